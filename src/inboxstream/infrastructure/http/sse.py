"""Server-Sent Events transport for StreamingResponse."""

from __future__ import annotations

import asyncio
from typing import AsyncIterator, Awaitable

from loguru import logger

SSE_MEDIA_TYPE = "text/event-stream"
SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

_CLOSED = object()


class TransportClosedError(RuntimeError):
    """Write attempted on a closed SSE channel."""


class SSEChannel:
    """Ordered in-memory pipe between a StreamSink and the HTTP response.

    ``write`` and ``close`` never block; the response side drains frames in
    the order they were written and stops after ``close``.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, frame: str) -> None:
        if self._closed:
            raise TransportClosedError("SSE channel is closed")
        self._queue.put_nowait(frame)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)

    async def __aiter__(self) -> AsyncIterator[str]:
        while True:
            frame = await self._queue.get()
            if frame is _CLOSED:
                return
            yield frame


async def stream_with_producer(channel: SSEChannel, producer: Awaitable) -> AsyncIterator[str]:
    """Run ``producer`` alongside the response and yield the channel's frames.

    If the client goes away before the stream ends, the producer is cancelled.
    """
    task = asyncio.ensure_future(producer)
    # A producer that dies without a terminal event must not leave the response hanging
    task.add_done_callback(lambda _: channel.close())
    try:
        async for frame in channel:
            yield frame
        await asyncio.wait({task})
        if not task.cancelled() and task.exception() is not None:
            logger.opt(exception=task.exception()).error("SSE producer failed")
    finally:
        if not task.done():
            logger.info("SSE client disconnected, cancelling producer")
            task.cancel()
