"""Delivery sinks.

A producer is written once against ``DeliverySink`` and stays unaware of
whether its output is streamed live (``StreamSink``), collected for a single
response (``CollectSink``) or echoed to a terminal (``ConsoleSink``).
"""

from __future__ import annotations

import sys
from enum import Enum
from typing import TextIO

from loguru import logger

from inboxstream.application.delivery.frames import encode_frame
from inboxstream.application.ports.delivery_sink import Transport
from inboxstream.domain.models import (
    ChunkEvent,
    DeliveryEvent,
    ErrorEvent,
    FinishEvent,
    StartEvent,
)


class DeliveryContractError(RuntimeError):
    """A sink lifecycle method was called out of order."""


class _SinkState(str, Enum):
    IDLE = "idle"
    STARTED = "started"
    CLOSED = "closed"


class StreamSink:
    """Writes every lifecycle event to its transport as soon as it happens.

    Bound to one transport for its whole life. The transport is closed right
    after the terminal frame (finish or error); any later call raises
    ``DeliveryContractError``. Transport failures are not caught here.
    """

    def __init__(self, transport: Transport, session_id: str) -> None:
        self.transport = transport
        self.session_id = session_id
        self._state = _SinkState.IDLE

    @property
    def closed(self) -> bool:
        return self._state is _SinkState.CLOSED

    def on_start(self, session_id: str, streaming: bool) -> None:
        self._require(_SinkState.IDLE, "start")
        self._emit(StartEvent(session_id=session_id, streaming=streaming))
        self._state = _SinkState.STARTED

    def on_chunk(self, text: str, accumulated: str) -> None:
        self._require(_SinkState.STARTED, "chunk")
        self._emit(ChunkEvent(text=text, accumulated=accumulated))

    def on_finish(self, complete: bool, session_id: str) -> None:
        self._require(_SinkState.STARTED, "finish")
        self._terminate(FinishEvent(complete=complete, session_id=session_id))

    def on_error(self, message: str) -> None:
        self._require(_SinkState.STARTED, "error")
        self._terminate(ErrorEvent(message=message))

    def _require(self, expected: _SinkState, event: str) -> None:
        if self._state is not expected:
            raise DeliveryContractError(
                f"{event} not allowed while stream {self.session_id} is {self._state.value}"
            )

    def _emit(self, event: DeliveryEvent) -> None:
        self.transport.write(encode_frame(event))

    def _terminate(self, event: DeliveryEvent) -> None:
        try:
            self._emit(event)
        finally:
            self._state = _SinkState.CLOSED
            self.transport.close()
            logger.debug(f"Stream {self.session_id} closed after {event.event}")


class CollectSink:
    """Keeps the latest accumulated text for a synchronous response."""

    def __init__(self) -> None:
        self._full_text = ""

    def on_start(self, session_id: str, streaming: bool) -> None:
        pass

    def on_chunk(self, text: str, accumulated: str) -> None:
        # Trust the producer's running value; never re-concatenate
        self._full_text = accumulated

    def on_finish(self, complete: bool, session_id: str) -> None:
        pass

    def on_error(self, message: str) -> None:
        pass

    def get_full_text(self) -> str:
        return self._full_text


class ConsoleSink:
    """Echoes deltas to a terminal."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream or sys.stdout
        self._first_chunk = True

    def on_start(self, session_id: str, streaming: bool) -> None:
        pass

    def on_chunk(self, text: str, accumulated: str) -> None:
        if self._first_chunk:
            self.stream.write(" ")
            self._first_chunk = False
        self.stream.write(text)
        self.stream.flush()

    def on_finish(self, complete: bool, session_id: str) -> None:
        self.stream.write("\n")
        self.stream.flush()

    def on_error(self, message: str) -> None:
        # Already reported through the logger by the producer
        pass
