"""Shared fixtures. No test talks to Postgres, an MCP server or an LLM."""

from __future__ import annotations

from typing import Sequence

import pytest
from loguru import logger

from inboxstream.domain.entities.email_message import GmailHeader, RawGmailMessage


class RecordingTransport:
    """Transport that keeps every frame and refuses writes after close."""

    def __init__(self) -> None:
        self.frames: list[str] = []
        self.closed = False
        self.close_calls = 0

    def write(self, frame: str) -> None:
        assert not self.closed, "write after close"
        self.frames.append(frame)

    def close(self) -> None:
        self.closed = True
        self.close_calls += 1


class FakeMailSource:
    """Scriptable mail source that records the calls it receives."""

    def __init__(
        self,
        messages: Sequence[RawGmailMessage] = (),
        init_error: Exception | None = None,
        list_error: Exception | None = None,
        persist_error: Exception | None = None,
    ) -> None:
        self.messages = list(messages)
        self.init_error = init_error
        self.list_error = list_error
        self.persist_error = persist_error
        self.calls: list[tuple] = []

    async def initialize(self, token: str) -> None:
        self.calls.append(("initialize", token))
        if self.init_error:
            raise self.init_error

    async def list_messages(self) -> list[RawGmailMessage]:
        self.calls.append(("list_messages",))
        if self.list_error:
            raise self.list_error
        return list(self.messages)

    async def persist(self, owner_id: str, messages: Sequence[RawGmailMessage]) -> None:
        self.calls.append(("persist", owner_id, list(messages)))
        if self.persist_error:
            raise self.persist_error

    def called(self, name: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == name]


class ScriptedProducer:
    """Reply producer that yields fixed deltas, optionally failing afterwards."""

    def __init__(self, deltas: Sequence[str], error: Exception | None = None) -> None:
        self.deltas = list(deltas)
        self.error = error
        self.seen_messages: list = []

    async def stream(self, messages):
        self.seen_messages = list(messages)
        for delta in self.deltas:
            yield delta
        if self.error:
            raise self.error


def make_gmail_message(
    message_id: str = "msg-1",
    subject: str = "Hello",
    sender: str = "alice@example.com",
    internal_date: str = "1700000000000",
) -> RawGmailMessage:
    return RawGmailMessage(
        id=message_id,
        threadId=f"thread-{message_id}",
        snippet="snippet",
        internalDate=internal_date,
        textBody=f"Body of {message_id}",
        headers=[
            GmailHeader(name="Subject", value=subject),
            GmailHeader(name="From", value=sender),
        ],
    )


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def log_records():
    """Capture loguru records emitted during the test."""
    records: list[dict] = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)
