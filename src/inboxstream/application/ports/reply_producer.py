from __future__ import annotations
from typing import AsyncIterator, Protocol

from inboxstream.domain.models import Message


class ReplyProducer(Protocol):
    # Yields text deltas, not running totals
    def stream(self, messages: list[Message]) -> AsyncIterator[str]: ...
