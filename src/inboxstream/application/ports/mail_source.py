from __future__ import annotations
from typing import Protocol, Sequence

from inboxstream.domain.entities.email_message import RawGmailMessage


class MailSourceError(RuntimeError):
    pass


class MailSource(Protocol):
    # initialize() must complete before list_messages(); persist() is all-or-nothing
    async def initialize(self, token: str) -> None: ...
    async def list_messages(self) -> list[RawGmailMessage]: ...
    async def persist(self, owner_id: str, messages: Sequence[RawGmailMessage]) -> None: ...
