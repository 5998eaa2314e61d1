from __future__ import annotations
from typing import Protocol, Sequence

from inboxstream.domain.entities.email_message import EmailRecord


class EmailRepository(Protocol):
    async def insert_emails(self, emails: Sequence[EmailRecord]) -> list[tuple[str, str]]: ...
