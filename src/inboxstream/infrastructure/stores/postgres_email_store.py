"""PostgreSQL implementation of EmailRepository."""

from __future__ import annotations

from typing import Sequence

from loguru import logger

from inboxstream.application.ports.email_repository import EmailRepository
from inboxstream.domain.entities.email_message import EmailRecord
from inboxstream.infrastructure.postgres_client import PostgresClientWrapper

# Existing rows are left untouched; both new and existing ids are returned
INSERT_EMAILS_SQL = """
    WITH input_rows (user_id, message_id, thread_id, subject, body, received_time,
                     is_unread, importance, from_address) AS (
        SELECT * FROM UNNEST(
            %s::text[], %s::text[], %s::text[], %s::text[], %s::text[],
            %s::timestamptz[], %s::bool[], %s::bool[], %s::text[]
        )
    ),
    inserted AS (
        INSERT INTO emails (user_id, message_id, thread_id, subject, body, received_time,
                            is_unread, importance, from_address)
        SELECT * FROM input_rows
        ON CONFLICT (user_id, message_id) DO NOTHING
        RETURNING id, message_id
    )
    SELECT id, message_id FROM inserted
    UNION ALL
    SELECT e.id, e.message_id FROM emails e
    JOIN input_rows i ON e.user_id = i.user_id AND e.message_id = i.message_id
"""


class PostgresEmailStore(EmailRepository):
    """Batch-insert emails, skipping ones already stored for the same user."""

    def __init__(self, client: PostgresClientWrapper):
        self.client = client

    async def insert_emails(self, emails: Sequence[EmailRecord]) -> list[tuple[str, str]]:
        if not emails:
            return []

        emails = _unique_by_key(emails)
        columns = [
            [e.user_id for e in emails],
            [e.message_id for e in emails],
            [e.thread_id for e in emails],
            [e.subject for e in emails],
            [e.body for e in emails],
            [e.received_time for e in emails],
            [e.is_unread for e in emails],
            [e.importance for e in emails],
            [e.from_address for e in emails],
        ]

        conn = await self.client.connect()
        async with conn.transaction():
            async with conn.cursor() as cur:
                await cur.execute(INSERT_EMAILS_SQL, columns)
                rows = await cur.fetchall()

        logger.debug(f"Inserted batch of {len(emails)} emails, {len(rows)} rows matched")
        return [(str(row[0]), row[1]) for row in rows]


def _unique_by_key(emails: Sequence[EmailRecord]) -> list[EmailRecord]:
    """First record wins for each (user_id, message_id); keeps the input order."""
    unique: dict[tuple[str, str], EmailRecord] = {}
    for email in emails:
        unique.setdefault((email.user_id, email.message_id), email)
    return list(unique.values())
