from __future__ import annotations
from datetime import datetime, timezone

from inboxstream.domain.entities.email_message import EmailRecord, RawGmailMessage


def _received_time(internal_date: str) -> datetime:
    # internalDate is epoch milliseconds; fall back to now if the server sent junk
    try:
        return datetime.fromtimestamp(int(internal_date) / 1000, tz=timezone.utc)
    except (TypeError, ValueError):
        return datetime.now(timezone.utc)


def gmail_to_email_record(owner_id: str, message: RawGmailMessage) -> EmailRecord:
    headers: dict[str, str] = {}
    for header in message.headers:
        headers[header.name.lower()] = header.value

    return EmailRecord(
        user_id=owner_id,
        message_id=message.id,
        thread_id=message.thread_id,
        subject=headers.get("subject"),
        body=message.text_body,
        received_time=_received_time(message.internal_date),
        is_unread=True,  # the list query only asks for unread mail
        importance=False,
        from_address=headers.get("from"),
    )
