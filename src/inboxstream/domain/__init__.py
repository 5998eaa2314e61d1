"""Domain models and entities."""

from inboxstream.domain.entities.email_message import (
    EmailRecord,
    GmailHeader,
    GmailListResponse,
    RawGmailMessage,
)
from inboxstream.domain.models import (
    ChunkEvent,
    ConversationThread,
    DeliveryEvent,
    ErrorEvent,
    FinishEvent,
    IngestionOutcome,
    IngestionStatus,
    Message,
    MessageRole,
    StartEvent,
)

__all__ = [
    "MessageRole",
    "Message",
    "ConversationThread",
    "DeliveryEvent",
    "StartEvent",
    "ChunkEvent",
    "FinishEvent",
    "ErrorEvent",
    "IngestionStatus",
    "IngestionOutcome",
    "GmailHeader",
    "RawGmailMessage",
    "GmailListResponse",
    "EmailRecord",
]
