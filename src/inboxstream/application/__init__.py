"""Application layer - delivery sinks, ports and use cases."""

from inboxstream.application.history import ConversationHistory, get_conversation_history
from inboxstream.application.use_cases.ingest_mailbox import IngestMailboxJob
from inboxstream.application.use_cases.send_message import DeliveryReport, SendMessageUseCase

__all__ = [
    "ConversationHistory",
    "get_conversation_history",
    "IngestMailboxJob",
    "SendMessageUseCase",
    "DeliveryReport",
]
