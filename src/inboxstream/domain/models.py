"""Domain models for inboxstream."""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Literal, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MessageRole(str, Enum):
    """Message roles in conversation."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class Message(BaseModel):
    """A message in the conversation."""

    id: UUID = Field(default_factory=uuid4)
    role: MessageRole
    content: str
    timestamp: datetime = Field(default_factory=_utcnow)


class ConversationThread(BaseModel):
    """A user's running conversation."""

    thread_id: str
    messages: list[Message] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


# ============================================================================
# Delivery events
# ============================================================================


class _Event(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class StartEvent(_Event):
    """Beginning of a delivery session."""

    event: Literal["start"] = "start"
    session_id: str = Field(alias="sessionId")
    streaming: bool


class ChunkEvent(_Event):
    """One incremental unit; ``accumulated`` is the running concatenation."""

    event: Literal["chunk"] = "chunk"
    text: str
    accumulated: str


class FinishEvent(_Event):
    """Terminal success."""

    event: Literal["finish"] = "finish"
    complete: bool
    session_id: str = Field(alias="sessionId")


class ErrorEvent(_Event):
    """Terminal failure."""

    event: Literal["error"] = "error"
    message: str = Field(alias="error")


DeliveryEvent = Annotated[
    Union[StartEvent, ChunkEvent, FinishEvent, ErrorEvent],
    Field(discriminator="event"),
]


# ============================================================================
# Ingestion
# ============================================================================


class IngestionStatus(str, Enum):
    """How a background ingestion run ended."""

    SKIPPED_EMPTY = "skipped-empty"
    PERSISTED = "persisted"
    FAILED = "failed"


@dataclass(frozen=True)
class IngestionOutcome:
    """Diagnostic record of one ingestion run. The HTTP caller that schedules the job never sees it."""

    status: IngestionStatus
    count: int = 0
    reason: str | None = None

    @classmethod
    def skipped_empty(cls) -> "IngestionOutcome":
        return cls(status=IngestionStatus.SKIPPED_EMPTY)

    @classmethod
    def persisted(cls, count: int) -> "IngestionOutcome":
        return cls(status=IngestionStatus.PERSISTED, count=count)

    @classmethod
    def failed(cls, reason: str) -> "IngestionOutcome":
        return cls(status=IngestionStatus.FAILED, reason=reason)
