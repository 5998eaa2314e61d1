from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class GmailHeader(BaseModel):
    name: str
    value: str


class RawGmailMessage(BaseModel):
    """Message as returned by the gmail_list_emails tool."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    thread_id: str = Field(alias="threadId")
    snippet: str = ""
    internal_date: str = Field(alias="internalDate")  # epoch millis, as a string
    text_body: str = Field(default="", alias="textBody")
    headers: list[GmailHeader] = Field(default_factory=list)


class GmailListResponse(BaseModel):
    messages: list[RawGmailMessage] = Field(default_factory=list)


@dataclass(frozen=True)
class EmailRecord:
    user_id: str
    message_id: str
    thread_id: str
    received_time: datetime
    subject: Optional[str] = None
    body: Optional[str] = None
    is_unread: bool = True
    importance: bool = False
    from_address: Optional[str] = None
