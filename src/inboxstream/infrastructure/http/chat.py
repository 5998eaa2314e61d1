"""Chat endpoints: live SSE stream or a single collected reply."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Header, HTTPException
from fastapi.responses import StreamingResponse
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from inboxstream.application.delivery import CollectSink, StreamSink
from inboxstream.application.history import ConversationHistory, get_conversation_history
from inboxstream.application.ports.reply_producer import ReplyProducer
from inboxstream.application.use_cases.send_message import SendMessageUseCase
from inboxstream.infrastructure.http.sse import (
    SSE_HEADERS,
    SSE_MEDIA_TYPE,
    SSEChannel,
    stream_with_producer,
)
from inboxstream.infrastructure.llm import get_reply_producer

router = APIRouter(prefix="/chat", tags=["chat"])


# ============================================================================
# Request/Response Models
# ============================================================================


class ChatRequest(BaseModel):
    """Request body for chat endpoints."""

    message: str = Field(..., min_length=1, description="The user message")


class ChatResponse(BaseModel):
    """Collected reply."""

    model_config = ConfigDict(populate_by_name=True)

    response: str
    user_id: str = Field(alias="userId")


class HistoryMessage(BaseModel):
    role: str
    content: str
    timestamp: datetime


class HistoryResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")
    message_count: int = Field(alias="messageCount")
    messages: list[HistoryMessage]


# ============================================================================
# Dependencies
# ============================================================================


def get_send_message_use_case(
    producer: ReplyProducer = Depends(get_reply_producer),
    history: ConversationHistory = Depends(get_conversation_history),
) -> SendMessageUseCase:
    return SendMessageUseCase(producer=producer, history=history)


def _require_message(request: ChatRequest) -> str:
    message = request.message.strip()
    if not message:
        raise HTTPException(status_code=400, detail="Message is required and must be a non-empty string")
    return message


# ============================================================================
# Endpoints
# ============================================================================


@router.post("/stream")
async def chat_stream(
    request: ChatRequest,
    user_id: str = Header(..., alias="x-user-id"),
    use_case: SendMessageUseCase = Depends(get_send_message_use_case),
) -> StreamingResponse:
    """Stream the reply as start/chunk/finish (or error) SSE frames."""
    message = _require_message(request)
    logger.info(f"Streaming chat for {user_id}")

    channel = SSEChannel()
    sink = StreamSink(channel, session_id=user_id)
    return StreamingResponse(
        stream_with_producer(channel, use_case.run(user_id, message, sink)),
        media_type=SSE_MEDIA_TYPE,
        headers=SSE_HEADERS,
    )


@router.post("", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    user_id: str = Header(..., alias="x-user-id"),
    use_case: SendMessageUseCase = Depends(get_send_message_use_case),
) -> ChatResponse:
    """Generate the whole reply and return it in one response."""
    message = _require_message(request)

    sink = CollectSink()
    report = await use_case.run(user_id, message, sink)
    if not report.ok:
        logger.error(f"Error in /chat endpoint for user {user_id}: {report.error}")
        raise HTTPException(status_code=500, detail="Failed to get response from agent")

    return ChatResponse(response=sink.get_full_text(), user_id=user_id)


@router.get("/history", response_model=HistoryResponse)
async def get_history(
    user_id: str = Header(..., alias="x-user-id"),
    history: ConversationHistory = Depends(get_conversation_history),
) -> HistoryResponse:
    messages = history.get_history(user_id)
    return HistoryResponse(
        user_id=user_id,
        message_count=len(messages),
        messages=[
            HistoryMessage(role=m.role.value, content=m.content, timestamp=m.timestamp)
            for m in messages
        ],
    )


@router.delete("/history")
async def clear_history(
    user_id: str = Header(..., alias="x-user-id"),
    history: ConversationHistory = Depends(get_conversation_history),
) -> dict[str, str]:
    history.clear_history(user_id)
    return {"message": "History cleared", "userId": user_id}
