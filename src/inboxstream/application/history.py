"""In-memory conversation history, one thread per user."""

from __future__ import annotations

from datetime import datetime, timezone

from inboxstream.domain.models import ConversationThread, Message, MessageRole


class ConversationHistory:
    """Per-user message history kept for the lifetime of the process."""

    def __init__(self, max_messages: int = 50) -> None:
        self.max_messages = max_messages
        self._threads: dict[str, ConversationThread] = {}

    def _thread(self, user_id: str) -> ConversationThread:
        thread = self._threads.get(user_id)
        if thread is None:
            thread = ConversationThread(thread_id=user_id)
            self._threads[user_id] = thread
        return thread

    def _append(self, user_id: str, role: MessageRole, content: str) -> Message:
        thread = self._thread(user_id)
        message = Message(role=role, content=content)
        thread.messages.append(message)
        if len(thread.messages) > self.max_messages:
            del thread.messages[: len(thread.messages) - self.max_messages]
        thread.updated_at = datetime.now(timezone.utc)
        return message

    def add_user_message(self, user_id: str, content: str) -> Message:
        return self._append(user_id, MessageRole.USER, content)

    def add_assistant_message(self, user_id: str, content: str) -> Message:
        return self._append(user_id, MessageRole.ASSISTANT, content)

    def get_history(self, user_id: str) -> list[Message]:
        thread = self._threads.get(user_id)
        return list(thread.messages) if thread else []

    def clear_history(self, user_id: str) -> None:
        self._threads.pop(user_id, None)


_history: ConversationHistory | None = None


def get_conversation_history() -> ConversationHistory:
    """Get singleton conversation history."""
    global _history
    if _history is None:
        from inboxstream.infrastructure.settings import get_settings

        _history = ConversationHistory(max_messages=get_settings().chat_history_limit)
    return _history
