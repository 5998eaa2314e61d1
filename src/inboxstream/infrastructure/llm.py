"""LangChain-backed reply producer."""

from __future__ import annotations

from typing import AsyncIterator

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from loguru import logger

from inboxstream.application.ports.reply_producer import ReplyProducer
from inboxstream.domain.models import Message, MessageRole
from inboxstream.infrastructure.settings import Settings, get_settings

SYSTEM_PROMPT = """You are a helpful personal assistant with access to the user's recent email.

Be friendly, concise, and helpful. If you don't know something, say so rather than making things up.
"""


def create_llm(settings: Settings) -> BaseChatModel:
    """Create the appropriate LLM based on settings."""
    provider = settings.llm_provider

    if provider == "local":
        from langchain_openai import ChatOpenAI

        logger.info(f"Initializing local vLLM at {settings.vllm_base_url} with model {settings.vllm_model_name}")
        return ChatOpenAI(
            base_url=settings.vllm_base_url,
            api_key="not-needed",
            model_name=settings.vllm_model_name,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
            streaming=True,
        )

    elif provider == "groq":
        from langchain_groq import ChatGroq

        if not settings.groq_api_key:
            raise ValueError("GROQ_API_KEY is required when llm_provider=groq")

        logger.info("Initializing Groq LLM with model llama-3.3-70b-versatile")
        return ChatGroq(
            api_key=settings.groq_api_key.get_secret_value(),
            model_name="llama-3.3-70b-versatile",
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
        )

    elif provider == "openai":
        from langchain_openai import ChatOpenAI

        if not settings.openai_api_key:
            raise ValueError("OPENAI_API_KEY is required when llm_provider=openai")

        logger.info("Initializing OpenAI LLM with model gpt-4o")
        return ChatOpenAI(
            api_key=settings.openai_api_key.get_secret_value(),
            model_name="gpt-4o",
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
            streaming=True,
        )

    elif provider == "anthropic":
        from langchain_anthropic import ChatAnthropic

        if not settings.anthropic_api_key:
            raise ValueError("ANTHROPIC_API_KEY is required when llm_provider=anthropic")

        logger.info("Initializing Anthropic LLM with model claude-sonnet-4-20250514")
        return ChatAnthropic(
            api_key=settings.anthropic_api_key.get_secret_value(),
            model_name="claude-sonnet-4-20250514",
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
        )

    else:
        raise ValueError(f"Unknown LLM provider: {provider}")


def to_langchain_messages(messages: list[Message], system_prompt: str | None = None) -> list[BaseMessage]:
    """Convert domain messages to LangChain message format."""
    lc_messages: list[BaseMessage] = []
    if system_prompt:
        lc_messages.append(SystemMessage(content=system_prompt))
    for msg in messages:
        if msg.role == MessageRole.USER:
            lc_messages.append(HumanMessage(content=msg.content))
        elif msg.role == MessageRole.ASSISTANT:
            lc_messages.append(AIMessage(content=msg.content))
        elif msg.role == MessageRole.SYSTEM:
            lc_messages.append(SystemMessage(content=msg.content))
        else:
            logger.warning(f"Unknown message role: {msg.role}, treating as human message")
            lc_messages.append(HumanMessage(content=msg.content))
    return lc_messages


def _chunk_text(content) -> str:
    # Anthropic streams content blocks instead of plain strings
    if isinstance(content, str):
        return content
    parts = []
    for block in content or []:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


class LangChainReplyProducer(ReplyProducer):
    """Streams reply deltas from a LangChain chat model."""

    def __init__(self, llm: BaseChatModel, system_prompt: str = SYSTEM_PROMPT):
        self.llm = llm
        self.system_prompt = system_prompt

    async def stream(self, messages: list[Message]) -> AsyncIterator[str]:
        lc_messages = to_langchain_messages(messages, self.system_prompt)
        async for chunk in self.llm.astream(lc_messages):
            text = _chunk_text(chunk.content)
            if text:
                yield text


_producer: LangChainReplyProducer | None = None


def get_reply_producer() -> LangChainReplyProducer:
    """Get singleton reply producer, creating the LLM on first use."""
    global _producer
    if _producer is None:
        _producer = LangChainReplyProducer(create_llm(get_settings()))
    return _producer
