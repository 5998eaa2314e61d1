"""Gmail mail source backed by the google-assistant MCP server."""

from __future__ import annotations

from typing import Optional, Sequence

from loguru import logger

from inboxstream.application.ports.email_repository import EmailRepository
from inboxstream.application.ports.mail_source import MailSource, MailSourceError
from inboxstream.domain.entities.email_message import GmailListResponse, RawGmailMessage
from inboxstream.infrastructure.email.providers.gmail_mcp.mapper import gmail_to_email_record
from inboxstream.infrastructure.mcp import GOOGLE_ASSISTANT, McpClient, McpServerRegistry

LIST_TOOL = "gmail_list_emails"
DEFAULT_QUERY = "in:inbox is:unread newer_than:3d -category:promotions -category:social -category:forums"


class GmailMcpMailSource(MailSource):
    def __init__(
        self,
        registry: McpServerRegistry,
        repository: EmailRepository,
        max_results: int = 10,
        query: str = DEFAULT_QUERY,
        timeout: float = 30.0,
    ) -> None:
        self.registry = registry
        self.repository = repository
        self.max_results = max_results
        self.query = query
        self.timeout = timeout
        self._client: Optional[McpClient] = None

    def _make_client(self, token: str) -> McpClient:
        config = self.registry.get(GOOGLE_ASSISTANT)
        return McpClient(config, access_token=token, timeout=self.timeout)

    async def initialize(self, token: str) -> None:
        client: Optional[McpClient] = None
        try:
            client = self._make_client(token)
            await client.initialize()
        except Exception as e:
            logger.error(f"Error initializing Gmail service: {e}")
            if client is not None:
                await client.close()
            raise MailSourceError("Failed to initialize Gmail service.") from e
        self._client = client

    async def list_messages(self) -> list[RawGmailMessage]:
        if self._client is None:
            raise MailSourceError("Gmail service not initialized.")
        async with self._client as client:
            response = await client.call_tool(
                LIST_TOOL,
                {"maxResults": self.max_results, "query": self.query},
            )
        return GmailListResponse.model_validate(response or {}).messages

    async def persist(self, owner_id: str, messages: Sequence[RawGmailMessage]) -> None:
        if not messages:
            logger.info("No emails to insert.")
            return

        records = [gmail_to_email_record(owner_id, m) for m in messages]
        try:
            inserted = await self.repository.insert_emails(records)
        except Exception as e:
            logger.error(f"Error inserting {len(messages)} emails into database: {e}")
            raise MailSourceError("Failed to insert emails.") from e
        logger.info(f"Stored {len(records)} emails for {owner_id} ({len(inserted)} rows matched)")
