"""
Gmail mail source tests.

MCP traffic is replaced with a fake client; the repository is an AsyncMock.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest
from conftest import make_gmail_message

from inboxstream.application.ports.mail_source import MailSourceError
from inboxstream.domain.entities.email_message import GmailHeader, RawGmailMessage
from inboxstream.infrastructure.email.providers.gmail_mcp import (
    GmailMcpMailSource,
    gmail_to_email_record,
)
from inboxstream.infrastructure.email.providers.gmail_mcp.client import DEFAULT_QUERY, LIST_TOOL
from inboxstream.infrastructure.mcp import McpServerConfig, McpServerRegistry


def _registry(enabled: bool = True) -> McpServerRegistry:
    return McpServerRegistry(
        [
            McpServerConfig(
                name="google-assistant",
                url="http://mcp.test/mcp",
                health_url="http://mcp.test/health",
                enabled=enabled,
            )
        ]
    )


class FakeMcpClient:
    def __init__(self, tool_result=None, init_error: Exception | None = None, tool_error: Exception | None = None):
        self.tool_result = tool_result
        self.init_error = init_error
        self.tool_error = tool_error
        self.tool_calls: list[tuple[str, dict]] = []
        self.closed = False

    async def initialize(self):
        if self.init_error:
            raise self.init_error
        return {}

    async def call_tool(self, name, arguments=None):
        self.tool_calls.append((name, arguments))
        if self.tool_error:
            raise self.tool_error
        return self.tool_result

    async def close(self):
        self.closed = True

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.close()


class TestGmailToEmailRecord:
    def test_headers_are_matched_case_insensitively(self):
        message = RawGmailMessage(
            id="m1",
            threadId="t1",
            internalDate="1700000000000",
            textBody="hello",
            headers=[
                GmailHeader(name="SUBJECT", value="Quarterly report"),
                GmailHeader(name="from", value="Bob <bob@example.com>"),
            ],
        )

        record = gmail_to_email_record("owner-1", message)

        assert record.user_id == "owner-1"
        assert record.message_id == "m1"
        assert record.thread_id == "t1"
        assert record.subject == "Quarterly report"
        assert record.from_address == "Bob <bob@example.com>"
        assert record.body == "hello"
        assert record.is_unread is True
        assert record.importance is False

    def test_internal_date_is_epoch_millis(self):
        record = gmail_to_email_record("o", make_gmail_message(internal_date="1700000000000"))
        assert record.received_time == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)

    def test_missing_headers_become_none(self):
        message = RawGmailMessage(id="m1", threadId="t1", internalDate="0", headers=[])
        record = gmail_to_email_record("o", message)
        assert record.subject is None
        assert record.from_address is None


class TestGmailMcpMailSource:
    @pytest.mark.asyncio
    async def test_list_messages_calls_tool_with_query(self):
        fake = FakeMcpClient(
            tool_result={
                "messages": [
                    {
                        "id": "m1",
                        "threadId": "t1",
                        "snippet": "s",
                        "internalDate": "1700000000000",
                        "textBody": "body",
                        "headers": [{"name": "Subject", "value": "Hi"}],
                    }
                ]
            }
        )
        source = GmailMcpMailSource(_registry(), repository=AsyncMock(), max_results=5)

        with patch.object(source, "_make_client", return_value=fake):
            await source.initialize("token-1")
            messages = await source.list_messages()

        assert fake.tool_calls == [(LIST_TOOL, {"maxResults": 5, "query": DEFAULT_QUERY})]
        assert [m.id for m in messages] == ["m1"]
        assert fake.closed

    @pytest.mark.asyncio
    async def test_tool_failure_still_closes_client(self):
        fake = FakeMcpClient(tool_error=TimeoutError("gmail timed out"))
        source = GmailMcpMailSource(_registry(), repository=AsyncMock())

        with patch.object(source, "_make_client", return_value=fake):
            await source.initialize("t")
            with pytest.raises(TimeoutError):
                await source.list_messages()

        assert fake.closed

    @pytest.mark.asyncio
    async def test_empty_tool_result_is_empty_batch(self):
        source = GmailMcpMailSource(_registry(), repository=AsyncMock())
        with patch.object(source, "_make_client", return_value=FakeMcpClient(tool_result=None)):
            await source.initialize("t")
            assert await source.list_messages() == []

    @pytest.mark.asyncio
    async def test_list_before_initialize_fails(self):
        source = GmailMcpMailSource(_registry(), repository=AsyncMock())
        with pytest.raises(MailSourceError, match="not initialized"):
            await source.list_messages()

    @pytest.mark.asyncio
    async def test_missing_server_config_fails_initialize(self):
        source = GmailMcpMailSource(McpServerRegistry([]), repository=AsyncMock())
        with pytest.raises(MailSourceError, match="Failed to initialize Gmail service."):
            await source.initialize("t")

    @pytest.mark.asyncio
    async def test_disabled_server_fails_initialize(self):
        source = GmailMcpMailSource(_registry(enabled=False), repository=AsyncMock())
        with pytest.raises(MailSourceError):
            await source.initialize("t")

    @pytest.mark.asyncio
    async def test_handshake_failure_closes_client(self):
        fake = FakeMcpClient(init_error=ConnectionError("refused"))
        source = GmailMcpMailSource(_registry(), repository=AsyncMock())

        with patch.object(source, "_make_client", return_value=fake):
            with pytest.raises(MailSourceError) as exc_info:
                await source.initialize("t")

        assert isinstance(exc_info.value.__cause__, ConnectionError)
        assert fake.closed

    @pytest.mark.asyncio
    async def test_persist_formats_and_inserts_batch(self):
        repository = AsyncMock()
        repository.insert_emails.return_value = [("uuid-1", "m1"), ("uuid-2", "m2")]
        source = GmailMcpMailSource(_registry(), repository=repository)

        await source.persist("owner-1", [make_gmail_message("m1"), make_gmail_message("m2")])

        repository.insert_emails.assert_awaited_once()
        records = repository.insert_emails.await_args.args[0]
        assert [r.message_id for r in records] == ["m1", "m2"]
        assert all(r.user_id == "owner-1" for r in records)

    @pytest.mark.asyncio
    async def test_persist_empty_is_no_op(self):
        repository = AsyncMock()
        source = GmailMcpMailSource(_registry(), repository=repository)

        await source.persist("owner-1", [])

        repository.insert_emails.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_persist_failure_is_wrapped(self):
        repository = AsyncMock()
        repository.insert_emails.side_effect = RuntimeError("connection lost")
        source = GmailMcpMailSource(_registry(), repository=repository)

        with pytest.raises(MailSourceError, match="Failed to insert emails."):
            await source.persist("owner-1", [make_gmail_message()])
