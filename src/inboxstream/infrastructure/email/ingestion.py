"""Wiring for the background mailbox ingestion job."""

from __future__ import annotations

from inboxstream.application.use_cases.ingest_mailbox import IngestMailboxJob
from inboxstream.infrastructure.email.providers.gmail_mcp import GmailMcpMailSource
from inboxstream.infrastructure.mcp import get_mcp_registry
from inboxstream.infrastructure.postgres_client import get_postgres_client
from inboxstream.infrastructure.settings import get_settings
from inboxstream.infrastructure.stores import PostgresEmailStore


def gmail_source_factory() -> GmailMcpMailSource:
    """A fresh Gmail source per run; sources hold a per-token MCP client."""
    settings = get_settings()
    return GmailMcpMailSource(
        registry=get_mcp_registry(),
        repository=PostgresEmailStore(get_postgres_client()),
        max_results=settings.gmail_max_results,
        query=settings.gmail_query,
        timeout=settings.mcp_timeout_seconds,
    )


_job: IngestMailboxJob | None = None


def get_ingestion_job() -> IngestMailboxJob:
    """Get singleton ingestion job."""
    global _job
    if _job is None:
        _job = IngestMailboxJob(gmail_source_factory)
    return _job
