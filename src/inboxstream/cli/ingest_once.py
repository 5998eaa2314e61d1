"""One-shot mailbox ingestion from Gmail via the google-assistant MCP server."""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

from loguru import logger

from inboxstream.domain.models import IngestionStatus
from inboxstream.infrastructure import get_postgres_client, get_settings
from inboxstream.infrastructure.email.ingestion import get_ingestion_job


async def _run(token: str, user_id: str) -> int:
    postgres = get_postgres_client()
    try:
        await postgres.setup_schema()
        outcome = await get_ingestion_job().run(token, user_id)
    finally:
        await postgres.disconnect()

    if outcome.status is IngestionStatus.FAILED:
        print(f"Ingestion failed: {outcome.reason}")
        return 1
    if outcome.status is IngestionStatus.SKIPPED_EMPTY:
        print("No new emails to ingest")
    else:
        print(f"Ingested {outcome.count} emails for {user_id}")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Ingest recent unread Gmail messages once")
    parser.add_argument("--user-id", required=True, help="Owner the emails are stored under")
    parser.add_argument(
        "--token",
        default=os.getenv("GMAIL_ACCESS_TOKEN"),
        help="Google access token (default: $GMAIL_ACCESS_TOKEN)",
    )
    args = parser.parse_args()

    if not args.token:
        parser.error("an access token is required (--token or GMAIL_ACCESS_TOKEN)")

    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        level=get_settings().log_level,
    )

    return asyncio.run(_run(args.token, args.user_id))


if __name__ == "__main__":
    raise SystemExit(main())
