"""Interactive terminal chat using the configured LLM."""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

from loguru import logger

from inboxstream.application.delivery import ConsoleSink
from inboxstream.application.history import ConversationHistory
from inboxstream.application.use_cases.ingest_mailbox import IngestMailboxJob
from inboxstream.application.use_cases.send_message import SendMessageUseCase
from inboxstream.infrastructure import get_postgres_client, get_settings
from inboxstream.infrastructure.email.ingestion import get_ingestion_job
from inboxstream.infrastructure.llm import get_reply_producer

EXIT_COMMANDS = {"exit", "quit"}
SYNC_COMMAND = "/sync"


async def chat_loop(
    use_case: SendMessageUseCase,
    session_id: str,
    job: IngestMailboxJob | None = None,
    token: str | None = None,
) -> None:
    """Read messages until exit; ``/sync`` ingests the mailbox without blocking the chat."""
    while True:
        try:
            line = await asyncio.to_thread(input, "You: ")
        except EOFError:
            break
        message = line.strip()
        if not message:
            continue
        if message.lower() in EXIT_COMMANDS:
            break
        if message == SYNC_COMMAND:
            if job is None or not token:
                print("Mailbox sync needs an access token (--token or GMAIL_ACCESS_TOKEN)")
            else:
                job.spawn(token, session_id)
                print("Mailbox sync started in the background")
            continue

        sys.stdout.write("Assistant:")
        report = await use_case.run(session_id, message, ConsoleSink())
        if not report.ok:
            print(f" [error: {report.error}]")

    if job is not None and job.pending:
        print(f"Waiting for {job.pending} mailbox sync(s) to finish...")
        await job.wait_pending()


async def _session(use_case: SendMessageUseCase, session_id: str, token: str | None) -> None:
    if not token:
        await chat_loop(use_case, session_id)
        return

    postgres = get_postgres_client()
    try:
        await postgres.setup_schema()
        await chat_loop(use_case, session_id, job=get_ingestion_job(), token=token)
    finally:
        await postgres.disconnect()


def main() -> int:
    parser = argparse.ArgumentParser(description="Chat with the assistant in the terminal")
    parser.add_argument("--session", default="console", help="Session id for history and mailbox owner")
    parser.add_argument(
        "--token",
        default=os.getenv("GMAIL_ACCESS_TOKEN"),
        help="Google access token enabling /sync (default: $GMAIL_ACCESS_TOKEN)",
    )
    args = parser.parse_args()

    settings = get_settings()
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        level=settings.log_level,
    )

    use_case = SendMessageUseCase(
        producer=get_reply_producer(),
        history=ConversationHistory(max_messages=settings.chat_history_limit),
    )
    asyncio.run(_session(use_case, args.session, args.token))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
