"""Background ingestion of a user's mailbox into the email store."""

from __future__ import annotations

import asyncio
import traceback
from typing import Callable

from loguru import logger

from inboxstream.application.ports.mail_source import MailSource
from inboxstream.domain.models import IngestionOutcome


class IngestMailboxJob:
    """Fetch one batch of messages and persist it, without ever raising.

    Flow:
    1. Build a fresh mail source and initialize it with the access token
    2. Fetch one batch of messages
    3. Empty batch: nothing to do
    4. Otherwise persist the whole batch under the owner

    Single attempt, no retries, no offset tracking. Whoever launched the job
    has already moved on, so failures are only reported through the logger.
    The returned outcome is for the scheduler and diagnostics.
    """

    def __init__(self, source_factory: Callable[[], MailSource]) -> None:
        self.source_factory = source_factory
        self._tasks: set[asyncio.Task] = set()

    async def run(self, access_token: str, owner_id: str) -> IngestionOutcome:
        log = logger.bind(owner_id=owner_id)
        try:
            log.info("Fetching and storing emails in the background...")
            source = self.source_factory()
            await source.initialize(access_token)
            messages = await source.list_messages()
            log.info(f"Fetched {len(messages)} emails")

            if not messages:
                log.info("No new emails to process in the background.")
                return IngestionOutcome.skipped_empty()

            await source.persist(owner_id, messages)
            log.info(f"Successfully processed {len(messages)} emails in the background.")
            return IngestionOutcome.persisted(len(messages))

        except Exception as e:
            reason = str(e) or e.__class__.__name__
            log.bind(
                error=reason,
                stack="".join(traceback.format_exception(type(e), e, e.__traceback__)),
            ).error(f"Error processing emails in background: {reason}")
            return IngestionOutcome.failed(reason)

    def spawn(self, access_token: str, owner_id: str) -> asyncio.Task:
        """Start ``run`` as a detached task on the running loop."""
        task = asyncio.get_running_loop().create_task(
            self.run(access_token, owner_id),
            name=f"ingest-mailbox-{owner_id}",
        )
        # The loop only keeps weak references to tasks
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def wait_pending(self) -> None:
        """Wait for every spawned run to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks))
