"""Email sync endpoint: queues mailbox ingestion and returns immediately."""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends, Header, HTTPException
from loguru import logger

from inboxstream.application.use_cases.ingest_mailbox import IngestMailboxJob
from inboxstream.infrastructure.email.ingestion import get_ingestion_job

router = APIRouter(prefix="/emails", tags=["emails"])


def _bearer_token(authorization: str) -> str:
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=401, detail="Bearer token required")
    return token.strip()


@router.post("/sync", status_code=202)
async def sync_emails(
    background_tasks: BackgroundTasks,
    authorization: str = Header(default=""),
    user_id: str = Header(..., alias="x-user-id"),
    job: IngestMailboxJob = Depends(get_ingestion_job),
) -> dict:
    """
    Fetch the user's recent unread mail and store it, in the background.

    The response does not wait for the job and never reports its result;
    failures only show up in the logs.
    """
    token = _bearer_token(authorization)

    background_tasks.add_task(job.run, token, user_id)
    logger.info(f"Queued email sync for {user_id}")

    return {"status": "accepted", "userId": user_id}
