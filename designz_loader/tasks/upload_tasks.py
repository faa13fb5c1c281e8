# designz_loader/tasks/upload_tasks.py

import asyncio
import logging
import os
from typing import Optional

import httpx
import redis.asyncio as redis
from celery import Celery
from tortoise import Tortoise

from designz_loader.core.backend import BackendError, get_backend_client, submit_bulk_archive
from designz_loader.core.config import settings
from designz_loader.core.db import TORTOISE_ORM
from designz_loader.core.events import publish_session_event
from designz_loader.core.sessions import mark_status

logger = logging.getLogger(__name__)

celery_app = Celery(
    "designz_loader",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
)

celery_app.conf.update(
    task_track_started=True,
    worker_prefetch_multiplier=1,  # uploads are large and slow
    task_acks_late=True,
)


async def forward_archive(session_id: int, token: Optional[str] = None, transport=None, events=None) -> str:
    """Hand the validated archive to the backend. Returns the final session status."""
    session = await mark_status(session_id, "uploading")
    await publish_session_event(session_id, {"status": "uploading"}, client=events)

    archive_path = session.meta.get("archive_path")
    client = get_backend_client(token, transport=transport)
    try:
        task_id = await submit_bulk_archive(client, archive_path, session.meta.get("filename"))
    except (httpx.HTTPStatusError, BackendError) as e:
        detail = e.response.text[:500] if isinstance(e, httpx.HTTPStatusError) else str(e)
        logger.error(f"Backend rejected archive for session {session_id}: {detail}")
        await mark_status(session_id, "upload_failed", error=detail)
        await publish_session_event(session_id, {"status": "upload_failed", "error": detail}, client=events)
        return "upload_failed"
    except httpx.HTTPError as e:
        # Network trouble: leave the session retryable, then let the task retry
        detail = f"Could not reach the upload service: {e}"
        logger.error(f"Forwarding archive for session {session_id} failed: {e}")
        await mark_status(session_id, "upload_failed", error=detail)
        await publish_session_event(session_id, {"status": "upload_failed", "error": detail}, client=events)
        raise
    finally:
        await client.aclose()

    await mark_status(session_id, "uploaded", backend_task_id=task_id, archive_path=None)
    await publish_session_event(session_id, {"status": "uploaded", "backend_task_id": task_id}, client=events)
    if archive_path and os.path.exists(archive_path):
        os.remove(archive_path)
    logger.info(f"Session {session_id} archive handed off as backend task {task_id}")
    return "uploaded"


@celery_app.task(bind=True, max_retries=5, default_retry_delay=30)
def forward_archive_task(self, session_id: int, token: Optional[str] = None):
    async def run_forward():
        await Tortoise.init(config=TORTOISE_ORM)
        # Fresh loop per task, so no sharing the API's redis pool
        events = redis.from_url(settings.REDIS_URL, encoding="utf-8", decode_responses=True)
        try:
            return await forward_archive(session_id, token, events=events)
        finally:
            await events.aclose()
            await Tortoise.close_connections()

    try:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        return loop.run_until_complete(run_forward())
    except Exception as exc:
        logger.exception(f"Forwarding archive for session {session_id} failed")
        raise self.retry(exc=exc)
