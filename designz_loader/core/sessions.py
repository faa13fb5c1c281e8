# designz_loader/core/sessions.py
import logging
import os
from typing import Optional

from tortoise.expressions import F

from designz_loader.models.db import UploadSession
from designz_loader.schemas.validation import ArchiveValidationResult

logger = logging.getLogger(__name__)


async def create_session() -> UploadSession:
    return await UploadSession.create()


async def begin_validation(session_id: int) -> int:
    """Bump the session generation and return it.

    The returned value is the token a later ``commit_validation`` call must
    present; any validation started afterwards invalidates it.
    """
    await UploadSession.filter(id=session_id).update(generation=F("generation") + 1, status="validating")
    session = await UploadSession.get(id=session_id)
    return session.generation


async def commit_validation(
    session_id: int,
    generation: int,
    result: ArchiveValidationResult,
    archive_path: Optional[str] = None,
    filename: Optional[str] = None,
) -> bool:
    session = await UploadSession.get(id=session_id)
    if session.generation != generation:
        logger.info(f"Dropping stale validation for session {session_id} (gen {generation} < {session.generation})")
        return False

    previous_path = session.meta.get("archive_path")
    meta = dict(session.meta)
    meta.update({
        "archive_path": archive_path if result.valid else None,
        "filename": filename,
        "last_result": result.model_dump(mode="json"),
    })

    # Compare-and-set: only lands if nobody started a newer validation meanwhile
    updated = await UploadSession.filter(id=session_id, generation=generation).update(
        status="valid" if result.valid else "invalid",
        design_count=result.design_count,
        meta=meta,
    )
    if not updated:
        logger.info(f"Dropping stale validation for session {session_id} (gen {generation})")
        return False

    if previous_path and previous_path != meta["archive_path"] and os.path.exists(previous_path):
        os.remove(previous_path)
    return True


async def mark_status(session_id: int, status: str, **meta_updates) -> UploadSession:
    session = await UploadSession.get(id=session_id)
    session.status = status
    if meta_updates:
        session.meta.update(meta_updates)
    await session.save()
    return session
