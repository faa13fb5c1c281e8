# designz_loader/api/uploads.py

import logging
import os
import shutil
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import StreamingResponse

from designz_loader.core.backend import get_backend_client, get_category_tree, get_minimum_required_designs
from designz_loader.core.config import settings
from designz_loader.core.events import publish_session_event
from designz_loader.core.security import get_bearer_token
from designz_loader.core.sessions import begin_validation, commit_validation, create_session, mark_status
from designz_loader.models.db import UploadSession
from designz_loader.schemas.validation import REQUIRED_EXTENSIONS
from designz_loader.utils.template import build_template_zip
from designz_loader.utils.validator import MAX_ARCHIVE_BYTES, validate_archive

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bulk-upload", tags=["bulk-upload"])


async def get_backend(token: Optional[str] = Depends(get_bearer_token)):
    client = get_backend_client(token)
    try:
        yield client
    finally:
        await client.aclose()


def _require_zip(file: UploadFile):
    if not (file.filename or "").lower().endswith(".zip"):
        raise HTTPException(400, "File must be a .zip file")


def _store_upload(src, path: str):
    src.seek(0)
    with open(path, "wb") as dst:
        shutil.copyfileobj(src, dst)


async def _get_session(session_id: int) -> UploadSession:
    session = await UploadSession.get_or_none(id=session_id)
    if not session:
        raise HTTPException(404, "Upload session not found.")
    return session


def _session_state(session: UploadSession) -> dict:
    return {
        "session_id": session.id,
        "status": session.status,
        "generation": session.generation,
        "design_count": session.design_count,
        "filename": session.meta.get("filename"),
        "backend_task_id": session.meta.get("backend_task_id"),
        "error": session.meta.get("error"),
        "last_result": session.meta.get("last_result"),
    }


@router.get("/config")
async def bulk_upload_config(client: httpx.AsyncClient = Depends(get_backend)):
    return {
        "minimum_required_designs": await get_minimum_required_designs(client),
        "max_archive_bytes": MAX_ARCHIVE_BYTES,
        "required_extensions": REQUIRED_EXTENSIONS,
    }


@router.post("/validate")
async def validate_bulk_archive(
    file: UploadFile = File(...),
    client: httpx.AsyncClient = Depends(get_backend),
):
    _require_zip(file)
    minimum = await get_minimum_required_designs(client)
    result = await run_in_threadpool(validate_archive, file.file, minimum, file.size)
    return result.model_dump(mode="json")


@router.get("/template")
async def download_template(client: httpx.AsyncClient = Depends(get_backend)):
    try:
        categories = await get_category_tree(client)
        content = await run_in_threadpool(build_template_zip, categories, settings.TEMPLATE_DROPDOWN_ROWS)
    except Exception as e:
        logger.error(f"Template generation failed: {e}")
        raise HTTPException(status_code=502, detail=f"Could not generate the template: {e}")

    return StreamingResponse(
        iter([content]),
        media_type="application/zip",
        headers={"Content-Disposition": "attachment; filename=bulk_upload_template.zip"},
    )


@router.post("/sessions")
async def start_session():
    session = await create_session()
    return _session_state(session)


@router.get("/sessions/{session_id}")
async def get_session(session_id: int):
    return _session_state(await _get_session(session_id))


@router.post("/sessions/{session_id}/archive")
async def upload_session_archive(
    session_id: int,
    file: UploadFile = File(...),
    client: httpx.AsyncClient = Depends(get_backend),
):
    session = await _get_session(session_id)
    if session.status in ("queued", "uploading", "uploaded"):
        raise HTTPException(400, "Archive was already submitted for this session.")
    _require_zip(file)

    minimum = await get_minimum_required_designs(client)
    generation = await begin_validation(session_id)
    await publish_session_event(session_id, {"status": "validating", "generation": generation})

    path = None
    if file.size is not None and file.size > MAX_ARCHIVE_BYTES:
        result = await run_in_threadpool(validate_archive, file.file, minimum, file.size)
    else:
        os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
        path = os.path.join(settings.UPLOAD_DIR, f"session_{session_id}_{generation}.zip")
        await run_in_threadpool(_store_upload, file.file, path)
        result = await run_in_threadpool(validate_archive, path, minimum)

    committed = await commit_validation(session_id, generation, result, path, file.filename)
    if path and (not committed or not result.valid):
        os.remove(path)

    if committed:
        await publish_session_event(session_id, {
            "status": "valid" if result.valid else "invalid",
            "generation": generation,
            "design_count": result.design_count,
            "errors": result.errors,
        })

    return {
        "session_id": session_id,
        "generation": generation,
        "stale": not committed,
        "result": result.model_dump(mode="json"),
    }


@router.post("/sessions/{session_id}/submit")
async def submit_session_archive(session_id: int, token: Optional[str] = Depends(get_bearer_token)):
    session = await _get_session(session_id)
    archive_path = session.meta.get("archive_path")
    if session.status not in ("valid", "upload_failed") or not archive_path:
        raise HTTPException(400, "Upload a valid archive before submitting.")

    await mark_status(session_id, "queued", error=None)
    await publish_session_event(session_id, {"status": "queued"})

    from designz_loader.tasks.upload_tasks import forward_archive_task
    forward_archive_task.delay(session_id=session_id, token=token)

    return {"message": "Upload queued successfully!", "status": "queued"}
