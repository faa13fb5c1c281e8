# designz_loader/core/backend.py
import logging
import os
from typing import Any, List, Optional

import httpx
from designz_loader.core.config import settings
from designz_loader.schemas.catalog import CategoryNode, SubcategoryRef

logger = logging.getLogger(__name__)

# Cached for the process lifetime once the backend answers
_minimum_designs_cache: Optional[int] = None


class BackendError(Exception):
    """The WeDesignz backend answered with something we cannot use."""


def get_backend_client(token: Optional[str] = None, transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    headers = {"Accept": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"

    return httpx.AsyncClient(
        base_url=settings.BACKEND_API_URL,
        headers=headers,
        timeout=settings.BACKEND_TIMEOUT,
        transport=transport,
    )


def reset_minimum_designs_cache():
    global _minimum_designs_cache
    _minimum_designs_cache = None


async def get_minimum_required_designs(client: httpx.AsyncClient) -> int:
    global _minimum_designs_cache
    if _minimum_designs_cache is not None:
        return _minimum_designs_cache

    try:
        resp = await client.get(settings.MINIMUM_DESIGNS_PATH)
        resp.raise_for_status()
        value = int(resp.json()["minimum_required_designs_onboard"])
    except (httpx.HTTPError, KeyError, TypeError, ValueError) as e:
        logger.warning(
            f"Could not fetch minimum designs, falling back to {settings.DEFAULT_MINIMUM_DESIGNS}: {e}"
        )
        return settings.DEFAULT_MINIMUM_DESIGNS

    _minimum_designs_cache = value
    return value


def _items(payload: Any, *keys: str) -> List[dict]:
    # Accepts a bare list or a list wrapped under one of ``keys``
    if isinstance(payload, dict):
        for key in keys:
            if isinstance(payload.get(key), list):
                payload = payload[key]
                break
        else:
            payload = payload.get("data", [])
    if not isinstance(payload, list):
        raise BackendError(f"Unexpected catalog payload: {type(payload).__name__}")
    return [item for item in payload if isinstance(item, dict) and item.get("name")]


async def get_category_tree(client: httpx.AsyncClient) -> List[CategoryNode]:
    resp = await client.get(settings.CATEGORIES_PATH)
    resp.raise_for_status()

    tree: List[CategoryNode] = []
    for item in _items(resp.json(), "categories", "results"):
        subcategories = item.get("subcategories")
        if subcategories is None and item.get("id") is not None:
            sub_resp = await client.get(settings.SUBCATEGORIES_PATH.format(category_id=item["id"]))
            sub_resp.raise_for_status()
            subcategories = sub_resp.json()
        tree.append(CategoryNode(
            id=item.get("id"),
            name=str(item["name"]).strip(),
            subcategories=[
                SubcategoryRef(id=sub.get("id"), name=str(sub["name"]).strip())
                for sub in _items(subcategories or [], "subcategories", "results")
            ],
        ))

    logger.info(f"Loaded {len(tree)} categories from catalog")
    return tree


async def submit_bulk_archive(client: httpx.AsyncClient, path: str, filename: Optional[str] = None) -> str:
    """Send the validated archive, unchanged, to the backend and return its task id."""
    filename = filename or os.path.basename(path)
    with open(path, "rb") as fh:
        resp = await client.post(
            settings.BULK_UPLOAD_PATH,
            files={"bulk_file": (filename, fh, "application/zip")},
        )
    resp.raise_for_status()

    data = resp.json()
    task_id = data.get("task_id") or data.get("id")
    if task_id is None:
        raise BackendError(f"Upload response did not include a task id: {data}")
    return str(task_id)
