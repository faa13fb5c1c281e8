from __future__ import annotations

import httpx
import pytest

from designz_loader.core.backend import (
    BackendError,
    get_backend_client,
    get_category_tree,
    get_minimum_required_designs,
    submit_bulk_archive,
)
from designz_loader.core.config import settings


def _client(handler) -> httpx.AsyncClient:
    return get_backend_client("token-123", transport=httpx.MockTransport(handler))


async def test_minimum_designs_fetched_and_cached() -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"minimum_required_designs_onboard": 75})

    async with _client(handler) as client:
        assert await get_minimum_required_designs(client) == 75
        assert await get_minimum_required_designs(client) == 75

    assert len(calls) == 1
    assert calls[0].url.path == settings.MINIMUM_DESIGNS_PATH
    assert calls[0].headers["Authorization"] == "Bearer token-123"


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="boom"),
        httpx.Response(200, json={"something_else": 1}),
        httpx.Response(200, json={"minimum_required_designs_onboard": "many"}),
    ],
)
async def test_minimum_designs_falls_back_to_default(response: httpx.Response) -> None:
    async with _client(lambda request: response) as client:
        assert await get_minimum_required_designs(client) == 50


async def test_minimum_designs_fallback_on_network_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    async with _client(handler) as client:
        assert await get_minimum_required_designs(client) == settings.DEFAULT_MINIMUM_DESIGNS

    # fallback is not cached, so the next call asks again
    async with _client(lambda request: httpx.Response(200, json={"minimum_required_designs_onboard": 20})) as client:
        assert await get_minimum_required_designs(client) == 20


async def test_category_tree_fetches_subcategories_per_category() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == settings.CATEGORIES_PATH:
            return httpx.Response(200, json={"categories": [
                {"id": 1, "name": "Logos"},
                {"id": 2, "name": " Jerseys "},
                {"id": 3, "name": ""},
            ]})
        if request.url.path == settings.SUBCATEGORIES_PATH.format(category_id=1):
            return httpx.Response(200, json=[{"id": 10, "name": "Minimal"}, {"id": 11, "name": "Mascot"}])
        if request.url.path == settings.SUBCATEGORIES_PATH.format(category_id=2):
            return httpx.Response(200, json={"results": [{"id": 20, "name": "Cricket"}]})
        return httpx.Response(404)

    async with _client(handler) as client:
        tree = await get_category_tree(client)

    assert [c.name for c in tree] == ["Logos", "Jerseys"]
    assert [s.name for s in tree[0].subcategories] == ["Minimal", "Mascot"]
    assert [s.id for s in tree[1].subcategories] == [20]


async def test_category_tree_uses_embedded_subcategories() -> None:
    paths = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        return httpx.Response(200, json=[
            {"id": 1, "name": "Icons", "subcategories": [{"id": 5, "name": "Line"}]},
        ])

    async with _client(handler) as client:
        tree = await get_category_tree(client)

    assert paths == [settings.CATEGORIES_PATH]
    assert tree[0].subcategories[0].name == "Line"


async def test_category_tree_raises_on_http_error() -> None:
    async with _client(lambda request: httpx.Response(503)) as client:
        with pytest.raises(httpx.HTTPStatusError):
            await get_category_tree(client)


async def test_category_tree_rejects_unexpected_payload() -> None:
    async with _client(lambda request: httpx.Response(200, json="nope")) as client:
        with pytest.raises(BackendError):
            await get_category_tree(client)


async def test_submit_bulk_archive_sends_file_unchanged(tmp_path) -> None:
    archive = tmp_path / "session_1_1.zip"
    archive.write_bytes(b"PK zip bytes")
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = request.read()
        return httpx.Response(201, json={"task_id": 42})

    async with _client(handler) as client:
        task_id = await submit_bulk_archive(client, str(archive), "designs.zip")

    assert task_id == "42"
    assert seen["path"] == settings.BULK_UPLOAD_PATH
    assert b'filename="designs.zip"' in seen["body"]
    assert b"PK zip bytes" in seen["body"]


async def test_submit_bulk_archive_requires_task_id(tmp_path) -> None:
    archive = tmp_path / "a.zip"
    archive.write_bytes(b"zip")

    async with _client(lambda request: httpx.Response(200, json={"ok": True})) as client:
        with pytest.raises(BackendError):
            await submit_bulk_archive(client, str(archive))
