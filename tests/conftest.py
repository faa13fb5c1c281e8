from __future__ import annotations

import pytest
from tortoise import Tortoise

from designz_loader.core.backend import reset_minimum_designs_cache
from helpers import FakeEvents


@pytest.fixture
def fake_events() -> FakeEvents:
    return FakeEvents()


@pytest.fixture(autouse=True)
def _reset_backend_cache():
    reset_minimum_designs_cache()
    yield
    reset_minimum_designs_cache()


@pytest.fixture
async def db():
    """Fresh in-memory SQLite database for session tests."""
    await Tortoise.init(db_url="sqlite://:memory:", modules={"models": ["designz_loader.models.db"]})
    await Tortoise.generate_schemas()
    yield
    await Tortoise.close_connections()
