"""Test configuration for API tests."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from config import Settings
from order_api.app import db as app_db
from order_api.app.main import create_app
from order_api.app.services import OrderService


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'orders.db'}"


@pytest.fixture
async def session_factory(db_url):
    engine = app_db.create_engine(db_url)
    await app_db.create_schema(engine)
    yield app_db.create_session_factory(engine)
    await engine.dispose()


@pytest.fixture
def service(session_factory) -> OrderService:
    return OrderService(session_factory)


@pytest.fixture
def client(db_url):
    settings = Settings(database_url=db_url, promoter_enabled=False)
    with TestClient(create_app(settings), raise_server_exceptions=False) as client:
        yield client
