"""Fixtures for HTTP API tests (FastAPI over httpx ASGITransport)."""

from __future__ import annotations

from collections.abc import AsyncIterator, Generator
from pathlib import Path

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from tessera.api import create_app
from tessera.auth import open_session
from tessera.config import AppConfig
from tests._db_factory import ALICE, make_db
from tests.conftest import PopulatedDB, populate


@pytest.fixture
def api_db(tmp_path: Path) -> Generator[PopulatedDB, None, None]:
    """Populated DB opened with check_same_thread=False, as ``main()`` does."""
    d = make_db(tmp_path, check_same_thread=False)
    yield populate(d)
    d.close()


@pytest.fixture
def alice_token(api_db: PopulatedDB) -> str:
    return open_session(api_db.db, ALICE)


@pytest.fixture
def app(api_db: PopulatedDB) -> FastAPI:
    return create_app(api_db.db, config=AppConfig(environment="test"))


@pytest.fixture
async def anon_client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Client with no credentials."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def client(app: FastAPI, alice_token: str) -> AsyncIterator[AsyncClient]:
    """Client authenticated as alice via bearer token."""
    transport = ASGITransport(app=app)
    headers = {"Authorization": f"Bearer {alice_token}"}
    async with AsyncClient(transport=transport, base_url="http://test", headers=headers) as c:
        yield c
