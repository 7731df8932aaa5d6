"""Test configuration and shared fixtures."""

import os
import tempfile

# Point the app at a throwaway SQLite file before gstbill is imported
_TMP_DIR = tempfile.mkdtemp(prefix="gstbill-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP_DIR}/gstbill-test.db"
os.environ.pop("INVOICE_BACKEND_URL", None)

import httpx
import pytest

from gstbill.database import async_session_factory, drop_db, engine, init_db
from gstbill.services.invoice_number_source import get_invoice_number_cache


@pytest.fixture
async def database():
    """Fresh tables for one test."""
    await init_db()
    get_invoice_number_cache().clear()
    yield
    await drop_db()
    get_invoice_number_cache().clear()
    await engine.dispose()


@pytest.fixture
async def db_session(database):
    async with async_session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def client(database):
    from gstbill.main import app

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client


@pytest.fixture
async def company(client):
    response = await client.put(
        "/api/v1/company",
        json={"company_name": "Acme Global Traders", "state": "West Bengal", "state_code": "19"},
    )
    assert response.status_code == 200
    return response.json()
