"""Pytest configuration and fixtures."""
import os
import tempfile
from pathlib import Path

import pytest

_TMP_DIR = Path(tempfile.mkdtemp(prefix="repairflow-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP_DIR / 'test.db'}"
os.environ["DATA_ROOT"] = str(_TMP_DIR)

from fastapi.testclient import TestClient  # noqa: E402

from repairflow.core.database import Base, engine  # noqa: E402
from repairflow.main import app  # noqa: E402


async def _reset_schema() -> None:
    from repairflow import models  # noqa: F401

    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
        await connection.run_sync(Base.metadata.create_all)


@pytest.fixture(scope="session")
def app_client():
    """One client for the whole session so the engine stays on a single event loop."""
    with TestClient(app) as client:
        yield client


@pytest.fixture
def client(app_client):
    app_client.portal.call(_reset_schema)
    return app_client


@pytest.fixture
def order_payload():
    return {
        "customer_name": "Anna Smirnova",
        "customer_phone": "+79991234567",
        "customer_email": "anna@example.com",
        "device_type": "laptop",
        "service_slug": "battery-replacement",
        "service_name": "Battery replacement",
        "urgent": False,
        "needs_pickup": False,
    }


@pytest.fixture
def create_order(client, order_payload):
    def _create(**overrides):
        response = client.post("/api/orders", json={**order_payload, **overrides})
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
def worker():
    return {"worker_id": "w-1", "worker_email": "tech@example.com", "worker_name": "Oleg Tech"}
