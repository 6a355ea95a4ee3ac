"""Shared test fixtures for the storefront API."""

import os

# Must be set before the app modules read their configuration.
os.environ.pop("DATABASE_URL", None)
os.environ.pop("DATABASE_NAME", None)
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET"] = "test-secret"

import json
from datetime import datetime

import mongomock
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from auth import create_access_token
from database import ensure_indexes, get_db
from main import app
from schemas import OrderRecord, Role


@pytest.fixture
def mongo_db():
    """Fresh in-memory database per test."""
    return mongomock.MongoClient()["niora_test"]


@pytest.fixture
def client(mongo_db):
    """TestClient with the database dependency pointed at mongo_db."""
    ensure_indexes(mongo_db)
    app.dependency_overrides[get_db] = lambda: mongo_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    token = create_access_token(str(ObjectId()), "Admin", Role.admin)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def customer_headers():
    token = create_access_token(str(ObjectId()), "Customer", Role.customer)
    return {"Authorization": f"Bearer {token}"}


def make_order(total, status="pending", created_at=None, items=None, order_id=None) -> OrderRecord:
    """Build a ledger row the way it is read back from the database."""
    if items is None:
        items = [{"name": "NIORA RED WINE SOAP", "price": total, "quantity": 1}]
    return OrderRecord(
        id=order_id or str(ObjectId()),
        items=items if isinstance(items, str) else json.dumps(items),
        total=total,
        status=status,
        address="12 MG Road, Hubli",
        contact="9999999999",
        created_at=created_at or datetime(2025, 1, 15, 10, 30),
    )
