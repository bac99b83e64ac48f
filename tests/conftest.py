import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

from dataclasses import replace

import mongomock
import pytest
from fastapi.testclient import TestClient

from minisocial.app import create_app
from minisocial.config import Settings


@pytest.fixture()
def settings() -> Settings:
    return Settings(secret_key="test-secret", db_name="minisocial_test")


@pytest.fixture()
def db():
    """In-memory stand-in for the MongoDB database (no server needed)."""
    return mongomock.MongoClient()["minisocial_test"]


@pytest.fixture()
def make_client(settings, db):
    """Build a TestClient over the shared db, optionally overriding settings fields."""

    def _make(**overrides) -> TestClient:
        return TestClient(create_app(replace(settings, **overrides), db=db))

    return _make


@pytest.fixture()
def client(make_client) -> TestClient:
    return make_client()


def register(client, *, username="alice", email="alice@example.com", password="p", name="Alice", age="30"):
    return client.post(
        "/register",
        data={"name": name, "username": username, "email": email, "age": age, "password": password},
    )


def login(client, *, email="alice@example.com", password="p"):
    return client.post("/login", data={"email": email, "password": password})
