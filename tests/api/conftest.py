"""Shared fixtures for API tests."""

import asyncio
from collections.abc import Iterator
from typing import Any

import pytest
from fastapi.testclient import TestClient

from textile_catalog.infrastructure.backends import configure_backends, reset_backends
from textile_catalog.infrastructure.blob_store import InMemoryBlobStore
from textile_catalog.infrastructure.config import settings
from textile_catalog.infrastructure.document_store import InMemoryDocumentStore
from textile_catalog.infrastructure.identity import StaticIdentityProvider
from textile_catalog.infrastructure.local_state import InMemoryKeyValueStore, KeyValueStore
from textile_catalog.main import app

TOKENS = {
    "admin-token": ("admin-1", "admin@example.com"),
    "user-token": ("user-1", "user@example.com"),
}


@pytest.fixture(autouse=True)
def backends(
    documents: InMemoryDocumentStore,
    blobs: InMemoryBlobStore,
    monkeypatch: pytest.MonkeyPatch,
) -> Iterator[None]:
    """Install in-memory backends for every API test."""
    local_state: dict[str, KeyValueStore] = {}
    configure_backends(
        documents=documents,
        blobs=blobs,
        identity=StaticIdentityProvider(TOKENS),
        local_state=lambda uid: local_state.setdefault(uid, InMemoryKeyValueStore()),
    )
    monkeypatch.setattr(settings, "admin_emails", "admin@example.com")
    yield
    reset_backends()


@pytest.fixture
def seed(documents: InMemoryDocumentStore):
    """Write a raw document into the in-memory store."""

    def _seed(collection: str, document_id: str, data: dict[str, Any]) -> None:
        asyncio.run(documents.set(collection, document_id, data))

    return _seed


@pytest.fixture
def client() -> TestClient:
    """Create test client without authentication."""
    return TestClient(app)


@pytest.fixture
def auth_client() -> TestClient:
    """Create test client signed in as a plain user."""
    return TestClient(app, headers={"Authorization": "Bearer user-token"})


@pytest.fixture
def admin_client() -> TestClient:
    """Create test client signed in as an allowlisted admin."""
    return TestClient(app, headers={"Authorization": "Bearer admin-token"})


@pytest.fixture
def image_file() -> tuple[str, bytes, str]:
    """Multipart file tuple for an image upload."""
    return ("wine red.jpg", b"\xff\xd8jpeg", "image/jpeg")
