"""Backend selection and process-wide instances.

Builds the document store, blob store, identity provider and client-local
state from settings, and keeps one instance of each for the process.
"""

import re
from collections.abc import Callable
from pathlib import Path

import structlog

from textile_catalog.infrastructure.blob_store import (
    BlobStore,
    FirebaseStorageBlobStore,
    InMemoryBlobStore,
)
from textile_catalog.infrastructure.config import Settings, settings
from textile_catalog.infrastructure.database import SqlDocumentStore
from textile_catalog.infrastructure.document_store import DocumentStore, InMemoryDocumentStore
from textile_catalog.infrastructure.identity import (
    FirebaseIdentityProvider,
    IdentityProvider,
    StaticIdentityProvider,
)
from textile_catalog.infrastructure.local_state import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
)

logger = structlog.get_logger()

LocalStateFactory = Callable[[str], KeyValueStore]


# ============================================================================
# Builders
# ============================================================================


def build_document_store(config: Settings) -> DocumentStore:
    """Create the configured document store.

    Raises:
        ValueError: If ``document_store`` names an unknown backend.
    """
    if config.document_store == "memory":
        return InMemoryDocumentStore()
    if config.document_store == "sql":
        return SqlDocumentStore(config.database_url, echo=config.debug)
    raise ValueError(f"Unknown document store: {config.document_store}")


def build_blob_store(config: Settings) -> BlobStore:
    """Create the configured blob store.

    Raises:
        ValueError: If ``blob_store`` names an unknown backend.
    """
    if config.blob_store == "memory":
        return InMemoryBlobStore()
    if config.blob_store == "firebase":
        return FirebaseStorageBlobStore(
            bucket=config.storage_bucket,
            base_url=config.storage_base_url,
            auth_token=config.storage_auth_token or None,
            timeout=config.http_timeout,
        )
    raise ValueError(f"Unknown blob store: {config.blob_store}")


def build_identity_provider(config: Settings) -> IdentityProvider:
    """Create the configured identity provider.

    Raises:
        ValueError: If ``identity_provider`` names an unknown backend.
    """
    if config.identity_provider == "static":
        return StaticIdentityProvider(config.static_token_table)
    if config.identity_provider == "firebase":
        return FirebaseIdentityProvider(
            api_key=config.firebase_api_key,
            base_url=config.identity_base_url,
            timeout=config.http_timeout,
        )
    raise ValueError(f"Unknown identity provider: {config.identity_provider}")


def local_state_path(state_dir: str, uid: str) -> Path:
    """State file of one user; the uid is reduced to filename-safe characters."""
    return Path(state_dir) / f"{re.sub(r'[^A-Za-z0-9_.-]', '_', uid)}.json"


def build_local_state_factory(config: Settings) -> LocalStateFactory:
    """Per-user client-local state: JSON files, or memory without a directory."""
    if not config.local_state_dir:
        stores: dict[str, KeyValueStore] = {}
        return lambda uid: stores.setdefault(uid, InMemoryKeyValueStore())
    return lambda uid: JsonFileKeyValueStore(local_state_path(config.local_state_dir, uid))


# ============================================================================
# Singletons
# ============================================================================


_document_store: DocumentStore | None = None
_blob_store: BlobStore | None = None
_identity_provider: IdentityProvider | None = None
_local_state_factory: LocalStateFactory | None = None


def get_document_store() -> DocumentStore:
    """Get the document store singleton."""
    global _document_store
    if _document_store is None:
        _document_store = build_document_store(settings)
        logger.info("Document store ready", backend=settings.document_store)
    return _document_store


def get_blob_store() -> BlobStore:
    """Get the blob store singleton."""
    global _blob_store
    if _blob_store is None:
        _blob_store = build_blob_store(settings)
        logger.info("Blob store ready", backend=settings.blob_store)
    return _blob_store


def get_identity_provider() -> IdentityProvider:
    """Get the identity provider singleton."""
    global _identity_provider
    if _identity_provider is None:
        _identity_provider = build_identity_provider(settings)
        logger.info("Identity provider ready", backend=settings.identity_provider)
    return _identity_provider


def get_local_state(uid: str) -> KeyValueStore:
    """Get the client-local key-value store of a user."""
    global _local_state_factory
    if _local_state_factory is None:
        _local_state_factory = build_local_state_factory(settings)
    return _local_state_factory(uid)


def configure_backends(
    documents: DocumentStore | None = None,
    blobs: BlobStore | None = None,
    identity: IdentityProvider | None = None,
    local_state: LocalStateFactory | None = None,
) -> None:
    """Install specific backend instances in place of the configured ones."""
    global _document_store, _blob_store, _identity_provider, _local_state_factory
    if documents is not None:
        _document_store = documents
    if blobs is not None:
        _blob_store = blobs
    if identity is not None:
        _identity_provider = identity
    if local_state is not None:
        _local_state_factory = local_state


async def close_backends() -> None:
    """Release backend connections and forget the instances."""
    for backend in (_document_store, _blob_store, _identity_provider):
        if backend is not None:
            await backend.close()
    reset_backends()


def reset_backends() -> None:
    """Forget backend instances without closing them (for testing)."""
    global _document_store, _blob_store, _identity_provider, _local_state_factory
    _document_store = None
    _blob_store = None
    _identity_provider = None
    _local_state_factory = None
