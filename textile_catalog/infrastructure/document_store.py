"""Document store abstraction.

Collections of schema-flexible documents addressed by collection name and
id, queried with equality predicates. No transactions are offered.
"""

import copy
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

import structlog

logger = structlog.get_logger()

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current time in UTC."""
    return datetime.now(timezone.utc)


class _ServerTimestamp:
    """Sentinel replaced by the store's clock when a document is written."""

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


def resolve_server_timestamps(data: dict[str, Any], now: datetime) -> dict[str, Any]:
    """Replace top-level ``SERVER_TIMESTAMP`` values with ``now``.

    Args:
        data: Fields about to be written.
        now: Store clock reading.

    Returns:
        New mapping with sentinels resolved.
    """
    return {
        key: now if value is SERVER_TIMESTAMP else value
        for key, value in data.items()
    }


@dataclass
class Snapshot:
    """A stored document and its id."""

    id: str
    data: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        """Document fields merged with the id under ``"id"``."""
        return {**self.data, "id": self.id}


class DocumentStore(ABC):
    """Async document store interface."""

    @abstractmethod
    async def query(self, collection: str, **equals: Any) -> list[Snapshot]:
        """List documents whose fields equal every given value.

        Args:
            collection: Collection name.
            equals: Field name to required value.

        Returns:
            Matching documents in insertion order.
        """

    @abstractmethod
    async def get(self, collection: str, document_id: str) -> Snapshot | None:
        """Fetch one document, or None if it does not exist."""

    @abstractmethod
    async def add(self, collection: str, data: dict[str, Any]) -> str:
        """Create a document with a generated id and return the id."""

    @abstractmethod
    async def set(self, collection: str, document_id: str, data: dict[str, Any]) -> None:
        """Create or replace a document under a known id."""

    @abstractmethod
    async def update(
        self, collection: str, document_id: str, fields: dict[str, Any]
    ) -> None:
        """Merge top-level fields into an existing document.

        Raises:
            KeyError: If the document does not exist.
        """

    @abstractmethod
    async def delete(self, collection: str, document_id: str) -> None:
        """Delete a document. Deleting a missing document is not an error."""

    async def close(self) -> None:
        """Release backend resources."""
        return None


class InMemoryDocumentStore(DocumentStore):
    """Dict-backed document store.

    Values are deep-copied on the way in and out so callers never share
    state with the store.
    """

    def __init__(self, clock: Clock = utc_now) -> None:
        """Initialize an empty store.

        Args:
            clock: Source of server timestamps.
        """
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._clock = clock

    def _collection(self, name: str) -> dict[str, dict[str, Any]]:
        return self._collections.setdefault(name, {})

    async def query(self, collection: str, **equals: Any) -> list[Snapshot]:
        return [
            Snapshot(id=doc_id, data=copy.deepcopy(data))
            for doc_id, data in self._collection(collection).items()
            if all(key in data and data[key] == value for key, value in equals.items())
        ]

    async def get(self, collection: str, document_id: str) -> Snapshot | None:
        data = self._collection(collection).get(document_id)
        if data is None:
            return None
        return Snapshot(id=document_id, data=copy.deepcopy(data))

    async def add(self, collection: str, data: dict[str, Any]) -> str:
        document_id = uuid4().hex
        self._collection(collection)[document_id] = copy.deepcopy(
            resolve_server_timestamps(data, self._clock())
        )
        logger.debug("Document added", collection=collection, document_id=document_id)
        return document_id

    async def set(self, collection: str, document_id: str, data: dict[str, Any]) -> None:
        self._collection(collection)[document_id] = copy.deepcopy(
            resolve_server_timestamps(data, self._clock())
        )

    async def update(
        self, collection: str, document_id: str, fields: dict[str, Any]
    ) -> None:
        documents = self._collection(collection)
        if document_id not in documents:
            raise KeyError(f"No document to update: {collection}/{document_id}")
        documents[document_id].update(
            copy.deepcopy(resolve_server_timestamps(fields, self._clock()))
        )

    async def delete(self, collection: str, document_id: str) -> None:
        self._collection(collection).pop(document_id, None)
