"""SQL-backed document store.

Keeps every collection in one ``documents`` table with a JSON payload,
using the async SQLAlchemy engine and session factory.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any
from uuid import uuid4

import structlog
from pydantic_core import to_jsonable_python
from sqlalchemy import JSON, Integer, String, UniqueConstraint, and_, delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

from textile_catalog.infrastructure.document_store import (
    Clock,
    DocumentStore,
    Snapshot,
    resolve_server_timestamps,
    utc_now,
)

logger = structlog.get_logger()

# Base class for models
Base = declarative_base()


class DocumentRecord(Base):
    """One stored document.

    Attributes:
        pk: Surrogate key; also gives insertion order.
        collection: Collection name.
        document_id: Document id, unique within its collection.
        data: Document fields as JSON.
    """

    __tablename__ = "documents"

    pk: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    collection: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    document_id: Mapped[str] = mapped_column(String(64), nullable=False)
    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    __table_args__ = (
        UniqueConstraint("collection", "document_id", name="uq_documents_collection_id"),
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<DocumentRecord({self.collection}/{self.document_id})>"


class SqlDocumentStore(DocumentStore):
    """Document store over an async SQLAlchemy engine.

    Equality predicates are evaluated in Python after loading the
    collection, which keeps the store portable across dialects.

    Example usage:
        store = SqlDocumentStore("sqlite+aiosqlite:///./catalog.db")
        await store.create_schema()
        product_id = await store.add("products", {"sku": "EMB-001"})
    """

    def __init__(self, database_url: str, clock: Clock = utc_now, echo: bool = False) -> None:
        """Create engine and session factory.

        Args:
            database_url: SQLAlchemy async URL.
            clock: Source of server timestamps.
            echo: Whether to log SQL statements.
        """
        self.engine = create_async_engine(database_url, echo=echo, pool_pre_ping=True)
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        self._clock = clock

    async def create_schema(self) -> None:
        """Create the documents table if it does not exist."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        await self.engine.dispose()

    @asynccontextmanager
    async def _session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    def _serialize(self, data: dict[str, Any]) -> dict[str, Any]:
        return to_jsonable_python(resolve_server_timestamps(data, self._clock()))

    async def _find(
        self, session: AsyncSession, collection: str, document_id: str
    ) -> DocumentRecord | None:
        result = await session.execute(
            select(DocumentRecord).where(
                and_(
                    DocumentRecord.collection == collection,
                    DocumentRecord.document_id == document_id,
                )
            )
        )
        return result.scalar_one_or_none()

    async def query(self, collection: str, **equals: Any) -> list[Snapshot]:
        async with self._session() as session:
            result = await session.execute(
                select(DocumentRecord)
                .where(DocumentRecord.collection == collection)
                .order_by(DocumentRecord.pk)
            )
            records = result.scalars().all()

        expected = to_jsonable_python(equals)
        return [
            Snapshot(id=record.document_id, data=dict(record.data))
            for record in records
            if all(
                key in record.data and record.data[key] == value
                for key, value in expected.items()
            )
        ]

    async def get(self, collection: str, document_id: str) -> Snapshot | None:
        async with self._session() as session:
            record = await self._find(session, collection, document_id)
            if record is None:
                return None
            return Snapshot(id=record.document_id, data=dict(record.data))

    async def add(self, collection: str, data: dict[str, Any]) -> str:
        document_id = uuid4().hex
        async with self._session() as session:
            session.add(
                DocumentRecord(
                    collection=collection,
                    document_id=document_id,
                    data=self._serialize(data),
                )
            )
        logger.debug("Document added", collection=collection, document_id=document_id)
        return document_id

    async def set(self, collection: str, document_id: str, data: dict[str, Any]) -> None:
        async with self._session() as session:
            record = await self._find(session, collection, document_id)
            if record is None:
                session.add(
                    DocumentRecord(
                        collection=collection,
                        document_id=document_id,
                        data=self._serialize(data),
                    )
                )
            else:
                record.data = self._serialize(data)

    async def update(
        self, collection: str, document_id: str, fields: dict[str, Any]
    ) -> None:
        async with self._session() as session:
            record = await self._find(session, collection, document_id)
            if record is None:
                raise KeyError(f"No document to update: {collection}/{document_id}")
            record.data = {**record.data, **self._serialize(fields)}

    async def delete(self, collection: str, document_id: str) -> None:
        async with self._session() as session:
            await session.execute(
                delete(DocumentRecord).where(
                    and_(
                        DocumentRecord.collection == collection,
                        DocumentRecord.document_id == document_id,
                    )
                )
            )
