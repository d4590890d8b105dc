"""
SQLite implementation of the keyed document store.

Documents live as JSON text in a single ``documents`` table keyed by
``(collection, id)``. Filters and ordering run on ``json_extract`` so the
store supports the same equality and range queries as any document
database.

Datetimes are stored as epoch seconds so range filters and ordering
compare numerically (naive values count as UTC); models parse them back
into aware datetimes.
"""

import json
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from enum import Enum
from typing import Any

import aiosqlite

from src.config import get_logger
from src.core.entities.base import as_utc
from src.core.exceptions import StoreFailureError
from src.core.interfaces.storage import IDocumentStore, IWriteBatch, OrderBy, QueryFilter
from src.infrastructure.storage.sqlite.connection import get_connection, get_transaction

logger = get_logger(__name__)

_SQL_OPS = {"==": "=", "!=": "!=", "<": "<", "<=": "<=", ">": ">", ">=": ">="}


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return as_utc(value).timestamp()
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_document(data: dict[str, Any]) -> str:
    return json.dumps(data, default=_json_default)


def decode_document(text: str) -> dict[str, Any]:
    return json.loads(text)


def encode_param(value: Any) -> Any:
    """Convert a filter value to what ``json_extract`` yields for it."""
    if isinstance(value, datetime):
        return as_utc(value).timestamp()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bool):
        return int(value)
    return value


def _json_path(field: str) -> str:
    return f"$.{field}"


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except aiosqlite.Error as e:
        logger.error("store_operation_failed", operation=operation, error=str(e))
        raise StoreFailureError(operation, str(e)) from e


def _now() -> str:
    return datetime.now(UTC).isoformat()


async def _merge_update(
    conn: aiosqlite.Connection, collection: str, doc_id: str, data: dict[str, Any]
) -> None:
    cursor = await conn.execute(
        "SELECT data FROM documents WHERE collection = ? AND id = ?",
        (collection, doc_id),
    )
    row = await cursor.fetchone()
    if row is None:
        raise StoreFailureError("update", f"document not found: {collection}/{doc_id}")

    merged = {**decode_document(row["data"]), **json.loads(encode_document(data))}
    await conn.execute(
        "UPDATE documents SET data = ?, updated_at = ? WHERE collection = ? AND id = ?",
        (json.dumps(merged), _now(), collection, doc_id),
    )


async def _upsert(
    conn: aiosqlite.Connection, collection: str, doc_id: str, data: dict[str, Any]
) -> None:
    now = _now()
    await conn.execute(
        """
        INSERT INTO documents (collection, id, data, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?)
        ON CONFLICT(collection, id) DO UPDATE SET
            data = excluded.data,
            updated_at = excluded.updated_at
        """,
        (collection, doc_id, encode_document(data), now, now),
    )


class SQLiteWriteBatch(IWriteBatch):
    """Queued writes applied in one immediate transaction."""

    def __init__(self) -> None:
        self._ops: list[tuple[str, str, str, dict[str, Any] | None]] = []

    def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        self._ops.append(("set", collection, doc_id, data))

    def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        self._ops.append(("update", collection, doc_id, data))

    def delete(self, collection: str, doc_id: str) -> None:
        self._ops.append(("delete", collection, doc_id, None))

    async def commit(self) -> None:
        if not self._ops:
            return

        with _store_errors("batch_commit"):
            async with get_transaction(immediate=True) as conn:
                for op, collection, doc_id, data in self._ops:
                    if op == "set" and data is not None:
                        await _upsert(conn, collection, doc_id, data)
                    elif op == "update" and data is not None:
                        await _merge_update(conn, collection, doc_id, data)
                    else:
                        await conn.execute(
                            "DELETE FROM documents WHERE collection = ? AND id = ?",
                            (collection, doc_id),
                        )

        logger.debug("batch_committed", operations=len(self._ops))
        self._ops.clear()


class SQLiteDocumentStore(IDocumentStore):
    """SQLite implementation of the document store."""

    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        with _store_errors("get"):
            async with get_connection() as conn:
                cursor = await conn.execute(
                    "SELECT data FROM documents WHERE collection = ? AND id = ?",
                    (collection, doc_id),
                )
                row = await cursor.fetchone()
        if row is None:
            return None
        return decode_document(row["data"])

    async def query(
        self,
        collection: str,
        filters: list[QueryFilter] | None = None,
        order_by: list[OrderBy] | None = None,
        limit: int | None = None,
    ) -> list[tuple[str, dict[str, Any]]]:
        sql = ["SELECT id, data FROM documents WHERE collection = ?"]
        params: list[Any] = [collection]

        for condition in filters or []:
            sql.append(f"AND json_extract(data, ?) {_SQL_OPS[condition.op]} ?")
            params.extend([_json_path(condition.field), encode_param(condition.value)])

        order_terms = []
        for order in order_by or []:
            order_terms.append(f"json_extract(data, ?) {'DESC' if order.descending else 'ASC'}")
            params.append(_json_path(order.field))
        order_terms.append("rowid ASC")
        sql.append("ORDER BY " + ", ".join(order_terms))

        if limit is not None:
            sql.append("LIMIT ?")
            params.append(limit)

        with _store_errors("query"):
            async with get_connection() as conn:
                cursor = await conn.execute(" ".join(sql), params)
                rows = await cursor.fetchall()

        return [(row["id"], decode_document(row["data"])) for row in rows]

    async def insert(
        self, collection: str, data: dict[str, Any], doc_id: str | None = None
    ) -> str:
        doc_id = doc_id or uuid.uuid4().hex
        now = _now()
        with _store_errors("insert"):
            async with get_transaction() as conn:
                await conn.execute(
                    """
                    INSERT INTO documents (collection, id, data, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (collection, doc_id, encode_document(data), now, now),
                )
        logger.debug("document_inserted", collection=collection, doc_id=doc_id)
        return doc_id

    async def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        with _store_errors("set"):
            async with get_transaction() as conn:
                await _upsert(conn, collection, doc_id, data)

    async def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        with _store_errors("update"):
            async with get_transaction(immediate=True) as conn:
                await _merge_update(conn, collection, doc_id, data)

    async def delete(self, collection: str, doc_id: str) -> None:
        with _store_errors("delete"):
            async with get_transaction() as conn:
                await conn.execute(
                    "DELETE FROM documents WHERE collection = ? AND id = ?",
                    (collection, doc_id),
                )

    def batch(self) -> SQLiteWriteBatch:
        return SQLiteWriteBatch()

    async def increment(self, collection: str, doc_id: str, field: str = "value") -> int:
        path = _json_path(field)
        now = _now()
        with _store_errors("increment"):
            async with get_transaction() as conn:
                cursor = await conn.execute(
                    """
                    INSERT INTO documents (collection, id, data, created_at, updated_at)
                    VALUES (?, ?, json_object(?, 1), ?, ?)
                    ON CONFLICT(collection, id) DO UPDATE SET
                        data = json_set(data, ?, COALESCE(json_extract(data, ?), 0) + 1),
                        updated_at = excluded.updated_at
                    RETURNING json_extract(data, ?)
                    """,
                    (collection, doc_id, field, now, now, path, path, path),
                )
                rows = await cursor.fetchall()
        if not rows:
            raise StoreFailureError("increment", f"no value returned for {collection}/{doc_id}")
        return int(rows[0][0])
