"""
In-memory implementation of the keyed document store.

Used by the test suite and for local runs with ``STORAGE_BACKEND=memory``.
Documents are deep-copied on the way in and out, so callers can never
mutate stored state through a returned dict.
"""

import asyncio
import copy
import operator
import uuid
from collections.abc import Callable
from typing import Any

from src.config import get_logger
from src.core.exceptions import StoreFailureError
from src.core.interfaces.storage import IDocumentStore, IWriteBatch, OrderBy, QueryFilter

logger = get_logger(__name__)

_MISSING = object()

_COMPARATORS: dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


def _matches(doc: dict[str, Any], condition: QueryFilter) -> bool:
    value = doc.get(condition.field, _MISSING)
    # A document without the field never matches, whatever the operator
    if value is _MISSING or value is None:
        return False
    return _COMPARATORS[condition.op](value, condition.value)


class InMemoryWriteBatch(IWriteBatch):
    """Queued writes applied together under the store lock."""

    def __init__(self, store: "InMemoryDocumentStore"):
        self._store = store
        self._ops: list[tuple[str, str, str, dict[str, Any] | None]] = []

    def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        self._ops.append(("set", collection, doc_id, copy.deepcopy(data)))

    def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        self._ops.append(("update", collection, doc_id, copy.deepcopy(data)))

    def delete(self, collection: str, doc_id: str) -> None:
        self._ops.append(("delete", collection, doc_id, None))

    async def commit(self) -> None:
        await self._store.apply(self._ops)
        self._ops = []


class InMemoryDocumentStore(IDocumentStore):
    """Dict-backed document store."""

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._lock = asyncio.Lock()

    def _collection(self, name: str) -> dict[str, dict[str, Any]]:
        return self._collections.setdefault(name, {})

    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        doc = self._collection(collection).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def query(
        self,
        collection: str,
        filters: list[QueryFilter] | None = None,
        order_by: list[OrderBy] | None = None,
        limit: int | None = None,
    ) -> list[tuple[str, dict[str, Any]]]:
        try:
            rows = [
                (doc_id, doc)
                for doc_id, doc in self._collection(collection).items()
                if all(_matches(doc, condition) for condition in filters or [])
            ]

            # Stable sorts applied last key first; missing values sort lowest
            for order in reversed(order_by or []):
                rows.sort(
                    key=lambda row, field=order.field: (
                        row[1].get(field) is not None,
                        row[1].get(field) if row[1].get(field) is not None else 0,
                    ),
                    reverse=order.descending,
                )
        except TypeError as e:
            logger.error("memory_query_failed", collection=collection, error=str(e))
            raise StoreFailureError("query", f"{collection}: {e}") from e

        if limit is not None:
            rows = rows[:limit]
        return [(doc_id, copy.deepcopy(doc)) for doc_id, doc in rows]

    async def insert(
        self, collection: str, data: dict[str, Any], doc_id: str | None = None
    ) -> str:
        doc_id = doc_id or uuid.uuid4().hex
        async with self._lock:
            docs = self._collection(collection)
            if doc_id in docs:
                raise StoreFailureError("insert", f"document already exists: {collection}/{doc_id}")
            docs[doc_id] = copy.deepcopy(data)
        return doc_id

    async def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        await self.apply([("set", collection, doc_id, copy.deepcopy(data))])

    async def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        await self.apply([("update", collection, doc_id, copy.deepcopy(data))])

    async def delete(self, collection: str, doc_id: str) -> None:
        await self.apply([("delete", collection, doc_id, None)])

    def batch(self) -> InMemoryWriteBatch:
        return InMemoryWriteBatch(self)

    async def increment(self, collection: str, doc_id: str, field: str = "value") -> int:
        async with self._lock:
            doc = self._collection(collection).setdefault(doc_id, {})
            doc[field] = int(doc.get(field, 0)) + 1
            return doc[field]

    async def apply(self, ops: list[tuple[str, str, str, dict[str, Any] | None]]) -> None:
        """
        Apply a list of writes all-or-nothing.

        Every update target is checked before anything is written.
        """
        async with self._lock:
            present: dict[tuple[str, str], bool] = {}
            for op, collection, doc_id, _ in ops:
                key = (collection, doc_id)
                exists = present.get(key, doc_id in self._collection(collection))
                if op == "update" and not exists:
                    raise StoreFailureError(
                        "update", f"document not found: {collection}/{doc_id}"
                    )
                present[key] = op != "delete"

            for op, collection, doc_id, data in ops:
                docs = self._collection(collection)
                if op == "set" and data is not None:
                    docs[doc_id] = data
                elif op == "update" and data is not None:
                    docs[doc_id].update(data)
                else:
                    docs.pop(doc_id, None)

    def clear(self) -> None:
        """Drop every collection."""
        self._collections.clear()
