"""
Abstract interfaces for storage providers.

The costing engine persists BOMs, items, cost configurations and counters
as flat keyed documents. Any store supporting keyed upsert/read/delete and
simple equality/range queries can back it.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Literal

FilterOp = Literal["==", "!=", "<", "<=", ">", ">="]


class Collections:
    """Collection paths used by the engine."""

    BOMS = "boms"
    COST_CONFIGURATIONS = "costConfigurations"
    COUNTERS = "counters"
    MATERIALS = "materials"
    SHAPES = "shapes"
    SERVICES = "services"

    @staticmethod
    def bom_items(bom_id: str) -> str:
        return f"boms/{bom_id}/items"


@dataclass(frozen=True)
class QueryFilter:
    """A single ``field <op> value`` condition."""

    field: str
    op: FilterOp
    value: Any


@dataclass(frozen=True)
class OrderBy:
    """Sort key for a query."""

    field: str
    descending: bool = False


def where(field: str, op: FilterOp, value: Any) -> QueryFilter:
    return QueryFilter(field, op, value)


class IWriteBatch(ABC):
    """
    Group of writes committed atomically.

    Nothing is applied until ``commit`` succeeds.
    """

    @abstractmethod
    def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Queue a full overwrite of a document."""

    @abstractmethod
    def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Queue a partial update of a document."""

    @abstractmethod
    def delete(self, collection: str, doc_id: str) -> None:
        """Queue a document deletion."""

    @abstractmethod
    async def commit(self) -> None:
        """Apply all queued writes in one transaction."""


class IDocumentStore(ABC):
    """
    Abstract interface for a keyed document store.

    Implementations raise ``StoreFailureError`` when the backend fails.
    """

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        """Read one document, or None when it does not exist."""

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: list[QueryFilter] | None = None,
        order_by: list[OrderBy] | None = None,
        limit: int | None = None,
    ) -> list[tuple[str, dict[str, Any]]]:
        """Return ``(id, document)`` pairs matching every filter."""

    @abstractmethod
    async def insert(
        self, collection: str, data: dict[str, Any], doc_id: str | None = None
    ) -> str:
        """Create a document and return its id (generated when not given)."""

    @abstractmethod
    async def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Create or fully overwrite a document."""

    @abstractmethod
    async def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Merge top-level keys into an existing document."""

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> None:
        """Delete a document; deleting a missing document is not an error."""

    @abstractmethod
    def batch(self) -> IWriteBatch:
        """Start an atomic write batch."""

    @abstractmethod
    async def increment(self, collection: str, doc_id: str, field: str = "value") -> int:
        """Atomically add one to a numeric field and return the new value."""
