"""Storage infrastructure implementations."""

from src.infrastructure.storage.memory import InMemoryDocumentStore
from src.infrastructure.storage.sqlite import (
    SQLiteDocumentStore,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)

__all__ = [
    # Document stores
    "InMemoryDocumentStore",
    "SQLiteDocumentStore",
    # Connection pool
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
]
