"""In-memory storage implementations."""

from src.infrastructure.storage.memory.document_store import (
    InMemoryDocumentStore,
    InMemoryWriteBatch,
)

__all__ = ["InMemoryDocumentStore", "InMemoryWriteBatch"]
