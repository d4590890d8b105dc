"""Infrastructure layer implementations."""

from src.infrastructure import catalog, storage

__all__ = ["storage", "catalog"]
