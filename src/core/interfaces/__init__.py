"""Core interfaces (ports) for dependency injection."""

from src.core.interfaces.catalog import (
    IMaterialCatalog,
    IServiceRegistry,
    IShapeCatalog,
    IShapeEvaluator,
)
from src.core.interfaces.storage import (
    Collections,
    FilterOp,
    IDocumentStore,
    IWriteBatch,
    OrderBy,
    QueryFilter,
    where,
)

__all__ = [
    # Storage interfaces
    "IDocumentStore",
    "IWriteBatch",
    "Collections",
    "FilterOp",
    "OrderBy",
    "QueryFilter",
    "where",
    # Catalog interfaces
    "IMaterialCatalog",
    "IShapeCatalog",
    "IShapeEvaluator",
    "IServiceRegistry",
]
