"""Catalog adapters: materials, shapes, services and the shape evaluator."""

from src.infrastructure.catalog.documents import (
    DocumentMaterialCatalog,
    DocumentServiceRegistry,
    DocumentShapeCatalog,
)
from src.infrastructure.catalog.shape_evaluator import FormulaShapeEvaluator

__all__ = [
    "DocumentMaterialCatalog",
    "DocumentShapeCatalog",
    "DocumentServiceRegistry",
    "FormulaShapeEvaluator",
]
