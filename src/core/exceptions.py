"""
Domain exceptions for the BOM costing engine.

Provides specific exception types for different error scenarios.
"""

from typing import Any


class BOMEngineError(Exception):
    """Base exception for all costing engine errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Lookup Exceptions
class NotFoundError(BOMEngineError):
    """A referenced record does not exist."""

    pass


class BOMNotFoundError(NotFoundError):
    """BOM not found in storage."""

    def __init__(self, bom_id: str):
        super().__init__(
            f"BOM not found: {bom_id}",
            code="BOM_NOT_FOUND",
            details={"bom_id": bom_id},
        )


class BOMItemNotFoundError(NotFoundError):
    """BOM item not found in storage."""

    def __init__(self, bom_id: str, item_id: str):
        super().__init__(
            f"BOM item not found: {item_id}",
            code="BOM_ITEM_NOT_FOUND",
            details={"bom_id": bom_id, "item_id": item_id},
        )


class ShapeNotFoundError(NotFoundError):
    """Shape not found in the shape catalog."""

    def __init__(self, shape_id: str):
        super().__init__(
            f"Shape not found: {shape_id}",
            code="SHAPE_NOT_FOUND",
            details={"shape_id": shape_id},
        )


class MaterialNotFoundError(NotFoundError):
    """Material not found in the catalog."""

    def __init__(self, material_id: str):
        super().__init__(
            f"Material not found: {material_id}",
            code="MATERIAL_NOT_FOUND",
            details={"material_id": material_id},
        )


class CostConfigurationNotFoundError(NotFoundError):
    """Cost configuration not found."""

    def __init__(self, config_id: str):
        super().__init__(
            f"Cost configuration not found: {config_id}",
            code="COST_CONFIGURATION_NOT_FOUND",
            details={"config_id": config_id},
        )


# Storage Exceptions
class StorageError(BOMEngineError):
    """Base exception for storage operations."""

    pass


class StoreFailureError(StorageError):
    """The document store is unreachable or rejected an operation."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Store failure during {operation}: {error}",
            code="STORE_FAILURE",
            details={"operation": operation, "error": error},
        )


# Costing Exceptions
class CostingError(BOMEngineError):
    """Base exception for cost calculation."""

    pass


class FormulaError(CostingError):
    """A custom service-cost formula could not be evaluated."""

    def __init__(self, formula: str, reason: str):
        super().__init__(
            f"Cannot evaluate formula '{formula}': {reason}",
            code="FORMULA_ERROR",
            details={"formula": formula, "reason": reason},
        )


class ShapeEvaluationError(CostingError):
    """The shape evaluator could not compute weight or cost."""

    def __init__(self, shape_id: str, reason: str):
        super().__init__(
            f"Shape evaluation failed for {shape_id}: {reason}",
            code="SHAPE_EVALUATION_ERROR",
            details={"shape_id": shape_id, "reason": reason},
        )


# Validation Exceptions
class ValidationError(BOMEngineError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class ConfigurationError(BOMEngineError):
    """Configuration error."""

    pass
