"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization. Domain records are
returned as-is (camelCase, like the stored documents); these DTOs wrap
lists and operation results.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from src.core.entities import BOM, BOMItem, BOMSummary, CostConfiguration


class BOMListResponse(BaseModel):
    """BOMs of an entity."""

    boms: list[BOM]
    total: int


class BOMDetailResponse(BaseModel):
    """A BOM with its items in item-number order."""

    bom: BOM
    items: list[BOMItem]


class BOMItemListResponse(BaseModel):
    items: list[BOMItem]
    total: int


class DeleteItemResponse(BaseModel):
    """Ids removed by a cascade delete."""

    deleted_item_ids: list[str]
    summary: BOMSummary | None = None


class RecalculationResponse(BaseModel):
    """Outcome of repricing a BOM."""

    bom_id: str
    items_total: int
    items_calculated: int
    items_skipped: int
    items_failed: int
    failed_item_ids: list[str] = Field(default_factory=list)
    summary: BOMSummary


class ShapeValidationResponse(BaseModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)


class CostConfigurationListResponse(BaseModel):
    configurations: list[CostConfiguration]
    total: int


class ComponentHealthResponse(BaseModel):
    """Health of one backing component."""

    name: str
    available: bool
    latency_ms: float | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    storage: ComponentHealthResponse | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. BOM_NOT_FOUND)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)
