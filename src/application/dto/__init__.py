"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.

These are the ONLY contracts between API handlers and the core services.
"""

from src.application.dto.requests import (
    AddBOMItemRequest,
    CreateBOMRequest,
    CreateCostConfigurationRequest,
    ShapeValidationRequest,
    UpdateBOMItemRequest,
    UpdateBOMRequest,
    UpdateCostConfigurationRequest,
)
from src.application.dto.responses import (
    BOMDetailResponse,
    BOMItemListResponse,
    BOMListResponse,
    ComponentHealthResponse,
    CostConfigurationListResponse,
    DeleteItemResponse,
    ErrorResponse,
    HealthResponse,
    RecalculationResponse,
    ShapeValidationResponse,
)

__all__ = [
    # Requests
    "CreateBOMRequest",
    "UpdateBOMRequest",
    "AddBOMItemRequest",
    "UpdateBOMItemRequest",
    "ShapeValidationRequest",
    "CreateCostConfigurationRequest",
    "UpdateCostConfigurationRequest",
    # Responses
    "BOMListResponse",
    "BOMDetailResponse",
    "BOMItemListResponse",
    "DeleteItemResponse",
    "RecalculationResponse",
    "ShapeValidationResponse",
    "CostConfigurationListResponse",
    "ComponentHealthResponse",
    "HealthResponse",
    "ErrorResponse",
]
