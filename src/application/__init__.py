"""
Application layer - DTOs and service factories.

This layer orchestrates business logic by:
1. Defining request/response DTOs for API contracts
2. Providing factory functions for dependency injection

API handlers reach the core services only through these factories.
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
from src.application.services import (
    get_bom_service,
    get_cost_config_service,
    get_item_cost_calculator,
    get_store,
    reset_services,
)

__all__ = [
    # Request DTOs
    "CreateBOMRequest",
    "UpdateBOMRequest",
    "AddBOMItemRequest",
    "UpdateBOMItemRequest",
    "ShapeValidationRequest",
    "CreateCostConfigurationRequest",
    "UpdateCostConfigurationRequest",
    # Response DTOs
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
    # Service factories
    "get_store",
    "get_bom_service",
    "get_cost_config_service",
    "get_item_cost_calculator",
    "reset_services",
]
