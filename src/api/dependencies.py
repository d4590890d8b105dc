"""
Dependency injection container for FastAPI.

Provides service instances to route handlers.
"""

from fastapi import Header

from src.application.services import (
    get_bom_service,
    get_cost_config_service,
    get_item_cost_calculator,
)
from src.core.services import BOMService, CostConfigurationService, ItemCostCalculator


# Service dependencies
def get_boms() -> BOMService:
    """Get BOM service."""
    return get_bom_service()


def get_cost_configs() -> CostConfigurationService:
    """Get cost configuration service."""
    return get_cost_config_service()


def get_calculator() -> ItemCostCalculator:
    """Get item cost calculator."""
    return get_item_cost_calculator()


def get_user_id(x_user_id: str | None = Header(default=None)) -> str | None:
    """Acting user, recorded as createdBy/updatedBy."""
    return x_user_id
