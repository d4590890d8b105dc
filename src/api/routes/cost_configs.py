"""
Cost configuration endpoints.
"""

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import get_cost_configs, get_user_id
from src.application.dto.requests import (
    CreateCostConfigurationRequest,
    UpdateCostConfigurationRequest,
)
from src.application.dto.responses import CostConfigurationListResponse
from src.core.entities import CostConfiguration
from src.core.exceptions import CostConfigurationNotFoundError
from src.core.services import CostConfigurationService, get_default_cost_configuration

router = APIRouter(prefix="/api/cost-configurations", tags=["cost-configurations"])


@router.post("", response_model=CostConfiguration, status_code=status.HTTP_201_CREATED)
async def create_cost_configuration(
    request: CreateCostConfigurationRequest,
    service: CostConfigurationService = Depends(get_cost_configs),
    user_id: str | None = Depends(get_user_id),
) -> CostConfiguration:
    """Create an active configuration; omitted policies take the defaults."""
    return await service.create(request.to_input(), user_id)


@router.get("", response_model=CostConfigurationListResponse)
async def list_cost_configurations(
    entity_id: str = Query(..., description="Owning entity"),
    service: CostConfigurationService = Depends(get_cost_configs),
) -> CostConfigurationListResponse:
    configs = await service.list_for_entity(entity_id)
    return CostConfigurationListResponse(configurations=configs, total=len(configs))


@router.get("/active", response_model=CostConfiguration | None)
async def get_active_cost_configuration(
    entity_id: str = Query(..., description="Owning entity"),
    service: CostConfigurationService = Depends(get_cost_configs),
) -> CostConfiguration | None:
    """The configuration in force now, or null when the entity has none."""
    return await service.get_active(entity_id)


@router.get("/default", response_model=CostConfiguration)
async def get_default_configuration(
    entity_id: str = Query(..., description="Owning entity"),
) -> CostConfiguration:
    """Unsaved default policy an entity can start from."""
    return get_default_cost_configuration(entity_id)


@router.get("/{config_id}", response_model=CostConfiguration)
async def get_cost_configuration(
    config_id: str,
    service: CostConfigurationService = Depends(get_cost_configs),
) -> CostConfiguration:
    config = await service.get(config_id)
    if config is None:
        raise CostConfigurationNotFoundError(config_id)
    return config


@router.patch("/{config_id}", response_model=CostConfiguration)
async def update_cost_configuration(
    config_id: str,
    request: UpdateCostConfigurationRequest,
    service: CostConfigurationService = Depends(get_cost_configs),
    user_id: str | None = Depends(get_user_id),
) -> CostConfiguration:
    return await service.update(config_id, request.to_input(), user_id)


@router.post("/{config_id}/deactivate", response_model=CostConfiguration)
async def deactivate_cost_configuration(
    config_id: str,
    service: CostConfigurationService = Depends(get_cost_configs),
    user_id: str | None = Depends(get_user_id),
) -> CostConfiguration:
    """Take a configuration out of force; it stays listed."""
    return await service.deactivate(config_id, user_id)
