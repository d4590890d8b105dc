"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and the core services; each
converts itself to the matching core input with ``to_input``.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.core.entities import (
    BOMCategory,
    BOMItemService,
    BOMItemType,
    BOMStatus,
    ComponentType,
    ContingencyConfig,
    CreateBOMInput,
    CreateBOMItemInput,
    CreateCostConfigurationInput,
    FabricationRates,
    LaborRates,
    OverheadConfig,
    ProfitConfig,
    UpdateBOMInput,
    UpdateBOMItemInput,
    UpdateCostConfigurationInput,
)


class RequestModel(BaseModel):
    """Accepts camelCase or snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateBOMRequest(RequestModel):
    """Request to create a BOM."""

    name: str = Field(..., description="BOM name", examples=["Shell & tube exchanger E-101"])
    entity_id: str = Field(..., description="Owning entity")
    description: str | None = None
    category: BOMCategory = Field(default=BOMCategory.OTHER)
    project_id: str | None = None
    project_name: str | None = None

    def to_input(self) -> CreateBOMInput:
        return CreateBOMInput(**self.model_dump(exclude_none=True))


class UpdateBOMRequest(RequestModel):
    """Partial BOM update."""

    name: str | None = None
    description: str | None = None
    category: BOMCategory | None = None
    entity_id: str | None = None
    project_id: str | None = None
    project_name: str | None = None
    status: BOMStatus | None = None

    def to_input(self) -> UpdateBOMInput:
        return UpdateBOMInput(**self.model_dump(exclude_unset=True, exclude_none=True))


class AddBOMItemRequest(RequestModel):
    """Request to add an item to a BOM."""

    name: str = Field(..., description="Item name", examples=["Shell plate"])
    description: str | None = None
    item_type: BOMItemType = Field(default=BOMItemType.PART)
    parent_item_id: str | None = Field(default=None, description="Parent item; root when absent")
    quantity: float = Field(default=1.0, description="Quantity, must be positive")
    unit: str = "nos"
    component_type: ComponentType | None = None
    shape_id: str | None = None
    material_id: str | None = None
    parameters: dict[str, float] | None = None
    services: list[BOMItemService] | None = None

    def to_input(self) -> CreateBOMItemInput:
        return CreateBOMItemInput(**self.model_dump(exclude_none=True))


class UpdateBOMItemRequest(RequestModel):
    """Partial item update. Component fields merge into the stored component."""

    name: str | None = None
    description: str | None = None
    item_type: BOMItemType | None = None
    quantity: float | None = None
    unit: str | None = None
    component_type: ComponentType | None = None
    shape_id: str | None = None
    material_id: str | None = None
    parameters: dict[str, float] | None = None
    services: list[BOMItemService] | None = None

    def to_input(self) -> UpdateBOMItemInput:
        return UpdateBOMItemInput(**self.model_dump(exclude_unset=True, exclude_none=True))


class ShapeValidationRequest(RequestModel):
    """Parameter values to check against a shape."""

    shape_id: str
    parameters: dict[str, float] = Field(default_factory=dict)


class CreateCostConfigurationRequest(RequestModel):
    """Request to create a cost configuration."""

    entity_id: str
    name: str
    description: str | None = None
    overhead: OverheadConfig | None = None
    contingency: ContingencyConfig | None = None
    profit: ProfitConfig | None = None
    labor_rates: LaborRates | None = None
    fabrication_rates: FabricationRates | None = None
    effective_from: datetime | None = None

    def to_input(self) -> CreateCostConfigurationInput:
        return CreateCostConfigurationInput(**self.model_dump(exclude_none=True))


class UpdateCostConfigurationRequest(RequestModel):
    """Partial cost configuration update."""

    name: str | None = None
    description: str | None = None
    overhead: OverheadConfig | None = None
    contingency: ContingencyConfig | None = None
    profit: ProfitConfig | None = None
    labor_rates: LaborRates | None = None
    fabrication_rates: FabricationRates | None = None
    is_active: bool | None = None
    effective_from: datetime | None = None

    def to_input(self) -> UpdateCostConfigurationInput:
        return UpdateCostConfigurationInput(
            **self.model_dump(exclude_unset=True, exclude_none=True)
        )
