"""
BOM domain entities.

A BOM owns a tree of items. Each item may carry a component (shape-based or
bought-out) from which its weight and cost are calculated, and the BOM keeps
a summary derived from all of its items.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import Field

from src.core.entities.base import DocumentModel, Money
from src.core.entities.service import BOMItemService, ServiceCostBreakdown


class BOMStatus(str, Enum):
    """Lifecycle status of a BOM."""

    DRAFT = "DRAFT"
    UNDER_REVIEW = "UNDER_REVIEW"
    APPROVED = "APPROVED"
    RELEASED = "RELEASED"
    ARCHIVED = "ARCHIVED"


class BOMCategory(str, Enum):
    """Kind of equipment or scope the BOM estimates."""

    HEAT_EXCHANGER = "HEAT_EXCHANGER"
    PRESSURE_VESSEL = "PRESSURE_VESSEL"
    STORAGE_TANK = "STORAGE_TANK"
    PIPING = "PIPING"
    STRUCTURAL = "STRUCTURAL"
    HVAC = "HVAC"
    OTHER = "OTHER"


class BOMItemType(str, Enum):
    """Role of an item in the tree."""

    ASSEMBLY = "ASSEMBLY"
    PART = "PART"
    MATERIAL = "MATERIAL"


class ComponentType(str, Enum):
    """Discriminator values of an item component."""

    SHAPE = "SHAPE"
    BOUGHT_OUT = "BOUGHT_OUT"


class ShapeComponent(DocumentModel):
    """Component whose weight and cost come from parametric geometry."""

    type: Literal["SHAPE"] = "SHAPE"
    shape_id: str | None = None
    material_id: str | None = None
    parameters: dict[str, float] = Field(default_factory=dict)


class BoughtOutComponent(DocumentModel):
    """Component purchased as-is and costed from the catalog price."""

    type: Literal["BOUGHT_OUT"] = "BOUGHT_OUT"
    material_id: str | None = None


Component = Annotated[ShapeComponent | BoughtOutComponent, Field(discriminator="type")]


class CalculatedProperties(DocumentModel):
    """Weight figures computed for an item."""

    weight: float = 0.0  # per unit, kg
    total_weight: float = 0.0


class ItemCost(DocumentModel):
    """Cost figures computed for an item."""

    material_cost_per_unit: Money
    total_material_cost: Money
    fabrication_cost_per_unit: Money
    total_fabrication_cost: Money
    service_cost_per_unit: Money
    total_service_cost: Money
    service_breakdown: list[ServiceCostBreakdown] = Field(default_factory=list)
    last_calculated: datetime | None = None


class BOMItem(DocumentModel):
    """One node in a BOM tree."""

    id: str | None = None
    bom_id: str
    item_number: str
    item_type: BOMItemType = BOMItemType.PART
    level: int = 0
    sort_order: int = 1
    parent_item_id: str | None = None

    name: str
    description: str | None = None
    quantity: float = 1.0
    unit: str = "nos"

    component: Component | None = None
    services: list[BOMItemService] | None = None

    calculated_properties: CalculatedProperties | None = None
    cost: ItemCost | None = None

    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    created_by: str | None = None
    updated_by: str | None = None

    @property
    def component_type(self) -> ComponentType | None:
        if self.component is None:
            return None
        return ComponentType(self.component.type)


class BOMSummary(DocumentModel):
    """Totals derived from all items of a BOM plus the cost configuration."""

    total_weight: float = 0.0
    total_material_cost: Money
    total_fabrication_cost: Money
    total_service_cost: Money
    total_direct_cost: Money
    overhead: Money
    contingency: Money
    profit: Money
    total_cost: Money
    item_count: int = 0
    currency: str
    service_breakdown: dict[str, Money] | None = None
    cost_config_id: str | None = None
    last_calculated: datetime | None = None

    @classmethod
    def empty(cls, currency: str) -> "BOMSummary":
        """A zeroed summary, as stored on a freshly created BOM."""
        return cls(
            total_material_cost=Money.zero(currency),
            total_fabrication_cost=Money.zero(currency),
            total_service_cost=Money.zero(currency),
            total_direct_cost=Money.zero(currency),
            overhead=Money.zero(currency),
            contingency=Money.zero(currency),
            profit=Money.zero(currency),
            total_cost=Money.zero(currency),
            currency=currency,
        )


class BOM(DocumentModel):
    """A costed bill of materials."""

    id: str | None = None
    bom_code: str
    name: str
    description: str | None = None
    category: BOMCategory = BOMCategory.OTHER
    entity_id: str
    project_id: str | None = None
    project_name: str | None = None
    status: BOMStatus = BOMStatus.DRAFT
    version: int = 1
    summary: BOMSummary

    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    created_by: str | None = None
    updated_by: str | None = None


class CreateBOMInput(DocumentModel):
    """Fields accepted when creating a BOM."""

    name: str = ""
    description: str | None = None
    category: BOMCategory = BOMCategory.OTHER
    entity_id: str = ""
    project_id: str | None = None
    project_name: str | None = None


class UpdateBOMInput(DocumentModel):
    """Partial BOM update. The code, id and creation audit fields are fixed."""

    name: str | None = None
    description: str | None = None
    category: BOMCategory | None = None
    entity_id: str | None = None
    project_id: str | None = None
    project_name: str | None = None
    status: BOMStatus | None = None


class CreateBOMItemInput(DocumentModel):
    """Fields accepted when adding an item to a BOM."""

    name: str = ""
    description: str | None = None
    item_type: BOMItemType = BOMItemType.PART
    parent_item_id: str | None = None
    quantity: float = 1.0
    unit: str = "nos"

    component_type: ComponentType | None = None
    shape_id: str | None = None
    material_id: str | None = None
    parameters: dict[str, float] | None = None

    services: list[BOMItemService] | None = None

    def build_component(self) -> ShapeComponent | BoughtOutComponent | None:
        """Component described by the flat input fields, if any."""
        if not (self.shape_id or self.material_id or self.component_type):
            return None
        return make_component(
            self.component_type or ComponentType.SHAPE,
            shape_id=self.shape_id,
            material_id=self.material_id,
            parameters=self.parameters,
        )


class UpdateBOMItemInput(DocumentModel):
    """Partial item update; unset fields are left untouched."""

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

    @property
    def touches_component(self) -> bool:
        return any(
            value is not None
            for value in (self.component_type, self.shape_id, self.material_id, self.parameters)
        )

    @property
    def affects_cost(self) -> bool:
        return self.touches_component or self.quantity is not None or self.services is not None


def make_component(
    component_type: ComponentType | str,
    shape_id: str | None = None,
    material_id: str | None = None,
    parameters: dict[str, Any] | None = None,
) -> ShapeComponent | BoughtOutComponent:
    """Build the component variant for a discriminator value."""
    if ComponentType(component_type) is ComponentType.BOUGHT_OUT:
        return BoughtOutComponent(material_id=material_id)
    return ShapeComponent(
        shape_id=shape_id,
        material_id=material_id,
        parameters=parameters or {},
    )
