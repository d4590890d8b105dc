"""Service domain entities: registry definitions and per-item service costs."""

from datetime import datetime
from enum import Enum

from pydantic import Field

from src.core.entities.base import DocumentModel, Money


class ServiceCalculationMethod(str, Enum):
    """How a service's cost is derived."""

    PERCENTAGE_OF_MATERIAL = "PERCENTAGE_OF_MATERIAL"
    PERCENTAGE_OF_TOTAL = "PERCENTAGE_OF_TOTAL"
    FIXED_AMOUNT = "FIXED_AMOUNT"
    RATE_PER_UNIT = "RATE_PER_UNIT"
    CUSTOM_FORMULA = "CUSTOM_FORMULA"


class ServiceCategory(str, Enum):
    """Service grouping used for reporting."""

    ENGINEERING = "ENGINEERING"
    FABRICATION = "FABRICATION"
    INSPECTION = "INSPECTION"
    TESTING = "TESTING"
    PAINTING = "PAINTING"
    TRANSPORT = "TRANSPORT"
    OTHER = "OTHER"


class ServiceDefinition(DocumentModel):
    """A service as registered in the service registry."""

    id: str | None = None
    name: str
    category: ServiceCategory = ServiceCategory.OTHER
    calculation_method: ServiceCalculationMethod
    default_rate_value: float = 0.0
    default_custom_formula: str | None = None
    currency: str | None = None

    # Empty sets mean "applies to everything"
    applicable_to_categories: list[str] = Field(default_factory=list)
    applicable_to_item_types: list[str] = Field(default_factory=list)
    applicable_to_component_types: list[str] = Field(default_factory=list)

    is_active: bool = True


class ServiceRateOverride(DocumentModel):
    """A per-item rate that supersedes the registry rate."""

    rate_value: float = 0.0
    currency: str | None = None
    custom_formula: str | None = None
    reason: str | None = None


class BOMItemService(DocumentModel):
    """A service attached to a BOM item."""

    service_id: str
    service_name: str | None = None
    service_category: ServiceCategory | None = None

    # Snapshot of the registry values; None defers to the registry
    calculation_method: ServiceCalculationMethod | None = None
    rate_value: float | None = None
    custom_formula: str | None = None

    rate_override: ServiceRateOverride | None = None
    added_by: str | None = None
    added_at: datetime | None = None


class ServiceCostBreakdown(DocumentModel):
    """How one service contributed to an item's cost."""

    service_id: str
    service_name: str | None = None
    service_category: ServiceCategory | None = None
    calculation_method: ServiceCalculationMethod
    rate_applied: float
    base_cost: Money | None = None
    cost_per_unit: Money
    total_cost: Money
    calculation_details: str = ""
    is_overridden: bool = False
