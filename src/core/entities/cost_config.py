"""
Cost configuration entities.

An entity-level, versioned costing policy: which overhead, contingency and
profit rates apply on top of a BOM's direct cost.
"""

from datetime import UTC, datetime
from enum import Enum

from pydantic import Field

from src.core.entities.base import DocumentModel, Money


class OverheadApplicability(str, Enum):
    """Which direct-cost bucket overhead is charged on."""

    ALL = "ALL"
    MATERIAL = "MATERIAL"
    FABRICATION = "FABRICATION"
    SERVICE = "SERVICE"


class OverheadConfig(DocumentModel):
    enabled: bool = True
    rate_percent: float = 0.0
    applicable_to: OverheadApplicability = OverheadApplicability.ALL


class ContingencyConfig(DocumentModel):
    enabled: bool = True
    rate_percent: float = 0.0


class ProfitConfig(DocumentModel):
    enabled: bool = True
    rate_percent: float = 0.0


class LaborRates(DocumentModel):
    """Hourly labor rates."""

    engineer_hourly_rate: Money | None = None
    draftsman_hourly_rate: Money | None = None
    fitter_hourly_rate: Money | None = None
    welder_hourly_rate: Money | None = None
    supervisor_hourly_rate: Money | None = None


class FabricationRates(DocumentModel):
    """Shop fabrication rates."""

    cutting_rate_per_meter: Money | None = None
    welding_rate_per_meter: Money | None = None
    forming_rate_per_sq_meter: Money | None = None
    machining_rate_per_hour: Money | None = None
    assembly_rate_per_unit: Money | None = None


DEFAULT_OVERHEAD_CONFIG = OverheadConfig(
    enabled=True, rate_percent=15.0, applicable_to=OverheadApplicability.ALL
)
DEFAULT_CONTINGENCY_CONFIG = ContingencyConfig(enabled=True, rate_percent=5.0)
DEFAULT_PROFIT_CONFIG = ProfitConfig(enabled=True, rate_percent=10.0)


class CostConfiguration(DocumentModel):
    """Costing policy for one entity, effective from a point in time."""

    id: str | None = None
    entity_id: str
    name: str
    description: str | None = None

    overhead: OverheadConfig = Field(default_factory=lambda: DEFAULT_OVERHEAD_CONFIG.model_copy())
    contingency: ContingencyConfig = Field(
        default_factory=lambda: DEFAULT_CONTINGENCY_CONFIG.model_copy()
    )
    profit: ProfitConfig = Field(default_factory=lambda: DEFAULT_PROFIT_CONFIG.model_copy())

    labor_rates: LaborRates | None = None
    fabrication_rates: FabricationRates | None = None

    is_active: bool = True
    effective_from: datetime = Field(default_factory=lambda: datetime.now(UTC))

    created_at: datetime | None = None
    updated_at: datetime | None = None
    created_by: str | None = None
    updated_by: str | None = None


class CreateCostConfigurationInput(DocumentModel):
    entity_id: str
    name: str
    description: str | None = None
    overhead: OverheadConfig | None = None
    contingency: ContingencyConfig | None = None
    profit: ProfitConfig | None = None
    labor_rates: LaborRates | None = None
    fabrication_rates: FabricationRates | None = None
    effective_from: datetime | None = None


class UpdateCostConfigurationInput(DocumentModel):
    name: str | None = None
    description: str | None = None
    overhead: OverheadConfig | None = None
    contingency: ContingencyConfig | None = None
    profit: ProfitConfig | None = None
    labor_rates: LaborRates | None = None
    fabrication_rates: FabricationRates | None = None
    is_active: bool | None = None
    effective_from: datetime | None = None
