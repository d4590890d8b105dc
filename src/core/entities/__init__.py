"""Core domain entities."""

from src.core.entities.base import DocumentModel, Money
from src.core.entities.bom import (
    BOM,
    BOMCategory,
    BOMItem,
    BOMItemType,
    BOMStatus,
    BOMSummary,
    BoughtOutComponent,
    CalculatedProperties,
    Component,
    ComponentType,
    CreateBOMInput,
    CreateBOMItemInput,
    ItemCost,
    ShapeComponent,
    UpdateBOMInput,
    UpdateBOMItemInput,
    make_component,
)
from src.core.entities.catalog import (
    Material,
    MaterialPrice,
    Shape,
    ShapeEvaluation,
    ShapeParameter,
    ShapeValidationResult,
)
from src.core.entities.cost_config import (
    DEFAULT_CONTINGENCY_CONFIG,
    DEFAULT_OVERHEAD_CONFIG,
    DEFAULT_PROFIT_CONFIG,
    ContingencyConfig,
    CostConfiguration,
    CreateCostConfigurationInput,
    FabricationRates,
    LaborRates,
    OverheadApplicability,
    OverheadConfig,
    ProfitConfig,
    UpdateCostConfigurationInput,
)
from src.core.entities.service import (
    BOMItemService,
    ServiceCalculationMethod,
    ServiceCategory,
    ServiceCostBreakdown,
    ServiceDefinition,
    ServiceRateOverride,
)

__all__ = [
    # Base
    "DocumentModel",
    "Money",
    # BOM entities
    "BOM",
    "BOMCategory",
    "BOMItem",
    "BOMItemType",
    "BOMStatus",
    "BOMSummary",
    "BoughtOutComponent",
    "CalculatedProperties",
    "Component",
    "ComponentType",
    "CreateBOMInput",
    "CreateBOMItemInput",
    "ItemCost",
    "ShapeComponent",
    "UpdateBOMInput",
    "UpdateBOMItemInput",
    "make_component",
    # Catalog entities
    "Material",
    "MaterialPrice",
    "Shape",
    "ShapeEvaluation",
    "ShapeParameter",
    "ShapeValidationResult",
    # Cost configuration entities
    "CostConfiguration",
    "CreateCostConfigurationInput",
    "UpdateCostConfigurationInput",
    "OverheadApplicability",
    "OverheadConfig",
    "ContingencyConfig",
    "ProfitConfig",
    "LaborRates",
    "FabricationRates",
    "DEFAULT_OVERHEAD_CONFIG",
    "DEFAULT_CONTINGENCY_CONFIG",
    "DEFAULT_PROFIT_CONFIG",
    # Service entities
    "BOMItemService",
    "ServiceCalculationMethod",
    "ServiceCategory",
    "ServiceCostBreakdown",
    "ServiceDefinition",
    "ServiceRateOverride",
]
