"""
Core business logic services.

Layer-pure services that depend only on:
- src/core/entities/*
- src/core/interfaces/*
- src/core/exceptions.py

NO infrastructure imports. All dependencies injected via constructor.
"""

from src.core.services.bom_code import BOMCodeGenerator
from src.core.services.bom_service import BOMService, CostRecalculationResult
from src.core.services.bom_summary import (
    BOMSummaryAggregator,
    compute_summary,
    summary_currency,
)
from src.core.services.cost_config_service import (
    CostConfigurationService,
    get_default_cost_configuration,
)
from src.core.services.formula import evaluate_formula
from src.core.services.item_cost_calculator import (
    ItemCostBatchResult,
    ItemCostCalculator,
    ItemCostResult,
)
from src.core.services.item_numbering import (
    ItemNumberAllocation,
    ItemNumberAllocator,
    item_number_key,
)
from src.core.services.service_costs import (
    ServiceCostInput,
    ServiceCostTotals,
    aggregate_service_breakdown,
    calculate_all_service_costs,
    calculate_service_cost,
    can_apply_service_to_item,
    resolve_item_services,
)

__all__ = [
    # BOM repository
    "BOMService",
    "CostRecalculationResult",
    "item_number_key",
    # Numbering
    "ItemNumberAllocator",
    "ItemNumberAllocation",
    # Item costing
    "ItemCostCalculator",
    "ItemCostResult",
    "ItemCostBatchResult",
    # Service costs
    "ServiceCostInput",
    "ServiceCostTotals",
    "calculate_service_cost",
    "calculate_all_service_costs",
    "can_apply_service_to_item",
    "resolve_item_services",
    "aggregate_service_breakdown",
    "evaluate_formula",
    # Summary
    "BOMSummaryAggregator",
    "compute_summary",
    "summary_currency",
    # Cost configuration
    "CostConfigurationService",
    "get_default_cost_configuration",
    # BOM codes
    "BOMCodeGenerator",
]
