"""
Service cost calculation.

Turns the services attached to a BOM item into per-unit and total costs
with a breakdown entry per service. Supported methods:

- percentage of material cost
- percentage of total (material + fabrication) cost
- fixed amount per item
- rate per unit
- custom arithmetic formula
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from src.config import get_logger
from src.core.entities.base import Money
from src.core.entities.bom import BOMItem
from src.core.entities.service import (
    BOMItemService,
    ServiceCalculationMethod,
    ServiceCostBreakdown,
    ServiceDefinition,
)
from src.core.exceptions import ValidationError
from src.core.interfaces.catalog import IServiceRegistry
from src.core.services.formula import evaluate_formula

logger = get_logger(__name__)


@dataclass
class ServiceCostInput:
    """Per-unit base costs the services are charged on."""

    material_cost: float
    fabrication_cost: float
    quantity: float
    currency: str


@dataclass
class ServiceCostTotals:
    """Aggregated service cost of one item."""

    service_cost_per_unit: Money
    total_service_cost: Money
    service_breakdown: list[ServiceCostBreakdown] = field(default_factory=list)


def format_number(value: float) -> str:
    """Render a number without a trailing ``.0`` for integral values."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def format_money(amount: float, currency: str) -> str:
    return f"{currency} {amount:,.2f}"


def calculate_service_cost(
    service: BOMItemService, cost_input: ServiceCostInput
) -> ServiceCostBreakdown:
    """
    Calculate one service's cost for one item.

    The service must already be resolved (``calculation_method`` set). A
    ``rate_override`` supersedes the nominal rate and formula.

    Raises:
        ValidationError: the service has no calculation method.
        FormulaError: a custom formula cannot be evaluated.
    """
    method = service.calculation_method
    if method is None:
        raise ValidationError(
            "calculationMethod", "service has no calculation method", service.service_id
        )

    override = service.rate_override
    rate = override.rate_value if override is not None else (service.rate_value or 0.0)
    formula = (
        override.custom_formula
        if override is not None and override.custom_formula
        else service.custom_formula
    )
    currency = cost_input.currency
    rate_currency = (override.currency if override is not None else None) or currency

    base_cost: Money | None = None
    match method:
        case ServiceCalculationMethod.PERCENTAGE_OF_MATERIAL:
            base = cost_input.material_cost
            cost_per_unit = base * rate / 100
            base_cost = Money(amount=base, currency=currency)
            details = (
                f"{format_number(rate)}% of material cost ({format_money(base, currency)})"
                f" = {format_money(cost_per_unit, currency)}"
            )
        case ServiceCalculationMethod.PERCENTAGE_OF_TOTAL:
            base = cost_input.material_cost + cost_input.fabrication_cost
            cost_per_unit = base * rate / 100
            base_cost = Money(amount=base, currency=currency)
            details = (
                f"{format_number(rate)}% of total cost ({format_money(base, currency)})"
                f" = {format_money(cost_per_unit, currency)}"
            )
        case ServiceCalculationMethod.FIXED_AMOUNT:
            cost_per_unit = rate
            details = f"Fixed amount: {format_money(rate, rate_currency)} per item"
        case ServiceCalculationMethod.RATE_PER_UNIT:
            cost_per_unit = rate
            details = f"Rate: {format_money(rate, rate_currency)} per unit"
        case ServiceCalculationMethod.CUSTOM_FORMULA:
            cost_per_unit = evaluate_formula(
                formula,
                {
                    "materialCost": cost_input.material_cost,
                    "fabricationCost": cost_input.fabrication_cost,
                    "quantity": cost_input.quantity,
                    "total": cost_input.material_cost + cost_input.fabrication_cost,
                },
            )
            details = f"Custom formula: {formula or ''} = {format_money(cost_per_unit, currency)}"

    return ServiceCostBreakdown(
        service_id=service.service_id,
        service_name=service.service_name,
        service_category=service.service_category,
        calculation_method=method,
        rate_applied=rate,
        base_cost=base_cost,
        cost_per_unit=Money(amount=cost_per_unit, currency=currency),
        total_cost=Money(amount=cost_per_unit * cost_input.quantity, currency=currency),
        calculation_details=details,
        is_overridden=override is not None,
    )


def calculate_all_service_costs(
    services: list[BOMItemService] | None, cost_input: ServiceCostInput
) -> ServiceCostTotals:
    """
    Sum the per-unit cost of every service and scale by quantity.

    Errors are not swallowed: a failing formula fails the whole item so a
    bad formula is never silently costed as zero.
    """
    currency = cost_input.currency
    if not services:
        return ServiceCostTotals(
            service_cost_per_unit=Money.zero(currency),
            total_service_cost=Money.zero(currency),
        )

    breakdown = [calculate_service_cost(service, cost_input) for service in services]
    per_unit = sum(entry.cost_per_unit.amount for entry in breakdown)

    return ServiceCostTotals(
        service_cost_per_unit=Money(amount=per_unit, currency=currency),
        total_service_cost=Money(amount=per_unit * cost_input.quantity, currency=currency),
        service_breakdown=breakdown,
    )


def can_apply_service_to_item(
    service: ServiceDefinition,
    category: str | None = None,
    item_type: str | None = None,
    component_type: str | None = None,
) -> bool:
    """
    Check a service's applicability sets against an item.

    An empty set places no restriction; an unknown item attribute is not
    checked against its set.
    """
    checks = (
        (service.applicable_to_categories, category),
        (service.applicable_to_item_types, item_type),
        (service.applicable_to_component_types, component_type),
    )
    for allowed, value in checks:
        if allowed and value is not None and value not in allowed:
            return False
    return True


async def resolve_item_services(
    services: list[BOMItemService] | None,
    registry: IServiceRegistry,
    *,
    category: str | None = None,
    item_type: str | None = None,
    component_type: str | None = None,
) -> list[BOMItemService]:
    """
    Fill each item service with its registry rules and drop the ones that
    cannot apply.

    Values already on the item service win over the registry defaults.
    Services whose definition is missing or inactive are skipped.
    """
    resolved: list[BOMItemService] = []
    for service in services or []:
        definition = await registry.get_service(service.service_id)
        if definition is None or not definition.is_active:
            logger.warning(
                "service_definition_unavailable",
                service_id=service.service_id,
                found=definition is not None,
            )
            continue

        if not can_apply_service_to_item(definition, category, item_type, component_type):
            logger.debug(
                "service_not_applicable",
                service_id=service.service_id,
                item_type=item_type,
                component_type=component_type,
            )
            continue

        resolved.append(
            service.model_copy(
                update={
                    "service_name": service.service_name or definition.name,
                    "service_category": service.service_category or definition.category,
                    "calculation_method": (
                        service.calculation_method or definition.calculation_method
                    ),
                    "rate_value": (
                        service.rate_value
                        if service.rate_value is not None
                        else definition.default_rate_value
                    ),
                    "custom_formula": (
                        service.custom_formula or definition.default_custom_formula
                    ),
                }
            )
        )
    return resolved


def aggregate_service_breakdown(items: Iterable[BOMItem]) -> dict[str, Money]:
    """Sum each service's total cost across items, keyed by service id."""
    totals: dict[str, Money] = {}
    for item in items:
        if item.cost is None:
            continue
        for entry in item.cost.service_breakdown:
            current = totals.get(entry.service_id)
            if current is None:
                totals[entry.service_id] = entry.total_cost.model_copy()
            else:
                current.amount += entry.total_cost.amount
    return totals
