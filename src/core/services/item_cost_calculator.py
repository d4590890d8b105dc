"""
Per-item weight and cost calculation.

An item's figures depend on its component:

- SHAPE: the shape evaluator turns parameters and material into weight,
  material cost and fabrication cost per unit
- BOUGHT_OUT: the catalog price is the material cost per unit, with no
  weight or fabrication cost
- no component: nothing to calculate

Services are charged on top of the per-unit base costs. Failures never
escape a single item: they are logged and the item is left without cost.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from src.config import get_logger, get_settings
from src.core.entities.base import Money
from src.core.entities.bom import (
    BOMItem,
    BoughtOutComponent,
    CalculatedProperties,
    ComponentType,
    ItemCost,
    ShapeComponent,
)
from src.core.entities.catalog import ShapeValidationResult
from src.core.exceptions import StoreFailureError
from src.core.interfaces.catalog import (
    IMaterialCatalog,
    IServiceRegistry,
    IShapeCatalog,
    IShapeEvaluator,
)
from src.core.interfaces.storage import Collections, IDocumentStore
from src.core.services.service_costs import (
    ServiceCostInput,
    ServiceCostTotals,
    calculate_all_service_costs,
    format_number,
    resolve_item_services,
)

logger = get_logger(__name__)


@dataclass
class ItemCostResult:
    """Calculated weight and cost of one item."""

    calculated_properties: CalculatedProperties
    cost: ItemCost


@dataclass
class ItemCostBatchResult:
    """Outcome of repricing a set of items."""

    total: int = 0
    calculated: int = 0
    skipped: int = 0
    failed_item_ids: list[str] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failed_item_ids)


class ItemCostCalculator:
    """Calculates and persists item weight and cost."""

    def __init__(
        self,
        store: IDocumentStore,
        materials: IMaterialCatalog,
        shapes: IShapeCatalog,
        shape_evaluator: IShapeEvaluator,
        services: IServiceRegistry,
        default_currency: str | None = None,
    ):
        self._store = store
        self._materials = materials
        self._shapes = shapes
        self._shape_evaluator = shape_evaluator
        self._services = services
        self._default_currency = default_currency or get_settings().costing.default_currency

    async def calculate_item_cost(
        self, item: BOMItem, category: str | None = None
    ) -> ItemCostResult | None:
        """
        Calculate an item's weight and cost.

        Args:
            item: Item to price
            category: BOM category, used to filter applicable services

        Returns:
            The result, or None when the item has no usable component or
            any lookup or calculation fails.
        """
        component = item.component
        try:
            match component:
                case None:
                    return None
                case BoughtOutComponent():
                    return await self._bought_out_cost(item, component, category)
                case ShapeComponent():
                    return await self._shape_cost(item, component, category)
        except Exception as e:
            logger.error(
                "item_cost_calculation_failed",
                bom_id=item.bom_id,
                item_id=item.id,
                error=str(e),
            )
            return None

    async def _bought_out_cost(
        self, item: BOMItem, component: BoughtOutComponent, category: str | None
    ) -> ItemCostResult | None:
        if not component.material_id:
            logger.warning("component_incomplete", item_id=item.id, component_type="BOUGHT_OUT")
            return None

        material = await self._materials.get_material(component.material_id)
        if material is None:
            logger.warning(
                "material_not_found", item_id=item.id, material_id=component.material_id
            )
            return None

        price = material.current_price.price_per_unit if material.current_price else None
        material_cost = price.amount if price else 0.0
        currency = (price.currency if price else None) or self._default_currency

        services = await self._service_totals(
            item,
            category,
            ComponentType.BOUGHT_OUT,
            ServiceCostInput(
                material_cost=material_cost,
                fabrication_cost=0.0,
                quantity=item.quantity,
                currency=currency,
            ),
        )
        return self._build_result(item, 0.0, material_cost, 0.0, currency, services)

    async def _shape_cost(
        self, item: BOMItem, component: ShapeComponent, category: str | None
    ) -> ItemCostResult | None:
        if not component.shape_id or not component.material_id:
            logger.warning("component_incomplete", item_id=item.id, component_type="SHAPE")
            return None

        shape = await self._shapes.get_shape(component.shape_id)
        if shape is None:
            logger.warning("shape_not_found", item_id=item.id, shape_id=component.shape_id)
            return None

        material = await self._materials.get_material(component.material_id)
        if material is None:
            logger.warning(
                "material_not_found", item_id=item.id, material_id=component.material_id
            )
            return None

        evaluation = await self._shape_evaluator.evaluate(
            shape, material, component.parameters, item.quantity
        )
        currency = evaluation.currency or self._default_currency

        services = await self._service_totals(
            item,
            category,
            ComponentType.SHAPE,
            ServiceCostInput(
                material_cost=evaluation.material_cost_per_unit,
                fabrication_cost=evaluation.fabrication_cost_per_unit,
                quantity=item.quantity,
                currency=currency,
            ),
        )
        return self._build_result(
            item,
            evaluation.weight_per_unit,
            evaluation.material_cost_per_unit,
            evaluation.fabrication_cost_per_unit,
            currency,
            services,
        )

    async def _service_totals(
        self,
        item: BOMItem,
        category: str | None,
        component_type: ComponentType,
        cost_input: ServiceCostInput,
    ) -> ServiceCostTotals:
        resolved = await resolve_item_services(
            item.services,
            self._services,
            category=category,
            item_type=item.item_type.value,
            component_type=component_type.value,
        )
        return calculate_all_service_costs(resolved, cost_input)

    @staticmethod
    def _build_result(
        item: BOMItem,
        weight: float,
        material_cost: float,
        fabrication_cost: float,
        currency: str,
        services: ServiceCostTotals,
    ) -> ItemCostResult:
        quantity = item.quantity
        return ItemCostResult(
            calculated_properties=CalculatedProperties(
                weight=weight,
                total_weight=weight * quantity,
            ),
            cost=ItemCost(
                material_cost_per_unit=Money(amount=material_cost, currency=currency),
                total_material_cost=Money(amount=material_cost * quantity, currency=currency),
                fabrication_cost_per_unit=Money(amount=fabrication_cost, currency=currency),
                total_fabrication_cost=Money(
                    amount=fabrication_cost * quantity, currency=currency
                ),
                service_cost_per_unit=services.service_cost_per_unit,
                total_service_cost=services.total_service_cost,
                service_breakdown=services.service_breakdown,
                last_calculated=datetime.now(UTC),
            ),
        )

    async def calculate_and_update_item_cost(
        self,
        bom_id: str,
        item: BOMItem,
        user_id: str | None = None,
        category: str | None = None,
    ) -> ItemCostResult | None:
        """
        Calculate an item's cost and write it to the item document.

        Nothing is written when the calculation yields no result.
        """
        result = await self.calculate_item_cost(item, category)
        if result is None or item.id is None:
            return None

        updates: dict[str, Any] = {
            "calculatedProperties": result.calculated_properties.to_document(),
            "cost": result.cost.to_document(),
            "updatedAt": datetime.now(UTC),
            "updatedBy": user_id,
        }
        try:
            await self._store.update(Collections.bom_items(bom_id), item.id, updates)
        except StoreFailureError as e:
            logger.error(
                "item_cost_persist_failed", bom_id=bom_id, item_id=item.id, error=e.message
            )
            return None

        logger.debug(
            "item_cost_calculated",
            bom_id=bom_id,
            item_id=item.id,
            total_material_cost=result.cost.total_material_cost.amount,
            total_fabrication_cost=result.cost.total_fabrication_cost.amount,
            total_service_cost=result.cost.total_service_cost.amount,
        )
        return result

    async def calculate_all_item_costs(
        self,
        bom_id: str,
        items: list[BOMItem],
        user_id: str | None = None,
        category: str | None = None,
    ) -> ItemCostBatchResult:
        """Reprice every item independently; one failure never stops the rest."""
        outcomes = await asyncio.gather(
            *(
                self.calculate_and_update_item_cost(bom_id, item, user_id, category)
                for item in items
            ),
            return_exceptions=True,
        )

        report = ItemCostBatchResult(total=len(items))
        for item, outcome in zip(items, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                logger.error(
                    "item_cost_batch_failure", bom_id=bom_id, item_id=item.id, error=str(outcome)
                )
                report.failed_item_ids.append(item.id or "")
            elif outcome is None:
                report.skipped += 1
            else:
                report.calculated += 1

        logger.info(
            "item_costs_recalculated",
            bom_id=bom_id,
            total=report.total,
            calculated=report.calculated,
            skipped=report.skipped,
            failed=report.failed,
        )
        return report

    async def validate_shape_parameters(
        self, shape_id: str, values: dict[str, float]
    ) -> ShapeValidationResult:
        """Check parameter values against the shape's declared parameters."""
        try:
            shape = await self._shapes.get_shape(shape_id)
        except Exception as e:
            logger.error("shape_validation_failed", shape_id=shape_id, error=str(e))
            return ShapeValidationResult(valid=False, errors=["Validation error occurred"])

        if shape is None:
            return ShapeValidationResult(valid=False, errors=["Shape not found"])

        errors: list[str] = []
        for param in shape.parameters:
            value = values.get(param.name)
            if value is None:
                if param.required:
                    errors.append(f"Required parameter '{param.label}' is missing")
                continue

            if param.min_value is not None and value < param.min_value:
                errors.append(
                    f"Parameter '{param.label}' is below minimum value "
                    f"({format_number(param.min_value)})"
                )
            if param.max_value is not None and value > param.max_value:
                errors.append(
                    f"Parameter '{param.label}' exceeds maximum value "
                    f"({format_number(param.max_value)})"
                )

        return ShapeValidationResult(valid=not errors, errors=errors)

    async def get_material_price(self, material_id: str) -> float:
        """Current price amount of a material, 0 when unknown."""
        try:
            price = await self._materials.get_current_price(material_id)
        except Exception as e:
            logger.error("material_price_lookup_failed", material_id=material_id, error=str(e))
            return 0.0
        return price.amount if price else 0.0
