"""
BOM summary aggregation.

Sums item weights and direct costs, then applies the entity's cost
configuration as a cascade::

    overhead    = base(applicableTo) * overhead%
    contingency = (direct + overhead) * contingency%
    profit      = (direct + overhead + contingency) * profit%
    total       = direct + overhead + contingency + profit

Without an active configuration the total is the direct cost.
"""

import asyncio
import weakref
from datetime import UTC, datetime

from src.config import get_logger, get_settings
from src.core.entities.base import Money
from src.core.entities.bom import BOMItem, BOMSummary
from src.core.entities.cost_config import CostConfiguration, OverheadApplicability
from src.core.exceptions import BOMNotFoundError
from src.core.interfaces.storage import Collections, IDocumentStore
from src.core.services.cost_config_service import CostConfigurationService
from src.core.services.item_numbering import item_number_key
from src.core.services.service_costs import aggregate_service_breakdown

logger = get_logger(__name__)


def summary_currency(items: list[BOMItem], default: str) -> str:
    """Currency of the first item (in item-number order) with a material cost."""
    for item in items:
        if item.cost is not None and item.cost.total_material_cost.currency:
            return item.cost.total_material_cost.currency
    return default


def _apply_rate(base: float, enabled: bool, rate_percent: float) -> float:
    if not enabled or rate_percent <= 0:
        return 0.0
    return base * rate_percent / 100


def compute_summary(
    items: list[BOMItem], config: CostConfiguration | None, currency: str
) -> BOMSummary:
    """
    Build a BOM summary from item figures and a cost configuration.

    Pure: the same items and configuration always give the same amounts.
    ``last_calculated`` is left unset for the caller to stamp.
    """
    total_weight = 0.0
    material = 0.0
    fabrication = 0.0
    service = 0.0
    for item in items:
        if item.calculated_properties is not None:
            total_weight += item.calculated_properties.total_weight
        if item.cost is not None:
            material += item.cost.total_material_cost.amount
            fabrication += item.cost.total_fabrication_cost.amount
            service += item.cost.total_service_cost.amount

    direct = material + fabrication + service
    overhead = contingency = profit = 0.0

    if config is not None:
        match config.overhead.applicable_to:
            case OverheadApplicability.MATERIAL:
                overhead_base = material
            case OverheadApplicability.FABRICATION:
                overhead_base = fabrication
            case OverheadApplicability.SERVICE:
                overhead_base = service
            case OverheadApplicability.ALL:
                overhead_base = direct
        overhead = _apply_rate(
            overhead_base, config.overhead.enabled, config.overhead.rate_percent
        )
        contingency = _apply_rate(
            direct + overhead, config.contingency.enabled, config.contingency.rate_percent
        )
        profit = _apply_rate(
            direct + overhead + contingency, config.profit.enabled, config.profit.rate_percent
        )

    breakdown = aggregate_service_breakdown(items)

    return BOMSummary(
        total_weight=total_weight,
        total_material_cost=Money(amount=material, currency=currency),
        total_fabrication_cost=Money(amount=fabrication, currency=currency),
        total_service_cost=Money(amount=service, currency=currency),
        total_direct_cost=Money(amount=direct, currency=currency),
        overhead=Money(amount=overhead, currency=currency),
        contingency=Money(amount=contingency, currency=currency),
        profit=Money(amount=profit, currency=currency),
        total_cost=Money(amount=direct + overhead + contingency + profit, currency=currency),
        item_count=len(items),
        currency=currency,
        service_breakdown=breakdown or None,
        cost_config_id=config.id if config is not None else None,
    )


class BOMSummaryAggregator:
    """
    Recomputes and persists BOM summaries.

    Recalculations of the same BOM run one at a time; the summary is only
    written once the new figures are complete.
    """

    def __init__(
        self,
        store: IDocumentStore,
        cost_configs: CostConfigurationService,
        default_currency: str | None = None,
    ):
        self._store = store
        self._cost_configs = cost_configs
        self._default_currency = default_currency or get_settings().costing.default_currency
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, bom_id: str) -> asyncio.Lock:
        lock = self._locks.get(bom_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[bom_id] = lock
        return lock

    async def recalculate(self, bom_id: str, user_id: str | None = None) -> BOMSummary:
        """
        Rebuild a BOM's summary from its items and persist it.

        Raises:
            BOMNotFoundError: the BOM does not exist.
            StoreFailureError: the store failed; the stored summary is unchanged.
        """
        async with self._lock_for(bom_id):
            bom_doc = await self._store.get(Collections.BOMS, bom_id)
            if bom_doc is None:
                raise BOMNotFoundError(bom_id)

            rows = await self._store.query(Collections.bom_items(bom_id))
            items = sorted(
                (BOMItem.from_document(doc_id, doc) for doc_id, doc in rows),
                key=lambda item: item_number_key(item.item_number),
            )
            currency = summary_currency(items, self._default_currency)

            entity_id = bom_doc.get("entityId", "")
            config = await self._cost_configs.get_active(entity_id)
            if config is None:
                logger.warning("cost_config_missing", bom_id=bom_id, entity_id=entity_id)

            summary = compute_summary(items, config, currency)
            now = datetime.now(UTC)
            summary.last_calculated = now

            await self._store.update(
                Collections.BOMS,
                bom_id,
                {"summary": summary.to_document(), "updatedAt": now, "updatedBy": user_id},
            )

        logger.info(
            "bom_summary_recalculated",
            bom_id=bom_id,
            item_count=summary.item_count,
            total_direct_cost=summary.total_direct_cost.amount,
            total_cost=summary.total_cost.amount,
            cost_config_id=summary.cost_config_id,
        )
        return summary
