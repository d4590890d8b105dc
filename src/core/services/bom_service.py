"""
BOM and BOM item operations.

Wraps the document store with the rules that keep a BOM consistent:
numbering of new items, cost calculation when an item's component,
quantity or services change, cascade deletion of sub-trees and a summary
recalculation after every item mutation.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from src.config import get_logger, get_settings
from src.core.entities.bom import (
    BOM,
    BOMCategory,
    BOMItem,
    BOMStatus,
    BOMSummary,
    ComponentType,
    CreateBOMInput,
    CreateBOMItemInput,
    UpdateBOMInput,
    UpdateBOMItemInput,
    make_component,
)
from src.core.exceptions import BOMItemNotFoundError, BOMNotFoundError, ValidationError
from src.core.interfaces.storage import Collections, IDocumentStore, OrderBy, QueryFilter, where
from src.core.services.bom_code import BOMCodeGenerator
from src.core.services.bom_summary import BOMSummaryAggregator
from src.core.services.item_cost_calculator import ItemCostBatchResult, ItemCostCalculator
from src.core.services.item_numbering import ItemNumberAllocator, item_number_key

logger = get_logger(__name__)

_COMPONENT_FIELDS = {"component_type", "shape_id", "material_id", "parameters"}


@dataclass
class CostRecalculationResult:
    """Outcome of repricing a whole BOM."""

    items: ItemCostBatchResult
    summary: BOMSummary


class BOMService:
    """
    BOM and item repository operations.

    All collaborators are injected; the service never touches a concrete
    backend.
    """

    def __init__(
        self,
        store: IDocumentStore,
        allocator: ItemNumberAllocator,
        calculator: ItemCostCalculator,
        aggregator: BOMSummaryAggregator,
        code_generator: BOMCodeGenerator,
        default_currency: str | None = None,
    ):
        self._store = store
        self._allocator = allocator
        self._calculator = calculator
        self._aggregator = aggregator
        self._code_generator = code_generator
        self._default_currency = default_currency or get_settings().costing.default_currency

    # BOM operations

    async def create_bom(self, data: CreateBOMInput, user_id: str | None = None) -> BOM:
        """
        Create a draft BOM with a fresh code and an empty summary.

        Raises:
            ValidationError: name or entity is missing.
        """
        if not data.name.strip():
            raise ValidationError("name", "BOM name is required", data.name)
        if not data.entity_id.strip():
            raise ValidationError("entityId", "Entity ID is required", data.entity_id)

        bom_code = await self._code_generator.generate()
        now = datetime.now(UTC)
        bom = BOM(
            bom_code=bom_code,
            name=data.name,
            description=data.description,
            category=data.category,
            entity_id=data.entity_id,
            project_id=data.project_id,
            project_name=data.project_name,
            status=BOMStatus.DRAFT,
            version=1,
            summary=BOMSummary.empty(self._default_currency),
            created_at=now,
            updated_at=now,
            created_by=user_id,
            updated_by=user_id,
        )
        bom.id = await self._store.insert(Collections.BOMS, bom.to_document())

        logger.info(
            "bom_created",
            bom_id=bom.id,
            bom_code=bom_code,
            entity_id=bom.entity_id,
            category=bom.category.value,
        )
        return bom

    async def get_bom(self, bom_id: str) -> BOM | None:
        doc = await self._store.get(Collections.BOMS, bom_id)
        if doc is None:
            return None
        return BOM.from_document(bom_id, doc)

    async def require_bom(self, bom_id: str) -> BOM:
        bom = await self.get_bom(bom_id)
        if bom is None:
            raise BOMNotFoundError(bom_id)
        return bom

    async def update_bom(
        self, bom_id: str, updates: UpdateBOMInput, user_id: str | None = None
    ) -> BOM:
        """Apply the set fields and bump the version."""
        current = await self.require_bom(bom_id)

        changes: dict[str, Any] = updates.model_dump(
            by_alias=True, exclude_none=True, exclude_unset=True
        )
        if "name" in changes and not changes["name"].strip():
            raise ValidationError("name", "BOM name is required", changes["name"])

        changes["version"] = current.version + 1
        changes["updatedAt"] = datetime.now(UTC)
        changes["updatedBy"] = user_id
        await self._store.update(Collections.BOMS, bom_id, changes)

        logger.info(
            "bom_updated",
            bom_id=bom_id,
            version=changes["version"],
            fields=sorted(k for k in changes if k not in ("version", "updatedAt", "updatedBy")),
        )

        # A different entity may have a different cost configuration
        if updates.entity_id is not None and updates.entity_id != current.entity_id:
            await self._aggregator.recalculate(bom_id, user_id)

        return await self.require_bom(bom_id)

    async def delete_bom(self, bom_id: str) -> None:
        """Delete a BOM and all of its items in one batch."""
        await self.require_bom(bom_id)

        collection = Collections.bom_items(bom_id)
        rows = await self._store.query(collection)

        batch = self._store.batch()
        for item_id, _ in rows:
            batch.delete(collection, item_id)
        batch.delete(Collections.BOMS, bom_id)
        await batch.commit()

        logger.info("bom_deleted", bom_id=bom_id, items_deleted=len(rows))

    async def list_boms(
        self,
        entity_id: str,
        project_id: str | None = None,
        category: BOMCategory | None = None,
        status: BOMStatus | None = None,
        limit: int | None = None,
    ) -> list[BOM]:
        """BOMs of an entity, newest first."""
        filters: list[QueryFilter] = [where("entityId", "==", entity_id)]
        if project_id:
            filters.append(where("projectId", "==", project_id))
        if category:
            filters.append(where("category", "==", category))
        if status:
            filters.append(where("status", "==", status))

        rows = await self._store.query(
            Collections.BOMS,
            filters=filters,
            order_by=[OrderBy("createdAt", descending=True)],
            limit=limit,
        )
        return [BOM.from_document(doc_id, doc) for doc_id, doc in rows]

    # Item operations

    async def add_item(
        self, bom_id: str, data: CreateBOMItemInput, user_id: str | None = None
    ) -> BOMItem:
        """
        Add an item under a parent (or at the root) and reprice the BOM.

        Raises:
            BOMNotFoundError: the BOM does not exist.
            BOMItemNotFoundError: the parent item does not exist.
            ValidationError: name is missing or quantity is not positive.
        """
        bom = await self.require_bom(bom_id)
        if not data.name.strip():
            raise ValidationError("name", "Item name is required", data.name)
        if data.quantity <= 0:
            raise ValidationError("quantity", "Quantity must be greater than zero", data.quantity)

        collection = Collections.bom_items(bom_id)
        now = datetime.now(UTC)

        async with self._allocator.reserve(bom_id, data.parent_item_id) as allocation:
            item = BOMItem(
                bom_id=bom_id,
                item_number=allocation.item_number,
                item_type=data.item_type,
                level=allocation.level,
                sort_order=allocation.sort_order,
                parent_item_id=data.parent_item_id,
                name=data.name,
                description=data.description,
                quantity=data.quantity,
                unit=data.unit,
                component=data.build_component(),
                services=data.services,
                created_at=now,
                updated_at=now,
                created_by=user_id,
                updated_by=user_id,
            )
            item.id = await self._store.insert(collection, item.to_document())

        logger.info(
            "bom_item_added",
            bom_id=bom_id,
            item_id=item.id,
            item_number=item.item_number,
            parent_item_id=item.parent_item_id,
        )

        if item.component is not None:
            result = await self._calculator.calculate_and_update_item_cost(
                bom_id, item, user_id, bom.category.value
            )
            if result is not None:
                item.calculated_properties = result.calculated_properties
                item.cost = result.cost

        await self._aggregator.recalculate(bom_id, user_id)
        return item

    async def get_item(self, bom_id: str, item_id: str) -> BOMItem | None:
        doc = await self._store.get(Collections.bom_items(bom_id), item_id)
        if doc is None:
            return None
        return BOMItem.from_document(item_id, doc)

    async def get_items(self, bom_id: str) -> list[BOMItem]:
        """All items of a BOM in item-number order."""
        rows = await self._store.query(Collections.bom_items(bom_id))
        items = [BOMItem.from_document(doc_id, doc) for doc_id, doc in rows]
        return sorted(items, key=lambda item: item_number_key(item.item_number))

    async def update_item(
        self,
        bom_id: str,
        item_id: str,
        updates: UpdateBOMItemInput,
        user_id: str | None = None,
    ) -> BOMItem:
        """
        Apply the set fields; component fields merge into the stored
        component. The item is repriced when its cost inputs change.
        """
        bom = await self.require_bom(bom_id)
        current = await self.get_item(bom_id, item_id)
        if current is None:
            raise BOMItemNotFoundError(bom_id, item_id)

        if updates.name is not None and not updates.name.strip():
            raise ValidationError("name", "Item name is required", updates.name)
        if updates.quantity is not None and updates.quantity <= 0:
            raise ValidationError(
                "quantity", "Quantity must be greater than zero", updates.quantity
            )

        changes: dict[str, Any] = updates.model_dump(
            by_alias=True, exclude_none=True, exclude_unset=True, exclude=_COMPONENT_FIELDS
        )
        if updates.touches_component:
            existing = current.component
            component_type = updates.component_type or (
                existing.type if existing is not None else ComponentType.SHAPE
            )
            parameters = (
                updates.parameters
                if updates.parameters is not None
                else getattr(existing, "parameters", None)
            )
            component = make_component(
                component_type,
                shape_id=updates.shape_id or getattr(existing, "shape_id", None),
                material_id=updates.material_id
                or (existing.material_id if existing is not None else None),
                parameters=parameters,
            )
            changes["component"] = component.to_document()

        changes["updatedAt"] = datetime.now(UTC)
        changes["updatedBy"] = user_id

        collection = Collections.bom_items(bom_id)
        await self._store.update(collection, item_id, changes)
        logger.info(
            "bom_item_updated",
            bom_id=bom_id,
            item_id=item_id,
            fields=sorted(k for k in changes if k not in ("updatedAt", "updatedBy")),
        )

        item = await self.get_item(bom_id, item_id)
        if item is None:
            raise BOMItemNotFoundError(bom_id, item_id)

        if updates.affects_cost:
            result = await self._calculator.calculate_and_update_item_cost(
                bom_id, item, user_id, bom.category.value
            )
            if result is not None:
                item.calculated_properties = result.calculated_properties
                item.cost = result.cost

        await self._aggregator.recalculate(bom_id, user_id)
        return item

    async def delete_item(
        self, bom_id: str, item_id: str, user_id: str | None = None
    ) -> list[str]:
        """
        Delete an item and every descendant, then reprice the BOM.

        Returns:
            Ids of all deleted items, the requested item first.
        """
        await self.require_bom(bom_id)
        collection = Collections.bom_items(bom_id)
        if await self._store.get(collection, item_id) is None:
            raise BOMItemNotFoundError(bom_id, item_id)

        to_delete: list[str] = []
        pending = [item_id]
        while pending:
            current_id = pending.pop()
            to_delete.append(current_id)
            children = await self._store.query(
                collection, filters=[where("parentItemId", "==", current_id)]
            )
            pending.extend(child_id for child_id, _ in children)

        batch = self._store.batch()
        for doc_id in to_delete:
            batch.delete(collection, doc_id)
        await batch.commit()

        logger.info(
            "bom_item_deleted",
            bom_id=bom_id,
            item_id=item_id,
            descendants_deleted=len(to_delete) - 1,
        )

        await self._aggregator.recalculate(bom_id, user_id)
        return to_delete

    # Costing

    async def recalculate_all_costs(
        self, bom_id: str, user_id: str | None = None
    ) -> CostRecalculationResult:
        """
        Reprice every item, then rebuild the summary.

        Items whose earlier calculation failed get another attempt here.
        """
        bom = await self.require_bom(bom_id)
        items = await self.get_items(bom_id)
        report = await self._calculator.calculate_all_item_costs(
            bom_id, items, user_id, bom.category.value
        )
        summary = await self._aggregator.recalculate(bom_id, user_id)
        return CostRecalculationResult(items=report, summary=summary)

    async def recalculate_summary(self, bom_id: str, user_id: str | None = None) -> BOMSummary:
        return await self._aggregator.recalculate(bom_id, user_id)
