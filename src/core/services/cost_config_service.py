"""
Cost configuration management.

A cost configuration is an entity's costing policy (overhead, contingency
and profit rates plus reference labor and fabrication rates). Several can
exist per entity; the one in force at a given time is the newest active
configuration whose ``effectiveFrom`` is not in the future.
"""

from datetime import UTC, datetime
from typing import Any

from src.config import get_logger
from src.core.entities.base import as_utc
from src.core.entities.cost_config import (
    DEFAULT_CONTINGENCY_CONFIG,
    DEFAULT_OVERHEAD_CONFIG,
    DEFAULT_PROFIT_CONFIG,
    CostConfiguration,
    CreateCostConfigurationInput,
    UpdateCostConfigurationInput,
)
from src.core.exceptions import CostConfigurationNotFoundError, ValidationError
from src.core.interfaces.storage import Collections, IDocumentStore, OrderBy, where

logger = get_logger(__name__)

DEFAULT_CONFIGURATION_NAME = "Default Cost Configuration"


def get_default_cost_configuration(entity_id: str) -> CostConfiguration:
    """
    Default policy for an entity: 15% overhead on all costs, 5%
    contingency, 10% profit.

    The result is not saved and is inactive, so it never shadows a stored
    configuration.
    """
    return CostConfiguration(
        entity_id=entity_id,
        name=DEFAULT_CONFIGURATION_NAME,
        overhead=DEFAULT_OVERHEAD_CONFIG.model_copy(),
        contingency=DEFAULT_CONTINGENCY_CONFIG.model_copy(),
        profit=DEFAULT_PROFIT_CONFIG.model_copy(),
        is_active=False,
        effective_from=datetime.now(UTC),
    )


class CostConfigurationService:
    """CRUD and active-configuration lookup over the document store."""

    def __init__(self, store: IDocumentStore):
        self._store = store

    async def create(
        self, data: CreateCostConfigurationInput, user_id: str | None = None
    ) -> CostConfiguration:
        """Create an active configuration; unset policies take the defaults."""
        if not data.entity_id.strip():
            raise ValidationError("entityId", "Entity ID is required", data.entity_id)
        if not data.name.strip():
            raise ValidationError("name", "Configuration name is required", data.name)

        now = datetime.now(UTC)
        config = CostConfiguration(
            entity_id=data.entity_id,
            name=data.name,
            description=data.description,
            overhead=data.overhead or DEFAULT_OVERHEAD_CONFIG.model_copy(),
            contingency=data.contingency or DEFAULT_CONTINGENCY_CONFIG.model_copy(),
            profit=data.profit or DEFAULT_PROFIT_CONFIG.model_copy(),
            labor_rates=data.labor_rates,
            fabrication_rates=data.fabrication_rates,
            is_active=True,
            effective_from=data.effective_from or now,
            created_at=now,
            updated_at=now,
            created_by=user_id,
            updated_by=user_id,
        )

        config.id = await self._store.insert(
            Collections.COST_CONFIGURATIONS, config.to_document()
        )
        logger.info(
            "cost_config_created",
            config_id=config.id,
            entity_id=config.entity_id,
            name=config.name,
        )
        return config

    async def get(self, config_id: str) -> CostConfiguration | None:
        doc = await self._store.get(Collections.COST_CONFIGURATIONS, config_id)
        if doc is None:
            return None
        return CostConfiguration.from_document(config_id, doc)

    async def get_active(
        self, entity_id: str, at: datetime | None = None
    ) -> CostConfiguration | None:
        """The configuration in force for an entity at ``at`` (default: now)."""
        rows = await self._store.query(
            Collections.COST_CONFIGURATIONS,
            filters=[
                where("entityId", "==", entity_id),
                where("isActive", "==", True),
                where("effectiveFrom", "<=", as_utc(at) if at else datetime.now(UTC)),
            ],
            order_by=[OrderBy("effectiveFrom", descending=True)],
            limit=1,
        )
        if not rows:
            return None
        doc_id, doc = rows[0]
        return CostConfiguration.from_document(doc_id, doc)

    async def update(
        self,
        config_id: str,
        updates: UpdateCostConfigurationInput,
        user_id: str | None = None,
    ) -> CostConfiguration:
        """Apply the fields that are set; unset fields are left untouched."""
        if await self.get(config_id) is None:
            raise CostConfigurationNotFoundError(config_id)

        changes: dict[str, Any] = updates.model_dump(
            by_alias=True, exclude_none=True, exclude_unset=True
        )
        changes["updatedAt"] = datetime.now(UTC)
        changes["updatedBy"] = user_id
        await self._store.update(Collections.COST_CONFIGURATIONS, config_id, changes)

        logger.info(
            "cost_config_updated",
            config_id=config_id,
            fields=sorted(k for k in changes if k not in ("updatedAt", "updatedBy")),
        )
        updated = await self.get(config_id)
        if updated is None:
            raise CostConfigurationNotFoundError(config_id)
        return updated

    async def list_for_entity(self, entity_id: str) -> list[CostConfiguration]:
        """All configurations of an entity, newest ``effectiveFrom`` first."""
        rows = await self._store.query(
            Collections.COST_CONFIGURATIONS,
            filters=[where("entityId", "==", entity_id)],
            order_by=[OrderBy("effectiveFrom", descending=True)],
        )
        return [CostConfiguration.from_document(doc_id, doc) for doc_id, doc in rows]

    async def deactivate(self, config_id: str, user_id: str | None = None) -> CostConfiguration:
        return await self.update(
            config_id, UpdateCostConfigurationInput(is_active=False), user_id
        )
