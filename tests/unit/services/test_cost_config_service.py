"""Tests for cost configuration management."""

from datetime import UTC, datetime, timedelta

import pytest

from src.core.entities import (
    CreateCostConfigurationInput,
    OverheadApplicability,
    OverheadConfig,
    UpdateCostConfigurationInput,
)
from src.core.exceptions import CostConfigurationNotFoundError, ValidationError
from src.core.services import CostConfigurationService, get_default_cost_configuration

ENTITY_ID = "entity-1"


class TestDefaultConfiguration:
    def test_defaults(self):
        config = get_default_cost_configuration(ENTITY_ID)

        assert config.entity_id == ENTITY_ID
        assert config.name == "Default Cost Configuration"
        assert config.is_active is False
        assert config.overhead.rate_percent == 15.0
        assert config.overhead.applicable_to == OverheadApplicability.ALL
        assert config.contingency.rate_percent == 5.0
        assert config.profit.rate_percent == 10.0

    def test_defaults_are_independent_copies(self):
        first = get_default_cost_configuration(ENTITY_ID)
        first.overhead.rate_percent = 99.0

        assert get_default_cost_configuration(ENTITY_ID).overhead.rate_percent == 15.0


class TestCreate:
    async def test_create_fills_defaults(self, cost_configs: CostConfigurationService):
        config = await cost_configs.create(
            CreateCostConfigurationInput(entity_id=ENTITY_ID, name="Shop rates"), "u-1"
        )

        assert config.id is not None
        assert config.is_active is True
        assert config.overhead.rate_percent == 15.0
        assert config.created_by == "u-1"

        stored = await cost_configs.get(config.id)
        assert stored is not None
        assert stored.name == "Shop rates"
        assert stored.profit.rate_percent == 10.0

    async def test_create_keeps_given_policy(self, cost_configs: CostConfigurationService):
        config = await cost_configs.create(
            CreateCostConfigurationInput(
                entity_id=ENTITY_ID,
                name="Material-heavy",
                overhead=OverheadConfig(
                    rate_percent=8.0, applicable_to=OverheadApplicability.MATERIAL
                ),
            )
        )

        stored = await cost_configs.get(config.id)
        assert stored.overhead.rate_percent == 8.0
        assert stored.overhead.applicable_to == OverheadApplicability.MATERIAL

    @pytest.mark.parametrize(
        ("entity_id", "name"),
        [("", "Shop rates"), ("   ", "Shop rates"), (ENTITY_ID, ""), (ENTITY_ID, "  ")],
    )
    async def test_create_requires_entity_and_name(
        self, cost_configs: CostConfigurationService, entity_id: str, name: str
    ):
        with pytest.raises(ValidationError):
            await cost_configs.create(
                CreateCostConfigurationInput(entity_id=entity_id, name=name)
            )


class TestGetActive:
    async def test_latest_effective_wins(self, cost_configs: CostConfigurationService):
        now = datetime.now(UTC)
        await cost_configs.create(
            CreateCostConfigurationInput(
                entity_id=ENTITY_ID, name="2025 rates", effective_from=now - timedelta(days=300)
            )
        )
        current = await cost_configs.create(
            CreateCostConfigurationInput(
                entity_id=ENTITY_ID, name="2026 rates", effective_from=now - timedelta(days=10)
            )
        )

        active = await cost_configs.get_active(ENTITY_ID)

        assert active is not None
        assert active.id == current.id

    async def test_future_config_not_active_yet(self, cost_configs: CostConfigurationService):
        now = datetime.now(UTC)
        current = await cost_configs.create(
            CreateCostConfigurationInput(
                entity_id=ENTITY_ID, name="Current", effective_from=now - timedelta(days=1)
            )
        )
        await cost_configs.create(
            CreateCostConfigurationInput(
                entity_id=ENTITY_ID, name="Next year", effective_from=now + timedelta(days=90)
            )
        )

        active = await cost_configs.get_active(ENTITY_ID)
        assert active.id == current.id

        later = await cost_configs.get_active(ENTITY_ID, at=now + timedelta(days=100))
        assert later.name == "Next year"

    async def test_inactive_ignored(self, cost_configs: CostConfigurationService):
        config = await cost_configs.create(
            CreateCostConfigurationInput(entity_id=ENTITY_ID, name="Old")
        )
        await cost_configs.deactivate(config.id)

        assert await cost_configs.get_active(ENTITY_ID) is None

    async def test_other_entity_ignored(self, cost_configs: CostConfigurationService):
        await cost_configs.create(
            CreateCostConfigurationInput(entity_id="entity-2", name="Other shop")
        )

        assert await cost_configs.get_active(ENTITY_ID) is None

    async def test_naive_effective_date_is_utc(self, cost_configs: CostConfigurationService):
        config = await cost_configs.create(
            CreateCostConfigurationInput(
                entity_id=ENTITY_ID, name="Legacy rates", effective_from=datetime(2020, 1, 1)
            )
        )

        assert config.effective_from == datetime(2020, 1, 1, tzinfo=UTC)
        active = await cost_configs.get_active(ENTITY_ID)
        assert active is not None
        assert active.id == config.id

    async def test_naive_lookup_time(self, cost_configs: CostConfigurationService):
        await cost_configs.create(
            CreateCostConfigurationInput(
                entity_id=ENTITY_ID,
                name="2026 rates",
                effective_from=datetime(2026, 1, 1, tzinfo=UTC),
            )
        )

        assert await cost_configs.get_active(ENTITY_ID, at=datetime(2025, 12, 31)) is None
        assert await cost_configs.get_active(ENTITY_ID, at=datetime(2026, 1, 2)) is not None


class TestUpdate:
    async def test_partial_update(self, cost_configs: CostConfigurationService):
        config = await cost_configs.create(
            CreateCostConfigurationInput(entity_id=ENTITY_ID, name="Shop rates")
        )

        updated = await cost_configs.update(
            config.id,
            UpdateCostConfigurationInput(
                overhead=OverheadConfig(rate_percent=20.0), description="Revised"
            ),
            "u-2",
        )

        assert updated.overhead.rate_percent == 20.0
        assert updated.description == "Revised"
        assert updated.name == "Shop rates"
        assert updated.profit.rate_percent == 10.0
        assert updated.updated_by == "u-2"

    async def test_update_missing_raises(self, cost_configs: CostConfigurationService):
        with pytest.raises(CostConfigurationNotFoundError):
            await cost_configs.update(
                "cfg-missing", UpdateCostConfigurationInput(name="Whatever")
            )

    async def test_deactivate(self, cost_configs: CostConfigurationService):
        config = await cost_configs.create(
            CreateCostConfigurationInput(entity_id=ENTITY_ID, name="Shop rates")
        )

        deactivated = await cost_configs.deactivate(config.id)

        assert deactivated.is_active is False


async def test_list_for_entity_newest_first(cost_configs: CostConfigurationService):
    now = datetime.now(UTC)
    for name, days_ago in [("Oldest", 300), ("Newest", 1), ("Middle", 100)]:
        await cost_configs.create(
            CreateCostConfigurationInput(
                entity_id=ENTITY_ID, name=name, effective_from=now - timedelta(days=days_ago)
            )
        )
    await cost_configs.create(
        CreateCostConfigurationInput(entity_id="entity-2", name="Elsewhere")
    )

    configs = await cost_configs.list_for_entity(ENTITY_ID)

    assert [c.name for c in configs] == ["Newest", "Middle", "Oldest"]
