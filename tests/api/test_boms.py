"""Tests for the BOM and item endpoints."""

import pytest
from httpx import AsyncClient

from src.application.services import get_store
from src.core.entities import Material, ServiceDefinition, Shape
from src.infrastructure.catalog import (
    DocumentMaterialCatalog,
    DocumentServiceRegistry,
    DocumentShapeCatalog,
)

ENTITY_ID = "entity-1"


@pytest.fixture
async def api_catalog(
    steel: Material,
    gate_valve: Material,
    plate_shape: Shape,
    inspection_service: ServiceDefinition,
) -> None:
    """Seed the application's store with the sample catalog."""
    store = get_store()
    await DocumentMaterialCatalog(store).save_material(steel)
    await DocumentMaterialCatalog(store).save_material(gate_valve)
    await DocumentShapeCatalog(store).save_shape(plate_shape)
    await DocumentServiceRegistry(store).save_service(inspection_service)


async def _create_bom(client: AsyncClient, **overrides) -> dict:
    payload = {"name": "Shell & tube exchanger E-101", "entityId": ENTITY_ID, **overrides}
    response = await client.post("/api/boms", json=payload, headers={"X-User-ID": "u-1"})
    assert response.status_code == 201
    return response.json()


async def _add_item(client: AsyncClient, bom_id: str, **payload) -> dict:
    response = await client.post(f"/api/boms/{bom_id}/items", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


class TestBOMEndpoints:
    async def test_create(self, async_client: AsyncClient):
        bom = await _create_bom(async_client, category="HEAT_EXCHANGER")

        assert bom["bomCode"].startswith("EST-")
        assert bom["status"] == "DRAFT"
        assert bom["version"] == 1
        assert bom["category"] == "HEAT_EXCHANGER"
        assert bom["createdBy"] == "u-1"
        assert bom["summary"]["totalCost"]["amount"] == 0.0

    async def test_create_accepts_snake_case(self, async_client: AsyncClient):
        response = await async_client.post(
            "/api/boms", json={"name": "Vessel", "entity_id": ENTITY_ID}
        )

        assert response.status_code == 201
        assert response.json()["entityId"] == ENTITY_ID

    async def test_blank_name_is_400(self, async_client: AsyncClient):
        response = await async_client.post("/api/boms", json={"name": " ", "entityId": ENTITY_ID})

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    async def test_missing_field_is_422(self, async_client: AsyncClient):
        response = await async_client.post("/api/boms", json={"entityId": ENTITY_ID})

        assert response.status_code == 422
        body = response.json()
        assert body["error_code"] == "VALIDATION_ERROR"
        assert "name" in body["detail"]

    async def test_get_missing_is_404(self, async_client: AsyncClient):
        response = await async_client.get("/api/boms/bom-missing")

        assert response.status_code == 404
        body = response.json()
        assert body["error_code"] == "BOM_NOT_FOUND"
        assert body["path"] == "/api/boms/bom-missing"
        assert body["hint"]

    async def test_list_filters(self, async_client: AsyncClient):
        await _create_bom(async_client, name="Tank", category="STORAGE_TANK")
        await _create_bom(async_client, name="Vessel")
        await _create_bom(async_client, name="Elsewhere", entityId="entity-2")

        everything = await async_client.get("/api/boms", params={"entity_id": ENTITY_ID})
        tanks = await async_client.get(
            "/api/boms", params={"entity_id": ENTITY_ID, "category": "STORAGE_TANK"}
        )
        drafts = await async_client.get(
            "/api/boms", params={"entity_id": ENTITY_ID, "status": "DRAFT"}
        )

        assert everything.json()["total"] == 2
        assert [b["name"] for b in tanks.json()["boms"]] == ["Tank"]
        assert drafts.json()["total"] == 2

    async def test_list_requires_entity(self, async_client: AsyncClient):
        response = await async_client.get("/api/boms")

        assert response.status_code == 422

    async def test_update(self, async_client: AsyncClient):
        bom = await _create_bom(async_client)

        response = await async_client.patch(
            f"/api/boms/{bom['id']}",
            json={"status": "UNDER_REVIEW"},
            headers={"X-User-ID": "u-2"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "UNDER_REVIEW"
        assert body["version"] == 2
        assert body["updatedBy"] == "u-2"

    async def test_delete(self, async_client: AsyncClient):
        bom = await _create_bom(async_client)
        await _add_item(async_client, bom["id"], name="Shell")

        response = await async_client.delete(f"/api/boms/{bom['id']}")

        assert response.status_code == 204
        assert (await async_client.get(f"/api/boms/{bom['id']}")).status_code == 404


class TestItemEndpoints:
    async def test_add_and_read_tree(self, async_client: AsyncClient, api_catalog):
        bom = await _create_bom(async_client)
        shell = await _add_item(async_client, bom["id"], name="Shell", itemType="ASSEMBLY")
        plate = await _add_item(
            async_client,
            bom["id"],
            name="Shell plate",
            parentItemId=shell["id"],
            componentType="SHAPE",
            shapeId="shape-plate",
            materialId="mat-steel",
            parameters={"L": 1000, "W": 500, "t": 10},
            quantity=2,
        )

        assert plate["itemNumber"] == "1.1"
        assert plate["level"] == 1
        assert plate["calculatedProperties"]["totalWeight"] == pytest.approx(78.5)
        assert plate["cost"]["totalMaterialCost"]["amount"] == pytest.approx(7850.0)

        detail = (await async_client.get(f"/api/boms/{bom['id']}")).json()
        assert [i["itemNumber"] for i in detail["items"]] == ["1", "1.1"]
        assert detail["bom"]["summary"]["totalWeight"] == pytest.approx(78.5)

        listing = (await async_client.get(f"/api/boms/{bom['id']}/items")).json()
        assert listing["total"] == 2

    async def test_add_to_missing_parent_is_404(self, async_client: AsyncClient):
        bom = await _create_bom(async_client)

        response = await async_client.post(
            f"/api/boms/{bom['id']}/items", json={"name": "Orphan", "parentItemId": "nope"}
        )

        assert response.status_code == 404
        assert response.json()["error_code"] == "BOM_ITEM_NOT_FOUND"

    async def test_zero_quantity_is_400(self, async_client: AsyncClient):
        bom = await _create_bom(async_client)

        response = await async_client.post(
            f"/api/boms/{bom['id']}/items", json={"name": "Part", "quantity": 0}
        )

        assert response.status_code == 400

    async def test_update_reprices(self, async_client: AsyncClient, api_catalog):
        bom = await _create_bom(async_client)
        valve = await _add_item(
            async_client,
            bom["id"],
            name="Gate valve",
            componentType="BOUGHT_OUT",
            materialId="mat-valve",
            quantity=5,
        )

        response = await async_client.patch(
            f"/api/boms/{bom['id']}/items/{valve['id']}", json={"quantity": 8}
        )

        assert response.status_code == 200
        assert response.json()["cost"]["totalMaterialCost"]["amount"] == 800.0
        item = (await async_client.get(f"/api/boms/{bom['id']}/items/{valve['id']}")).json()
        assert item["quantity"] == 8

    async def test_get_missing_item_is_404(self, async_client: AsyncClient):
        bom = await _create_bom(async_client)

        response = await async_client.get(f"/api/boms/{bom['id']}/items/nope")

        assert response.status_code == 404

    async def test_cascade_delete(self, async_client: AsyncClient, api_catalog):
        bom = await _create_bom(async_client)
        shell = await _add_item(async_client, bom["id"], name="Shell")
        nozzle = await _add_item(async_client, bom["id"], name="Nozzle", parentItemId=shell["id"])
        await _add_item(
            async_client,
            bom["id"],
            name="Flange",
            parentItemId=nozzle["id"],
            componentType="BOUGHT_OUT",
            materialId="mat-valve",
        )

        response = await async_client.delete(f"/api/boms/{bom['id']}/items/{shell['id']}")

        assert response.status_code == 200
        body = response.json()
        assert body["deleted_item_ids"][0] == shell["id"]
        assert len(body["deleted_item_ids"]) == 3
        assert body["summary"]["itemCount"] == 0
        assert body["summary"]["totalCost"]["amount"] == 0.0


class TestCostingEndpoints:
    async def test_recalculate(self, async_client: AsyncClient, api_catalog):
        bom = await _create_bom(async_client)
        await _add_item(
            async_client,
            bom["id"],
            name="Gate valve",
            componentType="BOUGHT_OUT",
            materialId="mat-valve",
            quantity=10,
        )
        await _add_item(async_client, bom["id"], name="Note")
        await async_client.post(
            "/api/cost-configurations", json={"entityId": ENTITY_ID, "name": "Shop rates"}
        )

        response = await async_client.post(f"/api/boms/{bom['id']}/recalculate")

        assert response.status_code == 200
        body = response.json()
        assert body["items_total"] == 2
        assert body["items_calculated"] == 1
        assert body["items_skipped"] == 1
        assert body["items_failed"] == 0
        assert body["summary"]["totalDirectCost"]["amount"] == 1000.0
        assert body["summary"]["totalCost"]["amount"] == pytest.approx(1328.25)

    async def test_summary(self, async_client: AsyncClient, api_catalog):
        bom = await _create_bom(async_client)
        await _add_item(
            async_client,
            bom["id"],
            name="Gate valve",
            componentType="BOUGHT_OUT",
            materialId="mat-valve",
            quantity=3,
        )

        response = await async_client.post(f"/api/boms/{bom['id']}/summary")

        assert response.status_code == 200
        assert response.json()["totalCost"]["amount"] == 300.0

    async def test_validate_shape(self, async_client: AsyncClient, api_catalog):
        response = await async_client.post(
            "/api/boms/validate-shape",
            json={"shapeId": "shape-plate", "parameters": {"L": 0, "W": 500, "t": 10}},
        )

        assert response.status_code == 200
        assert response.json() == {
            "valid": False,
            "errors": ["Parameter 'Length' is below minimum value (1)"],
        }

    async def test_request_id_echoed(self, async_client: AsyncClient):
        response = await async_client.get(
            "/api/boms", params={"entity_id": ENTITY_ID}, headers={"X-Request-ID": "abc123"}
        )

        assert response.headers["X-Request-ID"] == "abc123"
        assert "X-Response-Time" in response.headers
