"""Pytest configuration and fixtures."""

import os

# Tests run against the in-memory backend unless a test wires SQLite itself
os.environ["STORAGE_BACKEND"] = "memory"

from collections.abc import AsyncGenerator, Generator  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from src.application.services import reset_services  # noqa: E402
from src.config import reset_settings  # noqa: E402
from src.core.entities import (  # noqa: E402
    Material,
    MaterialPrice,
    Money,
    ServiceCalculationMethod,
    ServiceCategory,
    ServiceDefinition,
    Shape,
    ShapeParameter,
)
from src.core.services import (  # noqa: E402
    BOMCodeGenerator,
    BOMService,
    BOMSummaryAggregator,
    CostConfigurationService,
    ItemCostCalculator,
    ItemNumberAllocator,
)
from src.infrastructure.catalog import (  # noqa: E402
    DocumentMaterialCatalog,
    DocumentServiceRegistry,
    DocumentShapeCatalog,
    FormulaShapeEvaluator,
)
from src.infrastructure.storage.memory import InMemoryDocumentStore  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_singletons() -> Generator[None, None, None]:
    """Every test starts with fresh settings and service singletons."""
    reset_settings()
    reset_services()
    yield
    reset_services()
    reset_settings()


@pytest.fixture
def store() -> InMemoryDocumentStore:
    """Empty in-memory document store."""
    return InMemoryDocumentStore()


@pytest.fixture
def materials(store: InMemoryDocumentStore) -> DocumentMaterialCatalog:
    return DocumentMaterialCatalog(store)


@pytest.fixture
def shapes(store: InMemoryDocumentStore) -> DocumentShapeCatalog:
    return DocumentShapeCatalog(store)


@pytest.fixture
def service_registry(store: InMemoryDocumentStore) -> DocumentServiceRegistry:
    return DocumentServiceRegistry(store)


@pytest.fixture
def steel() -> Material:
    """Carbon steel plate material, 7850 kg/m^3 at INR 100/kg."""
    return Material(
        id="mat-steel",
        name="IS 2062 E250 plate",
        category="PLATE",
        density_kg_m3=7850.0,
        current_price=MaterialPrice(price_per_unit=Money(amount=100.0, currency="INR")),
    )


@pytest.fixture
def gate_valve() -> Material:
    """Bought-out valve at INR 100 per piece."""
    return Material(
        id="mat-valve",
        name='Gate valve 2" 150#',
        category="VALVE",
        current_price=MaterialPrice(
            price_per_unit=Money(amount=100.0, currency="INR"), unit="nos"
        ),
    )


@pytest.fixture
def plate_shape() -> Shape:
    """Rectangular plate: volume = L * W * t (mm^3), fabrication INR 50/kg."""
    return Shape(
        id="shape-plate",
        name="Plate",
        category="PLATE",
        parameters=[
            ShapeParameter(name="L", label="Length", min_value=1, max_value=12000, order=1),
            ShapeParameter(name="W", label="Width", min_value=1, max_value=3000, order=2),
            ShapeParameter(name="t", label="Thickness", min_value=1, max_value=200, order=3),
        ],
        volume_formula="L * W * t",
        fabrication_rate_per_kg=50.0,
    )


@pytest.fixture
def inspection_service() -> ServiceDefinition:
    """Third-party inspection at 10% of material cost."""
    return ServiceDefinition(
        id="svc-inspection",
        name="Third-party inspection",
        category=ServiceCategory.INSPECTION,
        calculation_method=ServiceCalculationMethod.PERCENTAGE_OF_MATERIAL,
        default_rate_value=10.0,
    )


@pytest_asyncio.fixture
async def seeded_catalog(
    materials: DocumentMaterialCatalog,
    shapes: DocumentShapeCatalog,
    service_registry: DocumentServiceRegistry,
    steel: Material,
    gate_valve: Material,
    plate_shape: Shape,
    inspection_service: ServiceDefinition,
) -> None:
    """Store the sample materials, shape and service."""
    await materials.save_material(steel)
    await materials.save_material(gate_valve)
    await shapes.save_shape(plate_shape)
    await service_registry.save_service(inspection_service)


@pytest.fixture
def cost_configs(store: InMemoryDocumentStore) -> CostConfigurationService:
    return CostConfigurationService(store)


@pytest.fixture
def calculator(
    store: InMemoryDocumentStore,
    materials: DocumentMaterialCatalog,
    shapes: DocumentShapeCatalog,
    service_registry: DocumentServiceRegistry,
) -> ItemCostCalculator:
    return ItemCostCalculator(
        store=store,
        materials=materials,
        shapes=shapes,
        shape_evaluator=FormulaShapeEvaluator(default_currency="INR"),
        services=service_registry,
        default_currency="INR",
    )


@pytest.fixture
def aggregator(
    store: InMemoryDocumentStore, cost_configs: CostConfigurationService
) -> BOMSummaryAggregator:
    return BOMSummaryAggregator(store, cost_configs, default_currency="INR")


@pytest.fixture
def bom_service(
    store: InMemoryDocumentStore,
    calculator: ItemCostCalculator,
    aggregator: BOMSummaryAggregator,
) -> BOMService:
    """BOM service over the in-memory store with the document catalogs."""
    return BOMService(
        store=store,
        allocator=ItemNumberAllocator(store),
        calculator=calculator,
        aggregator=aggregator,
        code_generator=BOMCodeGenerator(store, prefix="EST", sequence_width=4),
        default_currency="INR",
    )


@pytest_asyncio.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Async client against a fresh app on the in-memory backend."""
    from src.api.main import create_app

    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
