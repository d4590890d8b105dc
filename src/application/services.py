"""
Service factory functions for dependency injection.

This module provides factory functions that wire infrastructure
implementations to core services. API handlers should import from here.

Clean Architecture: Application layer orchestrates DI, not core layer.
"""

from typing import TYPE_CHECKING

from src.config import get_logger, get_settings
from src.core.services import (
    BOMCodeGenerator,
    BOMService,
    BOMSummaryAggregator,
    CostConfigurationService,
    ItemCostCalculator,
    ItemNumberAllocator,
)

if TYPE_CHECKING:
    from src.core.interfaces import (
        IDocumentStore,
        IMaterialCatalog,
        IServiceRegistry,
        IShapeCatalog,
        IShapeEvaluator,
    )

logger = get_logger(__name__)

# Singleton service instances
_store: "IDocumentStore | None" = None
_cost_config_service: CostConfigurationService | None = None
_item_cost_calculator: ItemCostCalculator | None = None
_bom_service: BOMService | None = None


def get_store() -> "IDocumentStore":
    """
    Get the document store for the configured backend.

    ``STORAGE_BACKEND=memory`` gives a process-local store (tests, demos);
    anything else uses SQLite.
    """
    global _store

    if _store is not None:
        return _store

    # Lazy import infrastructure to avoid circular imports
    backend = get_settings().storage.backend
    if backend == "memory":
        from src.infrastructure.storage.memory import InMemoryDocumentStore

        _store = InMemoryDocumentStore()
    else:
        from src.infrastructure.storage.sqlite import get_document_store

        _store = get_document_store()

    logger.info("document_store_selected", backend=backend)
    return _store


def get_cost_config_service(
    store: "IDocumentStore | None" = None,
) -> CostConfigurationService:
    """
    Get or create CostConfigurationService instance.

    Args:
        store: Optional document store override

    Returns:
        Configured CostConfigurationService
    """
    global _cost_config_service

    if _cost_config_service is not None and store is None:
        return _cost_config_service

    service = CostConfigurationService(store or get_store())

    if store is None:
        _cost_config_service = service

    return service


def get_item_cost_calculator(
    store: "IDocumentStore | None" = None,
    materials: "IMaterialCatalog | None" = None,
    shapes: "IShapeCatalog | None" = None,
    shape_evaluator: "IShapeEvaluator | None" = None,
    services: "IServiceRegistry | None" = None,
) -> ItemCostCalculator:
    """
    Get or create ItemCostCalculator instance.

    Catalogs default to the document-backed adapters over the same store.
    """
    global _item_cost_calculator

    overridden = any(
        dep is not None for dep in (store, materials, shapes, shape_evaluator, services)
    )
    if _item_cost_calculator is not None and not overridden:
        return _item_cost_calculator

    from src.infrastructure.catalog import (
        DocumentMaterialCatalog,
        DocumentServiceRegistry,
        DocumentShapeCatalog,
        FormulaShapeEvaluator,
    )

    doc_store = store or get_store()
    calculator = ItemCostCalculator(
        store=doc_store,
        materials=materials or DocumentMaterialCatalog(doc_store),
        shapes=shapes or DocumentShapeCatalog(doc_store),
        shape_evaluator=shape_evaluator or FormulaShapeEvaluator(),
        services=services or DocumentServiceRegistry(doc_store),
    )

    if not overridden:
        _item_cost_calculator = calculator

    return calculator


def get_bom_service(store: "IDocumentStore | None" = None) -> BOMService:
    """
    Get or create BOMService instance.

    The singleton matters beyond efficiency: item numbering and summary
    recalculation serialize on locks held by the allocator and aggregator,
    so every request must share the same instances.
    """
    global _bom_service

    if _bom_service is not None and store is None:
        return _bom_service

    doc_store = store or get_store()
    costing = get_settings().costing

    service = BOMService(
        store=doc_store,
        allocator=ItemNumberAllocator(doc_store),
        calculator=get_item_cost_calculator(store),
        aggregator=BOMSummaryAggregator(
            doc_store,
            get_cost_config_service(store),
            default_currency=costing.default_currency,
        ),
        code_generator=BOMCodeGenerator(
            doc_store,
            prefix=costing.bom_code_prefix,
            sequence_width=costing.bom_code_sequence_width,
            counters_collection=costing.counters_collection,
        ),
        default_currency=costing.default_currency,
    )

    if store is None:
        _bom_service = service

    return service


def reset_services() -> None:
    """Reset all singleton services (for testing)."""
    global _store, _cost_config_service, _item_cost_calculator, _bom_service

    _store = None
    _cost_config_service = None
    _item_cost_calculator = None
    _bom_service = None
