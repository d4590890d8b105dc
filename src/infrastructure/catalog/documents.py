"""
Catalog adapters backed by the document store.

Materials, shapes and service definitions are read from their own
collections in the same store that holds the BOMs.
"""

from src.config import get_logger
from src.core.entities.base import Money
from src.core.entities.catalog import Material, Shape
from src.core.entities.service import ServiceDefinition
from src.core.interfaces.catalog import IMaterialCatalog, IServiceRegistry, IShapeCatalog
from src.core.interfaces.storage import Collections, IDocumentStore

logger = get_logger(__name__)


class DocumentMaterialCatalog(IMaterialCatalog):
    """Materials from the ``materials`` collection."""

    def __init__(self, store: IDocumentStore):
        self._store = store

    async def get_material(self, material_id: str) -> Material | None:
        doc = await self._store.get(Collections.MATERIALS, material_id)
        if doc is None:
            return None
        return Material.from_document(material_id, doc)

    async def get_current_price(self, material_id: str) -> Money | None:
        material = await self.get_material(material_id)
        if material is None or material.current_price is None:
            return None
        return material.current_price.price_per_unit

    async def save_material(self, material: Material) -> Material:
        """Create or replace a material."""
        if material.id is None:
            material.id = await self._store.insert(Collections.MATERIALS, material.to_document())
        else:
            await self._store.set(Collections.MATERIALS, material.id, material.to_document())
        logger.debug("material_saved", material_id=material.id)
        return material


class DocumentShapeCatalog(IShapeCatalog):
    """Shapes from the ``shapes`` collection."""

    def __init__(self, store: IDocumentStore):
        self._store = store

    async def get_shape(self, shape_id: str) -> Shape | None:
        doc = await self._store.get(Collections.SHAPES, shape_id)
        if doc is None:
            return None
        return Shape.from_document(shape_id, doc)

    async def save_shape(self, shape: Shape) -> Shape:
        """Create or replace a shape."""
        if shape.id is None:
            shape.id = await self._store.insert(Collections.SHAPES, shape.to_document())
        else:
            await self._store.set(Collections.SHAPES, shape.id, shape.to_document())
        logger.debug("shape_saved", shape_id=shape.id)
        return shape


class DocumentServiceRegistry(IServiceRegistry):
    """Service definitions from the ``services`` collection."""

    def __init__(self, store: IDocumentStore):
        self._store = store

    async def get_service(self, service_id: str) -> ServiceDefinition | None:
        doc = await self._store.get(Collections.SERVICES, service_id)
        if doc is None:
            return None
        return ServiceDefinition.from_document(service_id, doc)

    async def save_service(self, service: ServiceDefinition) -> ServiceDefinition:
        """Create or replace a service definition."""
        if service.id is None:
            service.id = await self._store.insert(Collections.SERVICES, service.to_document())
        else:
            await self._store.set(Collections.SERVICES, service.id, service.to_document())
        logger.debug("service_saved", service_id=service.id)
        return service
