"""
Abstract interfaces for the catalogs the cost calculator consumes.

Shapes, materials and services live outside the costing core; these ports
are all it needs from them.
"""

from abc import ABC, abstractmethod

from src.core.entities.base import Money
from src.core.entities.catalog import Material, Shape, ShapeEvaluation
from src.core.entities.service import ServiceDefinition


class IMaterialCatalog(ABC):
    """Material lookup and current pricing."""

    @abstractmethod
    async def get_material(self, material_id: str) -> Material | None:
        """Get material by ID."""

    @abstractmethod
    async def get_current_price(self, material_id: str) -> Money | None:
        """Current price per unit, or None when the material has no price."""


class IShapeCatalog(ABC):
    """Shape definitions and their parameter declarations."""

    @abstractmethod
    async def get_shape(self, shape_id: str) -> Shape | None:
        """Get shape by ID."""


class IShapeEvaluator(ABC):
    """Turns shape parameters plus a material into weight and raw cost."""

    @abstractmethod
    async def evaluate(
        self,
        shape: Shape,
        material: Material,
        parameters: dict[str, float],
        quantity: float,
    ) -> ShapeEvaluation:
        """
        Evaluate one unit of the shape.

        Raises:
            ShapeEvaluationError: parameters are out of range or the
                geometry cannot be resolved.
        """


class IServiceRegistry(ABC):
    """Resolves service ids to their calculation rules."""

    @abstractmethod
    async def get_service(self, service_id: str) -> ServiceDefinition | None:
        """Get service definition by ID."""
