"""
Catalog entities consumed by the cost calculator.

Materials carry a current price; shapes declare the parameters their
geometry needs.
"""

from pydantic import BaseModel, Field

from src.core.entities.base import DocumentModel, Money


class MaterialPrice(DocumentModel):
    """Current catalog price of a material."""

    price_per_unit: Money
    unit: str = "kg"


class Material(DocumentModel):
    """A material or bought-out article in the catalog."""

    id: str | None = None
    name: str
    category: str | None = None
    density_kg_m3: float | None = None
    current_price: MaterialPrice | None = None


class ShapeParameter(DocumentModel):
    """One declared input of a parametric shape."""

    name: str
    label: str
    unit: str = "mm"
    required: bool = True
    min_value: float | None = None
    max_value: float | None = None
    default_value: float | None = None
    order: int = 0


class Shape(DocumentModel):
    """A parametric shape (plate, pipe, nozzle...)."""

    id: str | None = None
    name: str
    category: str | None = None
    parameters: list[ShapeParameter] = Field(default_factory=list)

    # Volume in mm^3 as an arithmetic expression over the parameter names
    volume_formula: str | None = None
    fabrication_rate_per_kg: float = 0.0


class ShapeEvaluation(BaseModel):
    """Per-unit figures returned by a shape evaluator."""

    weight_per_unit: float
    material_cost_per_unit: float
    fabrication_cost_per_unit: float
    currency: str


class ShapeValidationResult(BaseModel):
    """Outcome of checking parameter values against a shape's declaration."""

    valid: bool
    errors: list[str] = Field(default_factory=list)
