"""
Formula-driven shape evaluator.

Each shape declares its volume in mm^3 as an arithmetic formula over its
parameter names, e.g. ``L * W * t`` for a plate or
``pi / 4 * (OD * OD - ID * ID) * L`` for a pipe. From that:

    weight (kg)       = volume * 1e-9 * density (kg/m^3)
    material cost     = weight * material price per kg
    fabrication cost  = weight * shape fabrication rate per kg
"""

import math

from src.config import get_logger, get_settings
from src.core.entities.catalog import Material, Shape, ShapeEvaluation
from src.core.exceptions import FormulaError, ShapeEvaluationError
from src.core.interfaces.catalog import IShapeEvaluator
from src.core.services.formula import evaluate_formula

logger = get_logger(__name__)

MM3_TO_M3 = 1e-9


class FormulaShapeEvaluator(IShapeEvaluator):
    """Evaluates shapes from their volume formula and the material density."""

    def __init__(self, default_currency: str | None = None):
        self._default_currency = default_currency or get_settings().costing.default_currency

    async def evaluate(
        self,
        shape: Shape,
        material: Material,
        parameters: dict[str, float],
        quantity: float,
    ) -> ShapeEvaluation:
        shape_id = shape.id or shape.name
        if not shape.volume_formula:
            raise ShapeEvaluationError(shape_id, "shape has no volume formula")
        if not material.density_kg_m3:
            raise ShapeEvaluationError(shape_id, f"material {material.id} has no density")

        variables: dict[str, float] = {"pi": math.pi, **parameters}
        for param in shape.parameters:
            if param.name in parameters:
                continue
            if param.default_value is not None:
                variables[param.name] = param.default_value
            elif param.required:
                raise ShapeEvaluationError(shape_id, f"missing parameter '{param.name}'")

        try:
            volume_mm3 = evaluate_formula(shape.volume_formula, variables)
        except FormulaError as e:
            raise ShapeEvaluationError(shape_id, e.message) from e

        weight = volume_mm3 * MM3_TO_M3 * material.density_kg_m3
        price = material.current_price.price_per_unit if material.current_price else None
        price_per_kg = price.amount if price else 0.0
        currency = (price.currency if price else None) or self._default_currency

        logger.debug(
            "shape_evaluated",
            shape_id=shape_id,
            material_id=material.id,
            volume_mm3=volume_mm3,
            weight_kg=weight,
            quantity=quantity,
        )
        return ShapeEvaluation(
            weight_per_unit=weight,
            material_cost_per_unit=weight * price_per_kg,
            fabrication_cost_per_unit=weight * shape.fabrication_rate_per_kg,
            currency=currency,
        )
