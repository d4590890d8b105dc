"""API route modules."""

from src.api.routes.boms import router as boms_router
from src.api.routes.cost_configs import router as cost_configs_router
from src.api.routes.health import router as health_router

__all__ = [
    "health_router",
    "boms_router",
    "cost_configs_router",
]
