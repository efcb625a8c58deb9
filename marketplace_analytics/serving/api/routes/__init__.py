"""
Routers mounted under /api/v1.
"""
from .dashboards import router as dashboards_router
from .health import router as health_router
from .sellers import router as sellers_router

__all__ = [
    "health_router",
    "dashboards_router",
    "sellers_router",
]
