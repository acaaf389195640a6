from __future__ import annotations

from app.api.routes.health import router as health_router
from app.api.routes.simplify import router as simplify_router

__all__ = ["health_router", "simplify_router"]
