"""
API Routes.
"""
from .health import router as health_router
from .content import router as content_router

__all__ = [
    "health_router",
    "content_router",
]
