# Consolidated route imports
from .health import router as health_router
from .properties import router as properties_router
from .review import router as review_router
from .sources import router as sources_router

__all__ = [
    "health_router",
    "properties_router",
    "review_router",
    "sources_router",
]
