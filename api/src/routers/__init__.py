# FastAPI Routers
from src.routers.health import router as health_router
from src.routers.identity import router as identity_router
from src.routers.reports import router as reports_router
from src.routers.connections import router as connections_router

__all__ = [
    "health_router",
    "identity_router",
    "reports_router",
    "connections_router",
]
