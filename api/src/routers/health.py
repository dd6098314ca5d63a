"""Health Router - liveness check."""

from datetime import datetime, timezone

from fastapi import APIRouter

from src.models.contracts.health import BasicHealthResponse

router = APIRouter(prefix="/api/health", tags=["Health"])


@router.get("")
async def health() -> BasicHealthResponse:
    """Liveness check; healthy whenever the API responds."""
    return BasicHealthResponse(timestamp=datetime.now(timezone.utc).isoformat())
