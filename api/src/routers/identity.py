"""Identity Router - who the signed-in user is reporting as."""

from fastapi import APIRouter

from src.core.auth import CurrentUser
from src.models.contracts.reports import IdentityResponse

router = APIRouter(prefix="/api/identity", tags=["Identity"])


@router.get("")
async def get_identity(user: CurrentUser) -> IdentityResponse:
    """Get the caller's email, agent identity, admin flag and viewer link."""
    return IdentityResponse(
        email=user.email,
        agent_name=user.agent_name,
        is_admin=user.is_admin,
        viewer_of=user.viewer_of,
    )
