"""
Authentication and Authorization

Provides FastAPI dependencies for the signed-in user.

The dashboard signs users in with Firebase Authentication and sends the
Firebase ID token as a Bearer token. The token is verified with the
Firebase Admin SDK; email, agent identity and admin status are derived
from the verified claims only.

A viewer connected to an agent resolves to that agent's identity with
read-only access.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Annotated, Any

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from firebase_admin import auth as firebase_auth

from src.config import get_settings
from src.core.dependencies import Store
from src.core.firebase import get_firebase_app
from src.repositories.connections import ConnectionRepository
from src.services.connections import ConnectionService
from src.services.identity import resolve_agent_name

logger = logging.getLogger(__name__)

# HTTP Bearer token scheme
bearer_scheme = HTTPBearer(auto_error=False)

# Custom claim granting admin rights
ADMIN_CLAIM = "admin"


@dataclass
class UserPrincipal:
    """
    Authenticated user principal.

    agent_name is the identity the user's report is stored under. For a
    connected viewer it is the agent they are linked to, and viewer_of
    is set.
    """
    email: str
    agent_name: str
    is_admin: bool = False
    viewer_of: str | None = None

    @property
    def is_viewer(self) -> bool:
        return self.viewer_of is not None


def build_principal(email: str, is_admin_claim: bool = False) -> UserPrincipal | None:
    """
    Build a principal for a verified email.

    Returns None if no agent identity can be derived from the email.
    """
    email = email.strip()
    settings = get_settings()

    try:
        agent_name = resolve_agent_name(email, settings.agent_email_overrides)
    except ValueError:
        logger.warning(f"Rejected principal with unusable email: {email!r}")
        return None

    return UserPrincipal(
        email=email,
        agent_name=agent_name,
        is_admin=is_admin_claim or email.lower() in settings.admin_emails_list,
    )


async def verify_id_token(token: str) -> dict[str, Any] | None:
    """
    Verify a Firebase ID token.

    The Admin SDK call is blocking (it may fetch signing certificates),
    so it runs in a worker thread.

    Returns:
        Decoded claims, or None if the token is invalid or expired
    """
    def _verify() -> dict[str, Any]:
        return firebase_auth.verify_id_token(token, app=get_firebase_app())

    try:
        return await asyncio.to_thread(_verify)
    except (firebase_auth.InvalidIdTokenError, firebase_auth.CertificateFetchError, ValueError) as e:
        logger.warning(f"Rejected ID token: {e}")
        return None


async def get_current_user_optional(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> UserPrincipal | None:
    """
    Get the current user from the Firebase ID token (optional).

    Returns None if no token is provided, the token is invalid, or it
    carries no email claim.
    """
    if credentials is None or not credentials.credentials:
        return None

    claims = await verify_id_token(credentials.credentials)
    if not claims:
        return None

    email = claims.get("email")
    if not email:
        logger.warning(f"ID token for uid {claims.get('uid')} has no email claim")
        return None

    return build_principal(email, is_admin_claim=claims.get(ADMIN_CLAIM) is True)


async def get_current_user(
    user: Annotated[UserPrincipal | None, Depends(get_current_user_optional)],
    store: Store,
) -> UserPrincipal:
    """
    Get the current user (required), applying any viewer-agent connection.

    Raises:
        HTTPException: If not authenticated
    """
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    connection = await ConnectionService(ConnectionRepository(store)).connection_for_viewer(user.email)
    if connection is not None:
        user.agent_name = connection.agent_name
        user.viewer_of = connection.agent_name
    return user


async def get_current_editor(
    user: Annotated[UserPrincipal, Depends(get_current_user)],
) -> UserPrincipal:
    """
    Get the current user, requiring write access to their report.

    Raises:
        HTTPException: If the user is a connected viewer
    """
    if user.is_viewer:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Viewers have read-only access to the agent report",
        )
    return user


async def get_current_admin(
    user: Annotated[UserPrincipal, Depends(get_current_user)],
) -> UserPrincipal:
    """
    Get the current user, requiring admin rights.

    Raises:
        HTTPException: If user is not an admin
    """
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required"
        )
    return user


CurrentUser = Annotated[UserPrincipal, Depends(get_current_user)]
CurrentEditor = Annotated[UserPrincipal, Depends(get_current_editor)]
CurrentAdmin = Annotated[UserPrincipal, Depends(get_current_admin)]

# Dependency for requiring admin access
# Usage: dependencies=[RequireAdmin]
RequireAdmin = Depends(get_current_admin)
