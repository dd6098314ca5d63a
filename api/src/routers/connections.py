"""
Viewer-Agent Connections Router

Admin management of which viewer account may see which agent's data.
"""

import logging

from fastapi import APIRouter, status

from src.core.auth import CurrentAdmin, RequireAdmin
from src.core.dependencies import Store
from src.models.contracts.connections import (
    AvailableAgentsResponse,
    ConnectionCreate,
    ConnectionListResponse,
    ConnectionMutationResponse,
)
from src.repositories.connections import ConnectionRepository
from src.repositories.roster import RosterRepository
from src.services.connections import ConnectionService
from src.services.notifications import Notifier

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/connections",
    tags=["Viewer-Agent Connections"],
    dependencies=[RequireAdmin],  # All endpoints require admin
)


def _service(store: Store) -> ConnectionService:
    return ConnectionService(ConnectionRepository(store), Notifier(), RosterRepository(store))


@router.get("")
async def list_connections(store: Store) -> ConnectionListResponse:
    """List all viewer-agent connections."""
    service = _service(store)
    connections = await service.list_connections()
    return ConnectionListResponse(
        connections=connections,
        notifications=service.notifier.drain(),
    )


@router.get("/available-agents")
async def list_available_agents(store: Store) -> AvailableAgentsResponse:
    """List roster agents not yet connected to a viewer."""
    service = _service(store)
    agents = await service.available_agents()
    return AvailableAgentsResponse(
        agents=agents,
        notifications=service.notifier.drain(),
    )


@router.post("", status_code=status.HTTP_200_OK)
async def create_connection(
    request: ConnectionCreate,
    store: Store,
    user: CurrentAdmin,
) -> ConnectionMutationResponse:
    """
    Connect a viewer email to an agent.

    Validation failures and duplicates are reported as notifications
    with success=false, not as error statuses.
    """
    service = _service(store)
    connection = await service.create_connection(request.viewer_email, request.agent_name)
    if connection is not None:
        logger.info(f"Connection {connection.id} created by {user.email}")
    return ConnectionMutationResponse(
        success=connection is not None,
        connection=connection,
        notifications=service.notifier.drain(),
    )


@router.delete("/{connection_id}")
async def delete_connection(
    connection_id: str,
    store: Store,
    user: CurrentAdmin,
) -> ConnectionMutationResponse:
    """Remove a viewer-agent connection."""
    service = _service(store)
    deleted = await service.delete_connection(connection_id)
    if deleted:
        logger.info(f"Connection {connection_id} removed by {user.email}")
    return ConnectionMutationResponse(
        success=deleted,
        notifications=service.notifier.drain(),
    )
