"""
Viewer-Agent Connection Service

Admins link a viewer account (by email) to exactly one agent so the
viewer only sees that agent's data. Each email and each agent can be in
at most one connection.

All failures become notifications; nothing is raised to the router.
"""

import logging
import re
from datetime import datetime, timezone

from pydantic import ValidationError

from src.core.exceptions import DocumentStoreError
from src.models.contracts.connections import ViewerAgentConnection
from src.models.contracts.reports import AgentStats
from src.repositories.connections import ConnectionRepository
from src.repositories.roster import RosterRepository
from src.services.notifications import Notifier

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_NON_ALPHANUMERIC = re.compile(r"[^a-zA-Z0-9]")


def connection_id(viewer_email: str, agent_name: str) -> str:
    """
    Derive the document id of a connection.

    Deterministic: the same pair always maps to the same id. Every
    non-alphanumeric character becomes '-', so distinct pairs can collide
    (e.g. 'a.b' vs 'a-b'); collisions are not guarded against.
    """
    return _NON_ALPHANUMERIC.sub("-", f"{viewer_email}-{agent_name}")


class ConnectionService:
    """Create, list and remove viewer-agent connections."""

    def __init__(
        self,
        repository: ConnectionRepository,
        notifier: Notifier | None = None,
        roster: RosterRepository | None = None,
    ):
        self.repository = repository
        self.notifier = notifier or Notifier()
        self.roster = roster

    async def list_connections(self) -> list[ViewerAgentConnection]:
        """List all connections; an empty list (plus a notification) on failure."""
        try:
            return await self.repository.list_connections()
        except (DocumentStoreError, ValidationError) as e:
            logger.error(f"Error loading connections: {e}")
            self.notifier.error("Error", "Failed to load viewer-agent connections")
            return []

    async def available_agents(self) -> list[AgentStats]:
        """
        Roster agents not yet connected to any viewer.

        Empty (plus a notification) when the roster or connections cannot
        be read.
        """
        if self.roster is None:
            return []

        try:
            agents = await self.roster.list_agents()
            connected = {c.agent_name for c in await self.repository.list_connections()}
        except (DocumentStoreError, ValidationError) as e:
            logger.error(f"Error loading available agents: {e}")
            self.notifier.error("Error", "Failed to load agents")
            return []

        return [agent for agent in agents if agent.name not in connected]

    async def connection_for_viewer(self, viewer_email: str) -> ViewerAgentConnection | None:
        """Find the active connection for a viewer email, if any."""
        email = viewer_email.strip().lower()
        for connection in await self.list_connections():
            if connection.viewer_email.lower() == email and connection.status == "Active":
                return connection
        return None

    async def create_connection(self, viewer_email: str, agent_name: str) -> ViewerAgentConnection | None:
        """
        Connect a viewer email to an agent.

        Rejected (with a notification, before any write) when a field is
        blank, the email is malformed, or either side is already connected.

        Returns:
            The stored connection, or None if rejected or the write failed
        """
        viewer_email = viewer_email.strip()
        agent_name = agent_name.strip()

        if not viewer_email or not agent_name:
            self.notifier.error("Validation Error", "Please fill in all fields")
            return None

        if not EMAIL_PATTERN.match(viewer_email):
            self.notifier.error("Invalid Email", "Please enter a valid email address")
            return None

        try:
            existing = await self.repository.list_connections()
        except (DocumentStoreError, ValidationError) as e:
            logger.error(f"Error checking existing connections: {e}")
            self.notifier.error("Error", "Failed to create connection")
            return None

        if any(c.viewer_email == viewer_email or c.agent_name == agent_name for c in existing):
            self.notifier.error("Connection Exists", "This viewer email or agent is already connected")
            return None

        connection = ViewerAgentConnection(
            id=connection_id(viewer_email, agent_name),
            viewer_email=viewer_email,
            agent_name=agent_name,
            connected_at=datetime.now(timezone.utc).isoformat(),
            status="Active",
        )

        try:
            await self.repository.save_connection(connection)
        except DocumentStoreError as e:
            logger.error(f"Error creating connection: {e}")
            self.notifier.error("Error", "Failed to create connection")
            return None

        logger.info(f"Connected viewer {viewer_email} to agent {agent_name}")
        self.notifier.info(
            "Connection Created",
            f"{viewer_email} is now connected to agent {agent_name}",
        )
        return connection

    async def delete_connection(self, connection_id: str) -> bool:
        """
        Remove a connection.

        Returns:
            True if deleted, False if the delete failed
        """
        connection = next(
            (c for c in await self.list_connections() if c.id == connection_id),
            None,
        )

        try:
            await self.repository.delete_connection(connection_id)
        except DocumentStoreError as e:
            logger.error(f"Error deleting connection {connection_id}: {e}")
            self.notifier.error("Error", "Failed to remove connection")
            return False

        logger.info(f"Removed viewer-agent connection {connection_id}")
        if connection is not None:
            description = (
                f"Connection between {connection.viewer_email} and "
                f"{connection.agent_name} has been removed"
            )
        else:
            description = "Connection has been removed"
        self.notifier.info("Connection Removed", description)
        return True
