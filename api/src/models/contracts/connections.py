"""Viewer-agent connection contracts."""

from typing import Literal

from pydantic import Field

from src.models.contracts.reports import AgentStats, CamelModel, Notification


class ViewerAgentConnection(CamelModel):
    """Links a viewer account to the one agent whose data they may see."""

    id: str
    viewer_email: str
    agent_name: str
    connected_at: str  # ISO 8601
    status: Literal["Active", "Inactive"] = "Active"


class ConnectionCreate(CamelModel):
    """Request body for creating a connection."""

    viewer_email: str = ""
    agent_name: str = ""


class ConnectionListResponse(CamelModel):
    """Connections plus any notifications raised while loading them."""

    connections: list[ViewerAgentConnection] = Field(default_factory=list)
    notifications: list[Notification] = Field(default_factory=list)


class ConnectionMutationResponse(CamelModel):
    """Outcome of a create/delete call."""

    success: bool
    connection: ViewerAgentConnection | None = None
    notifications: list[Notification] = Field(default_factory=list)


class AvailableAgentsResponse(CamelModel):
    """Roster agents that can still be connected to a viewer."""

    agents: list[AgentStats] = Field(default_factory=list)
    notifications: list[Notification] = Field(default_factory=list)
