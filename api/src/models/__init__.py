"""
OpsDesk Models

Pydantic contracts (API request/response and stored documents):
    from src.models import ReportSnapshot, ClientEntry
    from src.models.contracts.reports import ReportSnapshot  # Granular access
"""

from src.models.contracts.connections import (
    AvailableAgentsResponse,
    ConnectionCreate,
    ConnectionListResponse,
    ConnectionMutationResponse,
    ViewerAgentConnection,
)
from src.models.contracts.health import BasicHealthResponse
from src.models.contracts.reports import (
    CLIENT_SCHEMA,
    AgentStats,
    ClientEntry,
    FieldSpec,
    Notification,
    RecordCompletion,
    RecordSchema,
    ReportFormState,
    ReportHeader,
    ReportSnapshot,
)

__all__ = [
    "CLIENT_SCHEMA",
    "AgentStats",
    "AvailableAgentsResponse",
    "BasicHealthResponse",
    "ClientEntry",
    "ConnectionCreate",
    "ConnectionListResponse",
    "ConnectionMutationResponse",
    "FieldSpec",
    "Notification",
    "RecordCompletion",
    "RecordSchema",
    "ReportFormState",
    "ReportHeader",
    "ReportSnapshot",
    "ViewerAgentConnection",
]
