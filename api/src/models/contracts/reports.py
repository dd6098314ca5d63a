"""
Agent report contracts.

Wire and stored keys are camelCase so documents written by the dashboard
and by this service are interchangeable. Python attributes stay snake_case.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing to camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ==================== SCHEMA ====================


@dataclass(frozen=True)
class FieldSpec:
    """One named string field of a sub-record."""

    key: str  # wire key, e.g. "planForTomorrow"
    label: str
    required: bool = False


@dataclass(frozen=True)
class RecordSchema:
    """Field layout of a sub-record type."""

    fields: tuple[FieldSpec, ...]

    @property
    def required_keys(self) -> list[str]:
        return [f.key for f in self.fields if f.required]

    @property
    def keys(self) -> list[str]:
        return [f.key for f in self.fields]


CLIENT_SCHEMA = RecordSchema(
    fields=(
        FieldSpec("shopId", "Shop ID"),
        FieldSpec("clientDetails", "Client Details"),
        FieldSpec("assets", "Assets"),
        FieldSpec("conversationSummary", "Conversation Summary", required=True),
        FieldSpec("planForTomorrow", "Plan for Tomorrow", required=True),
    )
)

# Header fields counted towards completion
HEADER_COUNTED_FIELDS = ("agentName", "addedToday", "monthlyAdded", "openShops", "deposits")


def resolve_attribute(model: type[BaseModel], field: str) -> str:
    """
    Map a wire key or attribute name to the model attribute name.

    Raises:
        KeyError: If the field is not declared on the model
    """
    for name, info in model.model_fields.items():
        if field == name or field == info.alias:
            return name
    raise KeyError(field)


# ==================== RECORDS ====================


class ClientEntry(CamelModel):
    """One client row in an agent report."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    shop_id: str = ""
    client_details: str = ""
    assets: str = ""
    conversation_summary: str = ""
    plan_for_tomorrow: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def default_missing_id(cls, value: Any) -> Any:
        return str(uuid4()) if value is None else value

    @field_validator(
        "shop_id", "client_details", "assets", "conversation_summary", "plan_for_tomorrow",
        mode="before",
    )
    @classmethod
    def null_as_empty(cls, value: Any) -> Any:
        # Documents edited outside the dashboard may hold nulls
        return "" if value is None else value

    def value_of(self, key: str) -> str:
        """Return the value of a field by wire key or attribute name."""
        return getattr(self, resolve_attribute(ClientEntry, key))


class ReportHeader(CamelModel):
    """Per-agent summary numbers at the top of the report."""

    agent_name: str = ""
    added_today: int = 0
    monthly_added: int = 0
    open_shops: int = 0
    deposits: float = 0


class ReportSnapshot(ReportHeader):
    """
    The stored report document for one agent.

    Written wholesale to agents/{identity}/reports/current on every save.
    agent_name is always the session identity.
    """

    clients: list[ClientEntry] = Field(default_factory=list)
    last_modified: datetime | None = None
    user_email: str | None = None

    def header(self) -> ReportHeader:
        return ReportHeader.model_validate(self.model_dump(include=set(ReportHeader.model_fields)))


class AgentStats(CamelModel):
    """Roster numbers for one agent, stored at agents/{identity}."""

    name: str
    added_today: int = 0
    monthly_added: int = 0
    open_accounts: int = 0
    total_deposits: float = 0


class RecordCompletion(CamelModel):
    """Required-field progress for one client entry."""

    completed: int
    total: int
    percentage: int
    complete: bool = False  # every required field filled


# ==================== NOTIFICATIONS ====================


class Notification(CamelModel):
    """A user-visible toast message."""

    title: str
    description: str
    variant: Literal["default", "destructive"] = "default"


# ==================== API ====================


class FieldUpdate(CamelModel):
    """Request body for a single field change."""

    field: str = Field(..., description="Wire key or attribute name of the field")
    value: Any = Field(default="", description="New value")


class ReportFormState(CamelModel):
    """Full form state returned by every report endpoint."""

    identity: str
    header: ReportHeader
    clients: list[ClientEntry]
    completion: int
    client_completion: dict[str, RecordCompletion]
    validation_errors: dict[str, list[str]]
    expanded_clients: dict[str, bool]
    expanded_sections: dict[str, bool]
    dirty: bool
    saving: bool
    autosave_state: str
    last_saved_at: datetime | None = None
    generated_report: str = ""
    notifications: list[Notification] = Field(default_factory=list)


class SubmitResponse(CamelModel):
    """Result of submitting the report for export."""

    valid: bool
    errors: dict[str, list[str]] = Field(default_factory=dict)
    scroll_to: str | None = None
    report: str | None = None
    state: ReportFormState


class TranslateRequest(CamelModel):
    """Request body for report translation."""

    text: str = ""


class TranslateResponse(CamelModel):
    """Translated text (or a placeholder when the service failed)."""

    text: str
    ok: bool


class IdentityResponse(CamelModel):
    """Resolved identity of the signed-in user."""

    email: str
    agent_name: str
    is_admin: bool
    viewer_of: str | None = None  # agent a connected viewer may see
