"""
Report Form Session

In-memory state of one agent's working report: header numbers, the
ordered client list, expansion flags and validation errors. Every data
mutation recomputes completion and marks the autosave scheduler dirty.

Dependencies (identity, repository, roster stats, notifier) are passed in
explicitly so the session can be driven without any request context.

Invariants:
- The client list always holds at least one entry
- Client order is insertion order (display index = list index)
- Hydration replaces local state wholesale; nothing is merged
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from pydantic import ValidationError

from src.core.exceptions import (
    DocumentStoreError,
    RecordNotFoundError,
    SectionNotFoundError,
    UnknownFieldError,
)
from src.models.contracts.reports import (
    AgentStats,
    ClientEntry,
    RecordCompletion,
    ReportFormState,
    ReportHeader,
    ReportSnapshot,
    resolve_attribute,
)
from src.repositories.reports import ReportRepository
from src.services.autosave import DEFAULT_AUTOSAVE_DELAY, AutosaveScheduler, AutosaveState
from src.services.completion import compute_completion, compute_record_completion
from src.services.form_validation import (
    ValidationErrorMap,
    first_invalid_record,
    is_blank,
    validate_records,
)
from src.services.notifications import Notifier
from src.services.report_export import render_report

logger = logging.getLogger(__name__)

DEFAULT_SECTIONS = ("agentInfo", "clients")
SECTIONS = DEFAULT_SECTIONS + ("report",)


@dataclass
class SubmitResult:
    """Outcome of a submit: either validation errors or the rendered report."""

    valid: bool
    errors: ValidationErrorMap = field(default_factory=dict)
    scroll_to: str | None = None
    report: str | None = None


class ReportFormSession:
    """Form state store for one agent report."""

    def __init__(
        self,
        identity: str,
        repository: ReportRepository,
        notifier: Notifier | None = None,
        user_email: str | None = None,
        autosave_delay: float = DEFAULT_AUTOSAVE_DELAY,
        roster: AgentStats | None = None,
    ):
        self.identity = identity
        self.repository = repository
        self.notifier = notifier or Notifier()
        self.user_email = user_email
        self.roster = roster

        self.header = ReportHeader(agent_name=identity)
        self.clients: list[ClientEntry] = [ClientEntry()]
        self.expanded_clients: dict[str, bool] = {self.clients[0].id: True}
        self.expanded_sections: dict[str, bool] = {name: True for name in DEFAULT_SECTIONS}
        self.validation_errors: ValidationErrorMap = {}
        self.completion = 0
        self.generated_report = ""
        self.loaded = False

        self._last_modified: datetime | None = None
        self.autosave = AutosaveScheduler(
            self._persist,
            delay=autosave_delay,
            on_failed=self._on_save_failed,
        )
        self._recompute()

    # ==================== HYDRATION ====================

    async def load(self) -> None:
        """
        Hydrate from the stored report.

        A failed read leaves the user with a blank report rather than
        blocking them; the next save will overwrite whatever is stored.
        """
        try:
            snapshot = await self.repository.get_report(self.identity)
        except (DocumentStoreError, ValidationError) as e:
            logger.error(f"Error loading report for agent {self.identity}: {e}")
            self.notifier.error("Load Failed", "Could not load your saved report")
            self.hydrate(None)
            return

        if snapshot is None:
            logger.info(f"No existing report for agent {self.identity}, starting with defaults")
        else:
            logger.info(f"Loaded report for agent {self.identity}")
        self.hydrate(snapshot)

    async def refresh(self) -> bool:
        """
        Re-read the stored report when the form is mounted again.

        Only runs while the session is idle with nothing unsaved, so local
        edits are never discarded. A failed read keeps the current state.

        Returns:
            True if state was replaced from the store
        """
        if self.autosave.state is not AutosaveState.IDLE or self.autosave.dirty:
            logger.debug(f"Skipping refresh for agent {self.identity}, unsaved changes pending")
            return False

        try:
            snapshot = await self.repository.get_report(self.identity)
        except (DocumentStoreError, ValidationError) as e:
            logger.warning(f"Error refreshing report for agent {self.identity}: {e}")
            self.notifier.error("Refresh Failed", "Could not reload your saved report")
            return False

        if snapshot is None:
            return False

        self.hydrate(snapshot)
        return True

    def hydrate(self, snapshot: ReportSnapshot | None) -> None:
        """Replace all local state from a snapshot, or seed first-time defaults."""
        if snapshot is None:
            header = ReportHeader(agent_name=self.identity)
            if self.roster is not None:
                header = ReportHeader(
                    agent_name=self.identity,
                    added_today=self.roster.added_today,
                    monthly_added=self.roster.monthly_added,
                    open_shops=self.roster.open_accounts,
                    deposits=self.roster.total_deposits,
                )
            clients = [ClientEntry()]
        else:
            header = snapshot.header()
            if not header.agent_name:
                header.agent_name = self.identity
            clients = [client.model_copy() for client in snapshot.clients] or [ClientEntry()]
            self._last_modified = _as_utc(snapshot.last_modified)
            self.autosave.last_saved_at = self._last_modified

        self.header = header
        self.clients = clients
        self.expanded_clients = {client.id: True for client in clients}
        self.validation_errors = {}
        self.generated_report = ""
        self.loaded = True
        self._recompute()

    # ==================== MUTATIONS ====================

    def set_header_field(self, name: str, value: Any) -> None:
        """
        Set one header field.

        Raises:
            UnknownFieldError: If name is not a header field
            pydantic.ValidationError: If value has the wrong type
        """
        try:
            attr = resolve_attribute(ReportHeader, name)
        except KeyError:
            raise UnknownFieldError(name)

        # Cleared number inputs come through as empty strings
        if attr != "agent_name" and (value is None or (isinstance(value, str) and not value.strip())):
            value = 0

        self.header = ReportHeader.model_validate({**self.header.model_dump(), attr: value})
        self._changed()

    def add_client(self) -> ClientEntry:
        """Append a blank client entry, expanded by default."""
        client = ClientEntry()
        self.clients.append(client)
        self.expanded_clients[client.id] = True
        self._changed()
        return client

    def remove_client(self, client_id: str) -> bool:
        """
        Remove a client entry.

        The last remaining entry can never be removed; the attempt is
        rejected with a notification and the list is left unchanged.

        Returns:
            True if removed, False if rejected

        Raises:
            RecordNotFoundError: If no entry has this id
        """
        if len(self.clients) <= 1:
            self.notifier.error("Cannot remove", "You must have at least one client in the report")
            return False

        self._index_of(client_id)
        self.clients = [client for client in self.clients if client.id != client_id]
        self.expanded_clients.pop(client_id, None)
        self.validation_errors.pop(client_id, None)
        self._changed()
        return True

    def update_client_field(self, client_id: str, name: str, value: Any) -> ClientEntry:
        """
        Set one field of a client entry.

        Filling a field that was flagged at the last submit clears that one
        flag immediately; the full check still runs on the next submit.

        Raises:
            RecordNotFoundError: If no entry has this id
            UnknownFieldError: If name is not a client field
        """
        index = self._index_of(client_id)
        try:
            attr = resolve_attribute(ClientEntry, name)
        except KeyError:
            raise UnknownFieldError(name)
        if attr == "id":
            raise UnknownFieldError(name)

        text = "" if value is None else str(value)
        updated = self.clients[index].model_copy(update={attr: text})
        self.clients[index] = updated

        key = ClientEntry.model_fields[attr].alias or attr
        flagged = self.validation_errors.get(client_id)
        if flagged and key in flagged and not is_blank(text):
            remaining = [f for f in flagged if f != key]
            if remaining:
                self.validation_errors[client_id] = remaining
            else:
                del self.validation_errors[client_id]

        self._changed()
        return updated

    def toggle_client(self, client_id: str) -> bool:
        """Flip a client entry's expansion; returns the new state."""
        self._index_of(client_id)
        self.expanded_clients[client_id] = not self.expanded_clients.get(client_id, True)
        return self.expanded_clients[client_id]

    def toggle_section(self, section: str) -> bool:
        """
        Flip a form section's expansion; returns the new state.

        Raises:
            SectionNotFoundError: If section is not one of SECTIONS
        """
        if section not in SECTIONS:
            raise SectionNotFoundError(section)
        self.expanded_sections[section] = not self.expanded_sections.get(section, False)
        return self.expanded_sections[section]

    # ==================== SAVE / SUBMIT ====================

    async def save(self) -> bool:
        """Manual save; supersedes a pending autosave."""
        saved = await self.autosave.manual_save()
        if saved:
            self.notifier.info(
                "Report Saved",
                f"Your report has been saved for agent {self.identity}",
            )
        return saved

    async def submit(self) -> SubmitResult:
        """
        Validate and, if complete, save and render the report.

        On errors the first offending client is expanded and returned as
        scroll_to so the dashboard can bring it into view.
        """
        errors = validate_records(self.clients)
        self.validation_errors = errors

        if errors:
            first_id = first_invalid_record(self.clients, errors)
            if first_id:
                self.expanded_clients[first_id] = True
            self.notifier.error(
                "Missing required information",
                "Please fill out all required fields marked with *",
            )
            return SubmitResult(valid=False, errors=errors, scroll_to=first_id)

        await self.autosave.manual_save()

        self.generated_report = render_report(self.header, self.clients)
        self.expanded_sections["report"] = True
        self.notifier.info("Report Generated", "Your report has been successfully generated")
        return SubmitResult(valid=True, report=self.generated_report)

    def clear_report(self) -> None:
        self.generated_report = ""
        self.notifier.info("Report Cleared", "The generated report has been cleared")

    def snapshot(self) -> ReportSnapshot:
        """
        Build the stored document for the current state.

        lastModified is stamped now and always moves forward, even if the
        clock has not.
        """
        now = datetime.now(timezone.utc)
        if self._last_modified is not None and now <= self._last_modified:
            now = self._last_modified + timedelta(milliseconds=1)
        self._last_modified = now

        return ReportSnapshot(
            **self.header.model_dump(exclude={"agent_name"}),
            agent_name=self.identity,
            clients=[client.model_copy() for client in self.clients],
            last_modified=now,
            user_email=self.user_email,
        )

    async def close(self) -> None:
        """Stop autosave and let an in-flight write finish."""
        self.autosave.close()
        await self.autosave.wait_settled()

    # ==================== STATE ====================

    def client_completion(self) -> dict[str, RecordCompletion]:
        return {client.id: compute_record_completion(client) for client in self.clients}

    def to_state(self) -> ReportFormState:
        """Full state for the dashboard, draining pending notifications."""
        return ReportFormState(
            identity=self.identity,
            header=self.header,
            clients=list(self.clients),
            completion=self.completion,
            client_completion=self.client_completion(),
            validation_errors={k: list(v) for k, v in self.validation_errors.items()},
            expanded_clients=dict(self.expanded_clients),
            expanded_sections=dict(self.expanded_sections),
            dirty=self.autosave.dirty,
            saving=self.autosave.saving,
            autosave_state=self.autosave.state.value,
            last_saved_at=self.autosave.last_saved_at,
            generated_report=self.generated_report,
            notifications=self.notifier.drain(),
        )

    # ==================== INTERNALS ====================

    def _index_of(self, client_id: str) -> int:
        for index, client in enumerate(self.clients):
            if client.id == client_id:
                return index
        raise RecordNotFoundError(client_id)

    def _recompute(self) -> None:
        self.completion = compute_completion(self.header, self.clients)

    def _changed(self) -> None:
        self._recompute()
        self.autosave.mark_dirty()

    async def _persist(self) -> None:
        await self.repository.save_report(self.identity, self.snapshot())

    def _on_save_failed(self, error: Exception) -> None:
        logger.error(f"Error saving report for agent {self.identity}: {error}")
        self.notifier.error("Save Failed", "Could not save your report. Please try again.")


def _as_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
