"""
Reports Router

The signed-in agent's working report. Every endpoint operates on the
live form session for the caller's identity and returns the full form
state, including notifications raised while handling the request.

Edits are not written straight through: they mark the session dirty and
the autosave timer persists them after the idle window. POST /save
forces an immediate write.

Connected viewers can read the agent's report but not change it.
"""

import logging

from fastapi import APIRouter, HTTPException, status
from pydantic import ValidationError

from src.core.auth import CurrentEditor, CurrentUser, UserPrincipal
from src.core.dependencies import SessionManager, Translator
from src.core.exceptions import RecordNotFoundError, SectionNotFoundError, UnknownFieldError
from src.models.contracts.reports import (
    FieldUpdate,
    ReportFormState,
    SubmitResponse,
    TranslateRequest,
    TranslateResponse,
)
from src.services.report_form import ReportFormSession

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reports", tags=["Reports"])


def _editor_email(user: UserPrincipal) -> str | None:
    return None if user.is_viewer else user.email


async def _session(manager: SessionManager, user: UserPrincipal) -> ReportFormSession:
    return await manager.get_session(user.agent_name, user_email=_editor_email(user))


def _field_error(e: Exception) -> HTTPException:
    if isinstance(e, (RecordNotFoundError, SectionNotFoundError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    if isinstance(e, UnknownFieldError):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.message)
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


@router.get("/current")
async def get_current_report(manager: SessionManager, user: CurrentUser) -> ReportFormState:
    """Get the caller's report form state, loading it on first access."""
    session = await _session(manager, user)
    return session.to_state()


@router.post("/current/open")
async def open_report(manager: SessionManager, user: CurrentUser) -> ReportFormState:
    """
    Mount the report form.

    Re-reads the stored report when nothing is pending locally, so
    changes saved from another device show up.
    """
    session = await manager.open_session(user.agent_name, user_email=_editor_email(user))
    return session.to_state()


@router.delete("/current/session", status_code=status.HTTP_204_NO_CONTENT)
async def close_report(manager: SessionManager, user: CurrentEditor) -> None:
    """
    Unmount the report form.

    A pending autosave is cancelled; a write already in flight finishes.
    """
    await manager.close_session(user.agent_name)


@router.patch("/current/header")
async def update_header_field(
    request: FieldUpdate,
    manager: SessionManager,
    user: CurrentEditor,
) -> ReportFormState:
    """Set one header field (agentName, addedToday, monthlyAdded, openShops, deposits)."""
    session = await _session(manager, user)
    try:
        session.set_header_field(request.field, request.value)
    except (UnknownFieldError, ValidationError) as e:
        raise _field_error(e)
    return session.to_state()


@router.post("/current/clients", status_code=status.HTTP_201_CREATED)
async def add_client(manager: SessionManager, user: CurrentEditor) -> ReportFormState:
    """Append a blank client entry."""
    session = await _session(manager, user)
    session.add_client()
    return session.to_state()


@router.patch("/current/clients/{client_id}")
async def update_client_field(
    client_id: str,
    request: FieldUpdate,
    manager: SessionManager,
    user: CurrentEditor,
) -> ReportFormState:
    """Set one field of a client entry."""
    session = await _session(manager, user)
    try:
        session.update_client_field(client_id, request.field, request.value)
    except (RecordNotFoundError, UnknownFieldError) as e:
        raise _field_error(e)
    return session.to_state()


@router.delete("/current/clients/{client_id}")
async def remove_client(client_id: str, manager: SessionManager, user: CurrentEditor) -> ReportFormState:
    """
    Remove a client entry.

    Removing the last entry is rejected with a notification in the
    returned state rather than an error status.
    """
    session = await _session(manager, user)
    try:
        session.remove_client(client_id)
    except RecordNotFoundError as e:
        raise _field_error(e)
    return session.to_state()


@router.post("/current/clients/{client_id}/toggle")
async def toggle_client(client_id: str, manager: SessionManager, user: CurrentEditor) -> ReportFormState:
    """Expand or collapse a client entry."""
    session = await _session(manager, user)
    try:
        session.toggle_client(client_id)
    except RecordNotFoundError as e:
        raise _field_error(e)
    return session.to_state()


@router.post("/current/sections/{section}/toggle")
async def toggle_section(section: str, manager: SessionManager, user: CurrentEditor) -> ReportFormState:
    """Expand or collapse a form section (agentInfo, clients, report)."""
    session = await _session(manager, user)
    try:
        session.toggle_section(section)
    except SectionNotFoundError as e:
        raise _field_error(e)
    return session.to_state()


@router.post("/current/save")
async def save_report(manager: SessionManager, user: CurrentEditor) -> ReportFormState:
    """Save now, superseding any pending autosave."""
    session = await _session(manager, user)
    await session.save()
    return session.to_state()


@router.post("/current/submit")
async def submit_report(manager: SessionManager, user: CurrentEditor) -> SubmitResponse:
    """
    Validate the report and generate the export text.

    When required client fields are missing the response carries the
    error map and the id of the first offending client to scroll to.
    """
    session = await _session(manager, user)
    result = await session.submit()
    if not result.valid:
        logger.info(f"Report submit for agent {user.agent_name} blocked by {len(result.errors)} incomplete clients")
    return SubmitResponse(
        valid=result.valid,
        errors=result.errors,
        scroll_to=result.scroll_to,
        report=result.report,
        state=session.to_state(),
    )


@router.delete("/current/generated")
async def clear_generated_report(manager: SessionManager, user: CurrentEditor) -> ReportFormState:
    """Discard the generated report text."""
    session = await _session(manager, user)
    session.clear_report()
    return session.to_state()


@router.post("/translate")
async def translate_report(
    request: TranslateRequest,
    translator: Translator,
    user: CurrentUser,
) -> TranslateResponse:
    """
    Translate report text.

    Service failures come back as placeholder text with ok=false.
    """
    try:
        result = await translator.translate(request.text)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Nothing to translate. Please generate a report first",
        )
    return TranslateResponse(text=result.text, ok=result.ok)
