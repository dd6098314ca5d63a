"""
Shared Request Dependencies

Process-wide services are created in the application lifespan and kept on
app.state; these dependencies hand them to routers.
"""

from typing import Annotated

from fastapi import Depends, Request

from src.core.document_store import DocumentStore
from src.services.report_sessions import ReportSessionManager
from src.services.translation import TranslationClient


def get_document_store(request: Request) -> DocumentStore:
    return request.app.state.document_store


def get_session_manager(request: Request) -> ReportSessionManager:
    return request.app.state.session_manager


def get_translation_client(request: Request) -> TranslationClient:
    return request.app.state.translation_client


Store = Annotated[DocumentStore, Depends(get_document_store)]
SessionManager = Annotated[ReportSessionManager, Depends(get_session_manager)]
Translator = Annotated[TranslationClient, Depends(get_translation_client)]
