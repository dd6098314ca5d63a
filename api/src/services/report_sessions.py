"""
Report Session Manager

Keeps one live ReportFormSession per agent identity inside the API
process, so the debounce timer survives between requests. Sessions are
created and hydrated on first access.

There is no cross-process coordination: two API replicas (or two
dashboards hitting different replicas) editing the same identity are
last-write-wins at the document store.
"""

import asyncio
import logging

from pydantic import ValidationError

from src.core.document_store import DocumentStore
from src.core.exceptions import DocumentStoreError
from src.models.contracts.reports import AgentStats
from src.repositories.reports import ReportRepository
from src.repositories.roster import RosterRepository
from src.services.autosave import DEFAULT_AUTOSAVE_DELAY
from src.services.notifications import Notifier
from src.services.report_form import ReportFormSession

logger = logging.getLogger(__name__)


class ReportSessionManager:
    """Registry of live report sessions keyed by identity."""

    def __init__(self, store: DocumentStore, autosave_delay: float = DEFAULT_AUTOSAVE_DELAY):
        self.reports = ReportRepository(store)
        self.roster = RosterRepository(store)
        self.autosave_delay = autosave_delay
        self._sessions: dict[str, ReportFormSession] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def __contains__(self, identity: str) -> bool:
        return identity in self._sessions

    async def get_session(self, identity: str, user_email: str | None = None) -> ReportFormSession:
        """
        Get the live session for an identity, loading it on first use.

        Concurrent first requests for the same identity load it once.
        """
        session = self._sessions.get(identity)
        if session is not None:
            if user_email:
                session.user_email = user_email
            return session

        lock = self._locks.setdefault(identity, asyncio.Lock())
        async with lock:
            session = self._sessions.get(identity)
            if session is not None:
                return session

            session = ReportFormSession(
                identity=identity,
                repository=self.reports,
                notifier=Notifier(),
                user_email=user_email,
                autosave_delay=self.autosave_delay,
                roster=await self._load_roster(identity),
            )
            await session.load()
            self._sessions[identity] = session
            logger.info(f"Opened report session for agent {identity}")
            return session

    async def open_session(self, identity: str, user_email: str | None = None) -> ReportFormSession:
        """
        Mount the report form for an identity.

        A new session is loaded from the store; an existing idle session
        is refreshed so edits saved elsewhere are picked up.
        """
        if identity not in self._sessions:
            return await self.get_session(identity, user_email=user_email)

        session = await self.get_session(identity, user_email=user_email)
        async with self._locks.setdefault(identity, asyncio.Lock()):
            if await session.refresh():
                logger.info(f"Refreshed report session for agent {identity} from the store")
        return session

    async def close_session(self, identity: str) -> None:
        session = self._sessions.pop(identity, None)
        if session is not None:
            await session.close()
            logger.info(f"Closed report session for agent {identity}")

    async def close_all(self) -> None:
        """Cancel pending autosaves and wait for in-flight writes."""
        for identity in list(self._sessions):
            await self.close_session(identity)

    async def _load_roster(self, identity: str) -> AgentStats | None:
        try:
            return await self.roster.get_agent(identity)
        except (DocumentStoreError, ValidationError) as e:
            logger.warning(f"Could not load roster stats for agent {identity}: {e}")
            return None
