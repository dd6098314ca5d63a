"""
Unit tests for ReportSessionManager.
"""

import asyncio

from src.core.document_store import document_path
from src.repositories.reports import report_path
from src.services.report_sessions import ReportSessionManager


class TestReportSessionManager:
    async def test_session_created_and_loaded_once(self, store):
        manager = ReportSessionManager(store, autosave_delay=0.05)

        first = await manager.get_session("KEN", user_email="ken@example.com")
        second = await manager.get_session("KEN")

        assert first is second
        assert first.loaded is True
        assert first.user_email == "ken@example.com"
        assert "KEN" in manager

    async def test_concurrent_first_access_loads_once(self, store):
        manager = ReportSessionManager(store, autosave_delay=0.05)

        sessions = await asyncio.gather(*(manager.get_session("JHE") for _ in range(5)))

        assert all(s is sessions[0] for s in sessions)

    async def test_roster_stats_seed_new_session(self, store):
        await store.set(document_path("agents", "KEL"), {"name": "KEL", "addedToday": 6, "openAccounts": 2})
        manager = ReportSessionManager(store, autosave_delay=0.05)

        session = await manager.get_session("KEL")

        assert session.header.added_today == 6
        assert session.header.open_shops == 2

    async def test_roster_failure_is_not_fatal(self, store):
        store.fail_reads = True
        manager = ReportSessionManager(store, autosave_delay=0.05)

        session = await manager.get_session("KEL")

        assert session.roster is None
        assert [n.title for n in session.notifier.pending] == ["Load Failed"]

    async def test_close_all_cancels_pending_saves(self, store):
        manager = ReportSessionManager(store, autosave_delay=0.05)
        session = await manager.get_session("KEN")
        session.set_header_field("addedToday", 1)

        await manager.close_all()
        await asyncio.sleep(0.15)

        assert store.writes == []
        assert "KEN" not in manager

    async def test_open_new_session_loads_it(self, store):
        manager = ReportSessionManager(store, autosave_delay=0.05)

        session = await manager.open_session("KEN", user_email="ken@example.com")

        assert session.loaded is True
        assert "KEN" in manager

    async def test_open_refreshes_idle_session_from_store(self, store):
        manager = ReportSessionManager(store, autosave_delay=0.05)
        session = await manager.get_session("KEN")
        await store.set(report_path("KEN"), {
            "agentName": "KEN",
            "addedToday": 9,
            "clients": [{"id": "remote-1", "conversationSummary": "from other device"}],
        })

        reopened = await manager.open_session("KEN")

        assert reopened is session
        assert session.header.added_today == 9
        assert [c.id for c in session.clients] == ["remote-1"]

    async def test_open_keeps_unsaved_edits(self, store):
        manager = ReportSessionManager(store, autosave_delay=1.0)
        session = await manager.get_session("KEN")
        session.set_header_field("addedToday", 2)
        await store.set(report_path("KEN"), {"agentName": "KEN", "addedToday": 9})

        await manager.open_session("KEN")

        assert session.header.added_today == 2
        await manager.close_all()

    async def test_refresh_failure_keeps_current_state(self, store):
        manager = ReportSessionManager(store, autosave_delay=0.05)
        session = await manager.get_session("KEN")
        client_ids = [c.id for c in session.clients]
        store.fail_reads = True

        await manager.open_session("KEN")

        assert [c.id for c in session.clients] == client_ids
        assert [n.title for n in session.notifier.drain()] == ["Refresh Failed"]

    async def test_close_session_drops_it(self, store):
        manager = ReportSessionManager(store, autosave_delay=0.05)
        first = await manager.get_session("KEN")

        await manager.close_session("KEN")
        second = await manager.get_session("KEN")

        assert "KEN" in manager
        assert second is not first
