"""
Unit tests for the reports API.

Runs the full application against the in-memory document store.
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from src.core.dependencies import get_translation_client
from src.services.translation import TranslationClient


def _first_client_id(state: dict) -> str:
    return state["clients"][0]["id"]


class TestAuthentication:
    def test_missing_email_header_is_401(self, app):
        with TestClient(app) as anonymous:
            response = anonymous.get("/api/reports/current")

        assert response.status_code == 401

    def test_identity_endpoint(self, client):
        response = client.get("/api/identity")

        assert response.status_code == 200
        assert response.json() == {
            "email": "lovely@example.com",
            "agentName": "LOVELY",
            "isAdmin": False,
            "viewerOf": None,
        }

    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestReportState:
    def test_first_load_returns_defaults(self, client):
        response = client.get("/api/reports/current")

        assert response.status_code == 200
        state = response.json()
        assert state["identity"] == "LOVELY"
        assert state["header"]["agentName"] == "LOVELY"
        assert len(state["clients"]) == 1
        assert state["dirty"] is False

    def test_header_update_marks_dirty(self, client):
        response = client.patch(
            "/api/reports/current/header",
            json={"field": "addedToday", "value": 4},
        )

        assert response.status_code == 200
        state = response.json()
        assert state["header"]["addedToday"] == 4
        assert state["dirty"] is True

    def test_unknown_header_field_is_422(self, client):
        response = client.patch("/api/reports/current/header", json={"field": "bonus", "value": 1})

        assert response.status_code == 422

    def test_bad_header_value_is_422(self, client):
        response = client.patch("/api/reports/current/header", json={"field": "openShops", "value": "many"})

        assert response.status_code == 422

    def test_add_update_and_remove_client(self, client):
        added = client.post("/api/reports/current/clients")
        assert added.status_code == 201
        new_id = added.json()["clients"][-1]["id"]

        updated = client.patch(
            f"/api/reports/current/clients/{new_id}",
            json={"field": "clientDetails", "value": "VIP, prefers calls"},
        )
        assert updated.json()["clients"][-1]["clientDetails"] == "VIP, prefers calls"

        removed = client.delete(f"/api/reports/current/clients/{new_id}")
        assert [c["id"] for c in removed.json()["clients"]] != [new_id]
        assert len(removed.json()["clients"]) == 1

    def test_removing_last_client_returns_notification(self, client):
        only_id = _first_client_id(client.get("/api/reports/current").json())

        response = client.delete(f"/api/reports/current/clients/{only_id}")

        assert response.status_code == 200
        state = response.json()
        assert len(state["clients"]) == 1
        assert [n["title"] for n in state["notifications"]] == ["Cannot remove"]

    def test_unknown_client_is_404(self, client):
        assert client.delete("/api/reports/current/clients/missing").status_code == 404
        assert client.post("/api/reports/current/clients/missing/toggle").status_code == 404

    def test_toggle_section(self, client):
        response = client.post("/api/reports/current/sections/report/toggle")

        assert response.json()["expandedSections"]["report"] is True

    def test_unknown_section_is_404(self, client):
        response = client.post("/api/reports/current/sections/sidebar/toggle")

        assert response.status_code == 404
        sections = client.get("/api/reports/current").json()["expandedSections"]
        assert "sidebar" not in sections


class TestSaveAndSubmit:
    def test_manual_save(self, client):
        response = client.post("/api/reports/current/save")

        state = response.json()
        assert state["dirty"] is False
        assert state["lastSavedAt"] is not None
        assert [n["title"] for n in state["notifications"]] == ["Report Saved"]

    def test_submit_with_missing_fields(self, client):
        client_id = _first_client_id(client.get("/api/reports/current").json())

        response = client.post("/api/reports/current/submit")

        body = response.json()
        assert body["valid"] is False
        assert body["errors"] == {client_id: ["conversationSummary", "planForTomorrow"]}
        assert body["scrollTo"] == client_id
        assert body["report"] is None

    def test_submit_valid_report(self, client):
        client_id = _first_client_id(client.get("/api/reports/current").json())
        for field, value in [("conversationSummary", "Talked bonuses"), ("planForTomorrow", "Follow up")]:
            client.patch(f"/api/reports/current/clients/{client_id}", json={"field": field, "value": value})

        response = client.post("/api/reports/current/submit")

        body = response.json()
        assert body["valid"] is True
        assert body["report"].startswith("Agent Report - ")
        assert body["state"]["generatedReport"] == body["report"]

        cleared = client.delete("/api/reports/current/generated")
        assert cleared.json()["generatedReport"] == ""

    def test_sessions_are_per_identity(self, app):
        with TestClient(app) as test_client:
            test_client.patch(
                "/api/reports/current/header",
                json={"field": "addedToday", "value": 9},
                headers={"X-User-Email": "ken@example.com"},
            )
            other = test_client.get(
                "/api/reports/current",
                headers={"X-User-Email": "kel@example.com"},
            )

        assert other.json()["identity"] == "KEL"
        assert other.json()["header"]["addedToday"] == 0


class TestTranslate:
    def test_blank_text_is_400(self, client):
        response = client.post("/api/reports/translate", json={"text": "  "})

        assert response.status_code == 400

    def test_translation_result(self, app, client):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[[["你好", "Hello", None, None]]])

        translator = TranslationClient(
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )
        app.dependency_overrides[get_translation_client] = lambda: translator

        response = client.post("/api/reports/translate", json={"text": "Hello"})

        assert response.json() == {"text": "你好", "ok": True}


class TestMountAndUnmount:
    def test_open_picks_up_report_saved_elsewhere(self, app, client):
        client.get("/api/reports/current")
        store = app.state.document_store
        client.portal.call(store.set, "agents/LOVELY/reports/current", {
            "agentName": "LOVELY",
            "addedToday": 9,
            "clients": [{"id": "remote-1", "conversationSummary": "from other device"}],
        })

        state = client.post("/api/reports/current/open").json()

        assert state["header"]["addedToday"] == 9
        assert [c["conversationSummary"] for c in state["clients"]] == ["from other device"]

    def test_close_session(self, app, client):
        client.get("/api/reports/current")

        response = client.delete("/api/reports/current/session")

        assert response.status_code == 204
        assert "LOVELY" not in app.state.session_manager


class TestViewerAccess:
    """A viewer connected to an agent sees that agent's report read-only."""

    @pytest.fixture
    def shared_client(self, app):
        with TestClient(app) as test_client:
            test_client.post(
                "/api/connections",
                json={"viewerEmail": "viewer@example.com", "agentName": "KEN"},
                headers={"X-User-Email": "boss@example.com"},
            )
            yield test_client

    def test_identity_resolves_to_connected_agent(self, shared_client):
        identity = shared_client.get(
            "/api/identity",
            headers={"X-User-Email": "viewer@example.com"},
        ).json()

        assert identity["agentName"] == "KEN"
        assert identity["viewerOf"] == "KEN"

    def test_viewer_reads_agent_report(self, shared_client):
        shared_client.patch(
            "/api/reports/current/header",
            json={"field": "addedToday", "value": 5},
            headers={"X-User-Email": "ken@example.com"},
        )

        state = shared_client.get(
            "/api/reports/current",
            headers={"X-User-Email": "viewer@example.com"},
        ).json()

        assert state["identity"] == "KEN"
        assert state["header"]["addedToday"] == 5

    def test_viewer_cannot_edit(self, shared_client):
        headers = {"X-User-Email": "viewer@example.com"}

        assert shared_client.patch(
            "/api/reports/current/header",
            json={"field": "addedToday", "value": 1},
            headers=headers,
        ).status_code == 403
        assert shared_client.post("/api/reports/current/save", headers=headers).status_code == 403
        assert shared_client.delete("/api/reports/current/session", headers=headers).status_code == 403
