"""
Unit tests for Firebase ID token authentication.

The Admin SDK verification call is patched; everything else runs the
real dependency chain.
"""

import pytest
from fastapi.testclient import TestClient
from firebase_admin import auth as firebase_auth

from src.core import auth as auth_module
from src.core.auth import build_principal


@pytest.fixture
def verified_claims(monkeypatch):
    """Map of token -> claims accepted by the patched verifier."""
    tokens: dict[str, dict] = {}

    def fake_verify(token, app=None, check_revoked=False, clock_skew_seconds=0):
        if token not in tokens:
            raise firebase_auth.InvalidIdTokenError("Token could not be verified")
        return tokens[token]

    monkeypatch.setattr(firebase_auth, "verify_id_token", fake_verify)
    monkeypatch.setattr(auth_module, "get_firebase_app", lambda settings=None: None)
    return tokens


@pytest.fixture
def token_client(token_app, verified_claims):
    with TestClient(token_app) as test_client:
        yield test_client


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class TestTokenAuthentication:
    def test_missing_token_is_401(self, token_client):
        response = token_client.get("/api/identity")

        assert response.status_code == 401

    def test_email_header_alone_is_not_trusted(self, token_client):
        response = token_client.get("/api/identity", headers={"X-User-Email": "ken@example.com"})

        assert response.status_code == 401

    def test_forged_admin_header_cannot_manage_connections(self, token_client):
        response = token_client.post(
            "/api/connections",
            json={"viewerEmail": "viewer@example.com", "agentName": "KEN"},
            headers={"X-User-Email": "boss@example.com"},
        )

        assert response.status_code == 401

    def test_invalid_token_is_401(self, token_client):
        response = token_client.get("/api/identity", headers=_bearer("forged"))

        assert response.status_code == 401

    def test_verified_token_resolves_identity(self, token_client, verified_claims):
        verified_claims["good"] = {"uid": "u-1", "email": "Ken@example.com"}

        response = token_client.get("/api/identity", headers=_bearer("good"))

        assert response.status_code == 200
        assert response.json() == {
            "email": "Ken@example.com",
            "agentName": "KEN",
            "isAdmin": False,
            "viewerOf": None,
        }

    def test_token_without_email_is_401(self, token_client, verified_claims):
        verified_claims["anon"] = {"uid": "u-2"}

        assert token_client.get("/api/identity", headers=_bearer("anon")).status_code == 401

    def test_admin_custom_claim(self, token_client, verified_claims):
        verified_claims["admin"] = {"uid": "u-3", "email": "ops@example.com", "admin": True}

        response = token_client.get("/api/connections", headers=_bearer("admin"))

        assert response.status_code == 200

    def test_configured_admin_email(self, token_client, verified_claims):
        verified_claims["boss"] = {"uid": "u-4", "email": "boss@example.com"}

        identity = token_client.get("/api/identity", headers=_bearer("boss")).json()

        assert identity["isAdmin"] is True


class TestBuildPrincipal:
    def test_unusable_email_gives_no_principal(self):
        assert build_principal("@example.com") is None

    def test_agent_email_override(self, monkeypatch):
        from src.config import get_settings

        monkeypatch.setenv("OPSDESK_AGENT_EMAIL_MAP", "anna=ANNA")
        get_settings.cache_clear()

        principal = build_principal("anna@example.com")

        assert principal.agent_name == "ANNA"
        assert principal.is_viewer is False
