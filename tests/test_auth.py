"""API key middleware tests."""

import pytest
from starlette.applications import Starlette
from starlette.responses import JSONResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from app.core.auth import APIKeyMiddleware


async def ok_endpoint(request):
    return JSONResponse({"ok": True})


def make_app(api_key=None) -> Starlette:
    app = Starlette(routes=[
        Route("/", ok_endpoint),
        Route("/health", ok_endpoint),
        Route("/tools", ok_endpoint),
    ])
    app.add_middleware(APIKeyMiddleware, api_key=api_key)
    return app


@pytest.fixture
def protected():
    return TestClient(make_app(api_key="s3cret"))


class TestAPIKeyMiddleware:
    def test_public_paths_need_no_key(self, protected):
        assert protected.get("/health").status_code == 200
        assert protected.get("/").status_code == 200

    def test_missing_key_rejected(self, protected):
        response = protected.get("/tools")
        assert response.status_code == 401
        assert response.text == "Unauthorized - Invalid or missing API key"

    def test_wrong_key_rejected(self, protected):
        assert protected.get("/tools", headers={"X-API-Key": "nope"}).status_code == 401

    @pytest.mark.parametrize("kwargs", [
        {"headers": {"X-API-Key": "s3cret"}},
        {"headers": {"Authorization": "Bearer s3cret"}},
        {"params": {"api_key": "s3cret"}},
    ])
    def test_accepted_key_locations(self, protected, kwargs):
        assert protected.get("/tools", **kwargs).status_code == 200

    def test_bearer_prefix_is_strict(self, protected):
        assert protected.get("/tools", headers={"Authorization": "Token s3cret"}).status_code == 401

    def test_secret_manager_key_loaded_lazily(self, monkeypatch):
        monkeypatch.delenv("MCP_API_KEY", raising=False)
        lookups = []

        def fake_secret(secret_id):
            lookups.append(secret_id)
            return "from-secret-manager"

        monkeypatch.setattr("app.core.auth.get_secret_sync", fake_secret)
        client = TestClient(make_app())

        assert lookups == []
        assert client.get("/tools").status_code == 401
        assert client.get("/tools", headers={"X-API-Key": "from-secret-manager"}).status_code == 200
        assert lookups == ["MCP_API_KEY"]

    def test_open_when_no_key_configured(self, monkeypatch):
        monkeypatch.delenv("MCP_API_KEY", raising=False)
        monkeypatch.setattr("app.core.auth.get_secret_sync", lambda secret_id: None)

        assert TestClient(make_app()).get("/tools").status_code == 200
