"""Tests for the GoHighLevel API client, using httpx.MockTransport."""

import json

import httpx
import pytest

import ghl_client
from ghl_client import ApiResponse, GHLClient, GHLConfig


def make_client(handler) -> GHLClient:
    config = GHLConfig(access_token="token-abc", location_id="loc-123", base_url="https://ghl.test/")
    return GHLClient(config, transport=httpx.MockTransport(handler))


class TestRequest:
    async def test_headers_and_params(self):
        seen = {}

        def handler(request: httpx.Request):
            seen["request"] = request
            return httpx.Response(200, json={"contacts": []})

        client = make_client(handler)
        response = await client.request("GET", "/contacts/", params={"locationId": "loc-123", "query": None,
                                                                     "tags": ["a", "b"]})

        request = seen["request"]
        assert response == ApiResponse.ok({"contacts": []})
        assert str(request.url).startswith("https://ghl.test/contacts/")
        assert request.headers["Authorization"] == "Bearer token-abc"
        assert request.headers["Version"] == "2021-07-28"
        assert request.headers["Accept"] == "application/json"
        assert request.url.params.get("locationId") == "loc-123"
        assert "query" not in request.url.params
        assert request.url.params.get_list("tags") == ["a", "b"]

    async def test_json_body(self):
        seen = {}

        def handler(request: httpx.Request):
            seen["body"] = request.content
            return httpx.Response(201, json={"id": "c1"})

        response = await make_client(handler).request("POST", "/contacts/", json_body={"email": "a@b.co"})

        assert json.loads(seen["body"]) == {"email": "a@b.co"}
        assert response.data == {"id": "c1"}

    async def test_empty_body_is_empty_dict(self):
        response = await make_client(lambda request: httpx.Response(204)).request("DELETE", "/contacts/c1")
        assert response.success is True
        assert response.data == {}

    async def test_non_json_body(self):
        response = await make_client(lambda request: httpx.Response(200, text="OK")).request("GET", "/ping")
        assert response.data == {"raw": "OK"}


class TestErrors:
    async def test_error_status_and_message(self):
        def handler(request):
            return httpx.Response(422, json={"message": ["email must be an email", "phone is invalid"]})

        response = await make_client(handler).request("POST", "/contacts/")

        assert response.success is False
        assert response.error.status_code == 422
        assert response.error.message == "GHL API Error (422): email must be an email; phone is invalid"

    async def test_error_field_fallback(self):
        response = await make_client(
            lambda request: httpx.Response(401, json={"error": "Unauthorized"})
        ).request("GET", "/contacts/c1")
        assert response.error.message == "GHL API Error (401): Unauthorized"

    async def test_text_error_body(self):
        response = await make_client(
            lambda request: httpx.Response(502, text="Bad Gateway")
        ).request("GET", "/contacts/c1")
        assert response.error.status_code == 502
        assert response.error.message.endswith("Bad Gateway")

    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        response = await make_client(handler).request("GET", "/contacts/c1")

        assert response.success is False
        assert response.error.status_code is None
        assert "connection refused" in response.error.message


class TestRateLimit:
    async def test_retries_429(self, monkeypatch):
        delays = []

        async def fake_sleep(seconds):
            delays.append(seconds)

        monkeypatch.setattr(ghl_client.asyncio, "sleep", fake_sleep)
        responses = iter([
            httpx.Response(429, headers={"Retry-After": "2"}),
            httpx.Response(200, json={"ok": True}),
        ])

        response = await make_client(lambda request: next(responses)).request("GET", "/contacts/")

        assert response.data == {"ok": True}
        assert delays == [2]

    async def test_gives_up_after_max_attempts(self, monkeypatch):
        delays = []

        async def fake_sleep(seconds):
            delays.append(seconds)

        monkeypatch.setattr(ghl_client.asyncio, "sleep", fake_sleep)

        response = await make_client(
            lambda request: httpx.Response(429, headers={"Retry-After": "120"}, json={"message": "Too many requests"})
        ).request("GET", "/contacts/")

        assert response.error.status_code == 429
        assert delays == [30, 30]

    @pytest.mark.parametrize("header,expected", [
        ("1.5", [1.5]),
        ("Wed, 21 Oct 2099 07:28:00 GMT", [30]),
        ("Wed, 21 Oct 2015 07:28:00 GMT", [0]),
        ("soon", [5]),
    ])
    async def test_retry_after_formats(self, monkeypatch, header, expected):
        delays = []

        async def fake_sleep(seconds):
            delays.append(seconds)

        monkeypatch.setattr(ghl_client.asyncio, "sleep", fake_sleep)
        responses = iter([
            httpx.Response(429, headers={"Retry-After": header}),
            httpx.Response(200, json={"ok": True}),
        ])

        response = await make_client(lambda request: next(responses)).request("GET", "/contacts/")

        assert response.success is True
        assert delays == expected

    async def test_http_date_on_final_attempt_still_returns_error(self, monkeypatch):
        async def fake_sleep(seconds):
            pass

        monkeypatch.setattr(ghl_client.asyncio, "sleep", fake_sleep)

        response = await make_client(
            lambda request: httpx.Response(
                429,
                headers={"Retry-After": "Wed, 21 Oct 2026 07:28:00 GMT"},
                json={"message": "Too many requests"},
            )
        ).request("GET", "/contacts/")

        assert isinstance(response, ApiResponse)
        assert response.success is False
        assert response.error.status_code == 429


class TestConfig:
    def test_from_env(self, monkeypatch):
        monkeypatch.setattr("app.core.config.get_secret_sync", lambda secret_id: None)
        monkeypatch.setenv("GHL_API_KEY", "env-token")
        monkeypatch.setenv("GHL_LOCATION_ID", "loc-env")
        monkeypatch.setenv("GHL_BASE_URL", "https://example.test/")
        monkeypatch.setenv("GHL_TIMEOUT", "12")

        config = GHLConfig.from_env()

        assert config.access_token == "env-token"
        assert config.location_id == "loc-env"
        assert config.base_url == "https://example.test"
        assert config.timeout == 12.0
        assert config.is_configured

    def test_secret_manager_takes_precedence(self, monkeypatch):
        monkeypatch.setattr("app.core.config.get_secret_sync", lambda secret_id: "secret-token")
        monkeypatch.setenv("GHL_API_KEY", "env-token")

        assert GHLConfig.from_env().access_token == "secret-token"

    def test_not_configured_error_names_missing(self):
        config = GHLConfig(access_token="t")
        assert not config.is_configured
        assert config.not_configured_error == "Error: GoHighLevel not configured. Set GHL_LOCATION_ID."

    def test_client_exposes_location(self):
        assert GHLClient(GHLConfig(location_id="loc-9")).location_id == "loc-9"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("GHL_API_KEY", "GHL_LOCATION_ID", "GHL_BASE_URL", "GHL_API_VERSION", "GHL_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
