"""Tests for the simplify API routes.

Each test builds its own application through the app factory so the usage
store and the fake LLM client are isolated per test.
"""

from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient

from app.adapters.llm.base import AbstractLLMClient
from app.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from app.core.app_factory import create_app
from app.core.config import Settings, settings
from app.core.errors import LLMAppError

STANDARD = settings.llm.standard_model
PREMIUM = settings.llm.premium_model


@pytest.fixture
def llm() -> AsyncMock:
    client = AsyncMock(spec=AbstractLLMClient)
    client.complete.return_value = "Plants use sunlight to make food."
    return client


@pytest.fixture
def clock() -> Mock:
    return Mock(return_value=1_700_000_000.0)


@pytest.fixture
def limiter(clock) -> InMemoryFixedWindowRateLimiter:
    return InMemoryFixedWindowRateLimiter(limit=2, window_seconds=3600, clock=clock)


@pytest.fixture
def client(llm, limiter) -> TestClient:
    app = create_app(llm_client=llm, premium_limiter=limiter, configure_logs=False)
    return TestClient(app)


def _payload(**overrides) -> dict:
    payload = {
        "input": "Photosynthesis converts light energy into chemical energy.",
        "level": "ELI5",
        "targetLanguage": "English",
        "model": STANDARD,
    }
    payload.update(overrides)
    return payload


class TestSimplifyEndpoint:
    def test_success(self, client, llm):
        response = client.post("/api/simplify", json=_payload())

        assert response.status_code == 200
        assert response.json() == {
            "output": "Plants use sunlight to make food.",
            "model": STANDARD,
        }
        assert llm.complete.await_count == 1

    def test_unknown_model_downgrades_to_standard(self, client, llm, limiter):
        response = client.post("/api/simplify", json=_payload(model="unknown-model"))

        assert response.status_code == 200
        assert response.json()["model"] == STANDARD
        assert llm.complete.call_args.kwargs["model"] == STANDARD
        assert len(limiter.store) == 0

    @pytest.mark.parametrize("field", ["input", "level", "targetLanguage", "model"])
    def test_missing_field_returns_400(self, client, llm, field):
        payload = _payload()
        del payload[field]

        response = client.post("/api/simplify", json=payload)

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "invalid_request"
        assert error["message"] == "Missing input, level, targetLanguage, or model"
        assert error["details"]["missing_fields"] == [field]
        assert llm.complete.await_count == 0

    def test_empty_body_returns_400(self, client, llm):
        response = client.post("/api/simplify", json={})

        assert response.status_code == 400
        assert response.json()["error"]["details"]["missing_fields"] == [
            "input",
            "level",
            "targetLanguage",
            "model",
        ]
        assert llm.complete.await_count == 0

    def test_non_string_field_returns_missing_fields(self, client, llm):
        response = client.post("/api/simplify", json=_payload(input=123))

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "invalid_request"
        assert error["details"]["missing_fields"] == ["input"]
        assert llm.complete.await_count == 0

    def test_missing_credential_reported_before_field_type_check(self, limiter):
        app = create_app(llm_client=None, premium_limiter=limiter, configure_logs=False)
        client = TestClient(app)

        response = client.post("/api/simplify", json=_payload(input=123))

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "missing_credential"

    def test_malformed_json_returns_400(self, client, llm):
        response = client.post(
            "/api/simplify",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "invalid_request"
        assert llm.complete.await_count == 0

    @pytest.mark.parametrize("method", ["get", "put", "patch", "delete"])
    def test_wrong_method_returns_405(self, client, llm, method):
        response = client.request(method.upper(), "/api/simplify")

        assert response.status_code == 405
        assert response.json()["error"]["code"] == "method_not_allowed"
        assert response.headers["Allow"] == "POST"
        assert llm.complete.await_count == 0

    def test_upstream_failure_returns_500(self, client, llm):
        llm.complete.side_effect = LLMAppError(
            code="upstream_failure",
            message="No response from the language model.",
        )

        response = client.post("/api/simplify", json=_payload())

        assert response.status_code == 500
        body = response.json()
        assert body["error"]["code"] == "upstream_failure"
        assert "output" not in body

    def test_missing_credential_returns_500(self, limiter):
        app = create_app(llm_client=None, premium_limiter=limiter, configure_logs=False)
        client = TestClient(app)

        response = client.post("/api/simplify", json=_payload())

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "missing_credential"

    def test_missing_credential_reported_before_field_validation(self, limiter):
        app = create_app(llm_client=None, premium_limiter=limiter, configure_logs=False)
        client = TestClient(app)

        response = client.post("/api/simplify", json={})

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "missing_credential"


class TestPremiumRateLimit:
    def test_premium_limit_per_forwarded_client(self, client, llm):
        headers = {"X-Forwarded-For": "203.0.113.7, 10.0.0.1"}

        for _ in range(2):
            ok = client.post("/api/simplify", json=_payload(model=PREMIUM), headers=headers)
            assert ok.status_code == 200
            assert ok.json()["model"] == PREMIUM

        denied = client.post("/api/simplify", json=_payload(model=PREMIUM), headers=headers)

        assert denied.status_code == 429
        error = denied.json()["error"]
        assert error["code"] == "rate_limited"
        assert "usage limit reached" in error["message"]
        assert int(denied.headers["Retry-After"]) > 0
        assert denied.headers["X-RateLimit-Limit"] == "2"
        assert denied.headers["X-RateLimit-Remaining"] == "0"
        assert llm.complete.await_count == 2

    def test_rate_limit_headers_can_be_disabled(self, llm, limiter, monkeypatch):
        monkeypatch.setenv("APP_RATE_LIMIT_INCLUDE_HEADERS", "false")
        app = create_app(
            settings=Settings(),
            llm_client=llm,
            premium_limiter=limiter,
            configure_logs=False,
        )
        client = TestClient(app)
        headers = {"X-Forwarded-For": "203.0.113.7"}

        for _ in range(2):
            client.post("/api/simplify", json=_payload(model=PREMIUM), headers=headers)
        denied = client.post("/api/simplify", json=_payload(model=PREMIUM), headers=headers)

        assert denied.status_code == 429
        assert int(denied.headers["Retry-After"]) > 0
        assert "X-RateLimit-Limit" not in denied.headers
        assert "X-RateLimit-Remaining" not in denied.headers
        assert "X-RateLimit-Reset" not in denied.headers
        details = denied.json()["error"]["details"]
        assert "limit" not in details
        assert "reset_at" not in details

    def test_other_clients_are_not_affected(self, client):
        for _ in range(3):
            client.post(
                "/api/simplify",
                json=_payload(model=PREMIUM),
                headers={"X-Forwarded-For": "203.0.113.7"},
            )

        other = client.post(
            "/api/simplify",
            json=_payload(model=PREMIUM),
            headers={"X-Forwarded-For": "198.51.100.20"},
        )

        assert other.status_code == 200

    def test_standard_model_still_served_when_premium_exhausted(self, client):
        headers = {"X-Forwarded-For": "203.0.113.7"}
        for _ in range(3):
            client.post("/api/simplify", json=_payload(model=PREMIUM), headers=headers)

        response = client.post("/api/simplify", json=_payload(), headers=headers)

        assert response.status_code == 200
        assert response.json()["model"] == STANDARD

    def test_limit_resets_after_window(self, client, clock):
        headers = {"X-Forwarded-For": "203.0.113.7"}
        for _ in range(2):
            client.post("/api/simplify", json=_payload(model=PREMIUM), headers=headers)
        assert (
            client.post("/api/simplify", json=_payload(model=PREMIUM), headers=headers).status_code
            == 429
        )

        clock.return_value += 3600 + 1

        response = client.post("/api/simplify", json=_payload(model=PREMIUM), headers=headers)
        assert response.status_code == 200

    def test_socket_address_used_without_forwarded_header(self, client, limiter):
        client.post("/api/simplify", json=_payload(model=PREMIUM))

        assert "testclient" in limiter.store

    def test_apps_do_not_share_usage(self, llm):
        first = TestClient(create_app(llm_client=llm, configure_logs=False))
        second = TestClient(create_app(llm_client=llm, configure_logs=False))

        first_app_store = first.app.state.simplify_service.premium_limiter.store
        second_app_store = second.app.state.simplify_service.premium_limiter.store

        first.post("/api/simplify", json=_payload(model=PREMIUM))

        assert len(first_app_store) == 1
        assert len(second_app_store) == 0


class TestHealthAndDocs:
    def test_health_reports_llm_configured(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "llm_configured": True}

    def test_health_reports_missing_llm(self):
        client = TestClient(create_app(llm_client=None, configure_logs=False))

        assert client.get("/health").json()["llm_configured"] is False

    def test_openapi_documents_rate_limit_headers(self, client):
        schema = client.get("/openapi.json").json()

        post = schema["paths"]["/api/simplify"]["post"]
        assert "Retry-After" in post["responses"]["429"]["headers"]
        assert "ErrorResponse" in schema["components"]["schemas"]
        assert {t["name"] for t in schema["tags"]} >= {"Simplify", "Health"}
