"""Tests for client identifier resolution and premium limiter wiring."""

from __future__ import annotations

from starlette.requests import Request

from app.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from app.core.config import AppSettings
from app.core.rate_limit import UNKNOWN_CLIENT_ID, build_premium_limiter, resolve_client_id


def _request(headers: dict[str, str] | None = None, client: tuple[str, int] | None = None) -> Request:
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/api/simplify",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
    }
    if client is not None:
        scope["client"] = client
    return Request(scope)


def test_uses_first_forwarded_for_entry():
    request = _request({"X-Forwarded-For": " 203.0.113.7 , 10.0.0.1"}, client=("10.0.0.9", 5000))

    assert resolve_client_id(request) == "203.0.113.7"


def test_falls_back_to_socket_address():
    request = _request(client=("198.51.100.4", 5000))

    assert resolve_client_id(request) == "198.51.100.4"


def test_blank_forwarded_for_falls_back_to_socket_address():
    request = _request({"X-Forwarded-For": " , 10.0.0.1"}, client=("198.51.100.4", 5000))

    assert resolve_client_id(request) == "198.51.100.4"


def test_unknown_bucket_when_nothing_resolvable():
    request = _request()

    assert resolve_client_id(request) == UNKNOWN_CLIENT_ID == "unknown"


def test_forwarded_for_ignored_when_not_trusted():
    request = _request({"X-Forwarded-For": "203.0.113.7"}, client=("198.51.100.4", 5000))

    assert resolve_client_id(request, trust_forwarded_for=False) == "198.51.100.4"


def test_build_premium_limiter_uses_settings():
    cfg = AppSettings(premium_rate_limit=3, premium_rate_limit_window_seconds=120)

    limiter = build_premium_limiter(cfg)

    assert isinstance(limiter, InMemoryFixedWindowRateLimiter)
    assert limiter.limit == 3
    assert limiter.window_seconds == 120


def test_each_built_limiter_owns_its_store():
    first = build_premium_limiter(AppSettings())
    second = build_premium_limiter(AppSettings())

    first.check_and_record("1.2.3.4")

    assert "1.2.3.4" in first.store
    assert "1.2.3.4" not in second.store
