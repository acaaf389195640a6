"""Rate limiting wiring for the HTTP layer.

This module connects the rate limiting adapter to FastAPI:
- builds the premium-tier limiter once per application (owned by app.state,
  not by a module global, so tests and app instances stay isolated)
- derives the best-effort client identifier used as the limiter key

Client identifier strategy:
- first entry of X-Forwarded-For (when trusted), else
- the socket peer address, else
- the shared "unknown" bucket.
"""

from __future__ import annotations

import logging

from fastapi import Request

from app.adapters.rate_limit.base import AbstractRateLimiter
from app.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter, UsageStore
from app.core.config import AppSettings, settings

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT_ID = "unknown"


def build_premium_limiter(app_settings: AppSettings | None = None) -> AbstractRateLimiter:
    """Create the premium-tier limiter with a fresh usage store.

    Args:
        app_settings: Settings providing limit and window; defaults to global settings.

    Returns:
        AbstractRateLimiter: Limiter to be owned by one application instance.
    """

    cfg = app_settings or settings.app
    limiter = InMemoryFixedWindowRateLimiter(
        limit=cfg.premium_rate_limit,
        window_seconds=cfg.premium_rate_limit_window_seconds,
        store=UsageStore(),
    )
    logger.info(
        "rate_limit.configured",
        extra={
            "limit": cfg.premium_rate_limit,
            "window_s": cfg.premium_rate_limit_window_seconds,
        },
    )
    return limiter


def resolve_client_id(request: Request, *, trust_forwarded_for: bool = True) -> str:
    """Derive the client identifier for rate limiting.

    Args:
        request: FastAPI request.
        trust_forwarded_for: Whether to honour the X-Forwarded-For header.

    Returns:
        str: Client address, or "unknown" when none can be resolved.
    """

    if trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            first = forwarded.split(",")[0].strip()
            if first:
                return first

    if request.client and request.client.host:
        return request.client.host

    return UNKNOWN_CLIENT_ID


def get_client_id(request: Request) -> str:
    """FastAPI dependency returning the client identifier for this request."""

    return resolve_client_id(
        request,
        trust_forwarded_for=settings.app.trust_forwarded_for,
    )
