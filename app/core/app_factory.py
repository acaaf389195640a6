from __future__ import annotations

"""Application factory for FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers and the
request-scoped collaborators owned by the app) so tests can build isolated
instances with their own LLM client and usage store.
"""

import logging

from fastapi import FastAPI

from app.adapters.llm.base import AbstractLLMClient
from app.adapters.llm.factory import create_llm_client
from app.adapters.rate_limit.base import AbstractRateLimiter
from app.api.routes import health_router, simplify_router
from app.core.config import Settings, settings as default_settings
from app.core.errors import MissingCredentialAppError
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware
from app.core.openapi import apply_openapi_customizations
from app.core.rate_limit import build_premium_limiter
from app.services.simplify_service import SimplifyService

logger = logging.getLogger(__name__)

_UNSET = object()


def _build_default_llm_client(settings: Settings) -> AbstractLLMClient | None:
    """Create the upstream client, or None when the API key is missing.

    A missing key does not prevent startup; every simplify request then fails
    with ``missing_credential``.
    """
    try:
        return create_llm_client(settings.llm)
    except MissingCredentialAppError as exc:
        logger.warning(
            "llm.client_unavailable",
            extra={"error_code": exc.code, "provider": settings.llm.provider},
        )
        return None


def create_app(
    *,
    settings: Settings | None = None,
    llm_client: AbstractLLMClient | None | object = _UNSET,
    premium_limiter: AbstractRateLimiter | None = None,
    configure_logs: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        settings: Settings to use; defaults to the global settings.
        llm_client: Upstream client override. Pass None to simulate a missing
            credential; omit to build one from settings.
        premium_limiter: Limiter override; a fresh in-memory one is built if omitted.
        configure_logs: Whether to (re)configure root logging.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    cfg = settings or default_settings

    # Logging first so subsequent init logs are formatted as desired
    if configure_logs:
        configure_logging(cfg.log, debug=cfg.app.debug)

    app = FastAPI(
        title="Text Simplifier API",
        description=(
            "Simplifies and translates pasted text with a large language model. "
            "Choose a rewrite level (ELI5, Plain English, Executive summary, ...) "
            "and an output language. The premium model is limited per client per hour."
        ),
        version="0.1.0",
        license_info={
            "name": "MIT License",
            "url": "https://opensource.org/licenses/MIT",
        },
    )

    if llm_client is _UNSET:
        llm_client = _build_default_llm_client(cfg)

    app.state.simplify_service = SimplifyService(
        llm=llm_client,  # type: ignore[arg-type]
        premium_limiter=premium_limiter or build_premium_limiter(cfg.app),
        llm_settings=cfg.llm,
        max_input_chars=cfg.app.max_input_chars,
        include_rate_limit_headers=cfg.app.rate_limit_include_headers,
    )

    # Middleware
    app.middleware("http")(request_id_middleware)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(simplify_router, prefix="/api")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    logger.info(
        "app.created",
        extra={
            "app_env": cfg.app_env,
            "standard_model": cfg.llm.standard_model,
            "premium_model": cfg.llm.premium_model,
            "llm_configured": llm_client is not None,
        },
    )

    return app
