from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(request: Request) -> dict:
    """Health check endpoint.

    Reports liveness plus whether an upstream API key is configured, so a
    missing credential is visible before the first simplify request fails.

    Returns:
        dict: {"status": "ok", "llm_configured": bool}.
    """

    service = getattr(request.app.state, "simplify_service", None)
    return {
        "status": "ok",
        "llm_configured": bool(service is not None and service.llm is not None),
    }
