"""OpenAPI customization utilities.

Enriches the generated OpenAPI schema with:
- Tags metadata
- The shared error envelope schema
- Rate limit headers on 429 responses

This keeps documentation concerns decoupled from the app factory.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

_ERROR_ENVELOPE = {
    "type": "object",
    "properties": {
        "error": {
            "type": "object",
            "properties": {
                "code": {"type": "string"},
                "message": {"type": "string"},
                "request_id": {"type": "string", "nullable": True},
                "details": {"type": "object"},
            },
            "required": ["code", "message"],
        }
    },
}

_RATE_LIMIT_HEADERS = {
    "Retry-After": {
        "description": "Seconds until the premium window resets.",
        "schema": {"type": "integer"},
    },
    "X-RateLimit-Limit": {
        "description": "Premium calls allowed per window.",
        "schema": {"type": "integer"},
    },
    "X-RateLimit-Remaining": {
        "description": "Premium calls left in the current window.",
        "schema": {"type": "integer"},
    },
    "X-RateLimit-Reset": {
        "description": "UNIX time when the current window resets.",
        "schema": {"type": "integer"},
    },
}


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add tags and error metadata.

    - Registers the ``ErrorResponse`` component
    - Points every 4xx/5xx response at ``ErrorResponse``
    - Documents rate limit headers on 429 responses
    - Adds tags metadata if not present
    """

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        schema = original_openapi()

        components = schema.setdefault("components", {})
        components.setdefault("schemas", {}).setdefault("ErrorResponse", _ERROR_ENVELOPE)
        error_ref = {"$ref": "#/components/schemas/ErrorResponse"}

        for methods in schema.get("paths", {}).values():
            for method_obj in methods.values():
                if not isinstance(method_obj, dict):
                    continue
                for status_code, response in method_obj.get("responses", {}).items():
                    if not status_code.startswith(("4", "5")) or status_code == "422":
                        continue
                    response.setdefault("content", {"application/json": {"schema": error_ref}})
                    if status_code == "429":
                        response.setdefault("headers", _RATE_LIMIT_HEADERS)

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        desired_tags = [
            {
                "name": "Simplify",
                "description": "Simplify and translate text with a language model.",
            },
            {
                "name": "Health",
                "description": "Liveness check.",
            },
        ]
        for tag in desired_tags:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        app.openapi_schema = schema
        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
