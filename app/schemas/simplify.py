"""Pydantic schemas for the simplify endpoint."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SimplifyRequest(BaseModel):
    """Inbound simplify payload.

    Fields are untyped and optional so that missing, blank or non-string
    values all surface as a single ``invalid_request`` error from the service
    instead of a framework validation error.
    """

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    text: Any = Field(
        default=None,
        json_schema_extra={"type": "string"},
        alias="input",
        description="Text to simplify, in any language.",
    )
    detail_level: Any = Field(
        default=None,
        json_schema_extra={"type": "string"},
        alias="level",
        description="Rewrite level, e.g. 'ELI5', 'Plain English', 'Executive summary'.",
    )
    target_language: Any = Field(
        default=None,
        json_schema_extra={"type": "string"},
        alias="targetLanguage",
        description="Language the answer must be written in.",
    )
    requested_model: Any = Field(
        default=None,
        json_schema_extra={"type": "string"},
        alias="model",
        description="Requested model id; unknown ids fall back to the standard tier.",
    )


class SimplifyResponse(BaseModel):
    """Simplified text together with the model that produced it."""

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    output: str = Field(..., description="Simplified/translated text.")
    model_used: str = Field(
        ...,
        alias="model",
        description="Model id that actually served the request.",
    )
