"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients.

    Fields are optional to keep shapes consistent across the codebase
    without forcing every error to fill them.
    """

    hint: str
    field: str
    missing_fields: list[str]
    max_value: int
    actual_value: int
    allowed_methods: list[str]
    limit: int
    remaining: int
    reset_at: int
    retry_after: int
    model: str


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when the inbound request is malformed or incomplete."""


class MethodNotAllowedAppError(AppError):
    """Raised when an endpoint is invoked with an unsupported HTTP verb."""


class RateLimitedAppError(AppError):
    """Raised when a client exhausted its premium-tier budget for the window."""


class MissingCredentialAppError(AppError):
    """Raised when the upstream API key is not configured (operator fault)."""


class LLMAppError(AppError):
    """Raised when the upstream LLM call fails or returns no usable reply."""
