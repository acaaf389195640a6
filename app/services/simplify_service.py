"""Text simplification service.

Turns a validated simplify request into one upstream chat completion:
- Validates required fields and input size
- Applies the premium-tier rate limit per client
- Resolves the requested model against the allowed tiers
- Builds the rewrite instruction from the detail level
- Maps the upstream reply (or failure) to a response

Request lifecycle:
    Received → Validated → [RateLimitChecked] → UpstreamDispatched → Succeeded | Failed
"""

from __future__ import annotations

import logging
import time
from enum import Enum

from app.adapters.llm.base import AbstractLLMClient
from app.adapters.rate_limit.base import AbstractRateLimiter
from app.core.config import LLMSettings
from app.core.errors import (
    ErrorDetails,
    MissingCredentialAppError,
    RateLimitedAppError,
    ValidationAppError,
)
from app.core.logging import hash_identifier
from app.schemas.simplify import SimplifyRequest, SimplifyResponse

logger = logging.getLogger(__name__)


class DetailLevel(str, Enum):
    """Closed set of rewrite levels; GENERIC is the default arm."""

    ELI5 = "ELI5"
    ELI10 = "ELI10"
    PLAIN_ENGLISH = "Plain English"
    EXECUTIVE_SUMMARY = "Executive summary"
    LEGAL_SUMMARY = "Legal summary"
    MEDICAL_EXPLANATION = "Medical explanation"
    ADHD_FRIENDLY = "ADHD-friendly"
    STUDY_GUIDE = "Study guide"
    GENERIC = "generic"


LEVEL_INSTRUCTIONS: dict[DetailLevel, str] = {
    DetailLevel.ELI5: (
        "Explain it as if talking to a five-year-old: very simple words, "
        "short sentences and one everyday example."
    ),
    DetailLevel.ELI10: (
        "Explain it as if talking to a ten-year-old: simple words, short "
        "sentences, and define any unusual term in passing."
    ),
    DetailLevel.PLAIN_ENGLISH: (
        "Rewrite it in plain language for an adult reader. Replace jargon with "
        "common words and keep sentences short."
    ),
    DetailLevel.EXECUTIVE_SUMMARY: (
        "Write an executive summary as 3 to 5 short bullet points covering the "
        "key facts, decisions and their impact."
    ),
    DetailLevel.LEGAL_SUMMARY: (
        "Summarize the legal meaning in plain terms: who must do what, by when, "
        "and what happens if they do not. Do not give legal advice."
    ),
    DetailLevel.MEDICAL_EXPLANATION: (
        "Explain the medical content in patient-friendly terms, defining each "
        "medical term in simple words. Do not give a diagnosis or treatment advice."
    ),
    DetailLevel.ADHD_FRIENDLY: (
        "Make it ADHD-friendly: start with a one-line takeaway, then use very "
        "short paragraphs or bullet points with the key words first."
    ),
    DetailLevel.STUDY_GUIDE: (
        "Turn it into a study guide: list the key concepts with one-line "
        "definitions, then add three review questions with short answers."
    ),
}

GENERIC_INSTRUCTION = "Rewrite it so it is clear and simple, using everyday words."

# Labels used by the original web form, kept as accepted spellings.
_LEVEL_ALIASES: dict[str, DetailLevel] = {
    "explain like i'm 5": DetailLevel.ELI5,
    "explain like i’m 5": DetailLevel.ELI5,
    "explain like i'm 10": DetailLevel.ELI10,
    "explain like i’m 10": DetailLevel.ELI10,
}

_FIELD_WIRE_NAMES = {
    "text": "input",
    "detail_level": "level",
    "target_language": "targetLanguage",
    "requested_model": "model",
}


def parse_detail_level(name: str) -> DetailLevel:
    """Map a free-form level name to a DetailLevel.

    Matching is case-insensitive and ignores surrounding whitespace.
    Unknown names map to DetailLevel.GENERIC.
    """
    key = name.strip().lower()
    for level in LEVEL_INSTRUCTIONS:
        if level.value.lower() == key:
            return level
    return _LEVEL_ALIASES.get(key, DetailLevel.GENERIC)


def build_instruction(detail_level: str, target_language: str) -> str:
    """Build the system instruction for one simplify call.

    The instruction always asks the model to detect the input language,
    translate into the target language when needed, apply the level's rewrite
    directive, and answer only in the target language.

    Args:
        detail_level: Requested level name.
        target_language: Language the answer must be written in.

    Returns:
        Deterministic instruction text.
    """
    level = parse_detail_level(detail_level)
    directive = LEVEL_INSTRUCTIONS.get(level, GENERIC_INSTRUCTION)

    return f"""
You are a helpful assistant that simplifies and explains text for language learners.

Tasks:
1. Detect the language of the input text.
2. If it is not written in "{target_language}", translate it into "{target_language}".
3. {directive}
4. Respond only in "{target_language}", with the rewritten text and nothing else.

Keep the original meaning. Do not add facts that are not in the input.
""".strip()


class SimplifyService:
    """Validate, rate limit, and forward simplify requests to the LLM.

    Attributes:
        llm: Upstream client, or None when no API key is configured.
        premium_limiter: Limiter applied to premium-tier requests only.
    """

    def __init__(
        self,
        llm: AbstractLLMClient | None,
        premium_limiter: AbstractRateLimiter,
        llm_settings: LLMSettings,
        *,
        max_input_chars: int = 20000,
        include_rate_limit_headers: bool = True,
    ) -> None:
        self.llm = llm
        self.premium_limiter = premium_limiter
        self.standard_model = llm_settings.standard_model
        self.premium_model = llm_settings.premium_model
        self.temperature = llm_settings.temperature
        self.max_input_chars = max_input_chars
        self.include_rate_limit_headers = include_rate_limit_headers

    @property
    def allowed_models(self) -> tuple[str, str]:
        return (self.standard_model, self.premium_model)

    def resolve_model(self, requested_model: str) -> str:
        """Return the requested model if allowed, else the standard tier."""
        if requested_model in self.allowed_models:
            return requested_model
        return self.standard_model

    def _validate(self, request: SimplifyRequest) -> dict[str, str]:
        """Check required fields and size limits.

        Returns:
            Stripped field values keyed by field name.

        Raises:
            ValidationAppError: If a field is missing, blank or not a string, or the
                input is too long.
        """
        values: dict[str, str] = {}
        missing: list[str] = []
        for field_name, wire_name in _FIELD_WIRE_NAMES.items():
            raw = getattr(request, field_name)
            value = raw.strip() if isinstance(raw, str) else ""
            if not value:
                missing.append(wire_name)
            values[field_name] = value

        if missing:
            raise ValidationAppError(
                code="invalid_request",
                message="Missing input, level, targetLanguage, or model",
                details={"missing_fields": missing},
            )

        if len(values["text"]) > self.max_input_chars:
            raise ValidationAppError(
                code="input_too_long",
                message=f"Input is too long (maximum {self.max_input_chars} characters).",
                details={
                    "field": "input",
                    "max_value": self.max_input_chars,
                    "actual_value": len(values["text"]),
                },
            )

        return values

    def _enforce_premium_limit(self, client_id: str) -> None:
        """Consume one premium call for ``client_id`` or raise RateLimitedAppError."""
        result = self.premium_limiter.check_and_record(client_id)
        client_hash = hash_identifier(client_id)

        if result.allowed:
            logger.info(
                "rate_limit.allowed",
                extra={
                    "client_hash": client_hash,
                    "limit": result.limit,
                    "remaining": result.remaining,
                    "window_s": self.premium_limiter.window_seconds,
                },
            )
            return

        logger.warning(
            "rate_limit.exceeded",
            extra={
                "client_hash": client_hash,
                "limit": result.limit,
                "window_s": self.premium_limiter.window_seconds,
                "retry_after_s": result.retry_after_seconds,
            },
        )
        details: ErrorDetails = {
            "model": self.premium_model,
            "retry_after": result.retry_after_seconds or 0,
        }
        # X-RateLimit-* headers are only emitted for the keys present here.
        if self.include_rate_limit_headers:
            details["limit"] = result.limit
            details["remaining"] = result.remaining
            details["reset_at"] = result.reset_at

        raise RateLimitedAppError(
            code="rate_limited",
            message="Premium model usage limit reached for this hour.",
            details=details,
        )

    async def simplify(self, request: SimplifyRequest, client_id: str) -> SimplifyResponse:
        """Run one simplify request end to end.

        Args:
            request: Inbound payload.
            client_id: Best-effort client identifier used for rate limiting.

        Returns:
            SimplifyResponse with the reply and the model that served it.

        Raises:
            MissingCredentialAppError: If no upstream API key is configured.
            ValidationAppError: If required fields are missing or the input is too long.
            RateLimitedAppError: If the client exhausted its premium budget.
            LLMAppError: If the upstream call fails or returns no content.
        """
        if self.llm is None:
            raise MissingCredentialAppError(
                code="missing_credential",
                message="Missing OpenAI API key",
            )

        values = self._validate(request)

        if values["requested_model"] == self.premium_model:
            self._enforce_premium_limit(client_id)

        model = self.resolve_model(values["requested_model"])
        if model != values["requested_model"]:
            logger.info(
                "simplify.model_fallback",
                extra={"requested_model": values["requested_model"], "model": model},
            )

        instruction = build_instruction(values["detail_level"], values["target_language"])

        start = time.perf_counter()
        reply = await self.llm.complete(
            model=model,
            system_prompt=instruction,
            user_content=values["text"],
            temperature=self.temperature,
        )

        logger.info(
            "simplify.completed",
            extra={
                "model": model,
                "detail_level": parse_detail_level(values["detail_level"]).value,
                "target_language": values["target_language"],
                "input_chars": len(values["text"]),
                "output_chars": len(reply),
                "upstream_ms": round((time.perf_counter() - start) * 1000, 2),
            },
        )

        return SimplifyResponse(output=reply, model_used=model)
