"""OpenAI LLM client adapter."""

import logging

import openai
from openai import AsyncOpenAI

from app.adapters.llm.base import AbstractLLMClient
from app.core.errors import LLMAppError

logger = logging.getLogger(__name__)


class OpenAIClient(AbstractLLMClient):
    """Client for OpenAI chat completions returning the reply text.

    Uses the official OpenAI Python SDK with async support. SDK-level retries
    are disabled: every call is a single round-trip bounded by the timeout.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        """Initialize OpenAI async client.

        Args:
            api_key: OpenAI API key for authentication.
            base_url: Optional custom base URL for OpenAI API.
            timeout_seconds: Timeout for requests in seconds.
        """
        self.client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_seconds,
            max_retries=0,
        )

    async def complete(
        self,
        *,
        model: str,
        system_prompt: str,
        user_content: str,
        temperature: float,
    ) -> str:
        """Send system + user messages and return the first choice's text.

        Args:
            model: Model id (e.g., "gpt-3.5-turbo").
            system_prompt: Rewriting instruction.
            user_content: Text to simplify.
            temperature: Sampling temperature.

        Returns:
            str: Trimmed, non-empty reply.

        Raises:
            LLMAppError: On timeout, transport/provider error, or empty reply.
        """
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_content},
        ]

        try:
            response = await self.client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=temperature,
            )
        except openai.APITimeoutError as exc:
            logger.error(
                "llm.request_timeout",
                extra={"model": model, "error_type": type(exc).__name__},
            )
            raise LLMAppError(
                code="upstream_failure",
                message="The language model did not respond in time.",
                details={"model": model, "hint": "timeout"},
            ) from exc
        except openai.OpenAIError as exc:
            logger.error(
                "llm.request_failed",
                extra={
                    "model": model,
                    "error_type": type(exc).__name__,
                    "http_status": getattr(exc, "status_code", None),
                },
            )
            raise LLMAppError(
                code="upstream_failure",
                message="Something went wrong with the language model.",
                details={"model": model},
            ) from exc

        choices = response.choices or []
        message = getattr(choices[0], "message", None) if choices else None
        content = message.content if message is not None else None
        reply = content.strip() if content else ""

        if not reply:
            logger.error(
                "llm.empty_reply",
                extra={"model": model, "choice_count": len(choices)},
            )
            raise LLMAppError(
                code="upstream_failure",
                message="No response from the language model.",
                details={"model": model, "hint": "empty_reply"},
            )

        return reply
