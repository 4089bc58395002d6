# core/llm_interface.py
"""
Handles all direct interactions with the hosted LLM used as the rubric
evaluator. Includes the asynchronous chat-completions client, rate-limit
detection and the retry loop shared by pipeline phases.
"""

from __future__ import annotations

import asyncio
from typing import Any, Protocol

import httpx
import structlog

from config import settings

logger = structlog.get_logger(__name__)


class LLMConfigurationError(RuntimeError):
    """Raised when the LLM client is missing required configuration."""


class EmptyLLMResponseError(RuntimeError):
    """Raised when the model answers with no usable text."""


class Clock(Protocol):
    """Anything that can wait; injected so delays are testable."""

    async def sleep(self, seconds: float) -> None: ...


class AsyncioClock:
    """Real wall-clock waits via ``asyncio.sleep``."""

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


class LLMClient(Protocol):
    async def async_call_llm(
        self, prompt: str, model_name: str | None = None
    ) -> tuple[str, dict[str, int] | None]: ...


def is_rate_limit_error(exc: BaseException) -> bool:
    """Return True for HTTP 429 responses or errors that mention a rate limit."""
    if (
        isinstance(exc, httpx.HTTPStatusError)
        and exc.response is not None
        and exc.response.status_code == 429
    ):
        return True
    message = str(exc)
    return "429" in message or "rate_limit" in message


class LLMService:
    """Async client for an OpenAI-compatible chat-completions endpoint."""

    def __init__(
        self,
        api_key: str | None = None,
        api_base: str | None = None,
        model: str | None = None,
        timeout: float = settings.HTTPX_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = settings.GROQ_API_KEY if api_key is None else api_key
        self.api_base = (api_base or settings.LLM_API_BASE).rstrip("/")
        self.model = model or settings.LLM_MODEL
        # Use a single async client for all requests to reuse connections
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)
        self.request_count = 0

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> LLMService:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def _log_llm_usage(self, model_name: str, usage_data: Any) -> None:
        """Helper to log LLM token usage if available in the response."""
        if usage_data and isinstance(usage_data, dict):
            logger.info(
                f"LLM ('{model_name}') Usage - Prompt: {usage_data.get('prompt_tokens', 'N/A')} tk, "
                f"Comp: {usage_data.get('completion_tokens', 'N/A')} tk, Total: {usage_data.get('total_tokens', 'N/A')} tk"
            )
        else:
            logger.debug(
                f"LLM ('{model_name}') response missing 'usage' information or 'usage' was not a dictionary."
            )

    async def _post_non_streaming(
        self, payload: dict[str, Any], headers: dict[str, str]
    ) -> tuple[str, dict[str, int] | None]:
        """Send a regular chat completion request."""
        response = await self._client.post(
            f"{self.api_base}/chat/completions",
            json=payload,
            headers=headers,
        )
        response.raise_for_status()
        data = response.json()
        raw_text = ""
        if data.get("choices"):
            message = data["choices"][0].get("message")
            if message and message.get("content"):
                raw_text = message["content"]
        else:
            logger.error(
                f"LLM ('{payload['model']}') Invalid response structure - missing choices/content despite 200 OK: {data}"
            )
        return raw_text, data.get("usage")

    async def async_call_llm(
        self,
        prompt: str,
        model_name: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> tuple[str, dict[str, int] | None]:
        """Send ``prompt`` as a single user message and return ``(text, usage)``.

        HTTP failures propagate as ``httpx.HTTPStatusError``; retrying is the
        caller's concern (see ``call_llm_with_retries``).
        """
        if not self.api_key:
            raise LLMConfigurationError("GROQ_API_KEY is not configured.")

        model = model_name or self.model
        payload: dict[str, Any] = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": max_tokens if max_tokens is not None else settings.LLM_MAX_TOKENS,
            "temperature": (
                temperature if temperature is not None else settings.LLM_TEMPERATURE
            ),
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        logger.debug(
            f"Calling LLM '{model}'. Prompt chars: {len(prompt)}. "
            f"Max output tokens: {payload['max_tokens']}. Temp: {payload['temperature']}"
        )
        self.request_count += 1
        text, usage = await self._post_non_streaming(payload, headers)
        self._log_llm_usage(model, usage)
        return text, usage


async def call_llm_with_retries(
    client: LLMClient,
    prompt: str,
    *,
    clock: Clock,
    max_retries: int = 3,
    rate_limit_backoff: float = 30.0,
    error_backoff: float = 5.0,
    model: str | None = None,
) -> tuple[str, dict[str, int] | None]:
    """Call ``client`` up to ``max_retries + 1`` times.

    Empty or whitespace-only answers count as failures. Waits grow linearly
    with the attempt number; rate-limit errors use ``rate_limit_backoff``.
    The last exception is re-raised once attempts are exhausted.
    """
    attempts = max_retries + 1
    attempt = 0
    while True:
        attempt += 1
        try:
            text, usage = await client.async_call_llm(prompt, model_name=model)
            if not text or not text.strip():
                raise EmptyLLMResponseError("LLM returned an empty response.")
            return text, usage
        except LLMConfigurationError:
            raise
        except Exception as exc:
            if attempt >= attempts:
                logger.error(
                    f"LLM call failed after {attempts} attempts. Last error: {exc}"
                )
                raise
            rate_limited = is_rate_limit_error(exc)
            delay = (rate_limit_backoff if rate_limited else error_backoff) * attempt
            logger.warning(
                f"LLM call failed (Attempt {attempt}/{attempts}): {exc}. "
                f"Retrying in {delay:.0f}s.",
                rate_limited=rate_limited,
            )
            await clock.sleep(delay)
