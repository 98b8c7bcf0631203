"""
Generative text client used for pattern analysis, reports and chat.

Two providers sit behind the same ``generate(parts, config)`` call:

* ``GeminiClient`` - Google Gemini ``generateContent`` REST endpoint over
  the shared pooled httpx client.
* ``ClaudeClient`` - Anthropic Messages API via the official SDK.

Both fail fast with ConfigurationError when the API key is missing, impose
an explicit timeout on every call and retry transient failures (5xx, 429,
timeouts, connection errors) a bounded number of times with exponential
backoff. Anything else surfaces as UpstreamServiceError.
"""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import httpx
from anthropic import APIConnectionError, APIStatusError, AsyncAnthropic

from app.core.config import settings
from app.core.logging_utils import log_llm_usage
from app.core.tracing import traced
from app.shared.correlation import propagate_correlation_headers
from app.shared.errors import ConfigurationError, EmptyCompletionError, UpstreamServiceError
from app.services.http_client import http_client_manager

logger = logging.getLogger("Plusnote.Generative")


@dataclass(frozen=True)
class GenerationConfig:
    """Sampling configuration for one generation call."""
    temperature: float
    top_k: int
    top_p: float
    max_output_tokens: int


# Low temperature and a single top-k candidate keep the JSON analysis stable.
ANALYSIS_CONFIG = GenerationConfig(temperature=0.3, top_k=1, top_p=1.0, max_output_tokens=1000)
REPORT_CONFIG = GenerationConfig(temperature=0.3, top_k=40, top_p=0.95, max_output_tokens=2048)
CHAT_CONFIG = GenerationConfig(temperature=0.7, top_k=40, top_p=0.95, max_output_tokens=300)

SAFETY_CATEGORIES = [
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
]
SAFETY_THRESHOLD = "BLOCK_MEDIUM_AND_ABOVE"


@dataclass
class GenerationResult:
    """Text returned by the generative endpoint plus usage bookkeeping."""
    text: str
    model: str
    input_tokens: int = 0
    output_tokens: int = 0
    attempts: int = 1


def _is_retryable_status(status_code: int) -> bool:
    return status_code == 429 or status_code >= 500


class GenerativeClient(ABC):
    """Base class implementing the timeout/retry/usage-logging envelope."""

    provider = "generative"

    def __init__(
        self,
        model: str,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_backoff: Optional[float] = None,
    ) -> None:
        self.model = model
        self.timeout = timeout if timeout is not None else settings.LLM_TIMEOUT_SECONDS
        self.max_retries = max_retries if max_retries is not None else settings.LLM_MAX_RETRIES
        self.retry_backoff = retry_backoff if retry_backoff is not None else settings.LLM_RETRY_BACKOFF_SECONDS

    @abstractmethod
    def _ensure_configured(self) -> None:
        """Raise ConfigurationError when the client cannot make calls."""

    @abstractmethod
    async def _generate_once(self, parts: Sequence[str], config: GenerationConfig) -> GenerationResult:
        """One attempt, no retries. Transient failures raise a retryable UpstreamServiceError."""

    async def generate(
        self,
        parts: Sequence[str],
        config: GenerationConfig,
        purpose: str = "unknown",
    ) -> GenerationResult:
        """
        Generate text for the given prompt parts.

        Args:
            parts: Prompt text parts, in order
            config: Sampling configuration
            purpose: Label for usage logging ('analysis', 'report', 'chat')

        Returns:
            GenerationResult with the candidate text

        Raises:
            ConfigurationError: The API key is missing (no network call is made)
            UpstreamServiceError: The endpoint failed after all retries
        """
        self._ensure_configured()

        started = time.monotonic()
        with traced(
            "llm.generate", **{"llm.provider": self.provider, "llm.model": self.model, "llm.purpose": purpose}
        ) as span:
            attempt = 0
            while True:
                attempt += 1
                try:
                    result = await self._generate_once(parts, config)
                    break
                except UpstreamServiceError as exc:
                    if not exc.retryable or attempt > self.max_retries:
                        logger.error(
                            "%s generation failed after %d attempt(s): %s",
                            self.provider, attempt, exc.message,
                        )
                        raise
                    delay = self.retry_backoff * (2 ** (attempt - 1))
                    logger.warning(
                        "%s generation attempt %d failed (%s), retrying in %.2fs",
                        self.provider, attempt, exc.message, delay,
                    )
                    await asyncio.sleep(delay)

            result.attempts = attempt
            span.set_attribute("llm.attempts", attempt)
            span.set_attribute("llm.output_tokens", result.output_tokens)

        log_llm_usage(
            provider=self.provider,
            model=result.model,
            input_tokens=result.input_tokens,
            output_tokens=result.output_tokens,
            duration_ms=int((time.monotonic() - started) * 1000),
            attempts=attempt,
            purpose=purpose,
        )
        return result


# =============================================================================
# GEMINI
# =============================================================================

class GeminiClient(GenerativeClient):
    """Google Gemini ``generateContent`` over REST."""

    provider = "gemini"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        api_base: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(model=model or settings.GEMINI_MODEL, **kwargs)
        self.api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self.api_base = (api_base or settings.GEMINI_API_BASE).rstrip("/")
        self._http_client = http_client

    def _ensure_configured(self) -> None:
        if not self.api_key:
            raise ConfigurationError("Gemini API key not configured")

    @property
    def endpoint(self) -> str:
        return f"{self.api_base}/models/{self.model}:generateContent"

    def build_payload(self, parts: Sequence[str], config: GenerationConfig) -> Dict[str, Any]:
        """Build the ``generateContent`` request body."""
        return {
            "contents": [{"parts": [{"text": part} for part in parts]}],
            "generationConfig": {
                "temperature": config.temperature,
                "topK": config.top_k,
                "topP": config.top_p,
                "maxOutputTokens": config.max_output_tokens,
            },
            "safetySettings": [
                {"category": category, "threshold": SAFETY_THRESHOLD}
                for category in SAFETY_CATEGORIES
            ],
        }

    async def _generate_once(self, parts: Sequence[str], config: GenerationConfig) -> GenerationResult:
        client = self._http_client or await http_client_manager.get_client()
        headers = propagate_correlation_headers({
            "Content-Type": "application/json",
            "x-goog-api-key": self.api_key,
        })

        try:
            response = await client.post(
                self.endpoint,
                json=self.build_payload(parts, config),
                headers=headers,
                timeout=self.timeout,
            )
        except httpx.TimeoutException as exc:
            raise UpstreamServiceError(
                "Gemini API request timed out", service=self.provider, retryable=True
            ) from exc
        except httpx.TransportError as exc:
            raise UpstreamServiceError(
                f"Gemini API connection failed: {exc}", service=self.provider, retryable=True
            ) from exc

        if response.is_error:
            raise UpstreamServiceError(
                f"Gemini API error: {_gemini_error_message(response)}",
                service=self.provider,
                upstream_status=response.status_code,
                retryable=_is_retryable_status(response.status_code),
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamServiceError(
                "Gemini API returned a non-JSON body",
                service=self.provider,
                upstream_status=response.status_code,
            ) from exc

        text = _gemini_candidate_text(data)
        if not text:
            block_reason = (data.get("promptFeedback") or {}).get("blockReason")
            logger.warning("Gemini response without candidate text (block reason: %s)", block_reason or "none")
            raise EmptyCompletionError(
                "Gemini API returned no candidate text",
                service=self.provider,
                upstream_status=response.status_code,
            )

        usage = data.get("usageMetadata") or {}
        return GenerationResult(
            text=text,
            model=data.get("modelVersion") or self.model,
            input_tokens=usage.get("promptTokenCount", 0),
            output_tokens=usage.get("candidatesTokenCount", 0),
        )


def _gemini_error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return error["message"]
    return f"HTTP {response.status_code}"


def _gemini_candidate_text(data: Dict[str, Any]) -> str:
    candidates = data.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(part.get("text", "") for part in parts if isinstance(part, dict))


# =============================================================================
# CLAUDE
# =============================================================================

class ClaudeClient(GenerativeClient):
    """
    Anthropic Messages API.

    With more than one prompt part, the first part becomes the system prompt
    and the rest form the user turn. SDK-level retries are disabled so the
    retry policy above applies uniformly across providers.
    """

    provider = "anthropic"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        client: Optional[AsyncAnthropic] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(model=model or settings.CLAUDE_MODEL, **kwargs)
        self.api_key = api_key if api_key is not None else settings.ANTHROPIC_API_KEY
        self._client = client

    def _ensure_configured(self) -> None:
        if not self.api_key and self._client is None:
            raise ConfigurationError("Anthropic API key not configured")

    @property
    def client(self) -> AsyncAnthropic:
        if self._client is None:
            self._client = AsyncAnthropic(api_key=self.api_key, max_retries=0, timeout=self.timeout)
        return self._client

    async def _generate_once(self, parts: Sequence[str], config: GenerationConfig) -> GenerationResult:
        request: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": config.max_output_tokens,
            "temperature": config.temperature,
            "top_k": config.top_k,
        }
        if len(parts) > 1:
            request["system"] = parts[0]
            user_text = "\n\n".join(parts[1:])
        else:
            user_text = parts[0] if parts else ""
        request["messages"] = [{"role": "user", "content": user_text}]

        try:
            message = await self.client.messages.create(**request)
        except APIStatusError as exc:
            raise UpstreamServiceError(
                f"Claude API error: {exc.message}",
                service=self.provider,
                upstream_status=exc.status_code,
                retryable=_is_retryable_status(exc.status_code),
            ) from exc
        except APIConnectionError as exc:
            # Also covers APITimeoutError
            raise UpstreamServiceError(
                f"Claude API connection failed: {exc}", service=self.provider, retryable=True
            ) from exc

        texts: List[str] = [
            block.text for block in message.content if getattr(block, "type", None) == "text"
        ]
        text = "".join(texts)
        if not text:
            raise EmptyCompletionError("Claude API returned no text content", service=self.provider)

        usage = getattr(message, "usage", None)
        return GenerationResult(
            text=text,
            model=getattr(message, "model", None) or self.model,
            input_tokens=getattr(usage, "input_tokens", 0) or 0,
            output_tokens=getattr(usage, "output_tokens", 0) or 0,
        )


def create_generative_client(provider: Optional[str] = None) -> GenerativeClient:
    """Build the client for the configured LLM provider."""
    provider = (provider or settings.LLM_PROVIDER).lower()
    if provider == "gemini":
        return GeminiClient()
    if provider in ("anthropic", "claude"):
        return ClaudeClient()
    raise ConfigurationError(f"Unknown LLM provider: {provider}")
