"""
Pooled outbound HTTP client.

One httpx.AsyncClient is shared by everything that leaves the process: the
Gemini ``generateContent`` calls and the HTML-to-PDF service. Callers pass
their own per-request timeout; the pool default is only a ceiling.

The application lifespan owns the pool:

    await http_client_manager.startup()
    ...
    await http_client_manager.shutdown()
"""

import logging
from typing import Optional

import httpx

from app.core.config import settings

logger = logging.getLogger("Plusnote.HTTP.Client")

USER_AGENT = "plusnote-health-journal/1.0"


class HTTPClientManager:
    """Owns the shared httpx.AsyncClient and its connection limits."""

    def __init__(
        self,
        max_connections: Optional[int] = None,
        max_keepalive_connections: Optional[int] = None,
        default_timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.limits = httpx.Limits(
            max_connections=max_connections or settings.HTTP_MAX_CONNECTIONS,
            max_keepalive_connections=max_keepalive_connections or settings.HTTP_MAX_KEEPALIVE,
        )
        # Ceiling for any single outbound call, whichever upstream it targets.
        self.default_timeout = default_timeout or max(
            settings.LLM_TIMEOUT_SECONDS, settings.PDF_TIMEOUT_SECONDS
        )
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def is_initialized(self) -> bool:
        return self._client is not None

    async def startup(self) -> None:
        if self._client is not None:
            return

        self._client = httpx.AsyncClient(
            limits=self.limits,
            timeout=httpx.Timeout(self.default_timeout),
            headers={"User-Agent": USER_AGENT},
            transport=self._transport,
        )
        logger.info(
            "Outbound HTTP pool ready",
            extra={
                "max_connections": self.limits.max_connections,
                "max_keepalive": self.limits.max_keepalive_connections,
                "timeout_seconds": self.default_timeout,
            },
        )

    async def shutdown(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("Outbound HTTP pool closed")

    async def get_client(self) -> httpx.AsyncClient:
        """The shared client, created on first use if the lifespan has not run."""
        if self._client is None:
            logger.warning("HTTP pool used before startup; creating it lazily")
            await self.startup()
        return self._client


http_client_manager = HTTPClientManager()
