"""Outbound HTTP client used by the mail provider."""

from typing import Any, Optional

import httpx

from shared.logging import get_logger

log = get_logger(__name__)


class HttpClient:
    """Async wrapper around httpx.AsyncClient.

    Every request carries the configured User-Agent. Transport errors are
    logged with the target host and then re-raised to the caller.
    """

    def __init__(self, timeout: float = 10.0, user_agent: Optional[str] = None) -> None:
        headers = {"User-Agent": user_agent} if user_agent else None
        self._client = httpx.AsyncClient(timeout=timeout, headers=headers)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._client.post(url, **kwargs)
        except httpx.HTTPError as e:
            log.warning(
                "http_request_failed",
                method="POST",
                host=httpx.URL(url).host,
                error_type=type(e).__name__,
            )
            raise

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()
