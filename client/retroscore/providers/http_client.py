import asyncio
import logging
from typing import Any, Optional
from urllib.parse import urlparse

import httpx

from retroscore.errors import NetworkError, ServerError
from retroscore.middleware.logging import event_hooks

logger = logging.getLogger("retroscore.http_client")

# Retryable HTTP status codes
_RETRYABLE_STATUSES = {429, 500, 502, 503, 504}


def _parse_retry_after(response: httpx.Response) -> Optional[float]:
    """Extract wait time from Retry-After or X-RateLimit-Retry-After headers."""
    for header in ("retry-after", "x-ratelimit-retry-after"):
        value = response.headers.get(header)
        if value is None:
            continue
        try:
            return float(value)
        except (ValueError, TypeError):
            continue
    return None


def _safe_url(url: str) -> str:
    """Strip query params for safe logging."""
    parsed = urlparse(str(url))
    if not parsed.netloc:
        return parsed.path
    return f"{parsed.scheme}://{parsed.netloc}{parsed.path}"


def _error_detail(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text[:500]


class ResilientClient:
    """httpx.AsyncClient wrapper that maps failures onto NetworkError / ServerError.

    Retries with exponential backoff only when ``max_retries`` > 0. The game
    API runs with zero retries: a failed guess goes back to the session, which
    owns the retry decision.
    """

    def __init__(
        self,
        name: str,
        base_url: str = "",
        timeout: float = 10.0,
        max_retries: int = 0,
        base_delay: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
            event_hooks=event_hooks(),
        )
        self._name = name
        self._max_retries = max(0, int(max_retries))
        self._base_delay = base_delay

    async def request(
        self,
        method: str,
        url: str,
        *,
        token: Optional[str] = None,
        **kwargs,
    ) -> httpx.Response:
        """Execute a request, returning only 2xx responses."""
        headers = dict(kwargs.pop("headers", None) or {})
        if token:
            headers["Authorization"] = f"Bearer {token}"

        for attempt in range(self._max_retries + 1):
            last_try = attempt >= self._max_retries
            try:
                resp = await self._client.request(method, url, headers=headers, **kwargs)
            except httpx.TransportError as exc:
                logger.warning(
                    "[%s] Network error on %s %s (attempt %d/%d): %s",
                    self._name, method, _safe_url(url),
                    attempt + 1, self._max_retries + 1, exc,
                )
                if last_try:
                    raise NetworkError(f"{method} {_safe_url(url)} failed: {exc}") from exc
                await asyncio.sleep(self._base_delay * (2 ** attempt))
                continue

            if resp.is_success:
                return resp

            if resp.status_code not in _RETRYABLE_STATUSES or last_try:
                logger.error(
                    "[%s] %s %s returned %d",
                    self._name, method, _safe_url(url), resp.status_code,
                )
                raise ServerError(
                    f"{method} {_safe_url(url)} returned {resp.status_code}",
                    status_code=resp.status_code,
                    detail=_error_detail(resp),
                )

            logger.warning(
                "[%s] Server error %d on %s %s (attempt %d/%d)",
                self._name, resp.status_code, method, _safe_url(url),
                attempt + 1, self._max_retries + 1,
            )
            delay = _parse_retry_after(resp)
            if delay is None:
                delay = self._base_delay * (2 ** attempt)
            # Cap delay at 60s
            await asyncio.sleep(min(delay, 60.0))

        raise AssertionError("unreachable")  # pragma: no cover

    async def get(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def patch(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("PATCH", url, **kwargs)

    async def aclose(self) -> None:
        await self._client.aclose()
