"""Hoarder API client."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

import httpx

from hoarder_sync.adapters.hoarder.models import HoarderBookmarkPage
from hoarder_sync.core.backoff import backoff_delay

if TYPE_CHECKING:
    from typing import Self

logger = logging.getLogger(__name__)

# GETs are idempotent, so server errors and transport failures are retried too
RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})

DEFAULT_MAX_RETRIES = 3
DEFAULT_PAGE_SIZE = 100
_ERROR_BODY_LIMIT = 500


class HoarderClientError(Exception):
    """The Hoarder API rejected a request or could not be reached."""


def _is_transient(exc: httpx.HTTPError) -> bool:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS_CODES
    return isinstance(exc, httpx.TransportError)


def _rejection_message(exc: httpx.HTTPError) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        return (
            f"Hoarder rejected request ({exc.response.status_code}): "
            f"{exc.response.text[:_ERROR_BODY_LIMIT]}"
        )
    return f"Hoarder request failed: {exc}"


class HoarderClient:
    """Async HTTP client for the Hoarder REST API (``/api/v1``)."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 30.0,
        *,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_base_delay: float = 1.0,
        retry_max_delay: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize Hoarder client.

        Args:
            base_url: Hoarder instance URL (e.g., https://hoarder.example.com)
            api_key: API key for authentication
            timeout: Request timeout in seconds
            max_retries: Maximum number of retry attempts for transient failures
            retry_base_delay: Base delay between retries in seconds
            retry_max_delay: Maximum delay between retries in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.api_url = f"{self.base_url}/api/v1"
        self.api_key = api_key
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self.retry_max_delay = retry_max_delay
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> Self:
        self._client = httpx.AsyncClient(
            base_url=self.api_url,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            timeout=self.timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise HoarderClientError("Client not initialized. Use async context manager.")
        return self._client

    async def _get_json(self, path: str, params: dict[str, Any], *, operation: str) -> Any:
        attempt = 0
        while True:
            try:
                response = await self.client.get(path, params=params)
                response.raise_for_status()
                return response.json()
            except httpx.HTTPError as exc:
                if not _is_transient(exc):
                    raise HoarderClientError(_rejection_message(exc)) from exc
                if attempt >= self.max_retries:
                    logger.error(
                        "hoarder_retry_exhausted",
                        extra={"operation": operation, "attempts": attempt + 1, "error": str(exc)},
                    )
                    msg = f"{operation} failed after {attempt + 1} attempts: {exc}"
                    raise HoarderClientError(msg) from exc
                delay = backoff_delay(attempt, self.retry_base_delay, self.retry_max_delay)
                logger.warning(
                    "hoarder_retry_attempt",
                    extra={
                        "operation": operation,
                        "attempt": attempt + 1,
                        "delay_seconds": round(delay, 2),
                        "error": str(exc),
                    },
                )
                await asyncio.sleep(delay)
                attempt += 1

    async def get_bookmarks(
        self,
        cursor: str | None = None,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> HoarderBookmarkPage:
        """Get one page of bookmarks.

        Args:
            cursor: Opaque cursor returned by the previous page, None for the first page
            limit: Maximum number of bookmarks to return

        Returns:
            The page and the cursor of the next page (None when exhausted)
        """
        params: dict[str, Any] = {"limit": limit}
        if cursor:
            params["cursor"] = cursor

        data = await self._get_json("/bookmarks", params, operation="get_bookmarks")
        page = HoarderBookmarkPage.model_validate(data)
        logger.debug(
            "hoarder_page_fetched",
            extra={
                "count": len(page.bookmarks),
                "has_cursor": cursor is not None,
                "has_next": page.next_cursor is not None,
            },
        )
        return page

    def archive_url_for(self, asset_id: str) -> str:
        """URL of the full-page archive viewer for *asset_id* (no request is made)."""
        return f"{self.base_url}/archive/{asset_id}"

    async def health_check(self) -> bool:
        """Check if the Hoarder API is accessible."""
        try:
            await self.get_bookmarks(limit=1)
            return True
        except HoarderClientError as e:
            logger.warning("hoarder_health_check_failed", extra={"error": str(e)})
            return False
