"""Tana Input API client."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Any

import httpx

from hoarder_sync.config.integrations import TANA_INPUT_API_URL
from hoarder_sync.core.backoff import backoff_delay

if TYPE_CHECKING:
    from typing import Self

    from hoarder_sync.adapters.tana.models import PlainNode

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 3
_ERROR_BODY_LIMIT = 500


class TanaClientError(Exception):
    """The Input API rejected a request or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TanaRetryableError(TanaClientError):
    """Rate limited or temporarily unavailable."""


class TanaClient:
    """Async client that creates nodes through the Tana Input API.

    Only requests that certainly did not create a node are retried: HTTP 429
    responses and connection failures before the request was sent. Server
    errors and read timeouts are raised, since retrying them could create the
    same node twice.
    """

    def __init__(
        self,
        api_token: str,
        *,
        api_url: str = TANA_INPUT_API_URL,
        target_node_id: str | None = None,
        timeout: float = 30.0,
        min_request_interval: float = 1.0,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_base_delay: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_url = api_url
        self.api_token = api_token
        self.target_node_id = target_node_id
        self.timeout = timeout
        self.min_request_interval = min_request_interval
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._throttle_lock = asyncio.Lock()
        self._last_request_at: float | None = None

    async def __aenter__(self) -> Self:
        self._client = httpx.AsyncClient(
            headers={
                "Authorization": f"Bearer {self.api_token}",
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
            raise TanaClientError("Client not initialized. Use async context manager.")
        return self._client

    async def _throttle(self) -> None:
        """Keep at least ``min_request_interval`` seconds between requests."""
        async with self._throttle_lock:
            if self._last_request_at is not None and self.min_request_interval > 0:
                wait = self._last_request_at + self.min_request_interval - time.monotonic()
                if wait > 0:
                    await asyncio.sleep(wait)
            self._last_request_at = time.monotonic()

    def _build_payload(self, node: PlainNode) -> dict[str, Any]:
        payload: dict[str, Any] = {"nodes": [node.as_api_payload()]}
        if self.target_node_id:
            payload["targetNodeId"] = self.target_node_id
        return payload

    async def _post_once(self, payload: dict[str, Any]) -> dict[str, Any]:
        await self._throttle()
        try:
            response = await self.client.post(self.api_url, json=payload)
        except httpx.ConnectError as exc:
            msg = f"Could not connect to Tana: {exc}"
            raise TanaRetryableError(msg) from exc
        except httpx.HTTPError as exc:
            msg = f"Tana request failed: {exc}"
            raise TanaClientError(msg) from exc

        if response.status_code == 429:
            msg = "Tana rate limit exceeded"
            raise TanaRetryableError(msg, status_code=429)
        if response.is_error:
            msg = (
                f"Tana rejected node ({response.status_code}): "
                f"{response.text[:_ERROR_BODY_LIMIT]}"
            )
            raise TanaClientError(msg, status_code=response.status_code)

        try:
            return response.json()
        except ValueError:
            return {}

    async def create_node(self, node: PlainNode) -> dict[str, Any]:
        """Create *node* (with its fields) under the configured target node.

        Returns:
            The decoded API response (empty dict when the body is not JSON)

        Raises:
            TanaClientError: If the node was rejected or retries are exhausted
        """
        payload = self._build_payload(node)
        attempt = 0
        while True:
            try:
                result = await self._post_once(payload)
            except TanaRetryableError as exc:
                if attempt >= self.max_retries:
                    logger.error(
                        "tana_retry_exhausted",
                        extra={"attempts": attempt + 1, "error": str(exc)},
                    )
                    raise
                delay = backoff_delay(attempt, self.retry_base_delay)
                logger.warning(
                    "tana_retry_attempt",
                    extra={
                        "attempt": attempt + 1,
                        "max_retries": self.max_retries,
                        "delay_seconds": round(delay, 2),
                        "error": str(exc),
                    },
                )
                await asyncio.sleep(delay)
                attempt += 1
                continue

            logger.debug("tana_node_created", extra={"node_name": node.name[:100]})
            return result
