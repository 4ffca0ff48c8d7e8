"""Graceful shutdown coordination for the sync process."""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from asyncio import AbstractEventLoop
    from collections.abc import Awaitable, Callable, Iterable

logger = logging.getLogger(__name__)


class ShutdownCoordinator:
    """Runs the cleanup coroutine at most once, bounded by a timeout."""

    def __init__(self, cleanup: Callable[[], Awaitable[None]], *, timeout: float) -> None:
        self._cleanup = cleanup
        self._timeout = timeout
        self._task: asyncio.Task[bool] | None = None
        self._requested = asyncio.Event()

    @property
    def requested(self) -> asyncio.Event:
        """Set once a shutdown has been requested (signal or explicit call)."""
        return self._requested

    def request(self, reason: str = "requested") -> None:
        """Request shutdown from a signal handler. Safe to call multiple times."""
        if not self._requested.is_set():
            logger.info("shutdown_requested", extra={"reason": reason})
        self._requested.set()

    async def run(self) -> bool:
        """Run cleanup once and return whether it finished within the timeout.

        Concurrent and repeated callers share the result of the first run.
        """
        if self._task is None:
            self._task = asyncio.create_task(self._run())
        return await asyncio.shield(self._task)

    async def _run(self) -> bool:
        try:
            await asyncio.wait_for(self._cleanup(), timeout=self._timeout)
        except TimeoutError:
            logger.error("shutdown_cleanup_timeout", extra={"timeout_sec": self._timeout})
            return False
        except Exception:
            logger.exception("shutdown_cleanup_failed")
            return False
        logger.info("shutdown_cleanup_complete")
        return True


def install_signal_handlers(
    loop: AbstractEventLoop,
    coordinator: ShutdownCoordinator,
    *,
    signals: Iterable[signal.Signals] = (signal.SIGINT, signal.SIGTERM),
) -> None:
    """Install OS signal handlers that request shutdown through the coordinator."""
    for sig in signals:
        try:
            loop.add_signal_handler(sig, coordinator.request, sig.name)
        except NotImplementedError:  # pragma: no cover
            # Windows / limited event loops may not support signal handlers.
            logger.warning("signal_handlers_unsupported", extra={"signal": str(sig)})
