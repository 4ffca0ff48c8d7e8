#!/usr/bin/env python3
"""Command line entry point for Hoarder -> Tana sync.

Usage:
    hoarder-sync full                 # walk the whole collection once
    hoarder-sync incremental          # one page from the stored cursor
    hoarder-sync test [--limit N]     # submit the first N bookmarks
    hoarder-sync status               # show cursor state and marker counts
    hoarder-sync daemon               # full sync, then incremental every interval
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import sys
from typing import TYPE_CHECKING, Any

from hoarder_sync.config import load_config
from hoarder_sync.core.logging_utils import setup_json_logging, shutdown_logging
from hoarder_sync.core.shutdown import ShutdownCoordinator, install_signal_handlers
from hoarder_sync.di.container import Container
from hoarder_sync.services.scheduler import SchedulerService

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from hoarder_sync.adapters.hoarder.models import SyncResult
    from hoarder_sync.adapters.hoarder.sync.service import BookmarkSyncService
    from hoarder_sync.config import AppConfig

logger = logging.getLogger("hoarder_sync")

COMMANDS = ("full", "incremental", "test", "status", "daemon")


class ShutdownRequested(Exception):
    """A signal arrived before the command finished."""


def print_result(result: SyncResult) -> None:
    print(f"\n=== {result.mode.capitalize()} Sync Summary ===")
    print(
        f"{result.items_synced} synced, {result.items_skipped} skipped, "
        f"{result.items_failed} failed over {result.pages} page(s)"
    )
    print(f"Next cursor: {result.next_cursor or '(end of collection)'}")
    print(f"Duration: {result.duration_seconds:.1f}s")
    if result.errors:
        print(f"\nErrors ({len(result.errors)}):")
        for err in result.errors[:10]:
            print(f"  - {err}")


def print_status(status: dict[str, Any]) -> None:
    print("\n=== Sync Status ===")
    print(f"State: {status['state']}")
    print(f"Cursor: {status['cursor'] or '-'}")
    print(f"Synced bookmarks: {status['synced_bookmarks']}")
    print(f"Synced URLs: {status['synced_urls']}")
    if "hoarder_reachable" in status:
        print(f"Hoarder API: {'reachable' if status['hoarder_reachable'] else 'unreachable'}")


async def _until_shutdown(awaitable: Awaitable[Any], coordinator: ShutdownCoordinator) -> Any:
    """Await *awaitable*, cancelling it if shutdown is requested first."""
    work = asyncio.ensure_future(awaitable)
    stop = asyncio.create_task(coordinator.requested.wait())
    try:
        await asyncio.wait({work, stop}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        stop.cancel()
    if not work.done():
        work.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await work
        raise ShutdownRequested
    return work.result()


async def _run_daemon(
    service: BookmarkSyncService, cfg: AppConfig, coordinator: ShutdownCoordinator
) -> int:
    try:
        print_result(await _until_shutdown(service.full_sync(), coordinator))
    except ShutdownRequested:
        raise
    except Exception as exc:
        # The scheduled incremental runs resume from the stored cursor.
        logger.error("daemon_initial_sync_failed", extra={"error": str(exc)})

    scheduler = SchedulerService(service, interval_sec=cfg.sync.interval_sec)
    await scheduler.start()
    try:
        await coordinator.requested.wait()
    finally:
        await scheduler.stop()
    return 0


async def run_command(
    command: str,
    *,
    limit: int | None = None,
    cfg: AppConfig | None = None,
    container_factory: Callable[[AppConfig], Container] = Container,
) -> int:
    """Run one CLI command and return the process exit code."""
    cfg = cfg or load_config()
    missing = cfg.missing_credentials()
    if missing:
        logger.error("missing_credentials", extra={"missing": missing})
        print(f"ERROR: missing required environment variables: {', '.join(missing)}")
        return 1

    exit_code = 0
    async with container_factory(cfg) as container:
        service = container.sync_service()
        coordinator = ShutdownCoordinator(
            service.cleanup, timeout=cfg.sync.shutdown_timeout_sec
        )
        install_signal_handlers(asyncio.get_running_loop(), coordinator)
        try:
            await _until_shutdown(service.initialize(), coordinator)
            if command == "daemon":
                exit_code = await _run_daemon(service, cfg, coordinator)
            elif command == "status":
                status = await _until_shutdown(service.sync_status(), coordinator)
                status["hoarder_reachable"] = await _until_shutdown(
                    container.hoarder_client().health_check(), coordinator
                )
                print_status(status)
                exit_code = 0 if status["hoarder_reachable"] else 1
            else:
                if command == "full":
                    work = service.full_sync()
                elif command == "incremental":
                    work = service.incremental_sync()
                else:
                    work = service.test_sync(limit)
                result = await _until_shutdown(work, coordinator)
                print_result(result)
                exit_code = 1 if result.items_failed else 0
        except ShutdownRequested:
            logger.warning("sync_interrupted", extra={"command": command})
            exit_code = 1
        except Exception as exc:
            logger.exception("sync_command_failed", extra={"command": command})
            print(f"\nERROR: {exc}")
            exit_code = 1
        finally:
            if not await coordinator.run():
                exit_code = 1
    return exit_code


def _positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        msg = f"invalid integer: {value!r}"
        raise argparse.ArgumentTypeError(msg) from exc
    if parsed < 1:
        msg = "must be at least 1"
        raise argparse.ArgumentTypeError(msg)
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hoarder-sync", description="Sync Hoarder bookmarks into Tana"
    )
    parser.add_argument("command", choices=COMMANDS, help="Sync mode to run")
    parser.add_argument(
        "--limit",
        type=_positive_int,
        default=None,
        help="Number of bookmarks for the test command (default: SYNC_TEST_LIMIT)",
    )
    return parser


async def _main(args: argparse.Namespace) -> int:
    try:
        cfg = load_config()
    except RuntimeError as exc:
        print(f"ERROR: {exc}")
        return 1

    setup_json_logging(
        cfg.runtime.log_level,
        log_file=cfg.runtime.log_file,
        serialize=cfg.runtime.log_json,
    )
    try:
        return await run_command(args.command, limit=args.limit, cfg=cfg)
    finally:
        await shutdown_logging()


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    sys.exit(asyncio.run(_main(args)))


if __name__ == "__main__":
    main()
