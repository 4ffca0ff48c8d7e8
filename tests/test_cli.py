"""End-to-end tests for the sync command line over mocked HTTP and Redis."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import httpx
import pytest

from conftest import fake_redis_factory
from hoarder_sync.cli import sync as cli
from hoarder_sync.config import load_config
from hoarder_sync.di.container import Container


def _bookmark(bookmark_id: str) -> dict:
    return {
        "id": bookmark_id,
        "createdAt": "2024-05-01T10:00:00.000Z",
        "tags": [],
        "content": {"type": "link", "url": f"https://example.com/{bookmark_id}", "title": bookmark_id},
    }


def hoarder_handler(request: httpx.Request) -> httpx.Response:
    if request.url.params.get("cursor") == "page-2":
        return httpx.Response(200, json={"bookmarks": [_bookmark("b3")], "nextCursor": None})
    return httpx.Response(
        200, json={"bookmarks": [_bookmark("b1"), _bookmark("b2")], "nextCursor": "page-2"}
    )


class TanaRecorder:
    def __init__(self, fail_names: set[str] | None = None) -> None:
        self.names: list[str] = []
        self.fail_names = fail_names or set()

    def __call__(self, request: httpx.Request) -> httpx.Response:
        name = json.loads(request.content)["nodes"][0]["name"]
        if name in self.fail_names:
            return httpx.Response(400, text="invalid node")
        self.names.append(name)
        return httpx.Response(200, json={})


@pytest.fixture
def cfg(tmp_path, monkeypatch: pytest.MonkeyPatch):
    for name in ("HOARDER_BASE_URL", "HOARDER_API_KEY", "TANA_API_TOKEN", "SYNC_BACKUP_DIR"):
        monkeypatch.delenv(name, raising=False)
    return load_config(
        hoarder={"base_url": "https://hoarder.test", "api_key": "hk"},
        tana={"api_token": "tk", "min_request_interval_sec": 0},
        sync={"backup_dir": str(tmp_path / "backup"), "batch_size": 2},
    )


@pytest.fixture
def signals(monkeypatch: pytest.MonkeyPatch) -> list:
    """Capture coordinators instead of installing real signal handlers."""
    captured: list = []
    monkeypatch.setattr(
        cli, "install_signal_handlers", lambda loop, coordinator: captured.append(coordinator)
    )
    return captured


def _factory(tana: TanaRecorder, hoarder=hoarder_handler):
    server_factory = fake_redis_factory()

    def build(cfg) -> Container:
        return Container(
            cfg,
            redis_factory=server_factory,
            hoarder_transport=httpx.MockTransport(hoarder),
            tana_transport=httpx.MockTransport(tana),
        )

    return build


@pytest.mark.asyncio
async def test_missing_credentials_exit_code(monkeypatch, capsys, signals) -> None:
    for name in ("HOARDER_BASE_URL", "HOARDER_API_KEY", "TANA_API_TOKEN"):
        monkeypatch.delenv(name, raising=False)

    code = await cli.run_command("full", cfg=load_config())

    assert code == 1
    assert "HOARDER_BASE_URL" in capsys.readouterr().out
    assert signals == []


@pytest.mark.asyncio
async def test_full_sync_command(cfg, signals, capsys) -> None:
    tana = TanaRecorder()

    code = await cli.run_command("full", cfg=cfg, container_factory=_factory(tana))

    assert code == 0
    assert tana.names == ["b1", "b2", "b3"]
    snapshot_path = Path(cfg.sync.backup_dir) / "cache-backup.json"
    snapshot = json.loads(snapshot_path.read_text(encoding="utf-8"))
    assert snapshot["last_cursor"] is None
    assert "3 synced" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_full_sync_failure_exit_code(cfg, signals) -> None:
    tana = TanaRecorder(fail_names={"b2"})

    code = await cli.run_command("full", cfg=cfg, container_factory=_factory(tana))

    assert code == 1
    assert tana.names == ["b1"]


@pytest.mark.asyncio
async def test_test_command_reports_failures(cfg, signals) -> None:
    tana = TanaRecorder(fail_names={"b1"})

    code = await cli.run_command("test", limit=2, cfg=cfg, container_factory=_factory(tana))

    assert code == 1
    assert tana.names == ["b2"]


@pytest.mark.asyncio
async def test_status_command(cfg, signals, capsys) -> None:
    code = await cli.run_command("status", cfg=cfg, container_factory=_factory(TanaRecorder()))

    assert code == 0
    out = capsys.readouterr().out
    assert "State: never_synced" in out
    assert "Hoarder API: reachable" in out


@pytest.mark.asyncio
async def test_status_command_reports_unreachable_hoarder(cfg, signals, capsys) -> None:
    def rejecting(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, text="bad key")

    code = await cli.run_command(
        "status", cfg=cfg, container_factory=_factory(TanaRecorder(), rejecting)
    )

    assert code == 1
    assert "Hoarder API: unreachable" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_daemon_runs_until_shutdown(cfg, monkeypatch) -> None:
    tana = TanaRecorder()

    def install(loop, coordinator) -> None:
        loop.call_later(0.2, coordinator.request, "test")

    monkeypatch.setattr(cli, "install_signal_handlers", install)

    code = await asyncio.wait_for(
        cli.run_command("daemon", cfg=cfg, container_factory=_factory(tana)), timeout=5
    )

    assert code == 0
    assert tana.names == ["b1", "b2", "b3"]


@pytest.mark.asyncio
async def test_shutdown_interrupts_running_command(cfg, monkeypatch) -> None:
    async def stalled_hoarder(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(30)
        return httpx.Response(200, json={"bookmarks": []})

    def install(loop, coordinator) -> None:
        loop.call_later(0.1, coordinator.request, "test")

    monkeypatch.setattr(cli, "install_signal_handlers", install)

    code = await asyncio.wait_for(
        cli.run_command(
            "full", cfg=cfg, container_factory=_factory(TanaRecorder(), stalled_hoarder)
        ),
        timeout=5,
    )

    assert code == 1


def test_parser_rejects_unknown_command() -> None:
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["sideways"])


@pytest.mark.parametrize("value", ["0", "-3", "many"])
def test_parser_rejects_non_positive_limit(value: str) -> None:
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["test", "--limit", value])


def test_parser_accepts_positive_limit() -> None:
    assert cli.build_parser().parse_args(["test", "--limit", "3"]).limit == 3
