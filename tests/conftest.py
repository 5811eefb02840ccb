"""Shared test fixtures."""

from __future__ import annotations

import threading
from collections.abc import Callable
from pathlib import Path

import pytest

from xlog_processor.dispatch.backend import CommandRunRequest, CommandRunResult

SEGMENTS = (
    "000000010000000000000001",
    "000000010000000000000002",
    "000000010000000000000003",
)


class RecordingRunner:
    """In-memory command runner that records every command it is asked to run."""

    def __init__(
        self,
        *,
        failing: frozenset[str] = frozenset(),
        on_run: Callable[[CommandRunRequest], None] | None = None,
    ) -> None:
        self.failing = failing
        self.on_run = on_run
        self.commands: list[str] = []
        self._lock = threading.Lock()

    def run(self, request: CommandRunRequest) -> CommandRunResult:
        with self._lock:
            self.commands.append(request.command)
        if self.on_run is not None:
            self.on_run(request)
        if request.command in self.failing:
            return CommandRunResult(exit_code=3, stderr=b"disk full\n")
        return CommandRunResult(exit_code=0)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (
        "XLOG_PROCESSOR_WORKERS",
        "XLOG_PROCESSOR_SHELL",
        "XLOG_PROCESSOR_GRACEFUL_SHUTDOWN_SECONDS",
        "XLOG_PROCESSOR_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def xlog_dir(tmp_path: Path) -> Path:
    """Archive directory with three segments plus the noise pg_receivexlog leaves around."""

    archive = tmp_path / "xlog"
    archive.mkdir()
    for name in SEGMENTS:
        (archive / name).write_bytes(b"")
    (archive / "000000010000000000000004.partial").write_bytes(b"")
    (archive / "00000001.history").write_bytes(b"")
    return archive
