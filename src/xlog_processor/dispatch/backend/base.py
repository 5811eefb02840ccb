"""Command execution interface for the dispatch engine."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol


@dataclass(slots=True)
class CommandRunRequest:
    """Inputs required to execute one expanded process command."""

    command: str
    shell: str = "/bin/sh"
    shutdown_requested: Callable[[], bool] | None = None
    graceful_shutdown_seconds: float = 2.0


@dataclass(slots=True)
class CommandRunResult:
    """Execution outcome from a command runner."""

    exit_code: int
    stderr: bytes = b""
    cancelled: bool = False

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0 and not self.cancelled


class CommandRunner(Protocol):
    """Protocol implemented by command runners."""

    def run(self, request: CommandRunRequest) -> CommandRunResult:
        """Run one command to completion or cancellation."""
