"""Command runner implementations."""

from xlog_processor.dispatch.backend.base import CommandRunner, CommandRunRequest, CommandRunResult
from xlog_processor.dispatch.backend.shell_backend import ShellCommandRunner

__all__ = [
    "CommandRunRequest",
    "CommandRunResult",
    "CommandRunner",
    "ShellCommandRunner",
]
