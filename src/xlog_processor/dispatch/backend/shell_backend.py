"""Subprocess-based runner executing process commands through a shell."""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import tempfile
import time

from xlog_processor.dispatch.backend.base import CommandRunRequest, CommandRunResult
from xlog_processor.errors import CommandRunError

logger = logging.getLogger(__name__)

_POLL_INTERVAL_SECONDS = 0.05


class ShellCommandRunner:
    """Run ``<shell> -c <command>``, capturing stderr and inheriting stdout."""

    def __init__(self, *, poll_interval_seconds: float = _POLL_INTERVAL_SECONDS) -> None:
        self.poll_interval_seconds = poll_interval_seconds

    def run(self, request: CommandRunRequest) -> CommandRunResult:
        # stderr goes to a spooled file so a chatty command cannot fill the pipe while we poll
        with tempfile.TemporaryFile() as stderr_handle:
            try:
                process = subprocess.Popen(  # noqa: S603
                    [request.shell, "-c", request.command],
                    stdin=subprocess.DEVNULL,
                    stderr=stderr_handle,
                    start_new_session=True,
                )
            except OSError as error:
                raise CommandRunError(
                    f"could not start {request.shell!r}: {error}",
                ) from error

            cancelled = self._wait(process, request)
            stderr_handle.seek(0)
            stderr = stderr_handle.read()

        return CommandRunResult(
            exit_code=process.returncode if process.returncode is not None else -1,
            stderr=stderr,
            cancelled=cancelled,
        )

    def _wait(self, process: subprocess.Popen[bytes], request: CommandRunRequest) -> bool:
        shutdown_requested = request.shutdown_requested
        if shutdown_requested is None:
            process.wait()
            return False

        while process.poll() is None:
            if shutdown_requested():
                logger.debug("Terminating in-flight command (pid %d)", process.pid)
                _terminate_process(process, grace_seconds=request.graceful_shutdown_seconds)
                return True
            time.sleep(self.poll_interval_seconds)
        return False


def _terminate_process(process: subprocess.Popen[bytes], *, grace_seconds: float) -> None:
    # the command runs in its own session, so signal the whole group to reach forked children
    if not _signal_group(process, signal.SIGTERM):
        return
    try:
        process.wait(timeout=grace_seconds)
    except subprocess.TimeoutExpired:
        if not _signal_group(process, signal.SIGKILL):
            return
        process.wait(timeout=grace_seconds or None)
    _signal_group(process, signal.SIGKILL)


def _signal_group(process: subprocess.Popen[bytes], signum: int) -> bool:
    try:
        os.killpg(process.pid, signum)
    except ProcessLookupError:
        return False
    except OSError:
        try:
            process.send_signal(signum)
        except OSError:
            return False
    return True
