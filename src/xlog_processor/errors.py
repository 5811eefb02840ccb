"""Error taxonomy for archive processing runs.

Every error here is fatal for the run: the CLI reports it and exits with status 1.
"""

from __future__ import annotations

from pathlib import Path


class XlogProcessorError(RuntimeError):
    """Base error for xlog-processor."""


class ListingFailure(XlogProcessorError):
    """Archive directory could not be opened or read."""

    def __init__(self, directory: Path, reason: str) -> None:
        super().__init__(f"could not read directory {directory}: {reason}")
        self.directory = directory
        self.reason = reason


class TemplateError(XlogProcessorError, ValueError):
    """Process command template could not be expanded."""


class UnrecognizedVerbError(TemplateError):
    def __init__(self, verb: str) -> None:
        super().__init__(f"unrecognized format verb {verb!r}")
        self.verb = verb


class UnterminatedVerbError(TemplateError):
    def __init__(self) -> None:
        super().__init__("unterminated format verb")


class OrderingDefect(XlogProcessorError):
    """Two segment names in one listing compare equal."""

    def __init__(self, filename: str) -> None:
        super().__init__(f"duplicate segment {filename} in directory listing")
        self.filename = filename


class CommandRunError(XlogProcessorError):
    """Process command could not be started at all."""


class CommandFailure(XlogProcessorError):
    """Process command exited with a non-zero status."""

    def __init__(self, filename: str, exit_code: int, stderr: bytes = b"") -> None:
        super().__init__(f"process command failed for {filename}: exit status {exit_code}")
        self.filename = filename
        self.exit_code = exit_code
        self.stderr = stderr


class DispatchInterrupted(XlogProcessorError):
    """Dispatch was stopped by a termination signal."""

    def __init__(self, signal_name: str) -> None:
        super().__init__(f"dispatch interrupted by {signal_name}")
        self.signal_name = signal_name
