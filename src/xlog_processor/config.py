"""Runtime configuration for archive processing."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(slots=True)
class DispatchSettings:
    """Dispatch engine settings."""

    workers: int = 1
    dry_run: bool = False
    shell: str = "/bin/sh"
    graceful_shutdown_seconds: float = 2.0


@dataclass(slots=True)
class LoggingSettings:
    """Diagnostics written to stderr."""

    level: str = "WARNING"
    format: str = "%(asctime)s %(levelname)s %(message)s"


@dataclass(slots=True)
class Settings:
    """Application settings grouped by domain concerns."""

    dispatch: DispatchSettings = field(default_factory=DispatchSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment with defaults matching the CLI."""

        return cls(
            dispatch=DispatchSettings(
                workers=_env_int("XLOG_PROCESSOR_WORKERS", 1),
                shell=os.getenv("XLOG_PROCESSOR_SHELL", "/bin/sh"),
                graceful_shutdown_seconds=_env_float(
                    "XLOG_PROCESSOR_GRACEFUL_SHUTDOWN_SECONDS",
                    2.0,
                ),
            ),
            logging=LoggingSettings(
                level=os.getenv("XLOG_PROCESSOR_LOG_LEVEL", "WARNING").strip().upper(),
            ),
        )

    def with_overrides(
        self,
        *,
        workers: int | None = None,
        dry_run: bool | None = None,
        log_level: str | None = None,
    ) -> Settings:
        """Return a copy with command-line values applied on top."""

        dispatch = self.dispatch
        if workers is not None:
            dispatch = replace(dispatch, workers=workers)
        if dry_run is not None:
            dispatch = replace(dispatch, dry_run=dry_run)
        logging_settings = self.logging
        if log_level is not None:
            logging_settings = replace(logging_settings, level=log_level.strip().upper())
        return replace(self, dispatch=dispatch, logging=logging_settings)

    def validate(self) -> None:
        """Raise configuration error if any value is out of range."""

        if self.dispatch.workers < 1:
            raise ValueError(f"invalid value {self.dispatch.workers} for -j")
        if not self.dispatch.shell.strip():
            raise ValueError("XLOG_PROCESSOR_SHELL must not be empty.")
        if self.dispatch.graceful_shutdown_seconds < 0:
            raise ValueError("XLOG_PROCESSOR_GRACEFUL_SHUTDOWN_SECONDS must be >= 0.")
        if self.logging.level not in _LOG_LEVELS:
            raise ValueError(
                f"Invalid log level {self.logging.level!r}. Expected one of {', '.join(_LOG_LEVELS)}.",
            )

    def configure_logging(self) -> None:
        logging.basicConfig(
            level=getattr(logging, self.logging.level),
            format=self.logging.format,
        )


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as error:
        raise ValueError(f"Invalid integer value for {name}: {value!r}") from error


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError as error:
        raise ValueError(f"Invalid numeric value for {name}: {value!r}") from error
