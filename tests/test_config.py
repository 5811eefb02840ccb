from __future__ import annotations

import allure
import pytest

from xlog_processor.config import DispatchSettings, LoggingSettings, Settings

pytestmark = [
    allure.epic("Archive Processing"),
    allure.feature("Configuration"),
]


def test_from_env_defaults() -> None:
    settings = Settings.from_env()

    assert settings.dispatch == DispatchSettings()
    assert settings.dispatch.workers == 1
    assert settings.dispatch.dry_run is False
    assert settings.logging.level == "WARNING"
    settings.validate()


def test_from_env_reads_overrides(monkeypatch) -> None:
    monkeypatch.setenv("XLOG_PROCESSOR_WORKERS", "4")
    monkeypatch.setenv("XLOG_PROCESSOR_SHELL", "/bin/bash")
    monkeypatch.setenv("XLOG_PROCESSOR_GRACEFUL_SHUTDOWN_SECONDS", "0.5")
    monkeypatch.setenv("XLOG_PROCESSOR_LOG_LEVEL", " info ")

    settings = Settings.from_env()

    assert settings.dispatch.workers == 4
    assert settings.dispatch.shell == "/bin/bash"
    assert settings.dispatch.graceful_shutdown_seconds == 0.5
    assert settings.logging.level == "INFO"


def test_from_env_rejects_non_integer_workers(monkeypatch) -> None:
    monkeypatch.setenv("XLOG_PROCESSOR_WORKERS", "many")

    with pytest.raises(ValueError, match="XLOG_PROCESSOR_WORKERS"):
        Settings.from_env()


def test_with_overrides_applies_only_given_values() -> None:
    base = Settings(dispatch=DispatchSettings(workers=3, shell="/bin/dash"))

    updated = base.with_overrides(dry_run=True, log_level="debug")

    assert updated.dispatch == DispatchSettings(workers=3, dry_run=True, shell="/bin/dash")
    assert updated.logging.level == "DEBUG"
    assert base.dispatch.dry_run is False


def test_validate_rejects_zero_workers() -> None:
    settings = Settings(dispatch=DispatchSettings(workers=0))

    with pytest.raises(ValueError, match="invalid value 0 for -j"):
        settings.validate()


def test_validate_rejects_empty_shell() -> None:
    settings = Settings(dispatch=DispatchSettings(shell="  "))

    with pytest.raises(ValueError, match="XLOG_PROCESSOR_SHELL"):
        settings.validate()


def test_validate_rejects_negative_grace_period() -> None:
    settings = Settings(dispatch=DispatchSettings(graceful_shutdown_seconds=-1))

    with pytest.raises(ValueError, match="GRACEFUL_SHUTDOWN_SECONDS"):
        settings.validate()


def test_validate_rejects_unknown_log_level() -> None:
    settings = Settings(logging=LoggingSettings(level="CHATTY"))

    with pytest.raises(ValueError, match="Invalid log level"):
        settings.validate()
