"""Controller for the archive processing CLI command."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from xlog_processor.archive import list_archive
from xlog_processor.config import Settings
from xlog_processor.dispatch import DispatchEngine
from xlog_processor.dispatch.backend import CommandRunner, ShellCommandRunner
from xlog_processor.segments import plan_segments

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ProcessArchiveCommand:
    """CLI input for one archive processing run."""

    xlogdir: Path
    process_command: str
    workers: int | None = None
    dry_run: bool = False
    log_level: str | None = None


class ArchiveCliController:
    """Scan an archive directory and process every segment except the newest."""

    def __init__(self, *, runner: CommandRunner | None = None) -> None:
        self._runner = runner

    def load_settings(self, command: ProcessArchiveCommand) -> Settings:
        settings = Settings.from_env().with_overrides(
            workers=command.workers,
            dry_run=command.dry_run,
            log_level=command.log_level,
        )
        settings.validate()
        return settings

    def process(
        self,
        command: ProcessArchiveCommand,
        settings: Settings | None = None,
    ) -> Iterator[str]:
        """Run the process command over the archive, yielding dry-run lines."""

        settings = settings or self.load_settings(command)
        plan = plan_segments(list_archive(command.xlogdir))

        lines: list[str] = []
        engine = DispatchEngine(
            runner=self._runner or ShellCommandRunner(),
            settings=settings.dispatch,
            emit=lines.append,
        )
        summary = engine.run(plan, directory=command.xlogdir, template=command.process_command)
        logger.debug("Dispatch summary: %s", summary)
        yield from lines
