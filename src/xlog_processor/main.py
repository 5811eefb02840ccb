"""CLI entrypoint for xlog-processor."""

from collections.abc import Iterable
from pathlib import Path

import rich_click as click

from xlog_processor import __version__
from xlog_processor.controllers import ArchiveCliController, ProcessArchiveCommand
from xlog_processor.errors import XlogProcessorError

click.rich_click.USE_MARKDOWN = True
ARCHIVE_CONTROLLER = ArchiveCliController()


class ArchiveCommand(click.RichCommand):
    """Command whose usage errors exit with status 1."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as error:
            error.exit_code = 1
            raise


@click.command(cls=ArchiveCommand)
@click.version_option(version=__version__, prog_name="xlog-processor")
@click.option(
    "-j",
    "--jobs",
    "workers",
    type=click.IntRange(min=1),
    default=None,
    help="Number of files to process concurrently. Defaults to XLOG_PROCESSOR_WORKERS or 1.",
)
@click.option(
    "--dryrun",
    "--dry-run",
    "dry_run",
    is_flag=True,
    default=False,
    help="Dry run, show what the program would do.",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Diagnostics level on stderr. Defaults to XLOG_PROCESSOR_LOG_LEVEL or WARNING.",
)
@click.argument("xlogdir", type=click.Path(path_type=Path))
@click.argument("process_command")
def xlog_processor(
    workers: int | None,
    dry_run: bool,
    log_level: str | None,
    xlogdir: Path,
    process_command: str,
) -> None:
    """Process files in an xlog archive populated by pg_receivexlog.

    Runs PROCESS_COMMAND through the shell once for every WAL segment in XLOGDIR
    except the most recent one, which pg_receivexlog still needs.

    In PROCESS_COMMAND, `%p` is replaced by the path to the file it should process,
    `%f` by only the file name, and `%%` by a percent sign. The command should
    return a zero exit status only if it succeeds; any failure stops the run.
    """

    command = ProcessArchiveCommand(
        xlogdir=xlogdir,
        process_command=process_command,
        workers=workers,
        dry_run=dry_run,
        log_level=log_level,
    )
    try:
        settings = ARCHIVE_CONTROLLER.load_settings(command)
        settings.configure_logging()
        _emit_lines(ARCHIVE_CONTROLLER.process(command, settings))
    except (XlogProcessorError, ValueError) as error:
        raise click.ClickException(str(error)) from error


def _emit_lines(lines: Iterable[str]) -> None:
    for line in lines:
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    xlog_processor()
