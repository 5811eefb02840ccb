"""Dispatch of process commands over the eligible segments of one scan."""

from __future__ import annotations

import logging
import queue
import signal
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path

from xlog_processor.config import DispatchSettings
from xlog_processor.dispatch.backend import CommandRunner, CommandRunRequest
from xlog_processor.errors import (
    CommandFailure,
    CommandRunError,
    DispatchInterrupted,
    XlogProcessorError,
)
from xlog_processor.segments import SegmentPlan
from xlog_processor.template import expand_command, segment_path

logger = logging.getLogger(__name__)

_QUEUE_POLL_SECONDS = 0.1


@dataclass(frozen=True, slots=True)
class WorkItem:
    """One segment and the command that processes it."""

    directory: Path
    filename: str
    command: str


@dataclass(slots=True)
class DispatchSummary:
    """Aggregate counters for one completed run."""

    eligible: int = 0
    dispatched: int = 0
    succeeded: int = 0
    abandoned: int = 0
    frontier: str | None = None
    dry_run: bool = False


@dataclass(slots=True)
class _RunState:
    """State shared between the producer and the workers of one live run."""

    abort: threading.Event = field(default_factory=threading.Event)
    lock: threading.Lock = field(default_factory=threading.Lock)
    failure: Exception | None = None
    signal_name: str | None = None
    dispatched: int = 0
    succeeded: int = 0

    def record_failure(self, error: Exception) -> None:
        with self.lock:
            if self.failure is None:
                self.failure = error
        self.abort.set()

    def request_stop(self, signal_name: str) -> None:
        if self.signal_name is None:
            self.signal_name = signal_name
        self.abort.set()


class DispatchEngine:
    """Runs the process command for every eligible segment on a fixed worker pool.

    The producer expands commands and enqueues them in ascending segment order into a
    queue bounded by the worker count, so enqueueing blocks while all workers are busy.
    The first failing command aborts the run: no further items are enqueued or started,
    commands still running are terminated, and :meth:`run` raises that failure once every
    worker has stopped.
    """

    def __init__(
        self,
        *,
        runner: CommandRunner,
        settings: DispatchSettings,
        emit: Callable[[str], None] | None = None,
    ) -> None:
        self.runner = runner
        self.settings = settings
        self._emit = emit or (lambda _line: None)

    def run(self, plan: SegmentPlan, *, directory: Path, template: str) -> DispatchSummary:
        summary = DispatchSummary(
            eligible=len(plan.eligible),
            frontier=plan.frontier,
            dry_run=self.settings.dry_run,
        )
        if plan.is_idle:
            logger.info("Nothing to process in %s", directory)
            return summary

        if self.settings.dry_run:
            self._dry_run(plan, directory=directory, template=template)
            return summary

        self._dispatch(plan, directory=directory, template=template, summary=summary)
        logger.info(
            "Processed %d segment(s) from %s, kept %s",
            summary.succeeded,
            directory,
            plan.frontier,
        )
        return summary

    def _dry_run(self, plan: SegmentPlan, *, directory: Path, template: str) -> None:
        for item in _work_items(plan, directory=directory, template=template):
            self._emit(
                f"would process {item.filename} in {item.directory} by running `{item.command}`",
            )
        self._emit(f"would not process {plan.frontier}")

    def _dispatch(
        self,
        plan: SegmentPlan,
        *,
        directory: Path,
        template: str,
        summary: DispatchSummary,
    ) -> None:
        state = _RunState()
        work_queue: queue.Queue[WorkItem | None] = queue.Queue(maxsize=self.settings.workers)
        workers = [
            threading.Thread(
                target=self._worker_loop,
                args=(work_queue, state),
                daemon=True,
                name=f"xlog-worker-{index}",
            )
            for index in range(self.settings.workers)
        ]
        logger.info(
            "Dispatching %d segment(s) from %s to %d worker(s)",
            len(plan.eligible),
            directory,
            len(workers),
        )

        with self._signal_handlers(state):
            for worker in workers:
                worker.start()
            try:
                for item in _work_items(plan, directory=directory, template=template):
                    if not _put(work_queue, item, state):
                        break
            except XlogProcessorError as error:
                state.record_failure(error)
            finally:
                for _ in workers:
                    if not _put(work_queue, None, state):
                        break
                for worker in workers:
                    worker.join()

        summary.dispatched = state.dispatched
        summary.succeeded = state.succeeded
        # segments whose command never started, including items still queued at abort
        summary.abandoned = summary.eligible - state.dispatched

        if state.failure is not None:
            logger.error(
                "Aborted after %d of %d segment(s) succeeded, %d abandoned",
                summary.succeeded,
                summary.eligible,
                summary.abandoned,
            )
            raise state.failure
        if state.signal_name is not None:
            logger.warning("Interrupted with %d segment(s) abandoned", summary.abandoned)
            raise DispatchInterrupted(state.signal_name)

    def _worker_loop(self, work_queue: queue.Queue[WorkItem | None], state: _RunState) -> None:
        while True:
            try:
                item = work_queue.get(timeout=_QUEUE_POLL_SECONDS)
            except queue.Empty:
                if state.abort.is_set():
                    return
                continue
            if item is None:
                return
            if state.abort.is_set():
                logger.debug("Abandoning %s", item.filename)
                return
            try:
                self._execute(item, state)
            except Exception as error:  # noqa: BLE001
                logger.exception("Worker error while processing %s", item.filename)
                state.record_failure(error)

    def _execute(self, item: WorkItem, state: _RunState) -> None:
        logger.debug("Processing %s: %s", item.filename, item.command)
        with state.lock:
            state.dispatched += 1
        try:
            result = self.runner.run(
                CommandRunRequest(
                    command=item.command,
                    shell=self.settings.shell,
                    shutdown_requested=state.abort.is_set,
                    graceful_shutdown_seconds=self.settings.graceful_shutdown_seconds,
                ),
            )
        except CommandRunError as error:
            logger.error("process command failed for %s: %s", item.filename, error)
            state.record_failure(error)
            return

        if result.cancelled:
            logger.warning("Terminated process command for %s", item.filename)
            return
        if result.exit_code != 0:
            failure = CommandFailure(item.filename, result.exit_code, result.stderr)
            logger.error("%s", failure)
            if result.stderr:
                logger.error("Program output:")
                logger.error("%s", result.stderr.decode("utf-8", errors="replace").rstrip())
            state.record_failure(failure)
            return

        with state.lock:
            state.succeeded += 1

    @contextmanager
    def _signal_handlers(self, state: _RunState) -> Iterator[None]:
        if threading.current_thread() is not threading.main_thread():
            yield
            return

        original_sigint = signal.getsignal(signal.SIGINT)
        original_sigterm = signal.getsignal(signal.SIGTERM)

        def _handler(signum: int, _: object | None) -> None:
            try:
                name = signal.Signals(signum).name
            except ValueError:
                name = str(signum)
            state.request_stop(name)

        signal.signal(signal.SIGINT, _handler)
        signal.signal(signal.SIGTERM, _handler)
        try:
            yield
        finally:
            signal.signal(signal.SIGINT, original_sigint)
            signal.signal(signal.SIGTERM, original_sigterm)


def _work_items(plan: SegmentPlan, *, directory: Path, template: str) -> Iterator[WorkItem]:
    for filename in plan.eligible:
        command = expand_command(template, segment_path(directory, filename), filename)
        yield WorkItem(directory=directory, filename=filename, command=command)


def _put(work_queue: queue.Queue[WorkItem | None], item: WorkItem | None, state: _RunState) -> bool:
    while not state.abort.is_set():
        try:
            work_queue.put(item, timeout=_QUEUE_POLL_SECONDS)
        except queue.Full:
            continue
        return True
    return False
