"""Worker-pool dispatch of process commands over archive segments."""

from xlog_processor.dispatch.engine import DispatchEngine, DispatchSummary, WorkItem

__all__ = [
    "DispatchEngine",
    "DispatchSummary",
    "WorkItem",
]
