"""Segment selection: which archive entries are WAL segments and which are safe to process."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from xlog_processor.errors import OrderingDefect

XLOG_DATA_FNAME_LEN = 24

_HEX_DIGITS = frozenset("0123456789ABCDEF")


@dataclass(frozen=True, slots=True)
class SegmentPlan:
    """Ordered segments of one directory scan, split at the frontier.

    The frontier is the newest segment; pg_receivexlog may still be writing it and
    needs it to know where to resume streaming, so it is never processed.
    """

    eligible: tuple[str, ...] = ()
    frontier: str | None = None

    @property
    def is_idle(self) -> bool:
        return not self.eligible


def is_xlog_filename(name: str) -> bool:
    """Return True for a 24-character uppercase hexadecimal segment name."""

    if len(name) != XLOG_DATA_FNAME_LEN:
        return False
    return all(char in _HEX_DIGITS for char in name)


def filter_xlog_files(names: Iterable[str]) -> list[str]:
    return [name for name in names if is_xlog_filename(name)]


def sort_xlog_files(names: Iterable[str]) -> list[str]:
    """Sort segment names ascending; equal neighbours mean a broken listing."""

    ordered = sorted(names)
    for previous, current in zip(ordered, ordered[1:], strict=False):
        if previous == current:
            raise OrderingDefect(current)
    return ordered


def plan_segments(names: Iterable[str]) -> SegmentPlan:
    """Select the segments that are safe to process from a raw directory listing."""

    ordered = sort_xlog_files(filter_xlog_files(names))
    if len(ordered) < 2:
        return SegmentPlan(frontier=ordered[-1] if ordered else None)
    return SegmentPlan(eligible=tuple(ordered[:-1]), frontier=ordered[-1])
