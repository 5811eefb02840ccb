"""Expansion of the user-supplied process command template.

Supported verbs:

- ``%p`` path to the segment (archive directory joined with the file name)
- ``%f`` file name alone
- ``%%`` a literal percent sign
"""

from __future__ import annotations

import posixpath
from pathlib import Path

from xlog_processor.errors import UnrecognizedVerbError, UnterminatedVerbError


def segment_path(directory: Path | str, filename: str) -> str:
    return posixpath.join(str(directory), filename)


def expand_command(template: str, full_path: str, filename: str) -> str:
    """Replace format verbs in ``template`` for one segment."""

    parts: list[str] = []
    percent = False
    for char in template:
        if not percent:
            if char == "%":
                percent = True
            else:
                parts.append(char)
            continue

        percent = False
        if char == "%":
            parts.append("%")
        elif char == "p":
            parts.append(full_path)
        elif char == "f":
            parts.append(filename)
        else:
            raise UnrecognizedVerbError(char)

    if percent:
        raise UnterminatedVerbError()
    return "".join(parts)
