"""Directory access for the pg_receivexlog archive."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from xlog_processor.errors import ListingFailure

logger = logging.getLogger(__name__)


def list_archive(directory: Path) -> list[str]:
    """Return entry names of ``directory`` in listing order."""

    try:
        with os.scandir(directory) as entries:
            names = [entry.name for entry in entries]
    except OSError as error:
        raise ListingFailure(directory, error.strerror or str(error)) from error
    logger.debug("Listed %d entries in %s", len(names), directory)
    return names
