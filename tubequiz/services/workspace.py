"""
Scoped working directory for one pipeline run.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

logger = logging.getLogger(__name__)


def remove_workdir(path: Path) -> None:
    """Best-effort removal. Failures are logged, never raised."""
    if not path.exists():
        return
    try:
        shutil.rmtree(path)
        logger.debug("Deleted workdir: %s", path)
    except OSError as e:
        logger.warning("Failed to delete workdir %s: %s", path, e)


@contextmanager
def scoped_workdir(root: Path, video_id: str) -> Iterator[Path]:
    """
    Yields a fresh <root>/<video_id> directory and removes it on every exit path.

    A stale directory left by an earlier attempt for the same video is wiped
    before the new one is created; OSError if it cannot be wiped.
    """
    path = Path(root) / video_id
    if path.exists():
        logger.info("Removing stale workdir: %s", path)
        remove_workdir(path)
        if path.exists():
            raise OSError(f"Stale workdir could not be removed: {path}")
    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Created workdir: %s", path)
    try:
        yield path
    finally:
        remove_workdir(path)
