"""Orphan cleanup for the IPC directories

A requester that timed out never claims its result, and a task submitted while
the host was down may never be picked up. Anything older than the retention
age is removed here. Temp files left by a crashed writer go the same way.
"""

import time
import logging
from pathlib import Path
from typing import Optional

from ipc_bridge.protocol import TMP_SUFFIX

logger = logging.getLogger("ipc.sweeper")


def _is_sweepable(path: Path) -> bool:
    if not path.is_file():
        return False
    return path.suffix == ".json" or path.name.endswith(TMP_SUFFIX)


def sweep_directory(directory, max_age: float, now: Optional[float] = None) -> int:
    """Remove entries with mtime older than max_age seconds. Returns count removed."""
    directory = Path(directory)
    now = time.time() if now is None else now
    removed = 0

    try:
        candidates = list(directory.iterdir())
    except FileNotFoundError:
        return 0

    for path in candidates:
        try:
            if not _is_sweepable(path):
                continue
            age = now - path.stat().st_mtime
            if age < max_age:
                continue
            path.unlink()
            removed += 1
            logger.info(f"Swept {directory.name}/{path.name} (age {int(age)}s)")
        except FileNotFoundError:
            # claimed by its consumer between listing and unlink
            continue

    return removed
