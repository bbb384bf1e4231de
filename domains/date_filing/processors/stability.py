"""
Stability gate: wait until a writer has released a newly created file.

An exclusive, non-blocking lock is attempted on a read-write handle
(flock on POSIX, msvcrt.locking on Windows). Success means nobody else
holds the file; the handle is closed immediately. POSIX writers rarely
take a lock, so there the file's size and mtime must also stay unchanged
across one poll interval.
"""

import os
import time
from pathlib import Path
from typing import Optional

from loguru import logger

if os.name == "nt":
    import msvcrt
else:
    import fcntl


def try_exclusive_open(path: Path) -> bool:
    """
    Attempt an exclusive open-then-close of ``path``.

    Returns:
        True if the file could be opened and locked exclusively
    """
    try:
        with open(path, "r+b") as handle:
            if os.name == "nt":
                msvcrt.locking(handle.fileno(), msvcrt.LK_NBLCK, 1)
                msvcrt.locking(handle.fileno(), msvcrt.LK_UNLCK, 1)
            else:
                fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
                fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
    except OSError as e:
        logger.debug(f"{path} is not yet available: {e}")
        return False

    return True


def file_snapshot(path: Path) -> Optional[tuple[int, int]]:
    """(st_size, st_mtime_ns) of ``path``, or None if it cannot be stat'ed."""
    try:
        stats = path.stat()
    except OSError:
        return None
    return stats.st_size, stats.st_mtime_ns


class FileStabilityGate:
    """Best-effort wait for a file to stop being written."""

    def __init__(self, max_wait: float = 10.0, poll_interval: float = 1.0):
        """
        Initialize stability gate.

        Args:
            max_wait: Wait budget in seconds
            poll_interval: Delay between attempts in seconds
        """
        self.max_wait = max_wait
        self.poll_interval = poll_interval

    @property
    def attempts(self) -> int:
        if self.poll_interval <= 0:
            return 1
        return int(self.max_wait // self.poll_interval) + 1

    def await_stable(self, path: Path) -> bool:
        """
        Block until ``path`` can be opened exclusively or the budget runs out.

        On POSIX the file must additionally be unchanged since the previous
        poll, so at least one poll interval is always spent.

        Args:
            path: Newly created file

        Returns:
            True once the file is free, False if the budget was exhausted
            or the file disappeared
        """
        path = Path(path)
        attempts = self.attempts
        previous = None

        for attempt in range(1, attempts + 1):
            current = file_snapshot(path)
            if current is None:
                logger.debug(f"{path} disappeared while waiting for it")
                return False

            settled = os.name == "nt" or current == previous
            if settled and try_exclusive_open(path):
                if attempt > 1:
                    logger.info(f"{path.name} became available after {attempt} attempt(s)")
                return True

            previous = current
            if attempt < attempts:
                time.sleep(self.poll_interval)

        logger.warning(f"{path.name} still busy after {self.max_wait}s, proceeding anyway")
        return False
