"""
Safe placement of a file under <base>/<yyyyMM>/<yyyyMMdd name>.

Each attempt recomputes the destination from the current directory state,
so a collision created between attempts is still avoided, and the move
itself never replaces an existing file. Attempt outcomes are returned as
MoveAttempt values and consumed by the retry loop.
"""

import errno
import os
import shutil
import time
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional

from loguru import logger

from app.models.schemas import DestinationPlan
from app.utils.helpers import date_prefix, has_date_prefix, month_folder, sanitize_filename
from domains.date_filing.errors import MoveError


def plan_destination(source: Path, base_directory: Path, resolved: date) -> DestinationPlan:
    """
    Compute the target directory and file name, before collision handling.

    Args:
        source: File being filed
        base_directory: Watched root
        resolved: Effective date of the file

    Returns:
        DestinationPlan
    """
    name = Path(source).name
    if not has_date_prefix(name):
        name = f"{date_prefix(resolved)} {name}"

    return DestinationPlan(
        target_directory=Path(base_directory) / month_folder(resolved),
        target_file_name=sanitize_filename(name),
    )


def _same_file(a: Path, b: Path) -> bool:
    try:
        return a.samefile(b)
    except OSError:
        return False


def find_free_destination(plan: DestinationPlan, source: Optional[Path] = None) -> Path:
    """
    First free path for ``plan``, appending _1, _2, ... before the extension.

    If ``source`` already sits at a candidate path, that path is returned.
    """
    candidate = plan.destination
    stem, suffix = candidate.stem, candidate.suffix
    counter = 0

    while candidate.exists():
        if source is not None and _same_file(candidate, source):
            return candidate
        counter += 1
        candidate = plan.target_directory / f"{stem}_{counter}{suffix}"

    return candidate


# os.link errors meaning "no hard link here", not "destination taken"
_LINK_UNSUPPORTED = {
    errno.EXDEV,
    errno.EPERM,
    errno.EMLINK,
    getattr(errno, "ENOTSUP", errno.EPERM),
    getattr(errno, "EOPNOTSUPP", errno.EPERM),
    getattr(errno, "ENOSYS", errno.EPERM),
}


def move_without_overwrite(source: Path, destination: Path) -> None:
    """
    Move ``source`` to ``destination``, never replacing an existing file.

    Same-filesystem moves hard-link then unlink the source. Where hard
    links are unavailable (other device, FAT) the data is copied into an
    exclusively created destination.

    Raises:
        FileExistsError: If ``destination`` already exists
        OSError: On any other failure; ``source`` is left in place
    """
    try:
        os.link(source, destination)
    except FileExistsError:
        raise
    except OSError as e:
        if e.errno not in _LINK_UNSUPPORTED:
            raise
        _copy_without_overwrite(source, destination)
    try:
        os.unlink(source)
    except OSError:
        os.unlink(destination)
        raise


def _copy_without_overwrite(source: Path, destination: Path) -> None:
    with open(source, "rb") as src, open(destination, "xb") as dst:
        try:
            shutil.copyfileobj(src, dst)
        except OSError:
            dst.close()
            os.unlink(destination)
            raise
    shutil.copystat(source, destination)


@dataclass
class MoveAttempt:
    """Outcome of a single move attempt."""

    ok: bool
    destination: Optional[Path] = None
    reason: str = ""
    retryable: bool = True


class SafeMover:
    """Moves files into dated folders with bounded retries."""

    def __init__(self, attempts: int = 3, retry_delay: float = 2.0):
        """
        Initialize mover.

        Args:
            attempts: Total attempts before giving up
            retry_delay: Seconds between attempts
        """
        self.attempts = max(1, attempts)
        self.retry_delay = retry_delay

    def place(self, source: Path, base_directory: Path, resolved: date) -> Path:
        """
        Move ``source`` to its dated destination under ``base_directory``.

        Args:
            source: File to move
            base_directory: Watched root
            resolved: Effective date

        Returns:
            Final path of the file

        Raises:
            MoveError: If every attempt failed; the source is left in place
        """
        source = Path(source)
        plan = plan_destination(source, base_directory, resolved)
        last = MoveAttempt(ok=False, reason="not attempted")

        for attempt in range(1, self.attempts + 1):
            last = self._attempt(source, plan)
            if last.ok:
                return last.destination

            logger.warning(
                f"Move attempt {attempt}/{self.attempts} for {source.name} failed: {last.reason}"
            )
            if not last.retryable:
                break
            if attempt < self.attempts:
                time.sleep(self.retry_delay)

        raise MoveError(source, last.reason, destination=last.destination, attempts=attempt)

    def _attempt(self, source: Path, plan: DestinationPlan) -> MoveAttempt:
        if not source.exists():
            return MoveAttempt(ok=False, reason="source no longer exists", retryable=False)

        try:
            plan.target_directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return MoveAttempt(ok=False, reason=f"cannot create {plan.target_directory}: {e}")

        destination = find_free_destination(plan, source)
        if _same_file(destination, source):
            logger.debug(f"{source} is already filed")
            return MoveAttempt(ok=True, destination=destination)

        try:
            move_without_overwrite(source, destination)
        except FileExistsError:
            return MoveAttempt(
                ok=False, destination=destination, reason=f"{destination.name} was taken by another file"
            )
        except OSError as e:
            return MoveAttempt(ok=False, destination=destination, reason=str(e))

        if not destination.exists() or source.exists():
            return MoveAttempt(
                ok=False,
                destination=destination,
                reason="post-move check failed (destination missing or source still present)",
            )

        logger.success(f"Filed {source.name} -> {destination}")
        return MoveAttempt(ok=True, destination=destination)
