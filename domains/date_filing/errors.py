"""Error types for the date filing domain."""

from pathlib import Path
from typing import Optional


class DateFilingError(Exception):
    """Base class for date filing errors."""


class SetupError(DateFilingError):
    """The watch cannot start: missing root or failed subscription."""


class DateResolutionFailure(DateFilingError):
    """No usable date could be read from a file's content or metadata."""


class MoveError(DateFilingError):
    """A file could not be placed after all retries."""

    def __init__(
        self,
        source: Path,
        reason: str,
        destination: Optional[Path] = None,
        attempts: int = 0,
    ):
        self.source = source
        self.destination = destination
        self.reason = reason
        self.attempts = attempts
        target = f" -> {destination}" if destination else ""
        super().__init__(f"Failed to move {source}{target} after {attempts} attempt(s): {reason}")
