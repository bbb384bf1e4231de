"""
Pydantic models for the inbox date filer.

Shared data models across the application.
"""

from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict

from app.utils.helpers import get_file_extension


# =====================================================
# Watch Models
# =====================================================

class WatchConfiguration(BaseModel):
    """Watched root, fixed for the lifetime of the process."""
    model_config = ConfigDict(frozen=True)

    root_path: Path


class ChangeKind(str, Enum):
    """Kinds of filesystem change the watcher forwards."""
    CREATED = "created"


class FileCreationEvent(BaseModel):
    """A single OS creation notification."""
    full_path: str
    name: str
    change_kind: ChangeKind = ChangeKind.CREATED

    @classmethod
    def from_path(cls, path: str) -> "FileCreationEvent":
        return cls(full_path=path, name=Path(path).name)

    @property
    def extension(self) -> str:
        return get_file_extension(Path(self.name))


# =====================================================
# Date Models
# =====================================================

class DateSource(str, Enum):
    """Where an effective date came from."""
    CREATION_TIME = "creation_time"
    TEXT_HEADER = "text_header"
    CONTAINER_METADATA = "container_metadata"


class ResolvedDate(BaseModel):
    """Effective date used to name and file a document."""
    model_config = ConfigDict(frozen=True)

    value: date
    source: DateSource
    header: Optional[str] = None  # Date, Sent, Delivery-Date, Received


class FileItem(BaseModel):
    """A file as seen by the date resolver."""
    path: Path
    extension: str
    created: date

    @classmethod
    def from_path(cls, path: Path) -> "FileItem":
        path = Path(path)
        return cls(
            path=path,
            extension=get_file_extension(path),
            created=file_creation_date(path),
        )


def file_creation_date(path: Path) -> date:
    """
    Local calendar date the file was created.

    Uses st_birthtime where the platform reports it and falls back to the
    modification time otherwise.
    """
    stats = Path(path).stat()
    timestamp = getattr(stats, "st_birthtime", None) or stats.st_mtime
    return datetime.fromtimestamp(timestamp).date()


# =====================================================
# Filing Models
# =====================================================

class DestinationPlan(BaseModel):
    """Where a file will be placed."""
    target_directory: Path
    target_file_name: str

    @property
    def destination(self) -> Path:
        return self.target_directory / self.target_file_name
