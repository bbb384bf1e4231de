"""
Per-event filing pipeline: stability gate -> date resolver -> mover.

One event runs to completion before the next is handled. Any failure is
contained here so that a bad file never stops the watcher.
"""

from pathlib import Path
from typing import Optional

from loguru import logger

from app.models.schemas import FileCreationEvent, FileItem, WatchConfiguration
from domains.date_filing.errors import MoveError
from domains.date_filing.processors.mover import SafeMover
from domains.date_filing.processors.stability import FileStabilityGate
from domains.date_filing.resolvers.dates import DateResolver


class FilingPipeline:
    """Files one created document into its dated folder."""

    def __init__(
        self,
        config: WatchConfiguration,
        gate: FileStabilityGate,
        resolver: DateResolver,
        mover: SafeMover,
    ):
        self.config = config
        self.gate = gate
        self.resolver = resolver
        self.mover = mover

    def handle(self, event: FileCreationEvent) -> Optional[Path]:
        """
        Process a single creation event.

        Args:
            event: Creation notification that passed the watcher's filters

        Returns:
            Final path of the filed document, or None if it was not moved
        """
        try:
            return self._process(event)
        except MoveError as e:
            logger.error(f"{e}; leaving {event.full_path} in place")
        except Exception:
            logger.exception(f"Unhandled error while filing {event.full_path}")
        return None

    def _process(self, event: FileCreationEvent) -> Optional[Path]:
        path = Path(event.full_path)
        logger.info(f"Processing {path}")

        self.gate.await_stable(path)

        if not path.is_file():
            logger.info(f"{path} vanished before it could be filed")
            return None

        item = FileItem.from_path(path)
        resolved = self.resolver.resolve(item)
        logger.debug(f"{path.name}: effective date {resolved.value} ({resolved.source.value})")

        return self.mover.place(path, self.config.root_path, resolved.value)
