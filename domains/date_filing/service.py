"""
Lifecycle of the date filing watcher.

Owns the watch configuration, wires the pipeline and drives it from the
watcher's event stream. SIGINT/SIGTERM stop the stream; an event already
being filed is allowed to finish before the subscription is torn down.
"""

import signal
from pathlib import Path
from typing import Iterable, Optional

from loguru import logger

from app.models.schemas import FileCreationEvent, WatchConfiguration
from app.utils.config import Settings
from domains.date_filing.processors.mover import SafeMover
from domains.date_filing.processors.pipeline import FilingPipeline
from domains.date_filing.processors.stability import FileStabilityGate
from domains.date_filing.resolvers.dates import DateResolver
from domains.date_filing.resolvers.msg_reader import MsgDateReader, load_msg_reader
from domains.date_filing.watchers.filesystem import ChangeWatcher


class DateFilingService:
    """Date filing orchestrator."""

    def __init__(
        self,
        config: WatchConfiguration,
        pipeline: FilingPipeline,
        watcher: ChangeWatcher,
    ):
        self.config = config
        self.pipeline = pipeline
        self.watcher = watcher
        self.processed = 0

    @classmethod
    def from_settings(
        cls,
        config: WatchConfiguration,
        settings: Settings,
        msg_reader: Optional[MsgDateReader] = None,
    ) -> "DateFilingService":
        """
        Build the service and its collaborators from settings.

        Args:
            config: Watch configuration for this process
            settings: Application settings
            msg_reader: Optional .msg capability; loaded from settings if omitted
        """
        if msg_reader is None:
            msg_reader = load_msg_reader(settings.msg_reader_enabled)

        pipeline = FilingPipeline(
            config=config,
            gate=FileStabilityGate(
                max_wait=settings.stability_max_wait,
                poll_interval=settings.stability_poll_interval,
            ),
            resolver=DateResolver(msg_reader=msg_reader),
            mover=SafeMover(
                attempts=settings.move_attempts,
                retry_delay=settings.move_retry_delay,
            ),
        )
        watcher = ChangeWatcher(
            root=config.root_path,
            supported_extensions=settings.get_supported_extensions(),
            ignored_extensions=settings.get_ignored_extensions(),
            notification_timeout=settings.notification_timeout,
        )
        return cls(config, pipeline, watcher)

    def install_signal_handlers(self) -> None:
        """Route SIGINT and SIGTERM to a graceful stop."""

        def _signal_handler(signum, frame):  # noqa: D401
            logger.info(f"Received signal {signum}, shutting down.")
            self.stop()

        signal.signal(signal.SIGINT, _signal_handler)
        signal.signal(signal.SIGTERM, _signal_handler)

    def run(self) -> int:
        """
        Watch and file until stopped.

        Returns:
            Number of documents filed

        Raises:
            SetupError: If the watch cannot be started
        """
        logger.info(f"Starting date filing watcher on {self.config.root_path}")

        with self.watcher:
            for event in self.watcher.events():
                self.handle(event)

        logger.info(f"Date filing watcher stopped after filing {self.processed} file(s)")
        return self.processed

    def handle(self, event: FileCreationEvent) -> Optional[Path]:
        """Run one event through the pipeline and count successes."""
        result = self.pipeline.handle(event)
        if result is not None:
            self.processed += 1
        return result

    def process_paths(self, paths: Iterable[Path]) -> int:
        """
        File existing documents without watching.

        Paths are subject to the same filters as watched events.

        Returns:
            Number of documents filed
        """
        for path in paths:
            event = FileCreationEvent.from_path(str(Path(path).expanduser().absolute()))
            if self.watcher.should_process(event):
                self.handle(event)
        return self.processed

    def stop(self) -> None:
        """Stop consuming events."""
        self.watcher.stop()
