"""
File system watcher for the date filing domain.

Subscribes to creation events under the watched root (recursively) and
exposes them as a lazy stream. Watchdog delivers notifications on its own
observer thread; they are queued here and consumed one at a time by
whoever iterates ChangeWatcher.events().
"""

import os
import queue
import threading
from pathlib import Path
from typing import Iterable, Iterator, Optional

from loguru import logger
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from app.models.schemas import FileCreationEvent
from domains.date_filing.errors import SetupError


class CreationEventHandler(FileSystemEventHandler):
    """Queues file creation notifications; everything else is ignored."""

    def __init__(self, events: "queue.Queue[FileCreationEvent]"):
        """
        Initialize event handler.

        Args:
            events: Queue drained by ChangeWatcher.events()
        """
        super().__init__()
        self.events = events

    def on_created(self, event: FileSystemEvent) -> None:
        """Queue file creation."""
        if event.is_directory:
            return

        path = os.fsdecode(event.src_path)
        logger.debug(f"Created: {path}")
        self.events.put(FileCreationEvent.from_path(path))


class ChangeWatcher:
    """Recursive creation-event subscription over one root directory."""

    def __init__(
        self,
        root: Path,
        supported_extensions: Iterable[str] = ("pdf", "eml", "msg"),
        ignored_extensions: Iterable[str] = ("ini",),
        notification_timeout: float = 1.0,
        observer_factory=Observer,
    ):
        """
        Initialize watcher.

        Args:
            root: Directory to watch
            supported_extensions: Extensions forwarded to the pipeline
            ignored_extensions: Extensions dropped without a diagnostic
            notification_timeout: Idle tick while waiting for notifications
            observer_factory: Watchdog observer class
        """
        self.root = Path(root)
        self.supported_extensions = {e.lower() for e in supported_extensions}
        self.ignored_extensions = {e.lower() for e in ignored_extensions}
        self.notification_timeout = notification_timeout

        self._queue: "queue.Queue[FileCreationEvent]" = queue.Queue()
        self._handler = CreationEventHandler(self._queue)
        self._observer_factory = observer_factory
        self._observer: Optional[Observer] = None
        self._stop = threading.Event()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> None:
        """
        Start the OS subscription.

        Raises:
            SetupError: If the root is missing or the watch cannot be created
        """
        if self._closed:
            raise SetupError("Watcher is closed and cannot be restarted")

        if not self.root.is_dir():
            raise SetupError(f"Watch path does not exist or is not a directory: {self.root}")

        observer = self._observer_factory()
        try:
            observer.schedule(self._handler, str(self.root), recursive=True)
            observer.start()
        except Exception as e:
            raise SetupError(f"Failed to watch {self.root}: {e}") from e

        self._observer = observer
        logger.success(f"Started watching: {self.root}")

    def should_process(self, event: FileCreationEvent) -> bool:
        """
        Check if a queued event should reach the pipeline.

        Args:
            event: Queued creation event

        Returns:
            True if the event names an existing file with a supported extension
        """
        path = Path(event.full_path)

        # Notification races: item already gone or turned out to be a directory
        if not path.exists() or path.is_dir():
            logger.debug(f"Dropping event for missing or non-file path: {path}")
            return False

        extension = event.extension
        if extension in self.ignored_extensions:
            return False

        if extension not in self.supported_extensions:
            logger.info(f"Ignoring {event.name}: unsupported extension '{extension}'")
            return False

        return True

    def events(self) -> Iterator[FileCreationEvent]:
        """
        Yield qualifying creation events until stop() or close() is called.

        An empty wait of notification_timeout seconds is an idle tick.
        """
        if self._closed:
            raise SetupError("Watcher is closed and cannot be restarted")

        while not self._stop.is_set():
            try:
                event = self._queue.get(timeout=self.notification_timeout)
            except queue.Empty:
                continue

            if self.should_process(event):
                yield event

    def stop(self) -> None:
        """Ask events() to finish. Safe to call from a signal handler."""
        self._stop.set()

    def close(self) -> None:
        """Stop iteration and release the OS watch handle."""
        self.stop()
        if self._observer is not None:
            self._observer.unschedule_all()
            self._observer.stop()
            self._observer.join()
            self._observer = None
            logger.info("File system observer stopped")
        self._closed = True

    def __enter__(self) -> "ChangeWatcher":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
