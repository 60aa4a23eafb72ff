"""
Source directory watcher for Image Relay.

Watchdog delivers creation events on its observer thread; the handler only
queues them. A single consumer takes one event at a time and runs it through
upload, result write and relocation before taking the next.
"""

import queue
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from loguru import logger
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from app.utils.config import Settings
from app.utils.exceptions import ImageRelayError
from app.utils.helpers import should_exclude_path, wait_until_stable
from domains.image_relay.relocator import relocate
from domains.image_relay.uploader import ImageUploader


@dataclass(frozen=True)
class WatchedFileEvent:
    """A creation notification, consumed exactly once."""

    path: Path
    created_at: float


class RelayEventHandler(FileSystemEventHandler):
    """Watchdog handler that forwards file creations to the consumer queue."""

    def __init__(self, events: "queue.Queue[WatchedFileEvent]"):
        """
        Initialize event handler.

        Args:
            events: Queue drained by the watch loop
        """
        super().__init__()
        self.events = events

    def on_created(self, event: FileSystemEvent):
        """Handle file/directory creation."""
        if event.is_directory:
            return

        path = Path(event.src_path).absolute()
        logger.debug(f"Created: {path}")
        self.events.put(WatchedFileEvent(path=path, created_at=time.time()))


class ImageRelayWatcher:
    """Watch loop orchestrator."""

    def __init__(
        self,
        settings: Settings,
        uploader: Optional[ImageUploader] = None,
        observer=None,
    ):
        """
        Initialize watcher.

        Args:
            settings: Application settings
            uploader: Upload pipeline (defaults to a live ImageUploader)
            observer: Watchdog observer (defaults to the platform Observer)
        """
        self.settings = settings
        self.uploader = uploader or ImageUploader(settings)
        self.events: "queue.Queue[WatchedFileEvent]" = queue.Queue()
        self.event_handler = RelayEventHandler(self.events)
        self.observer = observer if observer is not None else Observer()

    def start(self):
        """
        Subscribe to the source directory (non-recursive).

        Failures here are fatal to the caller.
        """
        source = self.settings.source_dir
        if not source.is_dir():
            raise FileNotFoundError(f"Source directory does not exist: {source}")

        self.observer.schedule(self.event_handler, str(source), recursive=False)
        self.observer.start()
        logger.success(f"Started watching: {source}")

    def stop(self):
        """Stop watching."""
        self.observer.stop()
        self.observer.join()
        logger.info("File system observer stopped")

    def handle(self, event: WatchedFileEvent) -> bool:
        """
        Process one event to completion.

        Returns:
            True if the file was uploaded and archived, False otherwise
        """
        path = event.path

        if path.is_dir():
            logger.debug(f"Ignoring directory: {path}")
            return False

        if should_exclude_path(
            path,
            self.settings.ignored_suffixes,
            skip_hidden=self.settings.skip_hidden,
        ):
            logger.debug(f"Ignoring excluded file: {path}")
            return False

        logger.info(f"Process file: {path}")

        try:
            settled = wait_until_stable(
                path,
                self.settings.settle_grace_period,
                self.settings.settle_poll_interval,
            )
            if not settled:
                logger.warning(f"{path.name} still growing after grace period, uploading anyway")

            self.uploader.process(path)
        except (ImageRelayError, OSError) as e:
            logger.error(f"Failed to process {path.name}: {e}")
            return False

        try:
            relocate(path, self.settings.destination_dir)
        except ImageRelayError as e:
            logger.error(f"Error moving file: {e}")
            return False

        return True

    def run(self, stop_event: Optional[threading.Event] = None, poll: float = 1.0):
        """
        Consume events until ``stop_event`` is set.

        Without a stop event the loop only ends with the process.
        """
        stop_event = stop_event or threading.Event()

        while not stop_event.is_set():
            try:
                event = self.events.get(timeout=poll)
            except queue.Empty:
                continue

            try:
                self.handle(event)
            finally:
                self.events.task_done()
