"""File system monitoring for deptrace watch mode."""

import asyncio
import logging
import os
import threading
import time
from pathlib import Path
from typing import Callable, List, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .models import RESOLVE_EXTENSIONS, is_ignored_path, normalize_pattern

logger = logging.getLogger(__name__)


class ReportWatcher(FileSystemEventHandler):
    """Regenerate a dependency report when tracked sources change."""

    def __init__(
        self,
        project_root: Path,
        regenerate: Callable[[], bool],
        report_path: Optional[Path] = None,
        exclude_dirs: Optional[List[str]] = None,
        update_delay: float = 2.0,
    ):
        self.project_root = Path(os.path.abspath(project_root))
        self.regenerate = regenerate
        self.report_path = Path(os.path.abspath(report_path)) if report_path else None
        self.exclude_dirs = tuple(p for p in map(normalize_pattern, exclude_dirs or []) if p)
        self.update_delay = update_delay
        self.pending_update = False
        self.last_event_time = time.time()
        self.observer: Optional[Observer] = None
        self.running = False
        self._lock = threading.Lock()

    def _is_tracked(self, src_path) -> bool:
        if not src_path:
            return False
        path = Path(os.path.abspath(os.fsdecode(src_path)))

        # Our own output must not trigger another run
        if self.report_path is not None and path == self.report_path:
            return False

        if path.suffix not in RESOLVE_EXTENSIONS:
            return False

        return not is_ignored_path(path, self.project_root, self.exclude_dirs)

    def _should_process(self, event: FileSystemEvent) -> bool:
        """Check if an event should trigger a report update."""
        if event.is_directory:
            return False
        return self._is_tracked(event.src_path) or self._is_tracked(getattr(event, "dest_path", ""))

    def on_any_event(self, event: FileSystemEvent):
        """Handle any file system event."""
        if event.event_type not in ('created', 'modified', 'deleted', 'moved'):
            return

        if self._should_process(event):
            with self._lock:
                self.last_event_time = time.time()
                self.pending_update = True
            logger.debug(f"Pending update after {event.event_type} of {event.src_path}")

    def take_pending(self, now: Optional[float] = None) -> bool:
        """Consume the pending flag once events have settled for update_delay."""
        now = time.time() if now is None else now
        with self._lock:
            if not self.pending_update or now - self.last_event_time < self.update_delay:
                return False
            self.pending_update = False
            return True

    async def process_updates(self):
        """Process pending updates with debouncing."""
        while self.running:
            if self.take_pending():
                try:
                    if self.regenerate():
                        logger.info(f"Updated report for {self.project_root}")
                    else:
                        logger.warning(f"Report update for {self.project_root} did not complete")
                except Exception as e:
                    logger.error(f"Error updating report: {e}", exc_info=True)

            await asyncio.sleep(0.2)

    def start(self):
        """Start the observer on the project root."""
        if self.observer is None:
            self.observer = Observer()
            self.observer.schedule(self, str(self.project_root), recursive=True)
            self.observer.start()
            logger.info(f"Started watching {self.project_root}")
        self.running = True

    def stop(self):
        """Stop the observer."""
        self.running = False
        if self.observer:
            try:
                self.observer.stop()
                self.observer.join(timeout=5)
            finally:
                self.observer = None

    async def run(self):
        """Watch until cancelled or interrupted."""
        self.start()
        try:
            await self.process_updates()
        finally:
            self.stop()
