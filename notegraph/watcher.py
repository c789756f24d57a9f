"""
File system watcher that feeds note changes into the view's event stream.

The observer thread never touches graph state. It collects changed note paths,
debounces them, and puts a single ``DocumentsChanged`` on a queue that the
window drains between frames, so a rebuild is handled like any other event.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .view.controller import DocumentsChanged

logger = logging.getLogger(__name__)


class NoteChangeHandler(FileSystemEventHandler):
    """
    Collects note file changes and emits them in debounced batches.

    Key behaviors:
    - Filters to the configured note extensions
    - Ignores hidden files and directories
    - Batches rapid changes (e.g., editor save cycles) into one event
    """

    DEBOUNCE_SECONDS = 0.5

    def __init__(
        self,
        root: Path,
        events: queue.Queue,
        extensions: tuple[str, ...] = (".md",),
    ):
        super().__init__()
        self.root = root
        self.events = events
        self.extensions = {ext.lower() for ext in extensions}

        self._lock = threading.Lock()
        self._pending: dict[str, float] = {}  # path -> last change timestamp

    def _is_relevant(self, path: str) -> bool:
        p = Path(path)
        try:
            rel = p.relative_to(self.root)
        except ValueError:
            rel = p
        if any(part.startswith(".") for part in rel.parts):
            return False
        return p.suffix.lower() in self.extensions

    def _touch(self, path: str) -> None:
        with self._lock:
            self._pending[path] = time.monotonic()

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        paths = [event.src_path]
        dest = getattr(event, "dest_path", "")
        if dest:
            paths.append(dest)
        for path in paths:
            path = path.decode() if isinstance(path, bytes) else path
            if self._is_relevant(path):
                self._touch(path)

    def flush_pending(self, now: float | None = None) -> DocumentsChanged | None:
        """Queue one DocumentsChanged once the newest change is older than the debounce window."""
        now = time.monotonic() if now is None else now
        with self._lock:
            if not self._pending:
                return None
            if now - max(self._pending.values()) < self.DEBOUNCE_SECONDS:
                return None
            paths = tuple(sorted(Path(p) for p in self._pending))
            self._pending.clear()

        change = DocumentsChanged(paths=paths)
        logger.debug("Queued change for %d path(s)", len(paths))
        self.events.put(change)
        return change


class NoteWatcher:
    """Runs a watchdog observer plus a flusher thread for one notes directory."""

    def __init__(self, root: Path, events: queue.Queue, extensions: tuple[str, ...] = (".md",)):
        self.handler = NoteChangeHandler(root, events, extensions)
        self.observer = Observer()
        self.observer.schedule(self.handler, str(root), recursive=True)
        self._stop = threading.Event()
        self._flusher = threading.Thread(target=self._flush_loop, name="notegraph-flush", daemon=True)

    def _flush_loop(self) -> None:
        while not self._stop.wait(self.handler.DEBOUNCE_SECONDS / 2):
            self.handler.flush_pending()

    def start(self) -> None:
        self.observer.start()
        self._flusher.start()

    def stop(self) -> None:
        self._stop.set()
        self.observer.stop()
        self.observer.join()
        if self._flusher.is_alive():
            self._flusher.join()

    def __enter__(self) -> NoteWatcher:
        self.start()
        return self

    def __exit__(self, *exc) -> None:
        self.stop()
