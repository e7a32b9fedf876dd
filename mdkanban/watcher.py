# mdkanban: file watcher
#
# Watches the board's markdown file for hand edits and reloads the store.
# Editors often save through a rename, so moves onto the file count too.

import logging
import threading
from pathlib import Path
from typing import Optional

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .store import BoardStore

logger = logging.getLogger(__name__)

CHANGE_EVENTS = ("modified", "created", "moved", "deleted")


class BoardFileHandler(FileSystemEventHandler):
    """Debounces events on one file and calls store.refresh() once they settle."""

    def __init__(self, store: BoardStore, debounce_ms: int = 300):
        self.store = store
        self.target = Path(store.source.path).resolve()
        self.delay = debounce_ms / 1000
        self._timer: Optional[threading.Timer] = None
        self._timer_lock = threading.Lock()

    def _is_target(self, path) -> bool:
        if not path:
            return False
        if isinstance(path, bytes):
            path = path.decode()
        return Path(path).resolve() == self.target

    def on_any_event(self, fs_event):
        # Our own reads raise opened/closed events; only content changes count
        if fs_event.is_directory or fs_event.event_type not in CHANGE_EVENTS:
            return
        if self._is_target(fs_event.src_path) or self._is_target(getattr(fs_event, "dest_path", "")):
            self.schedule()

    def schedule(self):
        """Restart the debounce timer."""
        with self._timer_lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.delay, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def cancel(self):
        with self._timer_lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def _fire(self):
        with self._timer_lock:
            self._timer = None
        try:
            self.store.refresh()
        except Exception as e:
            logger.error(f"Reload after file change failed: {e}")


class BoardWatcher:
    """Owns the watchdog observer for a store's file."""

    def __init__(self, store: BoardStore, debounce_ms: int = 300):
        self.handler = BoardFileHandler(store, debounce_ms)
        self.observer = Observer()

    def start(self):
        directory = self.handler.target.parent
        directory.mkdir(parents=True, exist_ok=True)
        self.observer.schedule(self.handler, str(directory), recursive=False)
        self.observer.start()
        logger.info(f"Watching {self.handler.target} for edits")

    def stop(self):
        self.handler.cancel()
        self.observer.stop()
        self.observer.join(timeout=5)
