# SPDX-License-Identifier: AGPL-3.0-only OR LicenseRef-Fullbleed-Commercial
import threading
import time
from pathlib import Path
from typing import Callable, Iterable, List

from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler

from .discovery import PKG_SCHEME
from .errors import WebJarError


class LocatorWatcher(FileSystemEventHandler):
    """Rebuild a fresh locator whenever something under a search root changes.

    The previous locator is left untouched; ``on_rebuild`` receives the new one.
    """

    def __init__(self, build: Callable, on_rebuild: Callable, delay=0.5, on_error=None, timer_factory=threading.Timer):
        self.build = build
        self.on_rebuild = on_rebuild
        self.on_error = on_error
        self.delay = delay
        self.timer_factory = timer_factory
        self._timer = None
        self._lock = threading.Lock()

    def on_any_event(self, event):
        if event.event_type not in ("created", "modified", "deleted", "moved"):
            return
        if event.is_directory and event.event_type == "modified":
            return

        # Ignore hidden files (editor swap files, .git)
        src = str(event.src_path)
        if "/." in src or "\\." in src:
            return

        # Debounce: restart the single-shot timer so the last event of a burst wins
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = self.timer_factory(self.delay, self.rebuild)
            self._timer.daemon = True
            self._timer.start()

    def rebuild(self):
        with self._lock:
            if self._timer is threading.current_thread():
                self._timer = None
        try:
            locator = self.build()
        except WebJarError as exc:
            if self.on_error is None:
                raise
            self.on_error(exc)
            return
        self.on_rebuild(locator)

    def cancel(self):
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None


def watch_directories(search_roots: Iterable) -> List[Path]:
    """Directories to observe: directory roots as-is, archives via their parent."""
    dirs: List[Path] = []
    for root in search_roots:
        text = str(root)
        if text.startswith(PKG_SCHEME):
            continue
        path = Path(text)
        target = path if path.is_dir() else path.parent
        if target.is_dir() and target not in dirs:
            dirs.append(target)
    return dirs


def watch_search_roots(search_roots: Iterable, build: Callable, on_rebuild: Callable, delay=0.5, on_error=None):
    """Observe the search roots and rebuild on change until interrupted."""
    handler = LocatorWatcher(build, on_rebuild, delay=delay, on_error=on_error)
    observer = Observer()
    for directory in watch_directories(search_roots):
        observer.schedule(handler, str(directory), recursive=True)
    observer.start()

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        observer.stop()
        handler.cancel()
    observer.join()
