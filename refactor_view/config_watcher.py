"""
Config watcher — reloads the refactor settings when the YAML file changes.

Uses watchdog to monitor the directory holding the config file and feeds
a :class:`ConfigurationChangeEvent` to the :class:`ConfigGate`.
"""

from __future__ import annotations

import asyncio
import logging
import os
import threading
import time
from typing import Optional

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .config import ConfigGate, ConfigurationChangeEvent

logger = logging.getLogger(__name__)


class ConfigFileHandler(FileSystemEventHandler):
    """
    Watchdog event handler that reloads one config file.

    Parameters
    ----------
    gate:
        The :class:`ConfigGate` to notify.
    path:
        Absolute path of the watched YAML file.
    debounce_seconds:
        Minimum delay between two reloads (editors often write twice).
    loop:
        When given, the gate is updated on this event loop instead of the
        watchdog thread.
    """

    def __init__(
        self,
        gate: ConfigGate,
        path: str,
        debounce_seconds: float = 0.5,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        super().__init__()
        self._gate = gate
        self._path = os.path.abspath(path)
        self._debounce = debounce_seconds
        self._loop = loop
        self._last_event = 0.0
        self._lock = threading.Lock()

    def on_modified(self, event) -> None:  # type: ignore[override]
        if not event.is_directory:
            self._handle_change(event.src_path)

    def on_created(self, event) -> None:  # type: ignore[override]
        if not event.is_directory:
            self._handle_change(event.src_path)

    def on_moved(self, event) -> None:  # type: ignore[override]
        if not event.is_directory:
            self._handle_change(event.dest_path)

    def _is_debounced(self) -> bool:
        now = time.time()
        with self._lock:
            if now - self._last_event < self._debounce:
                return True
            self._last_event = now
        return False

    def _handle_change(self, abs_path) -> None:
        if os.path.abspath(os.fsdecode(abs_path)) != self._path:
            return
        if self._is_debounced():
            return
        if self._loop is not None:
            self._loop.call_soon_threadsafe(self.reload)
        else:
            self.reload()

    def reload(self) -> bool:
        """Re-read the file and notify the gate. Returns True if re-read."""
        old_source = self._gate.source
        new_source = old_source.reload()
        event = ConfigurationChangeEvent.from_diff(old_source.data, new_source.data)
        logger.info("[Config watcher] %s changed (%d key(s))",
                    self._path, len(event.sections))
        return self._gate.on_configuration_changed(event, source=new_source)


class ConfigWatcher:
    """
    Non-blocking wrapper around a watchdog observer for the config file.

    Usage::

        watcher = ConfigWatcher(gate, "/path/to/.refactorview.yaml")
        watcher.start()
        ...
        watcher.stop()
    """

    def __init__(
        self,
        gate: ConfigGate,
        path: str,
        debounce_seconds: float = 0.5,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        self._path = os.path.abspath(path)
        self._handler = ConfigFileHandler(gate, self._path, debounce_seconds, loop)
        self._observer: Optional[Observer] = None

    @property
    def is_running(self) -> bool:
        return self._observer is not None

    def start(self) -> None:
        if self._observer is not None:
            return
        observer = Observer()
        observer.schedule(self._handler, os.path.dirname(self._path), recursive=False)
        observer.daemon = True
        observer.start()
        self._observer = observer
        logger.info("[Config watcher] Watching %s", self._path)

    def stop(self) -> None:
        """Stop the observer. Safe to call when not started."""
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=5)
        self._observer = None
        logger.info("[Config watcher] Stopped.")
