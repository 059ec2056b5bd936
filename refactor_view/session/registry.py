"""
Session registry — owns every open refactor session, keyed by session id.

Editor notifications (document changed, document unloaded) are forwarded to
the registry as plain method calls; the registry routes them to the owning
session.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterator, Optional

from ..config import ConfigGate, RefactorConfig
from ..editing.window_builder import FileItem
from .buffer import BufferSession, PreviewBuffer, SessionOptions

logger = logging.getLogger(__name__)

BufferFactory = Callable[[int, SessionOptions], Awaitable[BufferSession]]


async def preview_buffer_factory(key: int, options: SessionOptions) -> BufferSession:
    return PreviewBuffer(key, options)


@dataclass
class Session:
    """One open refactor document."""
    key: int
    buffer: BufferSession
    options: SessionOptions
    gate: ConfigGate
    file_items: list[FileItem] = field(default_factory=list)
    disposed: bool = False

    @property
    def config(self) -> RefactorConfig:
        return self.gate.config

    def dispose(self) -> None:
        if self.disposed:
            return
        self.disposed = True
        self.buffer.dispose()


class SessionRegistry:
    """Creates, tracks and tears down refactor sessions.

    Parameters
    ----------
    gate:
        Live configuration shared with every session.
    buffer_factory:
        Coroutine function ``(key, options) -> BufferSession`` that opens
        the scratch document.
    key_generator:
        Iterator of unique session keys. Defaults to ``1, 2, 3, ...``.
    """

    def __init__(
        self,
        gate: Optional[ConfigGate] = None,
        buffer_factory: Optional[BufferFactory] = None,
        key_generator: Optional[Iterator[int]] = None,
    ) -> None:
        self.gate = gate or ConfigGate()
        self._buffer_factory = buffer_factory or preview_buffer_factory
        self._keys = key_generator or itertools.count(1)
        self._sessions: dict[int, Session] = {}
        self._create_listeners: list[Callable[[int], None]] = []

    # ── Lifecycle ──

    async def create_session(self, options: Optional[SessionOptions] = None) -> Session:
        """Open a new scratch document and register its session."""
        options = options or SessionOptions()
        key = next(self._keys)
        buffer = await self._buffer_factory(key, options)
        session = Session(key=key, buffer=buffer, options=options, gate=self.gate)
        self._sessions[key] = session
        logger.info("[Registry] Session %d created", key)
        for listener in list(self._create_listeners):
            listener(key)
        return session

    async def attach_file_items(self, session: Session, items: list[FileItem]) -> None:
        await session.buffer.add_file_items(items)
        session.file_items = list(items)

    def on_create(self, listener: Callable[[int], None]) -> Callable[[], None]:
        """Call ``listener(key)`` after each session is created.

        Returns a function that removes the listener.
        """
        self._create_listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._create_listeners:
                self._create_listeners.remove(listener)

        return _unsubscribe

    # ── Editor notifications ──

    def on_document_changed(self, key: int, change: Any) -> None:
        session = self._sessions.get(key)
        if session is not None:
            session.buffer.on_change(change)

    def on_unload(self, key: int) -> None:
        session = self._sessions.pop(key, None)
        if session is not None:
            session.dispose()
            logger.info("[Registry] Session %d unloaded", key)

    # ── Queries ──

    def has(self, key: int) -> bool:
        return key in self._sessions

    def get(self, key: int) -> Optional[Session]:
        return self._sessions.get(key)

    def keys(self) -> list[int]:
        return list(self._sessions)

    def __len__(self) -> int:
        return len(self._sessions)

    async def save(self, key: int) -> Optional[bool]:
        """Save the session's document. None when no such session exists."""
        session = self._sessions.get(key)
        if session is None:
            return None
        return await session.buffer.save()

    # ── Teardown ──

    def reset(self) -> None:
        """Dispose every session and forget them."""
        sessions = list(self._sessions.values())
        self._sessions.clear()
        for session in sessions:
            session.dispose()
        if sessions:
            logger.info("[Registry] Reset, %d session(s) disposed", len(sessions))

    def dispose(self) -> None:
        """Release registry resources. Sessions are not disposed here."""
        self._create_listeners.clear()
        self._sessions.clear()
