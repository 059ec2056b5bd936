"""
Buffer sessions — the scratch document a refactor session renders into.

:class:`BufferSession` is the interface the registry talks to. The editor
integration provides the real implementation; :class:`PreviewBuffer` keeps
the rendered lines in memory and is used by the CLI and the tests.
"""

from __future__ import annotations

import asyncio
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from ..editing.edit_collector import read_lines
from ..editing.positions import Range, adjust_range
from ..editing.window_builder import ContextWindow, FileItem

logger = logging.getLogger(__name__)

SEPARATOR = "\u3000"
HEADER = "Save current buffer to make changes"


@dataclass(frozen=True)
class SessionOptions:
    """Editor handles a session is opened with. Opaque to the registry."""
    from_window_id: Any = None
    window_id: Any = None
    cwd: str = ""
    filetype: Optional[str] = None


class BufferSession(ABC):
    """A rendered refactor document."""

    @abstractmethod
    async def add_file_items(self, items: list[FileItem]) -> None:
        """Render the context windows of ``items``."""

    @abstractmethod
    def on_change(self, change: Any) -> None:
        """React to an edit of the rendered document."""

    @abstractmethod
    async def save(self) -> bool:
        """Write the document's edits back. Returns True on success."""

    @abstractmethod
    def dispose(self) -> None:
        """Release editor resources."""


class PreviewBuffer(BufferSession):
    """In-memory rendering of a refactor session.

    Layout: a header line, a separator line, then for every context window a
    title line (``SEPARATOR + relative path``) followed by the window's lines.
    """

    def __init__(
        self,
        key: int,
        options: SessionOptions,
        writer: Optional[Callable[["PreviewBuffer"], Awaitable[None]]] = None,
        read_lines: Callable[[str], list[str]] = read_lines,
    ) -> None:
        self.key = key
        self.options = options
        self.lines: list[str] = [HEADER, SEPARATOR]
        self.file_items: list[FileItem] = []
        self.changes: list[Any] = []
        self.disposed = False
        self._writer = writer
        self._read_lines = read_lines
        # (buffer line of the window's first line, window) per rendered window
        self._placements: list[tuple[int, ContextWindow]] = []

    @property
    def modified(self) -> bool:
        return bool(self.changes)

    def display_path(self, filepath: str) -> str:
        cwd = self.options.cwd
        if cwd and os.path.isabs(filepath):
            try:
                rel = os.path.relpath(filepath, cwd)
            except ValueError:
                return filepath
            if not rel.startswith(".."):
                return rel
        return filepath

    async def add_file_items(self, items: list[FileItem]) -> None:
        for item in items:
            content = await asyncio.to_thread(self._read_lines, item.filepath)
            title = SEPARATOR + self.display_path(item.filepath)
            for window in item.ranges:
                self.lines.append(title)
                self._placements.append((len(self.lines), window))
                self.lines.extend(content[window.start:window.end])
            self.file_items.append(item)
        logger.debug("[PreviewBuffer] session %d: %d line(s) rendered",
                     self.key, len(self.lines))

    def highlight_ranges(self) -> list[Range]:
        """Highlights of every window, in buffer coordinates."""
        out: list[Range] = []
        for first_line, window in self._placements:
            out.extend(adjust_range(h, -first_line) for h in window.highlights)
        return out

    def render(self) -> str:
        return "\n".join(self.lines)

    def on_change(self, change: Any) -> None:
        if self.disposed:
            return
        self.changes.append(change)

    async def save(self) -> bool:
        if self._writer is None:
            logger.info("[PreviewBuffer] session %d is read-only", self.key)
            return False
        await self._writer(self)
        self.changes.clear()
        return True

    def dispose(self) -> None:
        if self.disposed:
            return
        self.disposed = True
        self._placements.clear()
        logger.debug("[PreviewBuffer] session %d disposed", self.key)
