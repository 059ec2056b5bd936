"""
Edit collector — normalizes an edit-set into sorted ranges per file and
resolves each file's line count.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from ..errors import UnresolvableLineCount
from .positions import Range, range_from_any, range_sort_key
from .window_builder import FileItem, build_file_items
from .workspace_edit import (
    TextDocumentEdit, _edit_from_any, as_workspace_edit, uri_to_path,
)

logger = logging.getLogger(__name__)


def split_lines(text: str) -> list[str]:
    """Split ``text`` on ``\\n``, ``\\r\\n`` and ``\\r`` only.

    Other separators ``str.splitlines`` knows about (form feed, U+2028, ...)
    stay inside their line. A trailing newline does not open a new line.
    """
    if not text:
        return []
    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def count_lines(text: str) -> int:
    return len(split_lines(text))


def read_lines(path: str) -> list[str]:
    """Lines of a file on disk, numbered the same way as :func:`split_lines`."""
    with open(path, "r", encoding="utf-8", errors="replace", newline="") as f:
        return split_lines(f.read())


def file_line_count(path: str) -> int:
    return len(read_lines(path))


class LineCountResolver:
    """Resolves the line count of a file key.

    Documents registered with :meth:`open_document` are answered from
    memory; everything else is read from disk in a worker thread.
    """

    def __init__(self) -> None:
        self._documents: dict[str, int] = {}

    def open_document(self, key: str, text: str) -> None:
        self._documents[key] = count_lines(text)

    def close_document(self, key: str) -> None:
        self._documents.pop(key, None)

    def is_open(self, key: str) -> bool:
        return key in self._documents

    async def resolve(self, key: str) -> int:
        if key in self._documents:
            return self._documents[key]
        path = uri_to_path(key)
        try:
            return await asyncio.to_thread(file_line_count, path)
        except OSError as exc:
            logger.warning("[EditCollector] Cannot read %s: %s", path, exc)
            raise UnresolvableLineCount(key, exc) from exc


class EditCollector:
    """Extract per-file edit ranges from a workspace edit."""

    def __init__(self, resolver: Optional[LineCountResolver] = None) -> None:
        self.resolver = resolver or LineCountResolver()

    def collect(self, edit_set: Any) -> dict[str, list[Range]]:
        """Return ``{file_key: ranges}`` with ranges sorted by start.

        ``documentChanges`` wins over ``changes`` whenever it is present.
        Files without edits are left out, so an empty dict means there is
        nothing to show.
        """
        edit = as_workspace_edit(edit_set)
        ranges_map: dict[str, list[Range]] = {}
        if edit is None:
            return ranges_map

        if edit.document_changes is not None:
            for change in edit.document_changes:
                if not TextDocumentEdit.is_text_document_edit(change):
                    continue
                if isinstance(change, dict):
                    change = TextDocumentEdit.from_dict(change)
                ranges_map[change.uri] = _edit_ranges(change.edits)
        elif edit.changes is not None:
            for uri, edits in edit.changes.items():
                ranges_map[uri] = _edit_ranges(edits)

        return {
            key: sorted(ranges, key=range_sort_key)
            for key, ranges in ranges_map.items()
            if ranges
        }

    async def line_bound_for(self, key: str) -> int:
        return await self.resolver.resolve(key)

    async def collect_file_items(
        self,
        edit_set: Any,
        before_context: int,
        after_context: int,
        token: Any = None,
    ) -> Optional[list[FileItem]]:
        """Collect, resolve line counts and build context windows.

        Returns None for an empty edit-set, or when ``token`` is cancelled
        while line counts are resolved. A failing line count aborts
        the whole operation.
        """
        ranges_map = self.collect(edit_set)
        if not ranges_map:
            logger.info("[EditCollector] Edit-set is empty, nothing to show")
            return None

        line_counts: dict[str, int] = {}
        for key in ranges_map:
            line_counts[key] = await self.line_bound_for(key)
            if token is not None and token.is_cancellation_requested:
                logger.info("[EditCollector] Cancelled while resolving %s", key)
                return None

        return build_file_items(
            ranges_map, line_counts, before_context, after_context,
            key_to_path=uri_to_path,
        )


def _edit_ranges(edits: Any) -> list[Range]:
    return [range_from_any(_edit_from_any(e).range) for e in edits or []]
