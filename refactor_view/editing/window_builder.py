"""
Window builder — groups sorted edit ranges of a file into context windows.

A context window is a contiguous block of lines holding one or more edits
plus a few lines of surrounding context. Windows whose context regions
overlap or touch are merged so the same file area is never shown twice.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Sequence

from .positions import Range, adjust_range

logger = logging.getLogger(__name__)


@dataclass
class ContextWindow:
    """A line range ``[start, end)`` of a file with its edit highlights.

    ``highlights`` are relative to ``start``: line 0 of a highlight is the
    first line of the window.
    """
    start: int
    end: int
    highlights: list[Range] = field(default_factory=list)

    @property
    def line_count(self) -> int:
        return self.end - self.start

    def to_absolute(self) -> list[Range]:
        """Return the highlights in file coordinates."""
        return [adjust_range(h, -self.start) for h in self.highlights]

    def to_dict(self) -> dict:
        return {
            "start": self.start,
            "end": self.end,
            "highlights": [h.to_dict() for h in self.highlights],
        }


@dataclass
class FileItem:
    """All context windows of one file."""
    filepath: str
    ranges: list[ContextWindow] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "filepath": self.filepath,
            "ranges": [w.to_dict() for w in self.ranges],
        }


def build_windows(
    edit_ranges: Iterable[Range],
    before_context: int,
    after_context: int,
    max_line: int,
) -> list[ContextWindow]:
    """Merge edit ranges into context windows in a single pass.

    Parameters
    ----------
    edit_ranges:
        Edit ranges of one file, sorted by start position.
    before_context / after_context:
        Lines of context kept above and below each edit's start line.
    max_line:
        Line count of the file; no window extends past it.

    Returns
    -------
    list[ContextWindow]
        Non-overlapping windows in ascending order.
    """
    windows: list[ContextWindow] = []
    current: ContextWindow | None = None

    for r in edit_ranges:
        line = r.start.line
        start = max(0, line - before_context)
        end = min(max_line, line + after_context + 1)

        if current is not None and start < current.end:
            # Input is sorted, so only the most recent window can overlap.
            current.end = max(current.end, end)
            current.highlights.append(adjust_range(r, current.start))
        else:
            if current is not None:
                windows.append(current)
            current = ContextWindow(
                start=start,
                end=end,
                highlights=[adjust_range(r, start)],
            )

    if current is not None:
        windows.append(current)
    return windows


def build_file_items(
    ranges_by_key: Mapping[str, Sequence[Range]],
    line_counts: Mapping[str, int],
    before_context: int,
    after_context: int,
    key_to_path=None,
) -> list[FileItem]:
    """Build one :class:`FileItem` per file key, preserving key order.

    ``key_to_path`` converts a file key into the displayed file path; keys
    are used as-is when omitted.
    """
    items: list[FileItem] = []
    for key, ranges in ranges_by_key.items():
        windows = build_windows(ranges, before_context, after_context,
                                line_counts[key])
        filepath = key_to_path(key) if key_to_path else key
        logger.debug("[WindowBuilder] %s: %d edit(s) -> %d window(s)",
                     filepath, len(ranges), len(windows))
        items.append(FileItem(filepath=filepath, ranges=windows))
    return items
