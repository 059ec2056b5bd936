"""
Positions and ranges — the LSP coordinate types used by the refactor view.

Lines and characters are 0-indexed. Character offsets are carried through
untouched; nothing in this package interprets them.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import total_ordering
from typing import Any


@total_ordering
@dataclass(frozen=True)
class Position:
    """A (line, character) pair, ordered line first."""
    line: int
    character: int = 0

    def __lt__(self, other: "Position") -> bool:
        if not isinstance(other, Position):
            return NotImplemented
        return (self.line, self.character) < (other.line, other.character)

    def to_dict(self) -> dict:
        return {"line": self.line, "character": self.character}

    @classmethod
    def from_dict(cls, data: dict) -> "Position":
        return cls(line=int(data.get("line", 0)),
                   character=int(data.get("character", 0)))


@dataclass(frozen=True)
class Range:
    """A span between two positions."""
    start: Position
    end: Position

    @classmethod
    def create(cls, start_line: int, start_char: int,
               end_line: int, end_char: int) -> "Range":
        return cls(Position(start_line, start_char), Position(end_line, end_char))

    def to_dict(self) -> dict:
        return {"start": self.start.to_dict(), "end": self.end.to_dict()}

    @classmethod
    def from_dict(cls, data: dict) -> "Range":
        return cls(start=Position.from_dict(data.get("start") or {}),
                   end=Position.from_dict(data.get("end") or {}))


@dataclass(frozen=True)
class TextEdit:
    """A replacement of ``range`` with ``new_text``."""
    range: Range
    new_text: str = ""

    def to_dict(self) -> dict:
        return {"range": self.range.to_dict(), "newText": self.new_text}

    @classmethod
    def from_dict(cls, data: dict) -> "TextEdit":
        return cls(range=Range.from_dict(data.get("range") or {}),
                   new_text=str(data.get("newText") or ""))


@dataclass(frozen=True)
class Location:
    """A range inside the document identified by ``uri``."""
    uri: str
    range: Range

    @classmethod
    def from_dict(cls, data: dict) -> "Location":
        return cls(uri=str(data.get("uri") or ""),
                   range=Range.from_dict(data.get("range") or {}))


def range_sort_key(r: Range) -> tuple[int, int, int, int]:
    """Total order on ranges: start position first, end position as tie-break."""
    return (r.start.line, r.start.character, r.end.line, r.end.character)


def compare_ranges_using_starts(a: Range, b: Range) -> int:
    """Three-way comparison matching :func:`range_sort_key`."""
    ka, kb = range_sort_key(a), range_sort_key(b)
    return (ka > kb) - (ka < kb)


def adjust_range(r: Range, line_offset: int) -> Range:
    """Shift a range up by ``line_offset`` lines.

    Characters are unchanged. A negative offset moves the range back down,
    which maps a window-relative range to file coordinates.
    """
    return Range.create(
        r.start.line - line_offset, r.start.character,
        r.end.line - line_offset, r.end.character,
    )


def range_from_any(obj: Any) -> Range:
    """Accept either a :class:`Range` or its LSP dict form."""
    if isinstance(obj, Range):
        return obj
    return Range.from_dict(obj if isinstance(obj, dict) else {})
