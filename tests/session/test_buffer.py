"""Tests for the in-memory PreviewBuffer."""

from unittest.mock import AsyncMock

import pytest

from refactor_view.editing.positions import Range
from refactor_view.editing.window_builder import ContextWindow, FileItem
from refactor_view.session.buffer import HEADER, SEPARATOR, PreviewBuffer, SessionOptions


def _source(tmp_path, n=20):
    path = tmp_path / "src" / "mod.py"
    path.parent.mkdir()
    path.write_text("".join(f"line {i}\n" for i in range(n)), encoding="utf-8")
    return str(path)


class TestPreviewBuffer:
    @pytest.mark.asyncio
    async def test_renders_windows_with_titles(self, tmp_path):
        path = _source(tmp_path)
        buf = PreviewBuffer(1, SessionOptions(cwd=str(tmp_path)))
        await buf.add_file_items([FileItem(path, [
            ContextWindow(2, 4, [Range.create(1, 0, 1, 4)]),
            ContextWindow(10, 11, [Range.create(0, 5, 0, 6)]),
        ])])

        title = SEPARATOR + "src/mod.py"
        assert buf.lines == [
            HEADER, SEPARATOR,
            title, "line 2", "line 3",
            title, "line 10",
        ]
        assert buf.highlight_ranges() == [
            Range.create(4, 0, 4, 4),
            Range.create(6, 5, 6, 6),
        ]
        assert buf.render().splitlines()[3] == "line 2"

    @pytest.mark.asyncio
    async def test_path_outside_cwd_is_shown_absolute(self, tmp_path):
        path = _source(tmp_path)
        buf = PreviewBuffer(1, SessionOptions(cwd=str(tmp_path / "other")))
        await buf.add_file_items([FileItem(path, [ContextWindow(0, 1)])])
        assert buf.lines[2] == SEPARATOR + path

    @pytest.mark.asyncio
    async def test_form_feed_does_not_shift_lines(self, tmp_path):
        path = tmp_path / "mod.c"
        path.write_text("l0\n\x0cl1\nl2 x\nl3\n", encoding="utf-8")
        buf = PreviewBuffer(1, SessionOptions())
        await buf.add_file_items([FileItem(str(path), [ContextWindow(2, 3)])])
        assert buf.lines[3:] == ["l2 x"]

    @pytest.mark.asyncio
    async def test_save_without_writer_is_read_only(self):
        buf = PreviewBuffer(1, SessionOptions())
        buf.on_change({"text": "x"})
        assert buf.modified
        assert await buf.save() is False
        assert buf.modified

    @pytest.mark.asyncio
    async def test_save_with_writer(self):
        writer = AsyncMock()
        buf = PreviewBuffer(1, SessionOptions(), writer=writer)
        buf.on_change({"text": "x"})
        assert await buf.save() is True
        writer.assert_awaited_once_with(buf)
        assert not buf.modified

    def test_dispose_is_idempotent(self):
        buf = PreviewBuffer(1, SessionOptions())
        buf.dispose()
        buf.dispose()
        assert buf.disposed
        buf.on_change({})
        assert not buf.modified
