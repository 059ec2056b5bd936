"""Tests for the SessionRegistry lifecycle."""

import itertools
from unittest.mock import AsyncMock, MagicMock

import pytest

from refactor_view.config import ConfigGate, ConfigSource
from refactor_view.editing.window_builder import ContextWindow, FileItem
from refactor_view.session.buffer import BufferSession, PreviewBuffer, SessionOptions
from refactor_view.session.registry import SessionRegistry


def _mock_factory():
    created = []

    async def factory(key, options):
        buf = MagicMock(spec=BufferSession)
        buf.add_file_items = AsyncMock()
        buf.save = AsyncMock(return_value=True)
        created.append(buf)
        return buf

    return factory, created


@pytest.fixture
def registry():
    factory, created = _mock_factory()
    reg = SessionRegistry(ConfigGate(ConfigSource({})), buffer_factory=factory,
                          key_generator=itertools.count(100))
    reg.created_buffers = created
    return reg


class TestCreateSession:
    @pytest.mark.asyncio
    async def test_keys_come_from_generator(self, registry):
        s1 = await registry.create_session()
        s2 = await registry.create_session(SessionOptions(cwd="/tmp"))
        assert (s1.key, s2.key) == (100, 101)
        assert registry.has(100) and registry.has(101)
        assert registry.get(101).options.cwd == "/tmp"
        assert registry.keys() == [100, 101]
        assert len(registry) == 2

    @pytest.mark.asyncio
    async def test_default_keys_start_at_one(self):
        reg = SessionRegistry(ConfigGate(ConfigSource({})))
        session = await reg.create_session()
        assert session.key == 1
        assert isinstance(session.buffer, PreviewBuffer)

    @pytest.mark.asyncio
    async def test_session_reads_live_config(self, registry):
        session = await registry.create_session()
        assert session.config.before_context == 3
        registry.gate.override(before_context=9)
        assert session.config.before_context == 9

    @pytest.mark.asyncio
    async def test_on_create_listener(self, registry):
        seen = []
        unsubscribe = registry.on_create(seen.append)
        await registry.create_session()
        unsubscribe()
        await registry.create_session()
        assert seen == [100]

    @pytest.mark.asyncio
    async def test_attach_file_items(self, registry):
        session = await registry.create_session()
        items = [FileItem("a.py", [ContextWindow(0, 3)])]
        await registry.attach_file_items(session, items)
        session.buffer.add_file_items.assert_awaited_once_with(items)
        assert session.file_items == items


class TestNotifications:
    @pytest.mark.asyncio
    async def test_document_change_routed_to_owner(self, registry):
        s1 = await registry.create_session()
        s2 = await registry.create_session()
        registry.on_document_changed(s2.key, {"changes": 1})
        s2.buffer.on_change.assert_called_once_with({"changes": 1})
        s1.buffer.on_change.assert_not_called()

    def test_unknown_keys_are_ignored(self, registry):
        registry.on_document_changed(5, {})
        registry.on_unload(5)
        assert not registry.has(5)
        assert registry.get(5) is None

    @pytest.mark.asyncio
    async def test_unload_disposes_and_removes(self, registry):
        session = await registry.create_session()
        registry.on_unload(session.key)
        assert not registry.has(session.key)
        session.buffer.dispose.assert_called_once()

        registry.on_document_changed(session.key, {})
        session.buffer.on_change.assert_not_called()

        registry.on_unload(session.key)
        session.buffer.dispose.assert_called_once()

    @pytest.mark.asyncio
    async def test_save(self, registry):
        session = await registry.create_session()
        assert await registry.save(session.key) is True
        assert await registry.save(999) is None


class TestTeardown:
    @pytest.mark.asyncio
    async def test_reset_disposes_each_session_once(self, registry):
        sessions = [await registry.create_session() for _ in range(3)]
        sessions[0].dispose()
        registry.reset()
        assert len(registry) == 0
        for session in sessions:
            session.buffer.dispose.assert_called_once()
            assert session.disposed

    @pytest.mark.asyncio
    async def test_dispose_clears_without_disposing(self, registry):
        session = await registry.create_session()
        registry.dispose()
        assert not registry.has(session.key)
        session.buffer.dispose.assert_not_called()
        registry.dispose()
