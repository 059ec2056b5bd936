"""
Unit tests for refactor_view.config_watcher

The handler is driven with fake watchdog events; the observer itself is
patched out.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

from refactor_view.config import ConfigGate, ConfigSource
from refactor_view.config_watcher import ConfigFileHandler, ConfigWatcher


def _event(path, is_directory=False):
    event = MagicMock()
    event.is_directory = is_directory
    event.src_path = str(path)
    event.dest_path = str(path)
    return event


def _gate_for(path):
    path.write_text("refactor:\n  beforeContext: 1\n", encoding="utf-8")
    return ConfigGate(ConfigSource.load(str(path)))


class TestConfigFileHandler:

    def test_modification_reloads_gate(self, tmp_path):
        path = tmp_path / ".refactorview.yaml"
        gate = _gate_for(path)
        assert gate.config.before_context == 1

        path.write_text("refactor:\n  beforeContext: 6\n", encoding="utf-8")
        handler = ConfigFileHandler(gate, str(path), debounce_seconds=0)
        handler.on_modified(_event(path))
        assert gate.config.before_context == 6

    def test_other_files_are_ignored(self, tmp_path):
        path = tmp_path / ".refactorview.yaml"
        gate = _gate_for(path)
        handler = ConfigFileHandler(gate, str(path), debounce_seconds=0)
        with patch.object(handler, "reload") as reload:
            handler.on_modified(_event(tmp_path / "other.yaml"))
            handler.on_modified(_event(tmp_path, is_directory=True))
        reload.assert_not_called()

    def test_unrelated_section_change_does_not_reread(self, tmp_path):
        path = tmp_path / ".refactorview.yaml"
        gate = _gate_for(path)
        before = gate.config
        path.write_text("refactor:\n  beforeContext: 1\nsearch: {}\n", encoding="utf-8")
        handler = ConfigFileHandler(gate, str(path), debounce_seconds=0)
        assert handler.reload() is False
        assert gate.config is before

    def test_debounce_collapses_rapid_events(self, tmp_path):
        path = tmp_path / ".refactorview.yaml"
        gate = _gate_for(path)
        handler = ConfigFileHandler(gate, str(path), debounce_seconds=60)
        with patch.object(handler, "reload") as reload:
            handler.on_modified(_event(path))
            handler.on_modified(_event(path))
            handler.on_created(_event(path))
        reload.assert_called_once()

    def test_loop_dispatch(self, tmp_path):
        path = tmp_path / ".refactorview.yaml"
        gate = _gate_for(path)
        loop = MagicMock()
        handler = ConfigFileHandler(gate, str(path), debounce_seconds=0, loop=loop)
        handler.on_moved(_event(path))
        loop.call_soon_threadsafe.assert_called_once_with(handler.reload)


class TestConfigWatcher:

    def test_stop_when_not_started(self, tmp_path):
        watcher = ConfigWatcher(ConfigGate(ConfigSource({})), str(tmp_path / "c.yaml"))
        watcher.stop()
        assert not watcher.is_running

    @patch("refactor_view.config_watcher.Observer")
    def test_start_schedules_config_directory(self, mock_observer_cls, tmp_path):
        observer = mock_observer_cls.return_value
        watcher = ConfigWatcher(ConfigGate(ConfigSource({})), str(tmp_path / "c.yaml"))
        watcher.start()
        watcher.start()

        assert watcher.is_running
        observer.schedule.assert_called_once()
        assert observer.schedule.call_args[0][1] == str(tmp_path)
        observer.start.assert_called_once()

        watcher.stop()
        observer.stop.assert_called_once()
        observer.join.assert_called_once_with(timeout=5)
        assert not watcher.is_running
