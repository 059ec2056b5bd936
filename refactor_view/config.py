"""
Configuration — loads the ``refactor`` settings from .refactorview.yaml,
environment variables, and built-in defaults (in that priority order:
env > YAML > defaults).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from typing import Any, Iterable

import yaml

logger = logging.getLogger(__name__)

SECTION = "refactor"

_DEFAULTS = {
    "beforeContext": 3,
    "afterContext": 3,
    "openCommand": "vsplit",
    "saveToFile": True,
    "showMenu": "<Tab>",
}

_ENV_KEYS = {
    "beforeContext": "REFACTOR_BEFORE_CONTEXT",
    "afterContext": "REFACTOR_AFTER_CONTEXT",
    "openCommand": "REFACTOR_OPEN_COMMAND",
    "saveToFile": "REFACTOR_SAVE_TO_FILE",
    "showMenu": "REFACTOR_SHOW_MENU",
}

# Config file search locations
_CONFIG_FILENAMES = [".refactorview.yaml", ".refactorview.yml"]


def _find_config_file(explicit_path: str | None = None) -> str | None:
    """Find the config file. Checks explicit path, CWD, then user home."""
    if explicit_path:
        if os.path.isfile(explicit_path):
            return explicit_path
        return None

    search_dirs = [os.getcwd(), os.path.expanduser("~")]
    for d in search_dirs:
        for name in _CONFIG_FILENAMES:
            path = os.path.join(d, name)
            if os.path.isfile(path):
                return path
    return None


def _load_yaml(path: str) -> dict:
    """Load YAML file, returns empty dict on failure."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("[Config] Ignoring unreadable config %s: %s", path, exc)
        return {}


@dataclass(frozen=True)
class RefactorConfig:
    """A complete snapshot of the ``refactor`` settings."""
    before_context: int = _DEFAULTS["beforeContext"]
    after_context: int = _DEFAULTS["afterContext"]
    open_command: str = _DEFAULTS["openCommand"]
    save_to_file: bool = _DEFAULTS["saveToFile"]
    show_menu: str = _DEFAULTS["showMenu"]

    def to_dict(self) -> dict:
        return {
            "beforeContext": self.before_context,
            "afterContext": self.after_context,
            "openCommand": self.open_command,
            "saveToFile": self.save_to_file,
            "showMenu": self.show_menu,
        }

    @classmethod
    def from_section(cls, section: dict | None) -> "RefactorConfig":
        """Merge a raw ``refactor`` section over the defaults."""
        sd = section or {}
        return cls(
            before_context=_context_size(sd, "beforeContext"),
            after_context=_context_size(sd, "afterContext"),
            open_command=_text(sd, "openCommand"),
            save_to_file=_to_bool(sd.get("saveToFile", _DEFAULTS["saveToFile"])),
            show_menu=_text(sd, "showMenu"),
        )


def _context_size(section: dict, key: str) -> int:
    value = section.get(key, _DEFAULTS[key])
    try:
        size = int(value)
    except (TypeError, ValueError):
        logger.warning("[Config] %s.%s=%r is not an integer, using %d",
                       SECTION, key, value, _DEFAULTS[key])
        return _DEFAULTS[key]
    if size < 0:
        logger.warning("[Config] %s.%s=%d is negative, using %d",
                       SECTION, key, size, _DEFAULTS[key])
        return _DEFAULTS[key]
    return size


def _text(section: dict, key: str) -> str:
    value = section.get(key)
    return _DEFAULTS[key] if value is None else str(value)


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


class ConfigurationChangeEvent:
    """Names the settings touched by a configuration change."""

    def __init__(self, sections: Iterable[str]):
        self.sections = frozenset(sections)

    def affects_configuration(self, section: str) -> bool:
        for changed in self.sections:
            if changed == section or changed.startswith(section + "."):
                return True
            if section.startswith(changed + "."):
                return True
        return False

    @classmethod
    def from_diff(cls, old: dict, new: dict) -> "ConfigurationChangeEvent":
        """Build an event listing every dotted key that differs."""
        return cls(_diff_keys(old or {}, new or {}, ""))


def _diff_keys(old: dict, new: dict, prefix: str) -> list[str]:
    changed: list[str] = []
    for key in sorted(set(old) | set(new), key=str):
        path = f"{prefix}{key}"
        a, b = old.get(key), new.get(key)
        if isinstance(a, dict) and isinstance(b, dict):
            changed.extend(_diff_keys(a, b, path + "."))
        elif a != b:
            changed.append(path)
    return changed


class ConfigSource:
    """Raw settings resolved from env vars over YAML data.

    ``data`` is the whole parsed YAML document; :meth:`section` returns one
    top-level section with environment overrides applied.
    """

    def __init__(self, data: dict | None = None, path: str | None = None,
                 environ: dict | None = None):
        self.data = data or {}
        self.path = path
        self._environ = environ

    def section(self, name: str) -> dict:
        raw = self.data.get(name)
        sd = dict(raw) if isinstance(raw, dict) else {}
        if name == SECTION:
            env = os.environ if self._environ is None else self._environ
            for key, env_key in _ENV_KEYS.items():
                env_val = env.get(env_key)
                if env_val is not None:
                    sd[key] = env_val
        return sd

    def reload(self) -> "ConfigSource":
        """Re-read the YAML file this source came from."""
        data = _load_yaml(self.path) if self.path else {}
        return ConfigSource(data, self.path, self._environ)

    @classmethod
    def load(cls, config_path: str | None = None) -> "ConfigSource":
        """Load config from YAML file (if found) + env vars."""
        path = _find_config_file(config_path)
        yaml_data = _load_yaml(path) if path else {}
        if path:
            logger.debug("[Config] Loaded %s", path)
        return cls(yaml_data, path)


class ConfigGate:
    """Holds the current :class:`RefactorConfig`.

    The config object is replaced on every update, never mutated, so
    readers always see a complete snapshot.
    """

    def __init__(self, source: ConfigSource | None = None):
        self._source = source or ConfigSource()
        self._config = RefactorConfig.from_section(self._source.section(SECTION))

    @property
    def config(self) -> RefactorConfig:
        return self._config

    @property
    def source(self) -> ConfigSource:
        return self._source

    def on_configuration_changed(
        self,
        event: ConfigurationChangeEvent | None = None,
        source: ConfigSource | None = None,
    ) -> bool:
        """Recompute the config. Returns True when it was re-read."""
        if source is not None:
            self._source = source
        if event is not None and not event.affects_configuration(SECTION):
            return False
        self._config = RefactorConfig.from_section(self._source.section(SECTION))
        logger.info("[Config] refactor settings updated: %s", self._config.to_dict())
        return True

    def override(self, **changes: Any) -> RefactorConfig:
        """Swap in a copy of the current config with ``changes`` applied."""
        self._config = replace(self._config, **changes)
        return self._config
