"""
Refactor — entry points that turn an edit-set into a refactor session.

An edit-set comes from a rename provider (:meth:`Refactor.do_refactor`),
from a list of locations (:meth:`Refactor.from_locations`) or directly as a
workspace edit (:meth:`Refactor.from_workspace_edit`).
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional

from .config import ConfigGate, RefactorConfig
from .editing.edit_collector import EditCollector
from .editing.positions import Position
from .editing.workspace_edit import (
    is_empty_workspace_edit, locations_to_workspace_edit,
)
from .errors import ProviderRefusal
from .session.buffer import SessionOptions
from .session.registry import Session, SessionRegistry

logger = logging.getLogger(__name__)

PLACEHOLDER_NAME = "NewName"


class CancellationToken:
    """Cooperative cancellation flag checked after every await."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def is_cancellation_requested(self) -> bool:
        return self._cancelled


def _cancelled(token: Optional[CancellationToken]) -> bool:
    return token is not None and token.is_cancellation_requested


class RenameProvider(ABC):
    """Source of rename edits, typically backed by a language server."""

    @abstractmethod
    async def prepare_rename(self, document: Any, position: Position,
                             token: CancellationToken) -> Any:
        """Return a range (or True / None) if renaming is possible, False if not."""

    @abstractmethod
    async def provide_rename_edits(self, document: Any, position: Position,
                                   new_name: str,
                                   token: CancellationToken) -> Optional[Any]:
        """Return the workspace edit renaming the symbol at ``position``."""


class Refactor:
    """Builds refactor sessions from edit-sets."""

    def __init__(
        self,
        gate: Optional[ConfigGate] = None,
        registry: Optional[SessionRegistry] = None,
        collector: Optional[EditCollector] = None,
    ) -> None:
        self.gate = gate or (registry.gate if registry else ConfigGate())
        self.registry = registry or SessionRegistry(self.gate)
        self.collector = collector or EditCollector()

    @property
    def config(self) -> RefactorConfig:
        return self.gate.config

    async def do_refactor(
        self,
        provider: Optional[RenameProvider],
        document: Any,
        position: Position,
        token: Optional[CancellationToken] = None,
        options: Optional[SessionOptions] = None,
    ) -> Optional[Session]:
        """Open a session showing every edit of renaming the symbol at ``position``.

        Returns None when the request is cancelled or yields no edits.
        Raises :class:`ProviderRefusal` when the provider declines.
        """
        if provider is None:
            raise ProviderRefusal("Rename provider not found for current buffer")
        token = token or CancellationToken()

        res = await provider.prepare_rename(document, position, token)
        if token.is_cancellation_requested:
            return None
        if res is False:
            raise ProviderRefusal(
                "Provider returns null on prepare, unable to rename at current position"
            )

        edit = await provider.provide_rename_edits(document, position,
                                                   PLACEHOLDER_NAME, token)
        if token.is_cancellation_requested:
            return None
        if not edit:
            raise ProviderRefusal("Provider returns null for rename edits.")

        if options is None:
            options = SessionOptions(filetype=getattr(document, "filetype", None))
        return await self.from_workspace_edit(edit, options=options, token=token)

    async def from_locations(
        self,
        locations: Iterable[Any],
        options: Optional[SessionOptions] = None,
    ) -> Optional[Session]:
        """Open a session around a list of locations (search hits, references)."""
        locations = list(locations or [])
        if not locations:
            return None
        return await self.from_workspace_edit(locations_to_workspace_edit(locations),
                                              options=options)

    async def from_workspace_edit(
        self,
        edit: Any,
        options: Optional[SessionOptions] = None,
        token: Optional[CancellationToken] = None,
    ) -> Optional[Session]:
        """Open a session for ``edit``. Returns None when there is nothing to show."""
        if not edit or is_empty_workspace_edit(edit):
            return None
        config = self.gate.config
        items = await self.collector.collect_file_items(
            edit, config.before_context, config.after_context, token=token,
        )
        if items is None or _cancelled(token):
            return None

        session = await self.registry.create_session(options)
        try:
            if not _cancelled(token):
                await self.registry.attach_file_items(session, items)
        except Exception:
            logger.warning("[Refactor] Rendering session %d failed, closing it",
                           session.key)
            self.registry.on_unload(session.key)
            raise
        if _cancelled(token):
            logger.info("[Refactor] Session %d cancelled, closing it", session.key)
            self.registry.on_unload(session.key)
            return None
        logger.info("[Refactor] Session %d: %d file(s), %d window(s)",
                    session.key, len(items), sum(len(i.ranges) for i in items))
        return session

    # ── Registry passthroughs ──

    def has(self, key: int) -> bool:
        return self.registry.has(key)

    def get_session(self, key: int) -> Optional[Session]:
        return self.registry.get(key)

    async def save(self, key: int) -> Optional[bool]:
        return await self.registry.save(key)

    def reset(self) -> None:
        self.registry.reset()

    def dispose(self) -> None:
        self.registry.dispose()


__all__ = [
    "CancellationToken", "RenameProvider", "Refactor",
    "PLACEHOLDER_NAME",
]
