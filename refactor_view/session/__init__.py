"""Refactor sessions — scratch documents and the registry that owns them."""

from .buffer import BufferSession, PreviewBuffer, SessionOptions, SEPARATOR
from .registry import Session, SessionRegistry, preview_buffer_factory

__all__ = [
    "BufferSession", "PreviewBuffer", "SessionOptions", "SEPARATOR",
    "Session", "SessionRegistry", "preview_buffer_factory",
]
