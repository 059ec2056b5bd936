"""
Workspace edits — the two LSP shapes an edit-set can arrive in.

``changes`` maps a document URI to its text edits; ``documentChanges`` is a
list of per-document edit groups that may also contain file operations
(create / rename / delete), which carry no text edits and are skipped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional
from urllib.parse import urlparse
from urllib.request import url2pathname

from .positions import Location, TextEdit


@dataclass
class TextDocumentEdit:
    """Edits of the document identified by ``uri``."""
    uri: str
    edits: list[TextEdit] = field(default_factory=list)
    version: Optional[int] = None

    @staticmethod
    def is_text_document_edit(obj: Any) -> bool:
        """True for a ``TextDocumentEdit`` or its dict form."""
        if isinstance(obj, TextDocumentEdit):
            return True
        return (
            isinstance(obj, dict)
            and isinstance(obj.get("textDocument"), dict)
            and isinstance(obj.get("edits"), list)
        )

    @classmethod
    def from_dict(cls, data: dict) -> "TextDocumentEdit":
        doc = data.get("textDocument") or {}
        return cls(
            uri=str(doc.get("uri") or ""),
            edits=[_edit_from_any(e) for e in data.get("edits") or []],
            version=doc.get("version"),
        )


@dataclass
class WorkspaceEdit:
    """An edit-set spanning one or more documents."""
    changes: Optional[dict[str, list[TextEdit]]] = None
    document_changes: Optional[list[Any]] = None

    @classmethod
    def from_dict(cls, data: dict) -> "WorkspaceEdit":
        changes = None
        raw_changes = data.get("changes")
        if isinstance(raw_changes, dict):
            changes = {
                str(uri): [_edit_from_any(e) for e in edits or []]
                for uri, edits in raw_changes.items()
            }

        document_changes = None
        raw_doc_changes = data.get("documentChanges")
        if isinstance(raw_doc_changes, list):
            document_changes = []
            for item in raw_doc_changes:
                if TextDocumentEdit.is_text_document_edit(item):
                    document_changes.append(TextDocumentEdit.from_dict(item))
                else:
                    # File operations are kept so the shape stays faithful.
                    document_changes.append(item)
        return cls(changes=changes, document_changes=document_changes)

    def to_dict(self) -> dict:
        out: dict[str, Any] = {}
        if self.changes is not None:
            out["changes"] = {
                uri: [e.to_dict() for e in edits]
                for uri, edits in self.changes.items()
            }
        if self.document_changes is not None:
            docs: list[Any] = []
            for item in self.document_changes:
                if isinstance(item, TextDocumentEdit):
                    docs.append({
                        "textDocument": {"uri": item.uri, "version": item.version},
                        "edits": [e.to_dict() for e in item.edits],
                    })
                else:
                    docs.append(item)
            out["documentChanges"] = docs
        return out


def as_workspace_edit(edit_set: Any) -> Optional[WorkspaceEdit]:
    """Coerce an edit-set given as a dict or :class:`WorkspaceEdit`."""
    if edit_set is None:
        return None
    if isinstance(edit_set, WorkspaceEdit):
        return edit_set
    if isinstance(edit_set, dict):
        return WorkspaceEdit.from_dict(edit_set)
    raise TypeError(f"Unsupported edit-set type: {type(edit_set).__name__}")


def is_empty_workspace_edit(edit_set: Any) -> bool:
    """True when the edit-set touches no document with at least one edit."""
    edit = as_workspace_edit(edit_set)
    if edit is None:
        return True
    if edit.document_changes:
        for item in edit.document_changes:
            if isinstance(item, TextDocumentEdit) and item.edits:
                return False
            if not isinstance(item, TextDocumentEdit):
                # File operations count as work to do.
                return False
    if edit.changes:
        for edits in edit.changes.values():
            if edits:
                return False
    return True


def locations_to_workspace_edit(locations: Iterable[Any]) -> WorkspaceEdit:
    """Group locations by URI into a ``changes`` edit-set with empty text."""
    changes: dict[str, list[TextEdit]] = {}
    for loc in locations:
        if not isinstance(loc, Location):
            loc = Location.from_dict(loc)
        changes.setdefault(loc.uri, []).append(TextEdit(range=loc.range, new_text=""))
    return WorkspaceEdit(changes=changes)


def uri_to_path(key: str) -> str:
    """Convert a ``file://`` URI into a filesystem path.

    Keys without a scheme are treated as paths already and returned as-is;
    other schemes are returned unchanged.
    """
    text = str(key or "").strip()
    parsed = urlparse(text)
    if parsed.scheme != "file":
        return text
    path = url2pathname(parsed.path)
    if parsed.netloc and parsed.netloc != "localhost":
        path = f"//{parsed.netloc}{path}"
    return path


def _edit_from_any(obj: Any) -> TextEdit:
    if isinstance(obj, TextEdit):
        return obj
    return TextEdit.from_dict(obj if isinstance(obj, dict) else {})
