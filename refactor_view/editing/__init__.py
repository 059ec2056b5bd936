"""Edit grouping — turns scattered edit ranges into per-file context windows."""

from .positions import (
    Position, Range, TextEdit, Location,
    adjust_range, range_sort_key, compare_ranges_using_starts,
)
from .window_builder import ContextWindow, FileItem, build_windows, build_file_items
from .workspace_edit import (
    WorkspaceEdit, TextDocumentEdit,
    is_empty_workspace_edit, locations_to_workspace_edit, uri_to_path,
)
from .edit_collector import EditCollector, LineCountResolver

__all__ = [
    "Position", "Range", "TextEdit", "Location",
    "adjust_range", "range_sort_key", "compare_ranges_using_starts",
    "ContextWindow", "FileItem", "build_windows", "build_file_items",
    "WorkspaceEdit", "TextDocumentEdit",
    "is_empty_workspace_edit", "locations_to_workspace_edit", "uri_to_path",
    "EditCollector", "LineCountResolver",
]
