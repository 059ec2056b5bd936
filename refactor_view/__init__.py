"""refactor-view — review scattered edits of a rename or search as context windows."""

__version__ = "0.1.0"
