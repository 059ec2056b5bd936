import json
import logging
import os
from datetime import datetime

from .editing.window_builder import FileItem


def setup_logger(log_dir: str = ".refactorview/logs") -> logging.Logger:
    """Creates a file logger. All verbose output goes here."""
    os.makedirs(log_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = os.path.join(log_dir, f"refactor_{timestamp}.log")

    logger = logging.getLogger("refactor_view")
    logger.setLevel(logging.DEBUG)

    # File handler — captures everything
    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(message)s", datefmt="%H:%M:%S"
    ))
    logger.addHandler(fh)

    return logger


def format_summary(items: list[FileItem]) -> str:
    """One line per file: path, window count and edit count."""
    lines = []
    for item in items:
        edits = sum(len(w.highlights) for w in item.ranges)
        spans = ", ".join(f"{w.start + 1}-{w.end}" for w in item.ranges)
        lines.append(f"{item.filepath}: {edits} edit(s) in {len(item.ranges)} "
                     f"window(s) [lines {spans}]")
    return "\n".join(lines)


def format_json(items: list[FileItem]) -> str:
    return json.dumps([item.to_dict() for item in items], indent=2)
