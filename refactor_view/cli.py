"""
Command line entry point — previews the context windows of an edit-set.

The edit-set file holds an LSP workspace edit (``changes`` or
``documentChanges``) or, with ``--locations``, a list of locations. JSON
and YAML are both accepted.
"""

import argparse
import asyncio
import logging
import os
import sys

import yaml

from .cli_display import format_json, format_summary, setup_logger
from .config import ConfigGate, ConfigSource
from .errors import RefactorViewError
from .refactor import Refactor
from .session.buffer import SessionOptions

logger = logging.getLogger(__name__)


def load_edit_set(path: str):
    """Read a JSON or YAML edit-set file."""
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


async def _run(args, refactor: Refactor, data) -> int:
    options = SessionOptions(cwd=os.getcwd())
    if args.locations:
        session = await refactor.from_locations(data or [], options=options)
    elif data is not None and not isinstance(data, dict):
        print("Expected a workspace edit object; use --locations for a list.",
              file=sys.stderr)
        return 2
    else:
        session = await refactor.from_workspace_edit(data, options=options)

    if session is None:
        print("Nothing to refactor: the edit-set is empty.")
        return 0

    if args.json:
        print(format_json(session.file_items))
    elif args.summary:
        print(format_summary(session.file_items))
    else:
        print(session.buffer.render())
    refactor.registry.on_unload(session.key)
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Group the edits of a workspace edit into context windows")
    parser.add_argument("edits", help="JSON/YAML file with a workspace edit")
    parser.add_argument("--locations", action="store_true",
                        help="The file holds a list of locations instead")
    parser.add_argument("--before", type=int, default=None,
                        help="Lines of context before each edit")
    parser.add_argument("--after", type=int, default=None,
                        help="Lines of context after each edit")
    parser.add_argument("--config", default=None,
                        help="Path to a .refactorview.yaml config file")
    parser.add_argument("--json", action="store_true",
                        help="Print the file items as JSON")
    parser.add_argument("--summary", action="store_true",
                        help="Print one line per file")
    parser.add_argument("--log-dir", default=None,
                        help="Write a debug log to this directory")
    args = parser.parse_args(argv)

    if args.log_dir:
        setup_logger(args.log_dir)

    gate = ConfigGate(ConfigSource.load(args.config))
    overrides = {}
    if args.before is not None:
        overrides["before_context"] = max(0, args.before)
    if args.after is not None:
        overrides["after_context"] = max(0, args.after)
    if overrides:
        gate.override(**overrides)

    try:
        data = load_edit_set(args.edits)
    except (OSError, yaml.YAMLError) as exc:
        print(f"Cannot read {args.edits}: {exc}", file=sys.stderr)
        return 2

    refactor = Refactor(gate)
    try:
        return asyncio.run(_run(args, refactor, data))
    except RefactorViewError as exc:
        logger.warning("[CLI] %s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        refactor.reset()
        refactor.dispose()


if __name__ == "__main__":
    sys.exit(main())
