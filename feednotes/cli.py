"""
CLI for feednotes.

Usage:
    feednotes                     # open the feed
    feednotes --file notes.json   # use another notes file
    feednotes --version

The notes file must already exist; feednotes never creates it.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from feednotes import __version__
from feednotes.app import FeedNotes
from feednotes.config import ConfigError, get_config_path, get_log_path, get_notes_path, load_config
from feednotes.store import NoteStore, NoteStoreError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_LOAD_FAILED = 1
EXIT_BAD_CONFIG = 2
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="feednotes",
        description="A tiny terminal feed of notes with a vim-like composer.",
    )
    parser.add_argument("--file", type=Path, help="notes file (default: ~/.local/share/feednotes/notes.json)", default=None)
    parser.add_argument("--config", type=Path, help="config file (YAML)", default=None)
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def setup_logging(log_path: Path, level: str) -> None:
    """Send log records to *log_path*; curses owns the terminal."""
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_path, encoding="utf-8")
    except OSError as e:
        print(f"feednotes: warning: logging disabled ({log_path}: {e.strerror or e})", file=sys.stderr)
        handler = logging.NullHandler()
    logging.basicConfig(
        handlers=[handler],
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Run feednotes; return the process exit code."""
    args = build_parser().parse_args(argv)

    if args.config and not args.config.expanduser().exists():
        print(f"feednotes: config file not found: {args.config}", file=sys.stderr)
        return EXIT_BAD_CONFIG
    try:
        config = load_config(args.config.expanduser() if args.config else get_config_path())
    except ConfigError as e:
        print(f"feednotes: {e}", file=sys.stderr)
        return EXIT_BAD_CONFIG

    setup_logging(get_log_path(config), config["log_level"])
    notes_path = args.file.expanduser() if args.file else get_notes_path(config)

    try:
        store = NoteStore.load(notes_path)
    except NoteStoreError as e:
        logger.error("Cannot load notes: %s", e)
        print(f"feednotes: {e}", file=sys.stderr)
        return EXIT_LOAD_FAILED

    try:
        app = FeedNotes(store, config)
    except ConfigError as e:
        print(f"feednotes: {e}", file=sys.stderr)
        return EXIT_BAD_CONFIG

    logger.info("feednotes %s starting with %s", __version__, notes_path)
    try:
        app.run()
    except KeyboardInterrupt:
        logger.warning("Interrupted; unsaved changes were dropped")
        return EXIT_INTERRUPTED
    logger.info("feednotes exiting")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
