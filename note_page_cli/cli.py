from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from .config import CMD_NAME, Config, ConfigStore
from .errors import NotePageError
from .firestore_client import FirestoreClient
from .migrate import add_notebook_id
from .reader import fetch_notebooks, fetch_pages

LOGGER_NAME = "note_page_cli"
LOG_FILENAME = f"{CMD_NAME}.log"
DEBUG_LOG_FILENAME = f"{CMD_NAME}.debug.log"


def build_arg_parser() -> argparse.ArgumentParser:
    """Construct the command-line parser for note-page-cli."""

    parser = argparse.ArgumentParser(
        prog=CMD_NAME, description="Print notebooks and pages stored in Firestore."
    )
    parser.add_argument("-c", dest="edit", action="store_true", help="edit config")
    parser.add_argument("-m", dest="migrate", action="store_true", help="migrate Data")
    parser.add_argument(
        "--debug-log",
        action="store_true",
        help=f"Write raw documents to {DEBUG_LOG_FILENAME} in the config directory",
    )
    return parser


@dataclass
class AppContext:
    config: Config
    client: FirestoreClient
    logger: logging.Logger
    debug_logger: Optional[logging.Logger] = None


def print_records(label: str, records: Sequence) -> None:
    print(f"[info] {label}: {len(records)}")
    print(json.dumps([record.as_json() for record in records], indent=2, ensure_ascii=False))


def show_collections(ctx: AppContext) -> None:
    """Fetch both collections and print them, notebooks first."""

    books = fetch_notebooks(ctx.client, debug_logger=ctx.debug_logger)
    ctx.logger.info("Fetched %d notebooks", len(books))
    print_records("notebooks", books)

    pages = fetch_pages(ctx.client, debug_logger=ctx.debug_logger)
    ctx.logger.info("Fetched %d pages", len(pages))
    print_records("pages", pages)


def run_migration(ctx: AppContext) -> None:
    result = add_notebook_id(ctx.client, debug_logger=ctx.debug_logger)
    print(f"[info] {result.updated} of {result.scanned} pages set to notebook {result.default_notebook.id}")
    print("migrate finished.")


def run_cli(argv: Optional[List[str]] = None, *, store: Optional[ConfigStore] = None) -> int:
    """Entry point invoked by note_page.py, the console script, or tests."""

    parser = build_arg_parser()
    args = parser.parse_args(argv)

    store = store or ConfigStore()
    logger = logging.getLogger(LOGGER_NAME)

    try:
        logger = configure_logging(store.directory)
        debug_logger = configure_debug_logger(store.directory) if args.debug_log else None

        if args.edit:
            store.edit()
            logger.info("Edited %s", store.path)
            return 0

        config = store.load()
        client = FirestoreClient.from_key_file(config.require_account_key_file())
    except (NotePageError, OSError) as exc:
        return report_error(logger, exc)

    with client:
        ctx = AppContext(config=config, client=client, logger=logger, debug_logger=debug_logger)
        try:
            if args.migrate:
                run_migration(ctx)
            else:
                show_collections(ctx)
        except NotePageError as exc:
            return report_error(logger, exc)

    return 0


def report_error(logger: logging.Logger, exc: Exception) -> int:
    print(f"[error] {exc}")
    logger.error("%s", exc)
    return 1


def main() -> None:
    sys.exit(run_cli(sys.argv[1:]))


def _log_to_file(logger: logging.Logger, path: Path, fmt: str) -> logging.Logger:
    """Point ``logger`` at ``path``, swapping out a handler left on another file."""

    target = os.path.abspath(path)
    for handler in list(logger.handlers):
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == target:
            return logger
        logger.removeHandler(handler)
        handler.close()

    path.parent.mkdir(parents=True, exist_ok=True)
    logger.setLevel(logging.INFO)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(fmt))
    logger.addHandler(handler)
    return logger


def configure_logging(directory: Path) -> logging.Logger:
    """Set up the primary info-level logger that writes to note-page-cli.log."""

    return _log_to_file(
        logging.getLogger(LOGGER_NAME)
        ,directory / LOG_FILENAME
        ,"%(asctime)s [%(levelname)s] %(message)s"
    )


def configure_debug_logger(directory: Path) -> logging.Logger:
    """Create or return the debug logger that captures raw Firestore documents."""

    return _log_to_file(
        logging.getLogger(f"{LOGGER_NAME}.debug")
        ,directory / DEBUG_LOG_FILENAME
        ,"%(asctime)s [DEBUG] %(message)s"
    )
