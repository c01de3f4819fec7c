"""Command-line entry point for the Sanad legal assistant."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from sanad import (
    GenerationFailure,
    IngestionPipeline,
    LegalAssistantFlow,
    SanadError,
    bootstrap_collection,
)
from sanad.config import config

if TYPE_CHECKING:
    from collections.abc import Sequence
    from logging import Logger


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Build the CLI parser and read command-line arguments."""  # noqa: DOC201
    parser = argparse.ArgumentParser(
        description="Ask Tunisian legal questions and manage the knowledge base.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    ask = subparsers.add_parser("ask", help="Answer a legal question.")
    ask.add_argument(
        "query", help="The question, in Tunisian Arabic, French or English."
    )
    ask.add_argument(
        "--history",
        type=Path,
        default=None,
        help="JSON file holding the chat history ([{role, parts: [{text}]}]).",
    )

    ingest = subparsers.add_parser("ingest", help="Index PDF or TXT documents.")
    ingest.add_argument("paths", nargs="+", type=Path, help="Documents to ingest.")
    ingest.add_argument(
        "--collection",
        default=None,
        help="Target collection (default: LEGAL_DOCS_COLLECTION_NAME).",
    )

    bootstrap = subparsers.add_parser(
        "bootstrap", help="Create the knowledge collection if it is missing."
    )
    bootstrap.add_argument(
        "--collection",
        default=None,
        help="Collection to create (default: LEGAL_DOCS_COLLECTION_NAME).",
    )

    return parser.parse_args(argv)


def load_history(path: Path | None) -> list[dict] | None:
    """Read a chat history JSON file."""  # noqa: DOC201
    if path is None:
        return None
    with path.open(encoding="utf-8") as file:
        return json.load(file)


def run_ask(args: argparse.Namespace, logger: Logger) -> int:
    """Answer one question and print the answer JSON."""  # noqa: DOC201
    if config.is_development():
        bootstrap_collection()

    try:
        history = load_history(args.history)
        answer = LegalAssistantFlow().ask(args.query, history)
    except (OSError, json.JSONDecodeError, ValidationError):
        logger.exception("Invalid request")
        return 2
    except GenerationFailure:
        logger.exception("No answer could be generated")
        return 1
    except SanadError:
        logger.exception("Legal assistant unavailable")
        return 1

    print(json.dumps(answer.to_dict(), ensure_ascii=False, indent=2))  # noqa: T201
    return 0


def run_ingest(args: argparse.Namespace, logger: Logger) -> int:
    """Ingest every path into the collection."""  # noqa: DOC201
    collection_name = args.collection or config.LEGAL_DOCS_COLLECTION_NAME
    if not collection_name:
        logger.error("No collection given and LEGAL_DOCS_COLLECTION_NAME is not set")
        return 2

    try:
        pipeline = IngestionPipeline()
    except SanadError:
        logger.exception("Vector store unavailable")
        return 1

    total = 0
    for path in args.paths:
        try:
            total += pipeline.ingest_file(collection_name, path)
        except (OSError, ValueError, SanadError):
            logger.exception("Failed to ingest %s", path)
            return 1

    logger.info("Ingested %d chunks into %s", total, collection_name)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Validate configuration and dispatch the sub-command."""  # noqa: DOC201
    args = parse_args(argv)

    config.setup_logging()
    logger = config.get_logger(__name__)

    if args.command == "bootstrap":
        return 0 if bootstrap_collection(collection_name=args.collection) else 1

    try:
        config.validate()
    except ValueError:
        logger.exception("Configuration invalid")
        return 1

    if args.command == "ask":
        return run_ask(args, logger)
    return run_ingest(args, logger)


if __name__ == "__main__":
    sys.exit(main())
