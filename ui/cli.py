"""Command-line access to a bot's knowledge base."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

from application.use_cases.ingest_documents import ingest_file, process_bot_documents
from application.use_cases.scrape_website import ingest_website, scrape_website
from application.use_cases.search import get_context_for_query, search
from domain.entities import KnowledgeDocument
from domain.errors import KnowledgeBaseError
from infrastructure.config import ContainerConfig, build_default_container
from ui.logging_utils import setup_logging

logger = logging.getLogger(__name__)


def _document_summary(document: KnowledgeDocument) -> dict[str, object]:
    return {
        "id": document.id,
        "title": document.title,
        "file_type": document.file_type,
        "status": document.status,
        "file_size": document.file_size,
        "processing_error": document.processing_error,
    }


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--db", help="SQLite database path (default: BOTKNOWLEDGE_DB_PATH or botknowledge.db)")
    parser.add_argument("--log-level", default=None, help="Logging level, e.g. DEBUG")
    commands = parser.add_subparsers(dest="command", required=True)

    ingest = commands.add_parser("ingest", help="Ingest a local file into a bot's knowledge base")
    ingest.add_argument("bot_id", type=int)
    ingest.add_argument("path", type=Path)
    ingest.add_argument("--type", dest="declared_type", help="Declared MIME type or file type tag")
    ingest.add_argument(
        "--policy",
        choices=("inline", "mark_error"),
        help="What to do when the extractor fails (default from configuration)",
    )

    scrape = commands.add_parser("scrape", help="Scrape a web page into a bot's knowledge base")
    scrape.add_argument("bot_id", type=int)
    scrape.add_argument("url")
    scrape.add_argument("--preview", action="store_true", help="Print the summary without storing it")
    scrape.add_argument("--timeout", type=float, default=None)

    for name, help_text in (("search", "Rank a bot's documents for a query"), ("context", "Print the prompt context")):
        sub = commands.add_parser(name, help=help_text)
        sub.add_argument("bot_id", type=int)
        sub.add_argument("query")
        if name == "search":
            sub.add_argument("--limit", type=int, default=5)

    listing = commands.add_parser("list", help="List a bot's documents")
    listing.add_argument("bot_id", type=int)

    process = commands.add_parser("process", help="Index every document of a bot that has content")
    process.add_argument("bot_id", type=int)

    delete = commands.add_parser("delete", help="Delete a document")
    delete.add_argument("document_id", type=int)
    return parser.parse_args(argv)


def run(args: argparse.Namespace) -> object:
    config = ContainerConfig.from_env()
    if args.db:
        config.db_path = args.db
    container = build_default_container(config)
    repository = container.document_repository

    if args.command == "ingest":
        document = ingest_file(
            args.bot_id,
            args.path.name,
            args.path.read_bytes(),
            args.declared_type,
            document_repository=repository,
            file_normalizer=container.file_normalizer,
            policy=args.policy or config.extraction_error_policy,
            file_url=str(args.path.resolve()),
        )
        return _document_summary(document)
    if args.command == "scrape":
        if args.preview:
            return asdict(scrape_website(args.url, page_fetcher=container.page_fetcher, timeout=args.timeout))
        document, page = ingest_website(
            args.bot_id,
            args.url,
            page_fetcher=container.page_fetcher,
            document_repository=repository,
            timeout=args.timeout,
        )
        return {"document": _document_summary(document), "metadata": page.metadata}
    if args.command == "search":
        results = search(args.bot_id, args.query, document_repository=repository, limit=args.limit)
        return [
            {"document_id": r.document.id, "title": r.document.title, "score": r.score, "excerpt": r.excerpt}
            for r in results
        ]
    if args.command == "context":
        return get_context_for_query(args.bot_id, args.query, document_repository=repository)
    if args.command == "list":
        return [_document_summary(document) for document in repository.get_by_bot(args.bot_id)]
    if args.command == "process":
        return asdict(process_bot_documents(args.bot_id, document_repository=repository))
    if args.command == "delete":
        return {"deleted": repository.delete(args.document_id)}
    raise ValueError(f"Unknown command '{args.command}'")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level)
    try:
        output = run(args)
    except KnowledgeBaseError as exc:
        logger.error("%s failed: %s", args.command, exc.message)
        print(json.dumps(exc.to_dict(), indent=2), file=sys.stderr)
        return 1
    if isinstance(output, str):
        print(output)
    else:
        print(json.dumps(output, indent=2, ensure_ascii=False, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
