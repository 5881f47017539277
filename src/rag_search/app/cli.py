"""rag_search.app.cli

Command-line entry point.

Loads the configuration and corpus, builds the vector index and starts the
interactive session. An empty or unreadable corpus ends the program before
any model is loaded.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from rag_search.app.container import build_container
from rag_search.app.session import run_session
from rag_search.common import CorpusLoadError, EmbeddingError
from rag_search.config import GlobalConfig

logger = logging.getLogger("rag_search.app.cli")

DEFAULT_CONFIG_PATH = "config/config.yaml"
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
NO_DATA_MESSAGE = "No data found or the corpus is empty."


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ask questions answered from a small document corpus")

    parser.add_argument(
        "--config-file",
        "-c",
        type=str,
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to the YAML configuration file (default: {DEFAULT_CONFIG_PATH}).",
    )

    parser.add_argument(
        "--corpus",
        type=str,
        default=None,
        help="Override the corpus JSON path from config (optional).",
    )

    parser.add_argument(
        "--top-k",
        "-k",
        type=int,
        default=None,
        help="Override the number of documents retrieved per query (optional).",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Logging level, e.g. DEBUG or WARNING (default: from config, else WARNING).",
    )

    return parser.parse_args(argv)


def configure_logging(cfg: GlobalConfig, cli_level: str | None = None) -> None:
    """Configure the root logger from ``cfg.logging`` and an optional CLI override."""
    section = cfg.logging
    level_name = str(cli_level or section.get("level") or "WARNING").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {level_name!r}")

    logging.basicConfig(
        level=level,
        format=section.get("format") or DEFAULT_LOG_FORMAT,
    )


def _apply_overrides(cfg: GlobalConfig, args: argparse.Namespace) -> None:
    if args.corpus:
        cfg.set_override("corpus", "path", args.corpus)
    if args.top_k is not None:
        cfg.set_override("retriever", "top_k", int(args.top_k))


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)

    cfg = GlobalConfig.load(args.config_file)
    configure_logging(cfg, args.log_level)
    _apply_overrides(cfg, args)

    container = build_container(cfg)

    try:
        documents = container.documents
    except CorpusLoadError as e:
        logger.error("Could not load corpus: %s", e)
        documents = []

    if not documents:
        print(NO_DATA_MESSAGE)
        return 1

    print("Building the vector index...")
    try:
        container.vector_store
    except EmbeddingError:
        logger.exception("Failed to build the vector index")
        print("Could not build the vector index; see the log for details.")
        return 1

    pipeline = container.pipeline
    print("RAG system is ready.")
    run_session(pipeline)
    return 0


if __name__ == "__main__":
    sys.exit(main())
