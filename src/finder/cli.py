"""CLI entry point for Finder."""

import argparse
import logging
import sys
from pathlib import Path

from finder import __version__
from finder.chat import OpenRouterTransport
from finder.config import Settings
from finder.editor import EditorLauncher
from finder.index import CorpusIndex, load_corpus
from finder.search import FuzzyMatcher

logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
)
logger = logging.getLogger(__name__)


def load(root: str, settings: Settings) -> CorpusIndex:
    """Load the corpus at ``root`` or exit with an error."""
    root_path = Path(root)
    if not root_path.exists():
        logger.error(f"Path not found: {root}")
        sys.exit(1)

    corpus = load_corpus(root_path, settings.extensions)
    if not corpus:
        exts = ", ".join(sorted(settings.extensions))
        logger.error(f"No documents found in {root} (extensions: {exts})")
        sys.exit(1)
    return corpus


def make_transport(settings: Settings) -> OpenRouterTransport:
    return OpenRouterTransport(
        api_key=settings.api_key,
        model=settings.model,
        api_url=settings.api_url,
        max_tokens=settings.max_tokens,
        timeout=settings.timeout,
    )


def browse(root: str, settings: Settings) -> None:
    """Load the corpus and run the interactive TUI.

    Args:
        root: Folder (or single file) to search
        settings: Loaded settings
    """
    # Imported here to avoid loading Textual for the non-interactive commands
    from textual.logging import TextualHandler

    from finder.state import AppSession
    from finder.tui import run_tui

    corpus = load(root, settings)
    root_path = Path(root)
    editor_root = root_path if root_path.is_dir() else root_path.parent

    # stderr belongs to the TUI from here on
    logging.basicConfig(level=settings.log_level, handlers=[TextualHandler()], force=True)

    session = AppSession(corpus, make_transport(settings))
    run_tui(session, EditorLauncher(settings.editor, editor_root), editor_root.absolute())


def search(query: str, root: str, settings: Settings, limit: int = 20) -> None:
    """Print the best matches for ``query`` without entering the TUI.

    Args:
        query: Fuzzy query
        root: Folder (or single file) to search
        settings: Loaded settings
        limit: Maximum number of matches to print
    """
    corpus = load(root, settings)
    matches = FuzzyMatcher(corpus).search(query)
    if not matches:
        logger.info(f"No matches for: {query}")
        return

    for match in matches[:limit]:
        print(f"{match.location}  {match.text.strip()}")
    if len(matches) > limit:
        print(f"... {len(matches) - limit} more")


def info(root: str, settings: Settings) -> None:
    """Show what Finder would load from ``root``.

    Args:
        root: Folder (or single file) to inspect
        settings: Loaded settings
    """
    corpus = load(root, settings)
    chat = "enabled" if settings.api_key else "disabled (set OPENROUTER_API_KEY)"

    print(f"Corpus: {Path(root).absolute()}")
    print(f"  Documents: {len(corpus)}")
    print(f"  Lines indexed: {corpus.line_count}")
    print(f"  Extensions: {', '.join(sorted(settings.extensions))}")
    print(f"")
    print(f"Chat: {chat}")
    print(f"  Model: {settings.model}")
    print(f"  Editor: {settings.editor}")


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="finder",
        description="Finder - fuzzy search your notes, ask questions with cited answers",
    )
    parser.add_argument("--version", action="version", version=f"finder {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # browse command
    browse_parser = subparsers.add_parser(
        "browse",
        help="Launch the interactive search and chat TUI",
    )
    browse_parser.add_argument(
        "root", nargs="?", default=".", help="Folder or file to search (default: .)"
    )

    # search command
    search_parser = subparsers.add_parser(
        "search",
        help="Print fuzzy matches for a query",
    )
    search_parser.add_argument("query", help="Fuzzy query")
    search_parser.add_argument(
        "root", nargs="?", default=".", help="Folder or file to search (default: .)"
    )
    search_parser.add_argument(
        "-n",
        "--limit",
        type=int,
        default=20,
        help="Maximum number of matches to print (default: 20)",
    )

    # info command
    info_parser = subparsers.add_parser(
        "info",
        help="Show corpus and chat configuration",
    )
    info_parser.add_argument(
        "root", nargs="?", default=".", help="Folder or file to inspect (default: .)"
    )

    args = parser.parse_args(argv)
    settings = Settings.from_env()
    logging.getLogger().setLevel(settings.log_level)

    if args.command == "browse":
        browse(args.root, settings)
    elif args.command == "search":
        search(args.query, args.root, settings, args.limit)
    elif args.command == "info":
        info(args.root, settings)


if __name__ == "__main__":
    main()
