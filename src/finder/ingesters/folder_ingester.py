"""Ingester for local folders of text documents."""

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, Optional

from finder.models import Document
from finder.utils import decode_text

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = frozenset({".md"})

SKIP_DIRS = frozenset(
    {
        "__pycache__",
        "node_modules",
        "venv",
        "env",
        "dist",
        "build",
        "target",
        "site-packages",
    }
)


class FolderIngester:
    """Ingester for local filesystem folders."""

    source_type = "folder"

    def __init__(self, extensions: Optional[Iterable[str]] = None):
        exts = DEFAULT_EXTENSIONS if extensions is None else extensions
        self.extensions = frozenset(_normalize_extension(e) for e in exts)

    def can_handle(self, source: Path) -> bool:
        """Check if this is an existing directory."""
        return source.is_dir()

    def ingest(self, source: Path) -> Iterator[Document]:
        """Yield text documents from a folder recursively.

        Args:
            source: Path to the folder

        Yields:
            Documents ordered by their relative path
        """
        for full_path in sorted(self._walk(source)):
            rel_path = full_path.relative_to(source).as_posix()
            try:
                raw_content = full_path.read_bytes()
            except OSError as exc:
                logger.debug(f"Skipping unreadable file {rel_path}: {exc}")
                continue

            content = decode_text(raw_content)
            if content is None:
                logger.debug(f"Skipping binary file {rel_path}")
                continue

            yield Document.from_text(rel_path, content)

    def _walk(self, source: Path) -> Iterator[Path]:
        for root, dirs, files in os.walk(source):
            # Prune in place so os.walk never descends into skipped folders
            dirs[:] = [d for d in dirs if not self._should_skip(d)]
            for filename in files:
                if self._should_skip(filename):
                    continue
                if Path(filename).suffix.lower() not in self.extensions:
                    continue
                yield Path(root) / filename

    def _should_skip(self, name: str) -> bool:
        """Skip hidden entries, common build artifacts and virtualenvs."""
        return (
            name.startswith(".")
            or name in SKIP_DIRS
            or name.endswith(".egg-info")
        )


def _normalize_extension(ext: str) -> str:
    ext = ext.strip().lower()
    return ext if ext.startswith(".") else f".{ext}"
