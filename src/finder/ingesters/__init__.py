"""Corpus sources (ingesters) for Finder."""

from pathlib import Path
from typing import Optional

from finder.ingesters.file_ingester import FileIngester
from finder.ingesters.folder_ingester import DEFAULT_EXTENSIONS, FolderIngester
from finder.protocols import Ingester

# Registry of available ingesters
_INGESTERS: list[Ingester] = [
    FolderIngester(),
    FileIngester(),
]


def get_ingester(
    source: Path | str, extensions: Optional[frozenset[str]] = None
) -> Optional[Ingester]:
    """Find an ingester that can handle the given source.

    Args:
        source: Path to the corpus (folder or single file)
        extensions: File suffixes to index; overrides the folder default

    Returns:
        An Ingester instance that can handle the source, or None
    """
    source_path = Path(source)
    if extensions is not None and source_path.is_dir():
        return FolderIngester(extensions)
    for ingester in _INGESTERS:
        if ingester.can_handle(source_path):
            return ingester
    return None


def register_ingester(ingester: Ingester) -> None:
    """Register a custom ingester (for plugins/extensions).

    Args:
        ingester: An object implementing the Ingester protocol
    """
    _INGESTERS.append(ingester)


__all__ = [
    "get_ingester",
    "register_ingester",
    "FolderIngester",
    "FileIngester",
    "DEFAULT_EXTENSIONS",
]
