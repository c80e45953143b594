"""In-memory index of the loaded documents."""

import logging
from pathlib import Path
from typing import Iterable, Iterator, Optional

from finder.ingesters import get_ingester
from finder.models import Document, IndexedLine
from finder.utils import fold

logger = logging.getLogger(__name__)


class CorpusIndex:
    """Read-only collection of documents plus their flattened searchable lines.

    Built once at startup. Blank lines are kept in the documents (they count
    for line numbers and previews) but are left out of the searchable lines.
    """

    def __init__(self, documents: Iterable[Document] = ()):
        self._documents: dict[str, Document] = {}
        for doc in documents:
            if doc.path in self._documents:
                logger.warning(f"Duplicate document {doc.path} ignored")
                continue
            self._documents[doc.path] = doc

        self._lines: tuple[IndexedLine, ...] = tuple(
            IndexedLine(document=doc, number=number, text=text, folded=fold(text))
            for doc in self._documents.values()
            for number, text in enumerate(doc.lines, start=1)
            if text.strip()
        )

    @classmethod
    def from_documents(cls, documents: Iterable[Document]) -> "CorpusIndex":
        return cls(documents)

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, str]]) -> "CorpusIndex":
        """Build from ordered (path, full text) pairs."""
        return cls(Document.from_text(path, text) for path, text in pairs)

    @property
    def documents(self) -> tuple[Document, ...]:
        return tuple(self._documents.values())

    @property
    def lines(self) -> tuple[IndexedLine, ...]:
        return self._lines

    @property
    def line_count(self) -> int:
        """Number of searchable (non-blank) lines."""
        return len(self._lines)

    def __len__(self) -> int:
        return len(self._documents)

    def __iter__(self) -> Iterator[Document]:
        return iter(self._documents.values())

    def __bool__(self) -> bool:
        return bool(self._documents)

    def document(self, path: str) -> Optional[Document]:
        return self._documents.get(path)

    def contains(self, path: str, line: int) -> bool:
        """Check that ``path`` is loaded and has a line numbered ``line``."""
        doc = self._documents.get(path)
        return doc is not None and 1 <= line <= doc.line_count

    def build_context(self) -> str:
        """Render every document with line-addressed prefixes for the assistant."""
        parts: list[str] = []
        for doc in self._documents.values():
            parts.append(f"\n--- {doc.path} ---\n")
            for number, text in enumerate(doc.lines, start=1):
                parts.append(f"[{doc.path}:{number}] {text}\n")
        return "".join(parts)


def load_corpus(
    source: Path | str, extensions: Optional[Iterable[str]] = None
) -> CorpusIndex:
    """Load a folder or single file into a CorpusIndex.

    Raises:
        ValueError: if no ingester can handle the source
    """
    source_path = Path(source)
    exts = frozenset(extensions) if extensions is not None else None
    ingester = get_ingester(source_path, exts)
    if ingester is None:
        raise ValueError(f"Cannot load corpus from {source}")

    logger.debug(f"Loading {ingester.source_type} corpus from {source_path}")
    return CorpusIndex(ingester.ingest(source_path))
