"""Protocol for corpus sources."""

from pathlib import Path
from typing import Iterator, Protocol, runtime_checkable

from finder.models import Document


@runtime_checkable
class Ingester(Protocol):
    """Protocol for corpus sources.

    Implementations turn a local path into text documents. Uses structural
    subtyping - no inheritance required.
    """

    @property
    def source_type(self) -> str:
        """Return identifier for this source type (e.g., 'folder', 'file')."""
        ...

    def can_handle(self, source: Path) -> bool:
        """Check if this ingester can process the given source."""
        ...

    def ingest(self, source: Path) -> Iterator[Document]:
        """Yield text documents from the source, ordered by path."""
        ...
