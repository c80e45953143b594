"""Ingester for a single text file."""

from pathlib import Path
from typing import Iterator

from finder.models import Document
from finder.utils import decode_text


class FileIngester:
    """Treat one text file as the whole corpus."""

    source_type = "file"

    def can_handle(self, source: Path) -> bool:
        """Check if this is an existing regular file."""
        return source.is_file()

    def ingest(self, source: Path) -> Iterator[Document]:
        """Yield the file as a single document named after it.

        Binary files yield nothing.
        """
        content = decode_text(source.read_bytes())
        if content is not None:
            yield Document.from_text(source.name, content)
