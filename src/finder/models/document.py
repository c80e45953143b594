"""Core data models for documents, indexed lines and matches."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Document:
    """A text document loaded from the corpus source.

    Lines are stored without their line terminators. Line numbers are 1-based.
    """

    path: str
    lines: tuple[str, ...] = ()

    @classmethod
    def from_text(cls, path: str, text: str) -> "Document":
        # only "\n" ends a line; other separators str.splitlines knows about
        # (form feed, U+2028, ...) stay inside the line
        lines = text.split("\n")
        if lines[-1] == "":
            lines.pop()
        return cls(path=path, lines=tuple(line.removesuffix("\r") for line in lines))

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    @property
    def line_count(self) -> int:
        return len(self.lines)

    def line(self, number: int) -> str:
        """Return the text of 1-based line ``number``."""
        if not 1 <= number <= len(self.lines):
            raise IndexError(f"{self.path} has no line {number}")
        return self.lines[number - 1]


@dataclass(frozen=True)
class IndexedLine:
    """A searchable line of the corpus."""

    document: Document
    number: int
    text: str
    folded: str  # lowercased, same length as text

    @property
    def path(self) -> str:
        return self.document.path


@dataclass(frozen=True)
class Match:
    """A scored candidate line for a query."""

    path: str
    line: int
    text: str
    score: int
    positions: tuple[int, ...] = field(default=())

    @property
    def location(self) -> str:
        return f"{self.path}:{self.line}"
