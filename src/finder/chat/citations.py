"""Citation markers in assistant replies and the browsable citation list."""

import logging
import re
from typing import Optional

from finder.index import CorpusIndex
from finder.models import Citation
from finder.search import Ranked, rank, selection

logger = logging.getLogger(__name__)

# [README.md:20], [docs/a.md:3-7], [a.md:3, b.md:9]
_BRACKET_RE = re.compile(r"\[([^\[\]\n]+)\]")
_REFERENCE_RE = re.compile(r"^\s*(?:\./)?(?P<path>.+?):(?P<line>\d+)(?:\s*[-–]\s*\d+)?\s*$")
_SEPARATOR_RE = re.compile(r"[,;]")


def parse_markers(text: str) -> list[tuple[int, str, str, int]]:
    """Find citation markers in ``text``.

    Returns:
        (offset, label, path, line) per reference, in the order they appear
    """
    found = []
    for bracket in _BRACKET_RE.finditer(text):
        for part in _SEPARATOR_RE.split(bracket.group(1)):
            ref = _REFERENCE_RE.match(part)
            if ref is None:
                continue
            found.append(
                (bracket.start(), part.strip(), ref.group("path").strip(), int(ref.group("line")))
            )
    return found


def extract_citations(text: str, corpus: CorpusIndex) -> list[Citation]:
    """Resolve the citation markers of ``text`` against ``corpus``.

    Markers naming an unknown document or a line outside it are dropped.
    Repeated references are kept, one entry per occurrence.
    """
    citations = []
    for offset, label, path, line in parse_markers(text):
        if not corpus.contains(path, line):
            logger.debug(f"Dropping unresolved citation {label}")
            continue
        citations.append(Citation(path=path, line=line, label=label, offset=offset))
    return citations


class CitationList:
    """Filterable, navigable view over the citations of one turn."""

    def __init__(self, citations: Optional[list[Citation]] = None):
        self.citations: list[Citation] = list(citations or [])
        self.filter = ""
        self.visible: list[Ranked[Citation]] = []
        self.selected: Optional[int] = None
        self._refresh()

    def _refresh(self) -> None:
        self.visible = rank(self.filter, self.citations, key=_citation_key)
        self.selected = selection.clamp(0, len(self.visible))

    def set_filter(self, text: str) -> None:
        self.filter = text
        self._refresh()

    def type(self, char: str) -> None:
        self.set_filter(self.filter + char)

    def backspace(self) -> None:
        if self.filter:
            self.set_filter(self.filter[:-1])

    def move(self, delta: int) -> None:
        self.selected = selection.move(self.selected, delta, len(self.visible))

    @property
    def current(self) -> Optional[Citation]:
        if self.selected is None:
            return None
        return self.visible[self.selected].item

    def __len__(self) -> int:
        return len(self.visible)


def _citation_key(citation: Citation) -> str:
    return citation.label or citation.location
