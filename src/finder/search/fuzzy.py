"""Case-insensitive fuzzy subsequence matching and ranking.

A line matches a query when every query character appears in it in order.
Among the possible alignments the best-scoring one is kept. Scores reward
contiguous runs most, then runs that start on a word boundary, whole-word
runs, an early first match and short lines.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Generic, Iterable, Optional, Sequence, TypeVar

from finder.index import CorpusIndex
from finder.models import IndexedLine, Match
from finder.utils import fold

logger = logging.getLogger(__name__)

T = TypeVar("T")

SCORE_MATCH = 16
BONUS_CONSECUTIVE = 32
BONUS_BOUNDARY = 8
BONUS_FIRST_CHAR_MULTIPLIER = 2
BONUS_WORD_END = 8
PENALTY_GAP_START = 3
PENALTY_GAP_EXTENSION = 1
MAX_LEADING_PENALTY = 16
LENGTH_PENALTY_DIVISOR = 16
MAX_LENGTH_PENALTY = 16

# Contiguous occurrences examined per line
MAX_OCCURRENCES = 8


def _is_boundary(text: str, pos: int) -> bool:
    if pos == 0:
        return True
    prev, cur = text[pos - 1], text[pos]
    if not prev.isalnum():
        return True
    return prev.islower() and cur.isupper()


def _is_word_end(text: str, pos: int) -> bool:
    if pos == len(text) - 1:
        return True
    cur, nxt = text[pos], text[pos + 1]
    if not nxt.isalnum():
        return True
    return cur.islower() and nxt.isupper()


def _score_positions(text: str, positions: Sequence[int]) -> int:
    score = 0
    prev = -2
    run_at_boundary = False
    last = len(positions) - 1
    for k, pos in enumerate(positions):
        score += SCORE_MATCH
        if pos == prev + 1:
            score += BONUS_CONSECUTIVE
        else:
            if k > 0:
                gap = pos - prev - 1
                score -= PENALTY_GAP_START + PENALTY_GAP_EXTENSION * (gap - 1)
            run_at_boundary = _is_boundary(text, pos)
            if run_at_boundary:
                multiplier = BONUS_FIRST_CHAR_MULTIPLIER if k == 0 else 1
                score += BONUS_BOUNDARY * multiplier
        run_ends = k == last or positions[k + 1] != pos + 1
        if run_ends and run_at_boundary and _is_word_end(text, pos):
            score += BONUS_WORD_END
        prev = pos

    score -= min(positions[0], MAX_LEADING_PENALTY)
    score -= min(len(text) // LENGTH_PENALTY_DIVISOR, MAX_LENGTH_PENALTY)
    return score


def _forward(query: str, folded: str, start: int = 0) -> Optional[list[int]]:
    positions = []
    pos = start - 1
    for ch in query:
        pos = folded.find(ch, pos + 1)
        if pos < 0:
            return None
        positions.append(pos)
    return positions


def _tightened(query: str, folded: str, end: int) -> list[int]:
    """Shortest window ending at ``end``, found by scanning back then forward."""
    pos = end + 1
    for ch in reversed(query):
        pos = folded.rfind(ch, 0, pos)
    return _forward(query, folded, pos) or []


def _alignments(query: str, folded: str) -> list[Sequence[int]]:
    greedy = _forward(query, folded)
    if greedy is None:
        return []

    candidates: list[Sequence[int]] = []
    width = len(query)
    idx = folded.find(query)
    while idx >= 0 and len(candidates) < MAX_OCCURRENCES:
        candidates.append(range(idx, idx + width))
        idx = folded.find(query, idx + 1)
    if width > 1:
        candidates.append(_tightened(query, folded, greedy[-1]))
    candidates.append(greedy)
    return candidates


def score_text(
    query: str, text: str, folded: Optional[str] = None
) -> Optional[tuple[int, tuple[int, ...]]]:
    """Score ``text`` against ``query``.

    Args:
        query: Already folded query string (see ``finder.utils.fold``)
        text: Candidate text, used for word boundaries and length
        folded: Folded form of ``text``, computed when omitted

    Returns:
        (score, matched character positions), or None when ``text`` does
        not contain the query as a subsequence
    """
    if not query:
        return None
    if folded is None:
        folded = fold(text)

    best: Optional[tuple[int, tuple[int, ...]]] = None
    for positions in _alignments(query, folded):
        score = _score_positions(text, positions)
        if best is None or score > best[0]:
            best = (score, tuple(positions))
    return best


class FuzzyMatcher:
    """Ranks the lines of a corpus against a query.

    The full ranked list is recomputed on every call. When a query extends
    the previous one, only the previous matches are rescanned since a line
    that missed the shorter query cannot contain the longer one.
    """

    def __init__(self, corpus: CorpusIndex):
        self.corpus = corpus
        self._last_query = ""
        self._last_hits: tuple[IndexedLine, ...] = ()

    def search(self, query: str) -> list[Match]:
        folded_query = fold(query)
        if not folded_query:
            self._last_query = ""
            self._last_hits = ()
            return []

        if self._last_query and folded_query.startswith(self._last_query):
            candidates: Iterable[IndexedLine] = self._last_hits
        else:
            candidates = self.corpus.lines

        matches: list[Match] = []
        hits: list[IndexedLine] = []
        for line in candidates:
            result = score_text(folded_query, line.text, line.folded)
            if result is None:
                continue
            score, positions = result
            hits.append(line)
            matches.append(
                Match(
                    path=line.path,
                    line=line.number,
                    text=line.text,
                    score=score,
                    positions=positions,
                )
            )

        self._last_query = folded_query
        self._last_hits = tuple(hits)

        matches.sort(key=lambda m: (-m.score, m.line, m.path))
        logger.debug(f"Query {query!r}: {len(matches)} matches")
        return matches


@dataclass(frozen=True)
class Ranked(Generic[T]):
    """An item kept by ``rank`` with its score and highlight positions."""

    item: T
    score: int
    positions: tuple[int, ...]


def rank(query: str, items: Sequence[T], key: Callable[[T], str]) -> list[Ranked[T]]:
    """Fuzzy-filter ``items`` by the text ``key`` returns for each.

    An empty query keeps every item in its original order. Otherwise items
    are ordered by descending score, ties keeping their original order.
    """
    folded_query = fold(query)
    if not folded_query:
        return [Ranked(item, 0, ()) for item in items]

    ranked = []
    for item in items:
        result = score_text(folded_query, key(item))
        if result is not None:
            ranked.append(Ranked(item, result[0], result[1]))
    # sort is stable, so ties keep their input order
    ranked.sort(key=lambda r: -r.score)
    return ranked
