"""Fuzzy matching and preview windows."""

from finder.search import selection
from finder.search.fuzzy import FuzzyMatcher, Ranked, rank, score_text
from finder.search.preview import PreviewWindow, preview_window

__all__ = [
    "FuzzyMatcher",
    "Ranked",
    "rank",
    "score_text",
    "PreviewWindow",
    "preview_window",
    "selection",
]
