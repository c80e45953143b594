"""In-memory corpus index."""

from finder.index.corpus import CorpusIndex, load_corpus

__all__ = ["CorpusIndex", "load_corpus"]
