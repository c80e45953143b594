"""Data models for Finder."""

from finder.models.chat import ChatRequest, ChatTurn, Citation, Role
from finder.models.document import Document, IndexedLine, Match

__all__ = ["Document", "IndexedLine", "Match", "Citation", "ChatTurn", "ChatRequest", "Role"]
