"""Chat with the assistant: session, transport and citations."""

from finder.chat.citations import CitationList, extract_citations, parse_markers
from finder.chat.session import ChatSession, Exchange
from finder.chat.transport import (
    CredentialError,
    OpenRouterTransport,
    TransportError,
    parse_sse_line,
)

__all__ = [
    "ChatSession",
    "Exchange",
    "CitationList",
    "extract_citations",
    "parse_markers",
    "OpenRouterTransport",
    "TransportError",
    "CredentialError",
    "parse_sse_line",
]
