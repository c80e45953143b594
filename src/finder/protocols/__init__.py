"""Protocol definitions for the collaborators Finder talks to."""

from finder.protocols.ingester import Ingester
from finder.protocols.transport import ChatTransport

__all__ = ["Ingester", "ChatTransport"]
