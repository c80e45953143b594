"""Protocol for the streaming AI chat provider."""

from typing import AsyncIterator, Protocol, runtime_checkable

from finder.models import ChatRequest


@runtime_checkable
class ChatTransport(Protocol):
    """Protocol for streaming chat providers.

    ``stream`` yields text increments in the order the provider produced
    them and raises ``TransportError`` on connection or credential failure.
    """

    @property
    def available(self) -> bool:
        """Return True if a credential is configured."""
        ...

    def stream(self, request: ChatRequest) -> AsyncIterator[str]:
        """Open the exchange and yield reply increments."""
        ...
