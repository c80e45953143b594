"""Chat turn and citation models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Citation:
    """A resolved reference from assistant text to a corpus line."""

    path: str
    line: int
    label: str = ""
    offset: int = 0  # position of the marker in the turn text

    @property
    def location(self) -> str:
        return f"{self.path}:{self.line}"


@dataclass
class ChatTurn:
    """One message of the chat exchange.

    Assistant turns grow while a reply streams in. Text is only appended
    while streaming, and a turn becomes final exactly once. A failed turn
    shows the error notice in place of its text.
    """

    role: Role
    text: str = ""
    citations: list[Citation] = field(default_factory=list)
    final: bool = False
    cancelled: bool = False
    error: Optional[str] = None

    def append(self, increment: str) -> None:
        if self.final:
            raise RuntimeError("cannot append to a finalized turn")
        self.text += increment

    def finalize(self, *, cancelled: bool = False, error: Optional[str] = None) -> bool:
        """Mark the turn final. Returns False if it already was."""
        if self.final:
            return False
        self.final = True
        self.cancelled = cancelled
        if error is not None:
            self.error = error
            self.text = f"[error] {error}"
        return True

    @property
    def streaming(self) -> bool:
        return self.role is Role.ASSISTANT and not self.final


@dataclass(frozen=True)
class ChatRequest:
    """Everything the AI transport needs for one exchange."""

    context: str
    history: tuple[ChatTurn, ...]
    message: str
