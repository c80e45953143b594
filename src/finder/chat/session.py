"""Chat session: turn log and the streaming exchange with the assistant."""

import asyncio
import logging
from contextlib import aclosing
from dataclasses import dataclass
from typing import Callable, Optional

from finder.chat.citations import extract_citations
from finder.chat.transport import TransportError
from finder.index import CorpusIndex
from finder.models import ChatRequest, ChatTurn, Role
from finder.protocols import ChatTransport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Exchange:
    """One request/reply pair in flight."""

    request: ChatRequest
    prompt: ChatTurn
    reply: ChatTurn


class ChatSession:
    """Owns the append-only turn log and at most one in-flight exchange.

    Increments are applied through ``deliver`` in the order they are
    received. Once the reply turn of an exchange is final, anything still
    arriving for it is ignored.
    """

    def __init__(self, corpus: CorpusIndex, transport: ChatTransport):
        self.corpus = corpus
        self.transport = transport
        self.turns: list[ChatTurn] = []
        self._exchange: Optional[Exchange] = None
        self._context: Optional[str] = None

    @property
    def available(self) -> bool:
        return self.transport.available

    @property
    def busy(self) -> bool:
        return self._exchange is not None and not self._exchange.reply.final

    @property
    def exchange(self) -> Optional[Exchange]:
        return self._exchange if self.busy else None

    @property
    def last_reply(self) -> Optional[ChatTurn]:
        for turn in reversed(self.turns):
            if turn.role is Role.ASSISTANT:
                return turn
        return None

    @property
    def context(self) -> str:
        if self._context is None:
            self._context = self.corpus.build_context()
        return self._context

    def begin(self, message: str) -> Optional[Exchange]:
        """Record a user message and open a reply turn for it.

        Returns None, changing nothing, when a reply is still streaming or
        the message is blank.
        """
        message = message.strip()
        if not message:
            return None
        if self.busy:
            logger.debug("Send rejected: a reply is still streaming")
            return None

        request = ChatRequest(
            context=self.context,
            history=tuple(t for t in self.turns if t.final),
            message=message,
        )
        prompt = ChatTurn(role=Role.USER, text=message, final=True)
        reply = ChatTurn(role=Role.ASSISTANT)
        self.turns.extend([prompt, reply])
        self._exchange = Exchange(request=request, prompt=prompt, reply=reply)
        return self._exchange

    def deliver(self, exchange: Exchange, increment: str) -> bool:
        """Append ``increment`` to the exchange's reply. Returns False if stale."""
        if exchange.reply.final:
            return False
        exchange.reply.append(increment)
        return True

    def complete(self, exchange: Exchange) -> None:
        self._finalize(exchange)

    def fail(self, exchange: Exchange, error: Exception | str) -> None:
        logger.warning(f"Chat exchange failed: {error}")
        self._finalize(exchange, error=str(error) or error.__class__.__name__)

    def cancel(self) -> bool:
        """Finalize the streaming reply with the text received so far."""
        if not self.busy:
            return False
        assert self._exchange is not None
        self._finalize(self._exchange, cancelled=True)
        logger.debug("Chat exchange cancelled")
        return True

    def _finalize(
        self, exchange: Exchange, cancelled: bool = False, error: Optional[str] = None
    ) -> None:
        reply = exchange.reply
        if not reply.finalize(cancelled=cancelled, error=error):
            return
        if error is None:
            reply.citations = extract_citations(reply.text, self.corpus)

    async def run(
        self, exchange: Exchange, on_update: Optional[Callable[[], None]] = None
    ) -> None:
        """Drive ``exchange`` against the transport until it is final.

        Transport failures finalize the reply with an error notice. If the
        task running this is cancelled, the partial reply is kept.
        """
        notify = on_update or (lambda: None)
        try:
            async with aclosing(self.transport.stream(exchange.request)) as stream:
                async for increment in stream:
                    if not self.deliver(exchange, increment):
                        break
                    notify()
        except TransportError as exc:
            self.fail(exchange, exc)
        except Exception as exc:
            logger.exception("Unexpected error while streaming")
            self.fail(exchange, exc)
        except asyncio.CancelledError:
            self._finalize(exchange, cancelled=True)
            notify()
            raise
        else:
            self.complete(exchange)
        notify()
