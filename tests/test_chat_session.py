"""Tests for the chat session and its streaming exchange."""

import anyio
import pytest

from conftest import GatedTransport, ScriptedTransport
from finder.chat import ChatSession, CredentialError, TransportError
from finder.chat.prompt import build_messages
from finder.index import CorpusIndex
from finder.models import Role

pytestmark = pytest.mark.anyio


async def _wait_for(predicate) -> None:
    with anyio.fail_after(2):
        while not predicate():
            await anyio.sleep(0)


async def test_streams_reply_and_resolves_citations(corpus, transport):
    chat = ChatSession(corpus, transport)
    exchange = chat.begin("Where is the capital mentioned?")
    updates = []

    await chat.run(exchange, on_update=lambda: updates.append(exchange.reply.text))

    reply = exchange.reply
    assert reply.final and not reply.cancelled and reply.error is None
    assert reply.text == "See [README.md:3] and [docs/big.md:12]."
    assert [c.location for c in reply.citations] == ["README.md:3", "docs/big.md:12"]
    # one update per increment, each showing a longer prefix
    assert updates[:2] == ["See [README.md:3] ", "See [README.md:3] and [docs/big.md:12]."]
    assert not chat.busy


async def test_request_carries_context_and_history(corpus, transport):
    chat = ChatSession(corpus, transport)
    await chat.run(chat.begin("first"))
    await chat.run(chat.begin("second"))

    request = transport.requests[-1]
    assert "[README.md:3] The capital of France is Paris." in request.context
    assert [t.role for t in request.history] == [Role.USER, Role.ASSISTANT]
    assert request.message == "second"
    assert [t.text for t in chat.turns][::2] == ["first", "second"]


async def test_cancel_keeps_partial_text():
    transport = GatedTransport(("The capital ", "of Fra"), rest=("nce is Paris.",))
    chat = ChatSession(CorpusIndex.from_pairs([("a.md", "x")]), transport)
    exchange = chat.begin("What is the capital of France?")

    async with anyio.create_task_group() as tg:
        tg.start_soon(chat.run, exchange)
        await _wait_for(lambda: exchange.reply.text == "The capital of Fra")
        assert chat.cancel()
        transport.gate.set()

    reply = exchange.reply
    assert reply.text == "The capital of Fra"
    assert reply.final and reply.cancelled
    assert not chat.busy


async def test_task_cancellation_finalizes_reply(corpus):
    transport = GatedTransport(("partial",))
    chat = ChatSession(corpus, transport)
    exchange = chat.begin("question")

    async with anyio.create_task_group() as tg:
        tg.start_soon(chat.run, exchange)
        await _wait_for(lambda: exchange.reply.text == "partial")
        tg.cancel_scope.cancel()

    assert exchange.reply.final and exchange.reply.cancelled
    assert exchange.reply.text == "partial"


async def test_transport_error_becomes_error_turn(corpus):
    transport = ScriptedTransport(error=TransportError("connection refused"))
    chat = ChatSession(corpus, transport)
    exchange = chat.begin("question")

    await chat.run(exchange)

    assert exchange.reply.final
    assert exchange.reply.error == "connection refused"
    assert exchange.reply.text == "[error] connection refused"
    assert exchange.reply.citations == []

    # the session stays usable
    transport.error = None
    transport.chunks = ("ok",)
    retry = chat.begin("question again")
    await chat.run(retry)
    assert retry.reply.text == "ok"


async def test_error_after_partial_text_replaces_it(corpus):
    transport = ScriptedTransport(
        ("The capital of Fra [README.md:3]",), error=CredentialError("bad key")
    )
    chat = ChatSession(corpus, transport)
    exchange = chat.begin("question")
    await chat.run(exchange)
    assert exchange.reply.text == "[error] bad key"
    assert exchange.reply.error == "bad key"
    assert exchange.reply.citations == []


async def test_failed_turns_are_left_out_of_history(corpus):
    transport = ScriptedTransport(error=TransportError("boom"))
    chat = ChatSession(corpus, transport)
    await chat.run(chat.begin("first"))
    transport.error = None
    await chat.run(chat.begin("second"))

    messages = build_messages(transport.requests[-1])
    assert [m["role"] for m in messages] == ["system", "user", "user"]


def test_send_while_streaming_is_rejected(corpus, transport):
    chat = ChatSession(corpus, transport)
    first = chat.begin("one")
    assert chat.busy
    assert chat.begin("two") is None
    assert len(chat.turns) == 2
    chat.cancel()
    assert first.reply.final
    assert chat.begin("two") is not None


def test_blank_message_is_ignored(corpus, transport):
    chat = ChatSession(corpus, transport)
    assert chat.begin("   ") is None
    assert chat.turns == []


def test_stale_increments_are_dropped(corpus, transport):
    chat = ChatSession(corpus, transport)
    exchange = chat.begin("q")
    assert chat.deliver(exchange, "The capital of Fra")
    chat.cancel()
    assert not chat.deliver(exchange, "nce")
    assert exchange.reply.text == "The capital of Fra"


def test_cancel_resolves_citations_in_partial_text(corpus, transport):
    chat = ChatSession(corpus, transport)
    exchange = chat.begin("q")
    chat.deliver(exchange, "Paris [README.md:3] and [docs/big.md:")
    chat.cancel()
    assert [c.location for c in exchange.reply.citations] == ["README.md:3"]


def test_finalized_turn_rejects_appends(corpus, transport):
    chat = ChatSession(corpus, transport)
    exchange = chat.begin("q")
    chat.complete(exchange)
    with pytest.raises(RuntimeError):
        exchange.reply.append("more")
