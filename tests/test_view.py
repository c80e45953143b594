"""Tests for the rendering snapshot."""

import pytest

from finder.state import Action, AppSession, InputEvent, Mode
from finder.view import build_view

pytestmark = pytest.mark.anyio


@pytest.fixture
def session(corpus, transport):
    return AppSession(corpus, transport)


def test_idle_search_view(session):
    view = build_view(session)
    assert view.mode is Mode.SEARCH
    assert view.rows == ()
    assert view.preview is None
    assert view.document_count == 3
    assert view.line_count == 56
    assert view.chat_available


def test_rows_carry_highlights_and_preview_follows_selection(session):
    session.feed(InputEvent.typed("line 12"))
    view = build_view(session, list_height=5, preview_height=9)

    top = view.rows[0]
    assert top.selected
    assert top.label == "docs/big.md:12"
    assert "".join(top.text[p] for p in top.text_positions) == "line 12"
    assert view.preview.path == "docs/big.md"
    assert view.preview.target == 12
    assert (view.preview.start, view.preview.end) == (8, 16)


def test_rows_page_with_selection(session):
    session.feed(InputEvent.typed("line"))
    session.feed([InputEvent(Action.DOWN)] * 6)
    view = build_view(session, list_height=5)
    assert len(view.rows) == 5
    assert [row.selected for row in view.rows] == [False, True, False, False, False]
    assert view.total == len(session.search.results)


async def test_chat_and_citation_views(session):
    session.handle(InputEvent(Action.ENTER_CHAT))
    session.feed(InputEvent.typed("where?"))
    (effect,) = session.handle(InputEvent(Action.ACTIVATE))

    streaming = build_view(session)
    assert streaming.streaming
    assert streaming.prompt == ""
    assert streaming.citation_count == 0

    await session.chat.run(effect.exchange)
    done = build_view(session)
    assert not done.streaming
    assert len(done.turns) == 2
    assert done.citation_count == 2

    session.handle(InputEvent(Action.BROWSE_CITATIONS))
    view = build_view(session)
    assert view.mode is Mode.CITATIONS
    assert [row.label for row in view.rows] == ["README.md:3", "docs/big.md:12"]
    assert view.rows[0].text == "The capital of France is Paris."
    assert view.preview.target == 3
