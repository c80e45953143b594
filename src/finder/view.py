"""Rendering snapshot of an AppSession.

The terminal shell draws whatever ``build_view`` returns; it never reaches
into the session itself.
"""

from dataclasses import dataclass
from typing import Optional

from finder.models import ChatTurn
from finder.search import PreviewWindow, preview_window
from finder.state import AppSession, Mode


@dataclass(frozen=True)
class Row:
    """One line of the result or citation list."""

    label: str
    text: str
    label_positions: tuple[int, ...] = ()
    text_positions: tuple[int, ...] = ()
    selected: bool = False


@dataclass(frozen=True)
class View:
    mode: Mode
    prompt: str
    rows: tuple[Row, ...]
    total: int
    preview: Optional[PreviewWindow]
    turns: tuple[ChatTurn, ...]
    streaming: bool
    scroll: int
    notice: Optional[str]
    document_count: int
    line_count: int
    chat_available: bool
    citation_count: int


def _page(selected: Optional[int], total: int, height: int) -> range:
    """Indices of the page of ``height`` rows holding ``selected``."""
    if height < 1 or total == 0:
        return range(0)
    start = ((selected or 0) // height) * height
    return range(start, min(start + height, total))


def _search_rows(session: AppSession, height: int) -> tuple[tuple[Row, ...], int]:
    state = session.search
    rows = tuple(
        Row(
            label=state.results[i].location,
            text=state.results[i].text,
            text_positions=state.results[i].positions,
            selected=i == state.selected,
        )
        for i in _page(state.selected, len(state.results), height)
    )
    return rows, len(state.results)


def _citation_rows(session: AppSession, height: int) -> tuple[tuple[Row, ...], int]:
    items = session.citations.items
    rows = []
    for i in _page(items.selected, len(items), height):
        ranked = items.visible[i]
        citation = ranked.item
        doc = session.corpus.document(citation.path)
        text = doc.line(citation.line) if doc else ""
        rows.append(
            Row(
                label=citation.label or citation.location,
                text=text.strip(),
                label_positions=ranked.positions,
                selected=i == items.selected,
            )
        )
    return tuple(rows), len(items)


def build_view(session: AppSession, list_height: int = 20, preview_height: int = 20) -> View:
    """Snapshot what the active mode should show.

    Args:
        session: The interactive session
        list_height: Rows available for the result/citation list
        preview_height: Lines available for the preview pane
    """
    mode = session.mode
    rows: tuple[Row, ...] = ()
    total = 0
    preview = None

    if mode is Mode.SEARCH:
        prompt = session.search.query
        rows, total = _search_rows(session, list_height)
    elif mode is Mode.CITATIONS:
        prompt = session.citations.items.filter
        rows, total = _citation_rows(session, list_height)
    else:
        prompt = session.chat_state.draft

    location = session.selected_location()
    if location is not None:
        doc = session.corpus.document(location[0])
        if doc is not None:
            preview = preview_window(doc, location[1], preview_height)

    reply = session.chat.last_reply
    return View(
        mode=mode,
        prompt=prompt,
        rows=rows,
        total=total,
        preview=preview,
        turns=tuple(session.chat.turns),
        streaming=session.chat.busy,
        scroll=session.chat_state.scroll,
        notice=session.notice,
        document_count=len(session.corpus),
        line_count=session.corpus.line_count,
        chat_available=session.chat.available,
        citation_count=len(reply.citations) if reply and reply.final else 0,
    )
