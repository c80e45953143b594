"""Interactive session state: modes, per-mode records and input handling.

The main loop owns one ``AppSession`` and feeds it ``InputEvent``s. Each
step mutates the session synchronously and returns the effects the loop
must carry out (open an editor, start or cancel a background exchange,
quit). Nothing here blocks on I/O.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from finder.chat import ChatSession, CitationList, Exchange
from finder.index import CorpusIndex
from finder.models import ChatTurn, Match
from finder.protocols import ChatTransport
from finder.search import FuzzyMatcher, selection

logger = logging.getLogger(__name__)


class Mode(Enum):
    SEARCH = "search"
    CHAT = "chat"
    CITATIONS = "citations"


class Action(Enum):
    CHAR = "char"
    BACKSPACE = "backspace"
    UP = "up"
    DOWN = "down"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    ACTIVATE = "activate"
    BACK = "back"
    ENTER_CHAT = "enter_chat"
    BROWSE_CITATIONS = "browse_citations"
    CANCEL = "cancel"
    QUIT = "quit"
    FORCE_QUIT = "force_quit"


@dataclass(frozen=True)
class InputEvent:
    action: Action
    char: str = ""

    @classmethod
    def typed(cls, text: str) -> list["InputEvent"]:
        """One CHAR event per character of ``text``."""
        return [cls(Action.CHAR, ch) for ch in text]


# Effects returned by a step


@dataclass(frozen=True)
class OpenLocation:
    path: str
    line: int


@dataclass(frozen=True)
class StartExchange:
    exchange: Exchange


@dataclass(frozen=True)
class CancelExchange:
    pass


@dataclass(frozen=True)
class Quit:
    pass


Effect = Union[OpenLocation, StartExchange, CancelExchange, Quit]


@dataclass
class SearchState:
    query: str = ""
    results: list[Match] = field(default_factory=list)
    selected: Optional[int] = None

    @property
    def current(self) -> Optional[Match]:
        if self.selected is None:
            return None
        return self.results[self.selected]


@dataclass
class ChatState:
    draft: str = ""
    scroll: int = 0


@dataclass
class CitationsState:
    items: CitationList = field(default_factory=CitationList)
    source: Optional[ChatTurn] = None


NOTICE_BUSY = "busy: wait for the reply or press ctrl+c to cancel"
NOTICE_NO_KEY = "chat unavailable: set OPENROUTER_API_KEY"
NOTICE_NO_CITATIONS = "no citations in the last reply"


class AppSession:
    """The whole interactive state, one record per mode.

    Records survive mode switches, so coming back to a mode restores its
    query and selection. Only the streaming exchange is turn-scoped.
    """

    def __init__(self, corpus: CorpusIndex, transport: ChatTransport, page_size: int = 10):
        self.corpus = corpus
        self.matcher = FuzzyMatcher(corpus)
        self.chat = ChatSession(corpus, transport)
        self.page_size = max(1, page_size)
        self.mode = Mode.SEARCH
        self.search = SearchState()
        self.chat_state = ChatState()
        self.citations = CitationsState()
        self.notice: Optional[str] = None
        self.running = True

    def handle(self, event: InputEvent) -> list[Effect]:
        """Apply one input event and return the resulting effects."""
        self.notice = None
        if not self.running:
            return []
        if event.action is Action.FORCE_QUIT:
            return self._quit()

        if self.mode is Mode.SEARCH:
            return self._handle_search(event)
        if self.mode is Mode.CHAT:
            return self._handle_chat(event)
        return self._handle_citations(event)

    def feed(self, events: list[InputEvent]) -> list[Effect]:
        """Apply several events in order, collecting their effects."""
        effects: list[Effect] = []
        for event in events:
            effects.extend(self.handle(event))
        return effects

    def selected_location(self) -> Optional[tuple[str, int]]:
        """The (path, line) under the cursor of the active list, if any."""
        if self.mode is Mode.SEARCH:
            match = self.search.current
            return (match.path, match.line) if match else None
        if self.mode is Mode.CITATIONS:
            citation = self.citations.items.current
            return (citation.path, citation.line) if citation else None
        return None

    # Search mode

    def _handle_search(self, event: InputEvent) -> list[Effect]:
        action = event.action
        state = self.search

        if action is Action.CHAR:
            if event.char == "?" and not state.query:
                return self._enter_chat()
            self._set_query(state.query + event.char)
        elif action is Action.BACKSPACE:
            if state.query:
                self._set_query(state.query[:-1])
        elif action in _MOVES:
            state.selected = selection.move(
                state.selected, self._delta(action), len(state.results)
            )
        elif action is Action.ACTIVATE:
            return self._open(self.selected_location())
        elif action is Action.ENTER_CHAT:
            return self._enter_chat()
        elif action in (Action.BACK, Action.QUIT, Action.CANCEL):
            return self._quit()
        return []

    def _set_query(self, query: str) -> None:
        state = self.search
        state.query = query
        state.results = self.matcher.search(query)
        state.selected = selection.clamp(0, len(state.results))

    # Chat mode

    def _handle_chat(self, event: InputEvent) -> list[Effect]:
        action = event.action
        state = self.chat_state

        if action is Action.CHAR:
            state.draft += event.char
        elif action is Action.BACKSPACE:
            state.draft = state.draft[:-1]
        elif action in _MOVES:
            # scroll counts lines back from the newest output
            state.scroll = max(0, state.scroll - self._delta(action))
        elif action is Action.ACTIVATE:
            return self._send()
        elif action is Action.CANCEL:
            if self.chat.busy:
                return self._cancel()
            self.mode = Mode.SEARCH
        elif action is Action.BACK:
            effects = self._cancel() if self.chat.busy else []
            self.mode = Mode.SEARCH
            return effects
        elif action is Action.BROWSE_CITATIONS:
            self._enter_citations()
        return []

    def _enter_chat(self) -> list[Effect]:
        if not self.chat.available:
            self.notice = NOTICE_NO_KEY
            return []
        self.mode = Mode.CHAT
        return []

    def _send(self) -> list[Effect]:
        if self.chat.busy:
            self.notice = NOTICE_BUSY
            return []
        exchange = self.chat.begin(self.chat_state.draft)
        if exchange is None:
            return []
        self.chat_state.draft = ""
        self.chat_state.scroll = 0
        return [StartExchange(exchange)]

    def _cancel(self) -> list[Effect]:
        self.chat.cancel()
        return [CancelExchange()]

    def _enter_citations(self) -> None:
        reply = self.chat.last_reply
        if reply is None or not reply.final or not reply.citations:
            self.notice = NOTICE_NO_CITATIONS
            return
        if self.citations.source is not reply:
            self.citations = CitationsState(items=CitationList(reply.citations), source=reply)
        self.mode = Mode.CITATIONS

    # Citations mode

    def _handle_citations(self, event: InputEvent) -> list[Effect]:
        action = event.action
        items = self.citations.items

        if action is Action.CHAR:
            items.type(event.char)
        elif action is Action.BACKSPACE:
            items.backspace()
        elif action in _MOVES:
            items.move(self._delta(action))
        elif action is Action.ACTIVATE:
            return self._open(self.selected_location())
        elif action in (Action.BACK, Action.CANCEL):
            self.mode = Mode.CHAT
        return []

    # Shared

    def _delta(self, action: Action) -> int:
        return _MOVES[action] * (self.page_size if action in _PAGES else 1)

    def _open(self, location: Optional[tuple[str, int]]) -> list[Effect]:
        if location is None:
            return []
        logger.debug(f"Opening {location[0]}:{location[1]}")
        return [OpenLocation(*location)]

    def _quit(self) -> list[Effect]:
        effects: list[Effect] = []
        if self.chat.busy:
            effects.extend(self._cancel())
        self.running = False
        effects.append(Quit())
        return effects


_MOVES = {
    Action.UP: -1,
    Action.DOWN: 1,
    Action.PAGE_UP: -1,
    Action.PAGE_DOWN: 1,
}
_PAGES = frozenset({Action.PAGE_UP, Action.PAGE_DOWN})
