"""Finder TUI - fuzzy search, chat and citation browsing in the terminal."""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Group, RenderableType
from rich.markdown import Markdown
from rich.text import Text
from textual import events, work
from textual.app import App, ComposeResult, SuspendNotSupported
from textual.binding import Binding
from textual.containers import Container, Horizontal, VerticalScroll
from textual.message import Message
from textual.widgets import Footer, Header, Static

from finder import __version__
from finder.chat import Exchange
from finder.editor import EditorLauncher
from finder.models import ChatTurn, Role
from finder.search import PreviewWindow
from finder.state import (
    Action,
    AppSession,
    CancelExchange,
    Effect,
    InputEvent,
    Mode,
    OpenLocation,
    Quit,
    StartExchange,
)
from finder.view import Row, View, build_view

logger = logging.getLogger(__name__)

HIGHLIGHT = "bold #ffc864"
ACCENT = "#6495ed"
DIM = "#808080"

_KEYS = {
    "backspace": Action.BACKSPACE,
    "up": Action.UP,
    "down": Action.DOWN,
    "pageup": Action.PAGE_UP,
    "pagedown": Action.PAGE_DOWN,
    "enter": Action.ACTIVATE,
}

_PROMPTS = {
    Mode.SEARCH: "> ",
    Mode.CHAT: "ask> ",
    Mode.CITATIONS: "cite> ",
}


def render_row(row: Row) -> Text:
    """One list row with its matched characters highlighted."""
    line = Text(no_wrap=True, overflow="ellipsis")
    line.append("> " if row.selected else "  ", style=ACCENT)
    label = Text(row.label, style="bold" if row.selected else "")
    for pos in row.label_positions:
        label.stylize(HIGHLIGHT, pos, pos + 1)
    line.append_text(label)
    line.append("  ")
    text = Text(row.text, style=DIM)
    for pos in row.text_positions:
        text.stylize(HIGHLIGHT, pos, pos + 1)
    line.append_text(text)
    return line


def render_preview(window: PreviewWindow | None) -> RenderableType:
    if window is None:
        return Text("")
    width = len(str(max(window.end, 1)))
    out = Text(no_wrap=True, overflow="ellipsis")
    out.append(f"{window.path}\n", style=f"bold {ACCENT}")
    for number, line in window.numbered():
        style = "reverse" if number == window.target else ""
        out.append(f"{number:>{width}} ", style=DIM)
        out.append(f"{line}\n", style=style)
    return out


def render_turn(turn: ChatTurn) -> RenderableType:
    if turn.role is Role.USER:
        return Text(f"you: {turn.text}\n", style=f"bold {ACCENT}")
    parts: list[RenderableType] = [Markdown(turn.text or " ")]
    if turn.streaming:
        parts.append(Text("...", style=DIM))
    elif turn.cancelled:
        parts.append(Text("[cancelled]", style=DIM))
    parts.append(Text(""))
    return Group(*parts)


class ChatLog(VerticalScroll, can_focus=False):
    """Scrollable turn log; scrolling is driven by the session, not the mouse focus."""


class FinderApp(App):
    """The Finder TUI."""

    class ChatUpdated(Message):
        """Posted after each reply increment and on finalization."""

    CSS = """
    Screen {
        background: $surface;
    }

    #status {
        height: 1;
        padding: 0 1;
        color: $text-muted;
    }

    #prompt {
        height: 3;
        padding: 0 1;
        border: round $primary-darken-1;
    }

    #body {
        height: 1fr;
    }

    #list-pane {
        height: 1fr;
    }

    #results {
        width: 1fr;
        padding: 0 1;
        border: round $primary-darken-2;
    }

    #preview {
        width: 1fr;
        padding: 0 1;
        border: round $primary-darken-2;
        background: $surface-darken-1;
    }

    ChatLog {
        height: 1fr;
        padding: 0 1;
        border: round $primary-darken-2;
    }

    #notice {
        height: 1;
        padding: 0 1;
        color: $warning;
    }
    """

    BINDINGS = [
        Binding("escape", "input('back')", "Back", priority=True),
        Binding("tab", "input('enter_chat')", "Chat", priority=True),
        Binding("ctrl+o", "input('browse_citations')", "Citations", priority=True),
        Binding("ctrl+c", "input('cancel')", "Cancel", priority=True),
        Binding("ctrl+q", "input('force_quit')", "Quit", priority=True),
    ]

    TITLE = "Finder"

    def __init__(self, session: AppSession, editor: EditorLauncher, root: Path | str = "."):
        super().__init__()
        self.session = session
        self.editor = editor
        self.root = Path(root)

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static(id="status")
        yield Static(id="prompt")
        with Container(id="body"):
            with Horizontal(id="list-pane"):
                yield Static(id="results")
                yield Static(id="preview")
            yield ChatLog(Static(id="chat-content"), id="chat-log")
        yield Static(id="notice")
        yield Footer()

    def on_mount(self) -> None:
        self.sub_title = str(self.root)
        self.refresh_view()

    def on_resize(self, event: events.Resize) -> None:
        self.refresh_view()

    # Input

    def on_key(self, event: events.Key) -> None:
        action = _KEYS.get(event.key)
        if action is not None:
            self.dispatch_input(InputEvent(action))
        elif event.is_printable and event.character:
            self.dispatch_input(InputEvent(Action.CHAR, event.character))
        else:
            return
        event.stop()
        event.prevent_default()

    def action_input(self, name: str) -> None:
        self.dispatch_input(InputEvent(Action(name)))

    def dispatch_input(self, event: InputEvent) -> None:
        for effect in self.session.handle(event):
            self.apply_effect(effect)
        self.refresh_view()

    def apply_effect(self, effect: Effect) -> None:
        if isinstance(effect, StartExchange):
            self.run_exchange(effect.exchange)
        elif isinstance(effect, CancelExchange):
            self.workers.cancel_group(self, "chat")
        elif isinstance(effect, OpenLocation):
            self.open_location(effect.path, effect.line)
        elif isinstance(effect, Quit):
            self.exit()

    def open_location(self, path: str, line: int) -> None:
        try:
            with self.suspend():
                self.editor.open(path, line)
        except SuspendNotSupported:
            logger.error("Cannot hand the terminal to an editor in this environment")
            self.notify(f"Cannot open {path}:{line} here", severity="error")

    # Streaming

    @work(exclusive=True, group="chat")
    async def run_exchange(self, exchange: Exchange) -> None:
        """Stream the reply on the app's event loop."""
        await self.session.chat.run(
            exchange, on_update=lambda: self.post_message(self.ChatUpdated())
        )

    def on_finder_app_chat_updated(self, event: ChatUpdated) -> None:
        self.refresh_view()

    # Rendering

    def refresh_view(self) -> None:
        results = self.query_one("#results", Static)
        preview = self.query_one("#preview", Static)
        list_height = max(results.content_size.height - 1, 1)
        if self.session.mode is not Mode.CHAT:
            # the hidden list pane has no size in chat mode
            self.session.page_size = list_height
        view = build_view(
            self.session,
            list_height=list_height,
            preview_height=max(preview.content_size.height - 1, 1),
        )
        self._render_status(view)
        self._render_prompt(view)

        in_chat = view.mode is Mode.CHAT
        self.query_one("#list-pane").display = not in_chat
        self.query_one("#chat-log").display = in_chat

        if in_chat:
            self._render_chat(view)
        else:
            results.update(self._render_rows(view))
            preview.update(render_preview(view.preview))

        self.query_one("#notice", Static).update(view.notice or "")

    def _render_status(self, view: View) -> None:
        chat = "chat ready" if view.chat_available else "chat off (no API key)"
        status = (
            f"v{__version__}  {view.document_count} documents  "
            f"{view.line_count} lines indexed  {chat}  [{view.mode.value}]"
        )
        if view.citation_count:
            status += f"  {view.citation_count} citations (ctrl+o)"
        self.query_one("#status", Static).update(Text(status, style=DIM))

    def _render_prompt(self, view: View) -> None:
        prompt = Text(_PROMPTS[view.mode], style=ACCENT)
        prompt.append(view.prompt)
        prompt.append("_", style=f"blink {ACCENT}")
        if view.streaming:
            prompt.append("  (streaming, ctrl+c to cancel)", style=DIM)
        self.query_one("#prompt", Static).update(prompt)

    def _render_rows(self, view: View) -> RenderableType:
        if not view.rows:
            if view.mode is Mode.SEARCH and not view.prompt:
                message = "Type to search... (tab to chat)"
            else:
                message = "No results"
            return Text(message, style=DIM)
        lines = Text("\n").join(render_row(row) for row in view.rows)
        footer = Text(f"\n{view.total} matches", style=DIM)
        return Group(lines, footer)

    def _render_chat(self, view: View) -> None:
        content = self.query_one("#chat-content", Static)
        if view.turns:
            content.update(Group(*(render_turn(turn) for turn in view.turns)))
        else:
            content.update(Text("Ask a question about your documents.", style=DIM))
        log = self.query_one("#chat-log", ChatLog)
        self.call_after_refresh(
            lambda: log.scroll_to(y=max(0, log.max_scroll_y - view.scroll), animate=False)
        )


def run_tui(session: AppSession, editor: EditorLauncher, root: Path | str = ".") -> None:
    """Run the Finder TUI until the user quits."""
    FinderApp(session, editor, root).run()
