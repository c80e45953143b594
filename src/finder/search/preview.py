"""Preview window computation."""

from dataclasses import dataclass

from finder.models import Document


@dataclass(frozen=True)
class PreviewWindow:
    """A contiguous run of numbered lines from one document."""

    path: str
    target: int
    start: int
    lines: tuple[str, ...]

    @property
    def end(self) -> int:
        """Last line number shown (start - 1 when empty)."""
        return self.start + len(self.lines) - 1

    def numbered(self) -> list[tuple[int, str]]:
        return list(enumerate(self.lines, start=self.start))


def preview_window(document: Document, target: int, height: int) -> PreviewWindow:
    """Return up to ``height`` lines of ``document`` centered on ``target``.

    The window is clamped to the document, so near the start or end the
    target sits off-center instead of the window running past a bound.
    """
    total = document.line_count
    if height < 1 or total == 0:
        return PreviewWindow(path=document.path, target=target, start=1, lines=())

    height = min(height, total)
    start = target - height // 2
    start = max(1, min(start, total - height + 1))
    return PreviewWindow(
        path=document.path,
        target=target,
        start=start,
        lines=document.lines[start - 1 : start - 1 + height],
    )
