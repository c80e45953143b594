"""Selection index helpers shared by every navigable list."""

from typing import Optional


def clamp(index: Optional[int], size: int) -> Optional[int]:
    """Clamp ``index`` into a list of ``size`` items.

    Returns None for an empty list, so a selection never points past the end.
    """
    if size <= 0:
        return None
    if index is None:
        return 0
    return max(0, min(index, size - 1))


def move(index: Optional[int], delta: int, size: int) -> Optional[int]:
    if index is None:
        return clamp(None, size)
    return clamp(index + delta, size)
