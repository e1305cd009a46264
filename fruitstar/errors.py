"""fruitstar/errors.py — Level load failures.

Every error here is fatal to a single load attempt, never to the process.
The loader clears its loading marker before re-raising.
"""

from __future__ import annotations


class LevelLoadError(Exception):
    """Base class for failures that abort a level load."""


class EmptyImageError(LevelLoadError, ValueError):
    """The source image has no pixels."""

    def __init__(self, shape: tuple[int, ...] = ()):
        self.shape = shape
        super().__init__(f"Level image is empty (shape={shape!r}).")


class NoStart(LevelLoadError):
    """No walkable cell on the start edge."""

    def __init__(self) -> None:
        super().__init__("No starting point was available on the proposed map.")


class NoPathToEnd(LevelLoadError):
    """The search exhausted every reachable cell without touching x == 0."""

    def __init__(self, start: tuple[int, int] | None = None):
        self.start = start
        super().__init__(
            "No path was found from starting point to the end of the map."
        )
