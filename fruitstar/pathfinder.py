"""fruitstar/pathfinder.py — Depth-first route from the right edge to the left.

The start is the first walkable cell on the rightmost column (scanning y from
0, excluding the last row); the goal is any cell with x == 0. The route is
whatever walk the depth-first search finds first: a reachability witness,
not a shortest path. Neighbour order is fixed by Grid.neighbours, so the same
grid always yields the same path.
"""

from __future__ import annotations

from typing import Callable, Iterable, Optional, TypeVar

from fruitstar.errors import NoPathToEnd, NoStart
from fruitstar.grid import Cell, Grid

N = TypeVar("N")

Path = tuple[Cell, ...]
"""Ordered, immutable walk of grid-adjacent cells."""


# ---------------------------------------------------------------------------
# Start / goal
# ---------------------------------------------------------------------------

def find_start(grid: Grid) -> Optional[Cell]:
    """First walkable cell on the rightmost column, or None."""
    if grid.width == 0:
        return None
    x = grid.width - 1
    for y in range(grid.height - 1):
        if grid.has_vertex((x, y)):
            return (x, y)
    return None


def is_goal(cell: Cell) -> bool:
    return cell[0] == 0


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------

def dfs(
    start: N,
    successors: Callable[[N], Iterable[N]],
    success: Callable[[N], bool],
) -> Optional[list[N]]:
    """Depth-first search returning the walk from *start* to the first success.

    Successors are explored in the order they are yielded. Dead ends are
    dropped from the returned walk, so consecutive elements are always
    successor-linked.
    """
    if success(start):
        return [start]

    visited = {start}
    walk = [start]
    stack = [iter(successors(start))]
    while stack:
        for nxt in stack[-1]:
            if nxt in visited:
                continue
            visited.add(nxt)
            walk.append(nxt)
            if success(nxt):
                return walk
            stack.append(iter(successors(nxt)))
            break
        else:
            stack.pop()
            walk.pop()
    return None


def find_path(grid: Grid) -> Path:
    """Compute the level path over *grid*.

    Raises:
        NoStart: No walkable cell on the start edge.
        NoPathToEnd: No walkable route from the start to the x == 0 edge.
    """
    start = find_start(grid)
    if start is None:
        raise NoStart()

    walk = dfs(start, grid.neighbours, is_goal)
    if walk is None:
        raise NoPathToEnd(start)
    return tuple(walk)
