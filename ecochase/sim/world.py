# ecochase/sim/world.py
from __future__ import annotations
from typing import List, Tuple

from .models import Grid, Position
from .errors import InvalidPositionError

# South, North, East, West (screen y grows downward). Both searches and the
# prey policy expand neighbours in this order, so it decides their tie-breaks.
DIRECTIONS: Tuple[Tuple[int, int], ...] = ((0, 1), (0, -1), (1, 0), (-1, 0))


def in_bounds(pos: Tuple[int, int], grid: Grid) -> bool:
    x, y = pos
    return 0 <= x < grid.size and 0 <= y < grid.size


def require_in_bounds(pos: Tuple[int, int], grid: Grid) -> Position:
    if not in_bounds(pos, grid):
        raise InvalidPositionError(pos, grid.size)
    return Position(*pos)


def is_walkable(pos: Tuple[int, int], grid: Grid) -> bool:
    return in_bounds(pos, grid) and Position(*pos) not in grid.obstacles


def neighbors4(pos: Tuple[int, int], grid: Grid) -> List[Position]:
    """Walkable axis-aligned neighbours of `pos` in DIRECTIONS order."""
    x, y = require_in_bounds(pos, grid)
    out: List[Position] = []
    for dx, dy in DIRECTIONS:
        nxt = Position(x + dx, y + dy)
        if is_walkable(nxt, grid):
            out.append(nxt)
    return out


def manhattan(a: Tuple[int, int], b: Tuple[int, int]) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])
