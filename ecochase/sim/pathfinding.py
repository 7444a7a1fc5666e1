# ecochase/sim/pathfinding.py
"""
Shortest-path search on the 4-connected grid.

Both searches return the steps *after* `start` up to and including `goal`:
    []            when start == goal, or when the goal cannot be reached
    [p1, ..., g]  otherwise, one entry per unit move

Tie-breaks: neighbours are expanded in world.DIRECTIONS order (S, N, E, W).
BFS keeps the first predecessor that discovers a cell. A* pops the lowest
f-score and, among equal f-scores, the entry pushed first. The two searches may
therefore return different routes, but always of the same length.
"""
from __future__ import annotations

import heapq
import itertools
import logging
from collections import deque
from typing import Callable, Dict, List, Tuple

from .models import Grid, Position
from .world import neighbors4, require_in_bounds, manhattan
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

Path = List[Position]
PathFinder = Callable[[Tuple[int, int], Tuple[int, int], Grid], Path]


def _reconstruct(came_from: Dict[Position, Position], current: Position) -> Path:
    path = [current]
    while current in came_from:
        current = came_from[current]
        path.append(current)
    path.reverse()
    return path[1:]  # drop start


def bfs(start: Tuple[int, int], goal: Tuple[int, int], grid: Grid) -> Path:
    start = require_in_bounds(start, grid)
    goal = require_in_bounds(goal, grid)

    frontier = deque([start])
    visited = {start}
    came_from: Dict[Position, Position] = {}

    while frontier:
        current = frontier.popleft()
        if current == goal:
            return _reconstruct(came_from, current)
        for nxt in neighbors4(current, grid):
            if nxt in visited:
                continue
            visited.add(nxt)
            came_from[nxt] = current
            frontier.append(nxt)

    logger.debug("bfs: no path %s -> %s", start, goal)
    return []


def astar(start: Tuple[int, int], goal: Tuple[int, int], grid: Grid) -> Path:
    """A* with the Manhattan heuristic (admissible and consistent here)."""
    start = require_in_bounds(start, grid)
    goal = require_in_bounds(goal, grid)

    order = itertools.count()
    g_score: Dict[Position, int] = {start: 0}
    came_from: Dict[Position, Position] = {}
    open_heap: List[Tuple[int, int, Position]] = [(manhattan(start, goal), next(order), start)]
    closed = set()

    while open_heap:
        _f, _seq, current = heapq.heappop(open_heap)
        if current in closed:
            continue  # stale entry superseded by a cheaper push
        if current == goal:
            return _reconstruct(came_from, current)
        closed.add(current)

        tentative = g_score[current] + 1
        for nxt in neighbors4(current, grid):
            if tentative < g_score.get(nxt, float("inf")):
                came_from[nxt] = current
                g_score[nxt] = tentative
                heapq.heappush(open_heap, (tentative + manhattan(nxt, goal), next(order), nxt))

    logger.debug("astar: no path %s -> %s", start, goal)
    return []


# ------------------------------------------------------------------
# Registry
# ------------------------------------------------------------------
PATHFINDERS: Dict[str, PathFinder] = {
    "BFS": bfs,
    "A*": astar,
}


def get_pathfinder(name: str) -> PathFinder:
    try:
        return PATHFINDERS[name]
    except KeyError as exc:
        raise ConfigurationError(
            f"Path finder '{name}' not found. Available: {list(PATHFINDERS)}"
        ) from exc
