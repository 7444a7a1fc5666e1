import random

import pytest

from ecochase.sim.errors import ConfigurationError, InvalidPositionError
from ecochase.sim.models import Grid, Position
from ecochase.sim.pathfinding import astar, bfs, get_pathfinder, PATHFINDERS
from ecochase.sim.world import manhattan

SEARCHES = [bfs, astar]


def assert_valid_path(path, start, goal, grid):
    prev = start
    for step in path:
        assert manhattan(prev, step) == 1
        assert 0 <= step.x < grid.size and 0 <= step.y < grid.size
        assert step not in grid.obstacles
        prev = step
    assert prev == goal


@pytest.mark.parametrize("search", SEARCHES)
def test_straight_line(search):
    assert search((0, 2), (4, 2), Grid(5)) == [(1, 2), (2, 2), (3, 2), (4, 2)]


@pytest.mark.parametrize("search", SEARCHES)
@pytest.mark.parametrize("n", [1, 2, 7, 20])
def test_open_grid_corner_to_corner(search, n):
    grid = Grid(n)
    path = search((0, 0), (n - 1, n - 1), grid)
    assert len(path) == 2 * (n - 1)
    if path:
        assert_valid_path(path, (0, 0), (n - 1, n - 1), grid)


@pytest.mark.parametrize("search", SEARCHES)
def test_wall_with_gap_forces_detour(search):
    wall = frozenset(Position(2, y) for y in range(4))
    grid = Grid(5, wall)
    path = search((0, 0), (4, 0), grid)
    assert len(path) == 12
    assert Position(2, 4) in path
    assert_valid_path(path, (0, 0), (4, 0), grid)


@pytest.mark.parametrize("search", SEARCHES)
def test_enclosed_goal_returns_empty(search):
    grid = Grid(5, frozenset({Position(3, 4), Position(4, 3)}))
    assert search((0, 0), (4, 4), grid) == []


@pytest.mark.parametrize("search", SEARCHES)
def test_start_equals_goal(search):
    assert search((2, 2), (2, 2), Grid(5)) == []


@pytest.mark.parametrize("search", SEARCHES)
def test_out_of_bounds_endpoints_raise(search):
    with pytest.raises(InvalidPositionError):
        search((0, 0), (5, 5), Grid(5))
    with pytest.raises(InvalidPositionError):
        search((-1, 0), (1, 1), Grid(5))


def test_bfs_and_astar_agree_on_length_over_random_mazes():
    r = random.Random(7)
    for _ in range(60):
        n = r.randint(4, 15)
        cells = [Position(x, y) for x in range(n) for y in range(n)]
        start, goal = r.sample(cells, 2)
        obstacles = frozenset(c for c in cells if c not in (start, goal) and r.random() < 0.3)
        grid = Grid(n, obstacles)
        a = astar(start, goal, grid)
        b = bfs(start, goal, grid)
        assert len(a) == len(b)
        if a:
            assert_valid_path(a, start, goal, grid)
            assert_valid_path(b, start, goal, grid)


def test_registry():
    assert set(PATHFINDERS) == {"BFS", "A*"}
    assert get_pathfinder("BFS") is bfs
    assert get_pathfinder("A*") is astar
    with pytest.raises(ConfigurationError):
        get_pathfinder("Dijkstra")
