import logging

import pytest

from ecochase.sim.config import RunConfig, PlacementConfig
from ecochase.sim.errors import ConfigurationError
from ecochase.sim.models import IDLE, LogEntry, Position
from ecochase.sim.placement import (INIT_MESSAGE, LAYOUT_MESSAGE, initialize, place_entities,
                                    predator_start, state_from_layout)
from ecochase.sim.rng import RNG


def test_initialize_defaults():
    state = initialize(RunConfig())
    assert state.predator == (0, 10)
    assert len(state.prey) == 3
    assert [p.id for p in state.prey] == [0, 1, 2]
    assert len(state.obstacles) == int(20 * 20 * 0.2)
    assert state.tick == 0 and state.reward == 0 and state.phase == IDLE
    assert state.log == (LogEntry(0, INIT_MESSAGE),)
    assert state.algorithm == "A*"


@pytest.mark.parametrize("seed", range(10))
def test_nothing_overlaps_and_prey_start_in_right_half(seed):
    cfg = RunConfig(grid_size=12, obstacle_density=0.3, num_prey=6, seed=seed)
    state = initialize(cfg)
    cells = [state.predator] + list(state.prey_positions()) + list(state.obstacles)
    assert len(cells) == len(set(cells))
    assert all(6 <= p.x < 12 and 0 <= p.y < 12 for p in state.prey_positions())
    assert all(0 <= o.x < 12 and 0 <= o.y < 12 for o in state.obstacles)


def test_zero_density_means_no_obstacles():
    assert initialize(RunConfig(obstacle_density=0.0)).obstacles == frozenset()


def test_zero_prey():
    state = initialize(RunConfig(num_prey=0))
    assert state.prey == ()


def test_same_seed_same_world():
    cfg = RunConfig(grid_size=15, num_prey=4, seed=99)
    assert initialize(cfg) == initialize(cfg)
    assert initialize(cfg, RNG(5)) == initialize(cfg, RNG(5))


def test_too_many_prey_for_the_right_half():
    # 2x2 grid: right half has two cells
    with pytest.raises(ConfigurationError):
        initialize(RunConfig(grid_size=2, num_prey=3, obstacle_density=0.0))


def test_full_density_cannot_be_placed():
    with pytest.raises(ConfigurationError):
        initialize(RunConfig(grid_size=5, num_prey=3, obstacle_density=1.0))


def test_tiny_retry_budget_still_places():
    predator, prey, obstacles = place_entities(6, 0.5, 3, RNG(0), PlacementConfig(retry_factor=1))
    cells = [predator] + prey + obstacles
    assert len(cells) == len(set(cells)) == 1 + 3 + 18


@pytest.mark.parametrize("seed", range(20))
def test_exactly_full_grid_places(seed):
    n_obstacles = int(20 * 20 * 0.99)
    cfg = RunConfig(grid_size=20, obstacle_density=0.99, num_prey=400 - 1 - n_obstacles, seed=seed)
    state = initialize(cfg)
    cells = {state.predator} | set(state.prey_positions()) | set(state.obstacles)
    assert len(cells) == 400


@pytest.mark.parametrize("changes", [
    dict(grid_size=0),
    dict(obstacle_density=1.5),
    dict(obstacle_density=-0.1),
    dict(num_prey=-1),
    dict(predator_algo="DFS"),
])
def test_invalid_config_rejected(changes):
    with pytest.raises(ConfigurationError):
        initialize(RunConfig(**changes))


def test_predator_start():
    assert predator_start(20) == Position(0, 10)
    assert predator_start(5) == Position(0, 2)


def test_layout_accepted():
    state = state_from_layout(6, (0, 3), [(5, 5), (4, 1)], [(2, 2)], algorithm="BFS")
    assert state.predator == (0, 3)
    assert [(p.id, p.position) for p in state.prey] == [(0, (5, 5)), (1, (4, 1))]
    assert state.obstacles == frozenset({Position(2, 2)})
    assert state.algorithm == "BFS"
    assert state.log == (LogEntry(0, LAYOUT_MESSAGE),)
    assert state.phase == IDLE


@pytest.mark.parametrize("predator, prey, obstacles", [
    ((6, 0), [(1, 1)], []),            # predator out of bounds
    ((0, 0), [(1, -1)], []),           # prey out of bounds
    ((0, 0), [(0, 0)], []),            # prey on predator
    ((0, 0), [(2, 2)], [(2, 2)]),      # obstacle on prey
    ((0, 0), [(2, 2)], [(3, 3), (3, 3)]),
    ((0, 0), [("a", 1)], []),
])
def test_layout_rejected(predator, prey, obstacles):
    with pytest.raises(ConfigurationError):
        state_from_layout(6, predator, prey, obstacles)


def test_layout_rejects_unknown_algorithm_and_bad_size():
    with pytest.raises(ConfigurationError):
        state_from_layout(6, (0, 0), [], [], algorithm="DFS")
    with pytest.raises(ConfigurationError):
        state_from_layout(0, (0, 0), [], [])


def test_layout_prey_count_mismatch_only_warns(caplog):
    with caplog.at_level(logging.WARNING, logger="ecochase.sim.placement"):
        state = state_from_layout(6, (0, 0), [(3, 3)], [], num_prey=2)
    assert len(state.prey) == 1
    assert "declares 2 prey" in caplog.text
