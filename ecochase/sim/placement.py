# ecochase/sim/placement.py
from __future__ import annotations
import logging
from typing import Iterable, List, Optional, Set, Tuple

from .config import RUN, PLACEMENT, RunConfig, PlacementConfig, PREDATOR_ALGOS
from .errors import ConfigurationError
from .models import Grid, LogEntry, Position, Prey, SimulationState
from .rng import RNG
from .world import in_bounds

logger = logging.getLogger(__name__)

INIT_MESSAGE = "Simulation initialized."
LAYOUT_MESSAGE = "Configuration generated from prompt."


def predator_start(grid_size: int) -> Position:
    return Position(0, grid_size // 2)


def _sample_free(rng: RNG, x_range: Tuple[int, int], y_range: Tuple[int, int],
                 occupied: Set[Position], what: str, placement: PlacementConfig) -> Position:
    """
    Rejection-sample a cell in the region that is not in `occupied`.
    After retry_factor x region misses the free cells are enumerated and one is
    picked directly, so only a region with no free cell fails.
    """
    x0, x1 = x_range
    y0, y1 = y_range
    region = (x1 - x0) * (y1 - y0)
    taken = sum(1 for p in occupied if x0 <= p.x < x1 and y0 <= p.y < y1)
    free = region - taken
    if free <= 0:
        raise ConfigurationError(f"no free cell left to place {what}")

    budget = max(1, int(placement.retry_factor)) * region
    for _ in range(budget):
        pos = Position(rng.randrange(x0, x1), rng.randrange(y0, y1))
        if pos not in occupied:
            return pos

    logger.debug("placing %s: %d misses, picking from %d free cells", what, budget, free)
    cells = [Position(x, y) for x in range(x0, x1) for y in range(y0, y1)]
    return rng.choice([c for c in cells if c not in occupied])


def place_entities(grid_size: int, obstacle_density: float, num_prey: int, rng: RNG,
                   placement: PlacementConfig = PLACEMENT):
    """
    Returns (predator, prey_positions, obstacles).
      predator : (0, grid_size // 2)
      prey     : right half of the grid, x in [grid_size//2, grid_size)
      obstacles: anywhere, floor(grid_size^2 * density) of them
    Nothing overlaps.
    """
    half = grid_size // 2
    predator = predator_start(grid_size)
    occupied: Set[Position] = {predator}

    prey: List[Position] = []
    for i in range(num_prey):
        pos = _sample_free(rng, (half, grid_size), (0, grid_size), occupied, f"prey #{i}", placement)
        prey.append(pos)
        occupied.add(pos)

    n_obstacles = int(grid_size * grid_size * obstacle_density)
    obstacles: List[Position] = []
    for i in range(n_obstacles):
        pos = _sample_free(rng, (0, grid_size), (0, grid_size), occupied, f"obstacle #{i}", placement)
        obstacles.append(pos)
        occupied.add(pos)

    return predator, prey, obstacles


def initialize(config: RunConfig = RUN, rng: Optional[RNG] = None,
               placement: PlacementConfig = PLACEMENT) -> SimulationState:
    """Fresh idle state for `config`. Raises ConfigurationError, never loops forever."""
    config.validate()
    if rng is None:
        rng = RNG(config.seed)
    size = int(config.grid_size)
    predator, prey, obstacles = place_entities(
        size, float(config.obstacle_density), int(config.num_prey), rng, placement)

    logger.info("initialized %s: %d prey, %d obstacles", config, len(prey), len(obstacles))
    return SimulationState(
        grid=Grid(size=size, obstacles=frozenset(obstacles)),
        predator=predator,
        prey=tuple(Prey(i, p) for i, p in enumerate(prey)),
        algorithm=config.predator_algo,
        log=(LogEntry(0, INIT_MESSAGE),),
    )


def state_from_layout(grid_size: int, predator: Tuple[int, int], prey: Iterable[Tuple[int, int]],
                      obstacles: Iterable[Tuple[int, int]], algorithm: str = "A*",
                      num_prey: Optional[int] = None,
                      message: str = LAYOUT_MESSAGE) -> SimulationState:
    """
    Accept an explicit layout (e.g. from a configuration generator) after the
    same checks initialize() guarantees: everything in bounds, nothing shares a cell.
    """
    try:
        size = int(grid_size)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"grid_size must be an integer, got {grid_size!r}") from e
    if size < 1:
        raise ConfigurationError(f"grid_size must be >= 1, got {grid_size}")
    if algorithm not in PREDATOR_ALGOS:
        raise ConfigurationError(f"unknown predator_algo {algorithm!r}")
    grid = Grid(size=size)

    def _pos(p, what: str) -> Position:
        try:
            pos = Position(int(p[0]), int(p[1]))
        except (TypeError, ValueError, IndexError) as e:
            raise ConfigurationError(f"{what}: malformed position {p!r}") from e
        if not in_bounds(pos, grid):
            raise ConfigurationError(f"{what} at {tuple(pos)} is outside the {size}x{size} grid")
        return pos

    pred = _pos(predator, "predator")
    occupied = {pred: "predator"}

    prey_positions: List[Position] = []
    for i, p in enumerate(prey):
        pos = _pos(p, f"prey #{i}")
        if pos in occupied:
            raise ConfigurationError(f"prey #{i} at {tuple(pos)} overlaps {occupied[pos]}")
        occupied[pos] = f"prey #{i}"
        prey_positions.append(pos)

    obstacle_set: Set[Position] = set()
    for i, p in enumerate(obstacles):
        pos = _pos(p, f"obstacle #{i}")
        if pos in occupied:
            raise ConfigurationError(f"obstacle #{i} at {tuple(pos)} overlaps {occupied[pos]}")
        occupied[pos] = f"obstacle #{i}"
        obstacle_set.add(pos)

    if num_prey is not None and int(num_prey) != len(prey_positions):
        logger.warning("layout declares %s prey but lists %d positions; using the positions",
                       num_prey, len(prey_positions))

    return SimulationState(
        grid=Grid(size=size, obstacles=frozenset(obstacle_set)),
        predator=pred,
        prey=tuple(Prey(i, p) for i, p in enumerate(prey_positions)),
        algorithm=algorithm,
        log=(LogEntry(0, message),),
    )
