# ecochase/sim/behaviors.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Collection, Optional, Sequence, Tuple

from .models import Grid, Position, Prey
from .pathfinding import PathFinder
from .rng import RNG
from .world import neighbors4, manhattan

# ---------------- prey: random walk ----------------
def prey_step(pos: Tuple[int, int], grid: Grid, occupied: Collection[Position], rng: RNG) -> Position:
    """
    Uniform pick among walkable neighbours that are not in `occupied`
    (the predator's cell, plus anything else the caller blocks).
    Boxed in -> stay put.
    """
    candidates = [n for n in neighbors4(pos, grid) if n not in occupied]
    if not candidates:
        return Position(*pos)
    return rng.choice(candidates)

# ---------------- predator: greedy pursuit ----------------
def select_target(predator: Tuple[int, int], prey: Sequence[Prey]) -> Optional[Prey]:
    """Nearest prey by Manhattan distance; ties go to the lowest id."""
    best: Optional[Prey] = None
    best_key = None
    for p in prey:
        key = (manhattan(predator, p.position), p.id)
        if best_key is None or key < best_key:
            best, best_key = p, key
    return best


@dataclass(frozen=True)
class PredatorDecision:
    target: Optional[Prey]
    path: Tuple[Position, ...]
    next_pos: Position
    unreachable: bool = False

    @property
    def moved(self) -> bool:
        return bool(self.path)


def predator_step(predator: Tuple[int, int], prey: Sequence[Prey], grid: Grid,
                  pathfinder: PathFinder) -> PredatorDecision:
    predator = Position(*predator)
    target = select_target(predator, prey)
    if target is None:
        return PredatorDecision(None, (), predator)
    if target.position == predator:
        return PredatorDecision(target, (), predator)

    path = tuple(pathfinder(predator, target.position, grid))
    if not path:
        return PredatorDecision(target, (), predator, unreachable=True)
    # one cell per tick, however long the route
    return PredatorDecision(target, path, path[0])
