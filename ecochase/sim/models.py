# ecochase/sim/models.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import FrozenSet, NamedTuple, Optional, Tuple

IDLE = "idle"
RUNNING = "running"
PAUSED = "paused"
FINISHED = "finished"
PHASES = (IDLE, RUNNING, PAUSED, FINISHED)


class Position(NamedTuple):
    x: int
    y: int

    def manhattan(self, other: Tuple[int, int]) -> int:
        return abs(self.x - other[0]) + abs(self.y - other[1])


class LogEntry(NamedTuple):
    tick: int
    message: str


@dataclass(frozen=True)
class Grid:
    size: int
    obstacles: FrozenSet[Position] = frozenset()


@dataclass(frozen=True)
class Prey:
    id: int
    position: Position

    def moved_to(self, pos: Position) -> "Prey":
        return Prey(self.id, pos)


@dataclass(frozen=True)
class SimulationState:
    """
    One immutable snapshot of a run. Only engine.tick produces successors;
    resets build a new one from scratch.
    """
    grid: Grid
    predator: Position
    prey: Tuple[Prey, ...]
    algorithm: str = "A*"
    tick: int = 0
    reward: int = 0
    log: Tuple[LogEntry, ...] = ()
    phase: str = IDLE
    last_path: Tuple[Position, ...] = ()
    path_origin: Optional[Position] = None     # predator cell the last search started from
    target_id: Optional[int] = None
    captured: Tuple[int, ...] = field(default=())   # prey ids in capture order

    @property
    def grid_size(self) -> int:
        return self.grid.size

    @property
    def obstacles(self) -> FrozenSet[Position]:
        return self.grid.obstacles

    @property
    def is_finished(self) -> bool:
        return self.phase == FINISHED

    def prey_positions(self) -> Tuple[Position, ...]:
        return tuple(p.position for p in self.prey)

    def prey_by_id(self, pid: int) -> Optional[Prey]:
        for p in self.prey:
            if p.id == pid:
                return p
        return None
