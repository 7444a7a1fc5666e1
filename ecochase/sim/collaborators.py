# ecochase/sim/collaborators.py
"""
Boundary to the text-driven helpers that sit outside the simulation:

  ConfigGenerator : free text  -> GeneratedLayout (explicit positions)
  PathExplainer   : PathQuery  -> display string

Any object with the right method can be plugged in (for instance a client for a
hosted language model). Two offline implementations ship here so the CLI and UI
work without one: KeywordConfigGenerator and TemplatePathExplainer.

Neither side ever touches SimulationState directly; LiveSim applies a layout
through placement.state_from_layout, which re-validates it.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple

from .config import RUN
from .engine import target_position
from .errors import CollaboratorError
from .models import Position, SimulationState
from .placement import place_entities
from .rng import RNG
from .world import manhattan

# control panel form limits
GRID_MIN, GRID_MAX = 10, 50
PREY_MIN, PREY_MAX = 1, 10

DENSITY_WORDS = (
    (r"\bno obstacles?\b|\bempty\b|\bnone\b", 0.0),
    (r"\blow\b|\bsparse\b|\bfew\b|\blight\b", 0.1),
    (r"\bmedium\b|\bmoderate\b|\baverage\b", 0.2),
    (r"\bhigh\b|\bdense\b|\bmany\b|\bheavy\b", 0.35),
)


@dataclass(frozen=True)
class GeneratedLayout:
    grid_size: int
    num_prey: int
    obstacle_density: float
    predator: Position
    prey: Tuple[Position, ...]
    obstacles: Tuple[Position, ...] = ()

    @staticmethod
    def _position(raw: Any, what: str) -> Position:
        try:
            if isinstance(raw, Mapping):
                return Position(int(raw["x"]), int(raw["y"]))
            x, y = raw
            return Position(int(x), int(y))
        except (KeyError, TypeError, ValueError) as e:
            raise CollaboratorError(f"{what}: cannot read position from {raw!r}") from e

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GeneratedLayout":
        """Accepts the generator's camelCase JSON keys or their snake_case twins."""
        if not isinstance(data, Mapping):
            raise CollaboratorError(f"layout must be a mapping, got {type(data).__name__}")

        def pick(*keys):
            for k in keys:
                if k in data:
                    return data[k]
            raise CollaboratorError(f"layout is missing {keys[0]!r}")

        try:
            grid_size = int(pick("gridSize", "grid_size"))
            num_prey = int(pick("numPrey", "num_prey"))
            density = float(pick("obstacleDensity", "obstacle_density"))
        except (TypeError, ValueError) as e:
            raise CollaboratorError(f"layout has a non-numeric field: {e}") from e

        predator = cls._position(pick("predatorInitialPosition", "predator"), "predator")
        prey = tuple(cls._position(p, f"prey #{i}")
                     for i, p in enumerate(pick("preyInitialPositions", "prey")))
        obstacles_raw = data.get("obstaclePositions", data.get("obstacles", ()))
        obstacles = tuple(cls._position(p, f"obstacle #{i}") for i, p in enumerate(obstacles_raw))
        return cls(grid_size, num_prey, density, predator, prey, obstacles)


@dataclass(frozen=True)
class PathQuery:
    grid_size: int
    predator: Position
    prey: Position
    obstacles: Tuple[Position, ...]
    algorithm: str
    path: Tuple[Position, ...] = field(default=())


def path_query(state: SimulationState) -> Optional[PathQuery]:
    """Snapshot of the latest search for the explainer; None before the first tick."""
    target = target_position(state)
    if target is None or state.path_origin is None:
        return None
    return PathQuery(
        grid_size=state.grid_size,
        predator=Position(*state.path_origin),
        prey=Position(*target),
        obstacles=tuple(sorted(state.obstacles)),
        algorithm=state.algorithm,
        path=tuple(state.last_path),
    )


class ConfigGenerator(Protocol):
    def generate(self, prompt: str) -> GeneratedLayout: ...


class PathExplainer(Protocol):
    def explain(self, query: PathQuery) -> str: ...

# ---------------- offline implementations ----------------
class KeywordConfigGenerator:
    """
    Reads a prompt such as "a 20x20 grid with 5 prey and medium obstacle density"
    and places everything with the regular initializer.
    """

    def __init__(self, seed: Optional[int] = None):
        self.rng = RNG(RUN.seed if seed is None else seed)

    @staticmethod
    def parse(prompt: str) -> Dict[str, Any]:
        text = prompt.lower()
        out: Dict[str, Any] = dict(grid_size=RUN.grid_size, num_prey=RUN.num_prey,
                                   obstacle_density=RUN.obstacle_density)

        m = re.search(r"(\d+)\s*(?:x|×|by)\s*(\d+)", text)
        if m:
            out["grid_size"] = max(int(m.group(1)), int(m.group(2)))
        else:
            m = re.search(r"grid (?:of |size )?(\d+)", text)
            if m:
                out["grid_size"] = int(m.group(1))

        m = re.search(r"(\d+)\s+(?:\w+\s+)?prey", text)
        if m:
            out["num_prey"] = int(m.group(1))

        m = re.search(r"(\d+(?:\.\d+)?)\s*%", text)
        if m:
            out["obstacle_density"] = float(m.group(1)) / 100.0
        else:
            for pattern, value in DENSITY_WORDS:
                if re.search(pattern, text):
                    out["obstacle_density"] = value
                    break

        out["grid_size"] = min(GRID_MAX, max(GRID_MIN, out["grid_size"]))
        out["num_prey"] = min(PREY_MAX, max(PREY_MIN, out["num_prey"]))
        out["obstacle_density"] = min(1.0, max(0.0, out["obstacle_density"]))
        return out

    def generate(self, prompt: str) -> GeneratedLayout:
        params = self.parse(prompt)
        predator, prey, obstacles = place_entities(
            params["grid_size"], params["obstacle_density"], params["num_prey"], self.rng)
        return GeneratedLayout(
            grid_size=params["grid_size"],
            num_prey=params["num_prey"],
            obstacle_density=params["obstacle_density"],
            predator=predator,
            prey=tuple(prey),
            obstacles=tuple(obstacles),
        )


class TemplatePathExplainer:
    STRATEGY = {
        "BFS": ("Breadth-first search expands cells in rings of equal step count, "
                "so the first time it reaches the prey it has found a shortest route."),
        "A*": ("A* ranks cells by steps taken plus the Manhattan distance still to go; "
               "that estimate never overshoots on a 4-connected grid, so the route it "
               "returns is a shortest one while exploring fewer cells than BFS."),
    }

    def explain(self, query: PathQuery) -> str:
        if not query.path:
            if query.predator == query.prey:
                return "The predator is already on the prey's cell; no search was needed."
            return (f"No route exists from {tuple(query.predator)} to {tuple(query.prey)}: "
                    f"the obstacles seal the prey off, so the predator waits this tick.")

        direct = manhattan(query.predator, query.prey)
        steps = len(query.path)
        detour = steps - direct
        lines: List[str] = [
            self.STRATEGY.get(query.algorithm, f"{query.algorithm} searched the grid."),
            (f"From {tuple(query.predator)} to the prey at {tuple(query.prey)} it found "
             f"a {steps}-step route on a {query.grid_size}x{query.grid_size} grid "
             f"with {len(query.obstacles)} obstacle cells."),
        ]
        if detour == 0:
            lines.append("The route is as short as the straight Manhattan distance: "
                         "no obstacle stands in the way.")
        else:
            lines.append(f"That is {detour} steps longer than the Manhattan distance of "
                         f"{direct}, because obstacles force a detour.")
        first = query.path[0]
        lines.append(f"The predator only takes the first step, to {tuple(first)}, "
                     f"and searches again next tick as the prey moves.")
        return " ".join(lines)
