# ecochase/sim/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, asdict

import yaml

from .errors import ConfigurationError

PREDATOR_ALGOS = ("BFS", "A*")
DEFAULT_YAML_INDENT = 2

# ------------------------------------------------------------
# RUN SETTINGS (what the control panel edits)
# ------------------------------------------------------------
@dataclass(frozen=False)  # mutable so UI / CLI can tweak before a reset
class RunConfig:
    grid_size: int = 20
    obstacle_density: float = 0.2
    num_prey: int = 3
    predator_algo: str = "A*"   # "BFS" | "A*"
    seed: int = 42

    def validate(self) -> "RunConfig":
        try:
            self.grid_size = int(self.grid_size)
            self.obstacle_density = float(self.obstacle_density)
            self.num_prey = int(self.num_prey)
            self.seed = int(self.seed)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"non-numeric run setting: {e}") from e
        if self.grid_size < 1:
            raise ConfigurationError(f"grid_size must be >= 1, got {self.grid_size}")
        if not 0.0 <= self.obstacle_density <= 1.0:
            raise ConfigurationError(f"obstacle_density must be in [0, 1], got {self.obstacle_density}")
        if self.num_prey < 0:
            raise ConfigurationError(f"num_prey must be >= 0, got {self.num_prey}")
        if self.predator_algo not in PREDATOR_ALGOS:
            raise ConfigurationError(
                f"unknown predator_algo {self.predator_algo!r}; expected one of {PREDATOR_ALGOS}")
        return self

    @classmethod
    def from_yaml(cls, path: os.PathLike | str) -> "RunConfig":
        """Load run settings from a YAML mapping; unknown keys are an error."""
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"{path}: expected a mapping of run settings")
        try:
            cfg = cls(**data)
        except TypeError as e:
            raise ConfigurationError(f"{path}: {e}") from e
        return cfg.validate()

    def to_yaml(self, path: os.PathLike | str) -> None:
        with open(path, "w", encoding="utf-8") as fh:
            yaml.safe_dump(asdict(self), fh, indent=DEFAULT_YAML_INDENT, sort_keys=False)

    def __str__(self) -> str:
        return (f"RunConfig(grid={self.grid_size}, prey={self.num_prey}, "
                f"density={self.obstacle_density}, algo={self.predator_algo}, seed={self.seed})")

# ------------------------------------------------------------
# REWARD SHAPING
# ------------------------------------------------------------
@dataclass(frozen=True)
class RewardConfig:
    time_cost: int = 1         # paid every tick
    approach_bonus: int = 1    # predator got strictly closer to its target
    capture_bonus: int = 50    # per prey removed

# ------------------------------------------------------------
# PLACEMENT (rejection sampling budget)
# ------------------------------------------------------------
@dataclass(frozen=True)
class PlacementConfig:
    retry_factor: int = 20     # random draws per cell of the sampling region

# ------------------------------------------------------------
# LOOP / PACING
# ------------------------------------------------------------
@dataclass(frozen=True)
class LoopConfig:
    tick_interval_ms: int = 300
    log_capacity: int = 500
    # False: the tick after the last capture declares the run finished
    finish_on_capture: bool = False

# ------------------------------------------------------------
# HEADLESS SETTINGS
# ------------------------------------------------------------
@dataclass(frozen=False)
class SimConfig:
    max_ticks: int = 500
    track_csv: str | None = "runs/headless_ticks.csv"
    enable_plot: bool = False

# ------------------------------------------------------------
# EXPORT SINGLETONS
# ------------------------------------------------------------
RUN = RunConfig()
REWARDS = RewardConfig()
PLACEMENT = PlacementConfig()
LOOP = LoopConfig()
SIM = SimConfig()
