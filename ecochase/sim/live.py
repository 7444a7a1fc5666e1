# ecochase/sim/live.py
from __future__ import annotations
import logging
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, replace
from typing import List, Optional

from .collaborators import (ConfigGenerator, GeneratedLayout, KeywordConfigGenerator,
                            PathExplainer, TemplatePathExplainer, path_query)
from .config import RUN, REWARDS, LOOP, PLACEMENT, RunConfig, RewardConfig, LoopConfig, PlacementConfig
from .engine import tick, set_phase
from .errors import ConfigurationError
from .models import SimulationState, RUNNING, PAUSED
from .placement import initialize, state_from_layout
from .rng import RNG

logger = logging.getLogger(__name__)


class Pacer:
    """Fixed-interval tick clock fed with frame times; never asks for overlapping ticks."""

    def __init__(self, interval_ms: int = LOOP.tick_interval_ms, max_catchup: int = 4):
        self.interval_ms = max(1, int(interval_ms))
        self.max_catchup = max(1, int(max_catchup))
        self._acc = 0.0

    def due(self, elapsed_ms: float) -> int:
        self._acc += max(0.0, elapsed_ms)
        n = int(self._acc // self.interval_ms)
        self._acc -= n * self.interval_ms
        if n > self.max_catchup:
            # drop the backlog after a long stall instead of bursting
            n = self.max_catchup
            self._acc = 0.0
        return n

    def reset(self):
        self._acc = 0.0


@dataclass
class _Pending:
    kind: str      # "layout" | "explain"
    epoch: int
    future: Future


class LiveSim:
    """
    Step-by-step owner of one run for the UI and CLI.

    The state is replaced wholesale by reset() and by generated layouts. Every
    replacement bumps `epoch`; a collaborator result tagged with an older epoch
    is dropped in poll() instead of being applied to the newer run.
    """
    def __init__(self, config: Optional[RunConfig] = None, seed: Optional[int] = None,
                 generator: Optional[ConfigGenerator] = None, explainer: Optional[PathExplainer] = None,
                 rewards: RewardConfig = REWARDS, loop: LoopConfig = LOOP,
                 placement: PlacementConfig = PLACEMENT):
        self.config = replace(config if config is not None else RUN)
        if seed is not None:
            self.config.seed = seed
        self.rewards = rewards
        self.loop = loop
        self.placement = placement
        self.generator = generator if generator is not None else KeywordConfigGenerator(self.config.seed)
        self.explainer = explainer if explainer is not None else TemplatePathExplainer()

        self.rng = RNG(self.config.seed)
        self._seeds = RNG(self.config.seed)   # fresh seeds for rerolled runs
        self.state: SimulationState = initialize(self.config, self.rng, placement)
        self.epoch = 0
        self.warnings: List[str] = []
        self.explanation: Optional[str] = None

        self._ticking = False
        self._pending: List[_Pending] = []
        self._executor: Optional[ThreadPoolExecutor] = None

    # ---------------- run control ----------------
    def start(self):
        self.state = set_phase(self.state, RUNNING)

    def pause(self):
        self.state = set_phase(self.state, PAUSED)

    def toggle_pause(self):
        if self.state.phase == RUNNING:
            self.pause()
        else:
            self.start()

    def step(self) -> bool:
        """Run one tick if the run is live. Returns True when the state advanced."""
        if self.state.phase != RUNNING:
            return False
        self._ticking = True
        try:
            before = self.state
            self.state = tick(before, self.rng, self.rewards, self.loop)
        finally:
            self._ticking = False
        return self.state is not before

    def next_seed(self) -> int:
        """Draw a seed for a new run; the sequence is fixed by the first run's seed."""
        return self._seeds.randrange(0, 1_000_001)

    def reset(self, config: Optional[RunConfig] = None, seed: Optional[int] = None) -> SimulationState:
        if self._ticking:
            raise RuntimeError("reset requested while a tick is in progress")
        cfg = replace(config if config is not None else self.config)
        if seed is not None:
            cfg.seed = seed
        rng = RNG(cfg.seed)
        fresh = initialize(cfg, rng, self.placement)   # may raise; nothing replaced yet
        self._replace(fresh, cfg, rng)
        return fresh

    def apply_layout(self, layout: GeneratedLayout) -> SimulationState:
        if self._ticking:
            raise RuntimeError("layout applied while a tick is in progress")
        fresh = state_from_layout(layout.grid_size, layout.predator, layout.prey, layout.obstacles,
                                  algorithm=self.config.predator_algo, num_prey=layout.num_prey)
        cfg = replace(self.config, grid_size=fresh.grid_size, num_prey=len(fresh.prey),
                      obstacle_density=layout.obstacle_density)
        self._replace(fresh, cfg, self.rng)
        return fresh

    def _replace(self, fresh: SimulationState, cfg: RunConfig, rng: RNG):
        self.state = fresh
        self.config = cfg
        self.rng = rng
        self.epoch += 1
        self.explanation = None
        logger.info("state replaced (epoch %d): %s", self.epoch, cfg)

    # ---------------- collaborators ----------------
    def _submit(self, kind: str, fn, *args) -> Future:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="ecochase-collab")
        fut = self._executor.submit(fn, *args)
        self._pending.append(_Pending(kind, self.epoch, fut))
        return fut

    def request_layout(self, prompt: str) -> Future:
        return self._submit("layout", self.generator.generate, prompt)

    def request_explanation(self) -> Optional[Future]:
        query = path_query(self.state)
        if query is None:
            self._warn("nothing to explain yet: run at least one tick")
            return None
        return self._submit("explain", self.explainer.explain, query)

    @property
    def busy(self) -> bool:
        return bool(self._pending)

    def poll(self) -> List[str]:
        """Apply finished collaborator results on the caller's thread. Returns the kinds applied."""
        applied: List[str] = []
        still: List[_Pending] = []
        for p in self._pending:
            if not p.future.done():
                still.append(p)
                continue
            if p.epoch != self.epoch:
                logger.warning("discarding stale %s result (epoch %d, now %d)", p.kind, p.epoch, self.epoch)
                continue
            exc = p.future.exception()
            if exc is not None:
                self._warn(f"{p.kind} request failed: {exc}")
                continue
            result = p.future.result()
            if p.kind == "layout":
                try:
                    self.apply_layout(result)
                except ConfigurationError as e:
                    self._warn(f"generated layout rejected: {e}")
                    continue
            else:
                self.explanation = str(result)
            applied.append(p.kind)
        self._pending = still
        return applied

    def wait_pending(self, timeout: Optional[float] = None) -> List[str]:
        if self._pending:
            wait([p.future for p in self._pending], timeout=timeout)
        return self.poll()

    def close(self):
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None
        self._pending = []

    def _warn(self, msg: str):
        logger.warning(msg)
        self.warnings.append(msg)
