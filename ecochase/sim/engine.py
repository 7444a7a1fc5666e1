# ecochase/sim/engine.py
from __future__ import annotations
import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Tuple

from .behaviors import prey_step, predator_step
from .config import REWARDS, LOOP, PLACEMENT, RewardConfig, LoopConfig, RunConfig, PlacementConfig
from .models import (LogEntry, Position, SimulationState,
                     IDLE, RUNNING, PAUSED, FINISHED)
from .pathfinding import get_pathfinder
from .placement import initialize
from .rng import RNG
from .world import manhattan

logger = logging.getLogger(__name__)

FINISHED_MESSAGE = "All prey captured! Simulation finished."

# requested phase -> phases it may be entered from
_TRANSITIONS = {
    RUNNING: (IDLE, PAUSED),
    PAUSED: (RUNNING,),
}


def _append_log(log: Tuple[LogEntry, ...], entries: Iterable[LogEntry], capacity: int) -> Tuple[LogEntry, ...]:
    merged = log + tuple(entries)
    if capacity > 0 and len(merged) > capacity:
        merged = merged[-capacity:]
    return merged


def set_phase(state: SimulationState, phase: str) -> SimulationState:
    """running <-> paused, idle -> running. Anything else leaves the state as is."""
    if phase not in _TRANSITIONS:
        raise ValueError(f"set_phase accepts {RUNNING!r} or {PAUSED!r}, got {phase!r}")
    if state.phase not in _TRANSITIONS[phase]:
        logger.debug("ignoring phase change %s -> %s", state.phase, phase)
        return state
    return replace(state, phase=phase)


def reset(state: Optional[SimulationState], config: RunConfig, rng: Optional[RNG] = None,
          placement: PlacementConfig = PLACEMENT) -> SimulationState:
    """Discard `state` and build a new idle run. On ConfigurationError nothing changes."""
    fresh = initialize(config, rng, placement)
    if state is not None:
        logger.info("reset after %d ticks (reward %d)", state.tick, state.reward)
    return fresh


def tick(state: SimulationState, rng: RNG, rewards: RewardConfig = REWARDS,
         loop: LoopConfig = LOOP) -> SimulationState:
    """
    Advance one tick. Only a running state moves; any other phase is returned as is.

    Order within a tick:
      1. no prey left          -> finished (no tick increment, no reward change)
      2. prey random-walk      -> all decided against the pre-tick snapshot
      3. predator one step     -> toward the nearest post-move prey
      4. reward                -> -time_cost, +approach_bonus, +capture_bonus per capture
      5. tick += 1, log
    """
    if state.phase != RUNNING:
        return state

    # 1. completion check
    if not state.prey:
        logger.info("run finished at tick %d with reward %d", state.tick, state.reward)
        return replace(
            state,
            phase=FINISHED,
            last_path=(),
            path_origin=None,
            target_id=None,
            log=_append_log(state.log, [LogEntry(state.tick, FINISHED_MESSAGE)], loop.log_capacity),
        )

    grid = state.grid
    new_tick = state.tick + 1
    entries: List[LogEntry] = []

    # 2. prey move simultaneously; the predator's current cell is blocked
    blocked = {state.predator}
    moved_prey = tuple(p.moved_to(prey_step(p.position, grid, blocked, rng)) for p in state.prey)

    # 3. predator pursues the nearest prey after they moved
    decision = predator_step(state.predator, moved_prey, grid, get_pathfinder(state.algorithm))
    new_predator = decision.next_pos

    # 4. reward
    reward = state.reward - rewards.time_cost
    if decision.target is not None:
        before = manhattan(state.predator, decision.target.position)
        after = manhattan(new_predator, decision.target.position)
        if after < before:
            reward += rewards.approach_bonus
        if decision.unreachable:
            entries.append(LogEntry(new_tick, f"Predator cannot find a path to prey #{decision.target.id}."))
            logger.debug("tick %d: prey #%d unreachable from %s", new_tick, decision.target.id, state.predator)

    remaining = []
    captured = list(state.captured)
    for p in moved_prey:
        if p.position == new_predator:
            reward += rewards.capture_bonus
            captured.append(p.id)
            entries.append(LogEntry(new_tick, f"Predator captured prey #{p.id} at ({p.position.x}, {p.position.y})!"))
            logger.info("tick %d: captured prey #%d at %s", new_tick, p.id, tuple(p.position))
        else:
            remaining.append(p)

    # 5. bookkeeping
    phase = RUNNING
    if not remaining and loop.finish_on_capture:
        phase = FINISHED
        entries.append(LogEntry(new_tick, FINISHED_MESSAGE))
        logger.info("run finished at tick %d with reward %d", new_tick, reward)

    return replace(
        state,
        predator=new_predator,
        prey=tuple(remaining),
        tick=new_tick,
        reward=reward,
        phase=phase,
        last_path=decision.path,
        path_origin=state.predator,
        target_id=decision.target.id if decision.target is not None else None,
        captured=tuple(captured),
        log=_append_log(state.log, entries, loop.log_capacity),
    )

# ---------------- accessors for renderers / CSV ----------------
def snapshot(state: SimulationState) -> Dict:
    return dict(
        grid_size=state.grid_size,
        predator=tuple(state.predator),
        prey=[dict(id=p.id, x=p.position.x, y=p.position.y) for p in state.prey],
        obstacles=sorted(tuple(o) for o in state.obstacles),
        path=[tuple(p) for p in state.last_path],
        target_id=state.target_id,
        tick=state.tick,
        reward=state.reward,
        phase=state.phase,
        algorithm=state.algorithm,
        log=[(e.tick, e.message) for e in state.log],
    )


def run_headless(state: SimulationState, rng: RNG, max_ticks: int,
                 rewards: RewardConfig = REWARDS, loop: LoopConfig = LOOP) -> List[SimulationState]:
    """Start the run and tick until finished or `max_ticks` ticks have run. Returns every state."""
    state = set_phase(state, RUNNING)
    history = [state]
    while state.phase == RUNNING and state.tick < max_ticks:
        state = tick(state, rng, rewards, loop)
        history.append(state)
    # the completion check needs one more evaluation
    if state.phase == RUNNING and not state.prey:
        state = tick(state, rng, rewards, loop)
        history.append(state)
    return history


def target_position(state: SimulationState) -> Optional[Position]:
    if state.target_id is None:
        return None
    p = state.prey_by_id(state.target_id)
    if p is not None:
        return p.position
    # target captured this tick: it was standing where the predator is now
    return state.predator
