# ecochase/sim/metrics.py
from __future__ import annotations
from typing import Dict, List, Sequence
import os
import csv

from .models import SimulationState, FINISHED

UNREACHABLE_PREFIX = "Predator cannot find a path"


def summarize_tick(state: SimulationState) -> Dict[str, object]:
    return dict(
        tick=state.tick,
        prey_left=len(state.prey),
        captured=len(state.captured),
        reward=state.reward,
        predator_x=state.predator.x,
        predator_y=state.predator.y,
        target_id=-1 if state.target_id is None else state.target_id,
        path_len=len(state.last_path),
        phase=state.phase,
    )


def summarize_run(history: Sequence[SimulationState]) -> Dict[str, object]:
    """Totals over the states of one run (first state = the initialized one)."""
    if not history:
        return dict(ticks=0, captures=0, unreachable_ticks=0, final_reward=0, finished=False)
    last = history[-1]
    # the log is bounded, so read each state's own entries from its tail
    unreachable = set()
    for state in history:
        for e in reversed(state.log):
            if e.tick != state.tick:
                break
            if e.message.startswith(UNREACHABLE_PREFIX):
                unreachable.add(e.tick)
    return dict(
        ticks=last.tick,
        captures=len(last.captured),
        unreachable_ticks=len(unreachable),
        final_reward=last.reward,
        finished=last.phase == FINISHED,
        algorithm=last.algorithm,
        grid_size=last.grid_size,
        obstacles=len(last.obstacles),
    )


def capture_ticks(history: Sequence[SimulationState]) -> List[int]:
    """Tick numbers on which at least one prey was caught."""
    out: List[int] = []
    for prev, cur in zip(history, history[1:]):
        if len(cur.captured) > len(prev.captured):
            out.append(cur.tick)
    return out


def append_csv(path: str, row: Dict[str, object]) -> None:
    folder = os.path.dirname(path)
    if folder:
        os.makedirs(folder, exist_ok=True)
    write_header = not os.path.exists(path)
    with open(path, "a", newline="") as f:
        w = csv.DictWriter(f, fieldnames=list(row.keys()))
        if write_header:
            w.writeheader()
        w.writerow(row)
