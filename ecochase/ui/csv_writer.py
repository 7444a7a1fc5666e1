# ecochase/ui/csv_writer.py
from __future__ import annotations
import csv
import os
import uuid
from typing import Dict, Optional, Sequence
from ..sim.models import SimulationState
from ..sim.metrics import summarize_tick, summarize_run


class RunCsvLogger:
    """
    Append UI run stats to CSV files.
    - ticks_path: runs/ui_ticks.csv  (one row per tick)
    - runs_path:  runs/ui_runs.csv   (one row per finished or abandoned run, optional)
    Each logger gets its own session_id and every reset starts a new run_index,
    so several sessions can share the same files.

    Usage from UI loop:
        logger = RunCsvLogger()
        ...
        if live.step():
            logger.append_tick(live.state, seed=live.config.seed)
        if live.state.is_finished:
            logger.append_run(history, seed=live.config.seed)
    """
    def __init__(self,
                 ticks_path: str = "runs/ui_ticks.csv",
                 runs_path: str = "runs/ui_runs.csv",
                 enable_runs: bool = True):
        self.ticks_path = ticks_path
        self.runs_path = runs_path
        self.enable_runs = enable_runs
        self.session_id = uuid.uuid4().hex[:8]
        self.run_index = 0

        # Ensure folders exist
        for path in (self.ticks_path, self.runs_path if self.enable_runs else None):
            if path and os.path.dirname(path):
                os.makedirs(os.path.dirname(path), exist_ok=True)

        self._tick_header = [
            "session_id", "run_index", "seed", "algorithm", "grid_size",
            "tick", "prey_left", "captured", "reward",
            "predator_x", "predator_y", "target_id", "path_len", "phase",
        ]
        if self.ticks_path and not os.path.exists(self.ticks_path):
            with open(self.ticks_path, "w", newline="") as f:
                csv.DictWriter(f, fieldnames=self._tick_header).writeheader()

        self._run_header = [
            "session_id", "run_index", "seed", "algorithm", "grid_size", "obstacles",
            "ticks", "captures", "unreachable_ticks", "final_reward", "finished", "notes",
        ]
        if self.enable_runs and self.runs_path and not os.path.exists(self.runs_path):
            with open(self.runs_path, "w", newline="") as f:
                csv.DictWriter(f, fieldnames=self._run_header).writeheader()

    def new_run(self):
        self.run_index += 1

    # ---------------- rows ----------------
    def _tick_row(self, state: SimulationState, seed: Optional[int]) -> Dict:
        row = dict(session_id=self.session_id, run_index=self.run_index,
                   seed=seed if seed is not None else "",
                   algorithm=state.algorithm, grid_size=state.grid_size)
        row.update(summarize_tick(state))
        return row

    def _run_row(self, history: Sequence[SimulationState], seed: Optional[int], notes: Optional[str]) -> Dict:
        summary = summarize_run(history)
        return dict(
            session_id=self.session_id,
            run_index=self.run_index,
            seed=seed if seed is not None else "",
            algorithm=summary.get("algorithm", ""),
            grid_size=summary.get("grid_size", ""),
            obstacles=summary.get("obstacles", ""),
            ticks=summary["ticks"],
            captures=summary["captures"],
            unreachable_ticks=summary["unreachable_ticks"],
            final_reward=summary["final_reward"],
            finished=int(bool(summary["finished"])),
            notes=(notes or ""),
        )

    # ---------------- public API ----------------
    def append_tick(self, state: SimulationState, seed: Optional[int] = None):
        if not self.ticks_path:
            return
        with open(self.ticks_path, "a", newline="") as f:
            csv.DictWriter(f, fieldnames=self._tick_header).writerow(self._tick_row(state, seed))

    def append_run(self, history: Sequence[SimulationState], seed: Optional[int] = None,
                   notes: Optional[str] = None):
        """One summary row for the run that `history` covers."""
        if not (self.enable_runs and self.runs_path) or not history:
            return
        with open(self.runs_path, "a", newline="") as f:
            csv.DictWriter(f, fieldnames=self._run_header).writerow(self._run_row(history, seed, notes))
