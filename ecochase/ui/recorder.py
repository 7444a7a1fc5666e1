# ecochase/ui/recorder.py
from __future__ import annotations
import os, time
from typing import Optional
import numpy as np

from ..sim.models import SimulationState


class Recorder:
    """
    Capture a snapshot every `stride_ticks` ticks for offline playback (NPZ).
    Stores: predator xy, prey xy + ids (NaN / -1 padded), reward, tick, and the
    obstacle layout of the recorded run.
    """
    def __init__(self, enabled=False, stride_ticks=1):
        self.enabled = enabled
        self.stride_ticks = max(1, int(stride_ticks))
        self._last_tick = None
        self.grid_size = 0
        self.algorithm = ""
        self.obstacles = np.zeros((0, 2), np.int32)
        self.pred_list = []
        self.prey_list = []
        self.prey_id_list = []
        self.reward_list = []
        self.tick_list = []
        self.maxN = 0

    def toggle(self): self.enabled = not self.enabled; print(f"[Recorder] {'ON' if self.enabled else 'OFF'}")
    def clear(self):
        self._last_tick = None
        self.pred_list.clear(); self.prey_list.clear(); self.prey_id_list.clear()
        self.reward_list.clear(); self.tick_list.clear()
        self.maxN = 0
        print("[Recorder] cleared")

    def __len__(self):
        return len(self.tick_list)

    def maybe_capture(self, state: SimulationState) -> bool:
        if not self.enabled: return False
        if state.tick == self._last_tick: return False
        if (state.tick % self.stride_ticks) != 0: return False
        if self.tick_list and state.tick < self.tick_list[-1]:
            # a reset happened: a recording covers one run only
            self.clear()
        self._last_tick = state.tick

        if not self.tick_list:
            self.grid_size = state.grid_size
            self.algorithm = state.algorithm
            self.obstacles = np.array(sorted(state.obstacles), np.int32).reshape(-1, 2)

        N = len(state.prey); self.maxN = max(self.maxN, N)
        prey = np.zeros((N, 2), np.float32)
        ids = np.zeros((N,), np.int32)
        for i, p in enumerate(state.prey):
            prey[i] = p.position
            ids[i] = p.id

        self.pred_list.append(np.array(state.predator, np.float32))
        self.prey_list.append(prey); self.prey_id_list.append(ids)
        self.reward_list.append(state.reward); self.tick_list.append(state.tick)
        return True

    def save_npz(self, out_path: Optional[str]=None):
        if not self.tick_list:
            print("[Recorder] nothing to save"); return None

        T = len(self.tick_list); maxN = self.maxN
        pred = np.stack(self.pred_list).astype(np.float32)
        prey = np.full((T, maxN, 2), np.nan, np.float32)
        prey_ids = np.full((T, maxN), -1, np.int32)
        for t in range(T):
            N = self.prey_list[t].shape[0]
            prey[t, :N] = self.prey_list[t]
            prey_ids[t, :N] = self.prey_id_list[t]

        if out_path is None:
            os.makedirs("recordings", exist_ok=True)
            stamp = time.strftime("%Y%m%d_%H%M%S")
            out_path = os.path.join("recordings", f"chase_run_{stamp}.npz")
        elif os.path.dirname(out_path):
            os.makedirs(os.path.dirname(out_path), exist_ok=True)

        np.savez_compressed(
            out_path,
            grid_size=np.int32(self.grid_size),
            algorithm=np.array(self.algorithm),
            stride_ticks=np.int32(self.stride_ticks),
            obstacles=self.obstacles,
            predator=pred,
            prey=prey, prey_ids=prey_ids,
            reward=np.array(self.reward_list, np.int32),
            tick=np.array(self.tick_list, np.int32),
        )
        print(f"[Recorder] saved: {out_path} (T={T}, maxN={maxN})")
        return out_path
