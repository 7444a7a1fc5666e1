import numpy as np

from ecochase.sim.engine import run_headless, tick
from ecochase.ui.recorder import Recorder


def test_disabled_recorder_ignores_states(sealed_prey):
    rec = Recorder()
    assert not rec.maybe_capture(sealed_prey)
    assert len(rec) == 0
    assert rec.save_npz() is None


def test_capture_skips_repeats_and_respects_stride(sealed_prey, rng):
    rec = Recorder(enabled=True, stride_ticks=2)
    history = run_headless(sealed_prey, rng, max_ticks=6)
    captured = [rec.maybe_capture(s) for s in history]
    assert captured == [True, False, True, False, True, False, True]
    assert not rec.maybe_capture(history[-1])
    assert rec.tick_list == [0, 2, 4, 6]


def test_reset_starts_a_new_recording(sealed_prey, rng):
    rec = Recorder(enabled=True)
    s = sealed_prey
    for _ in range(3):
        s = tick(s, rng)
        rec.maybe_capture(s)
    assert len(rec) == 3
    rec.maybe_capture(sealed_prey)
    assert rec.tick_list == [0]


def test_save_npz_pads_vanished_prey(tmp_path, boxed_capture, rng):
    rec = Recorder(enabled=True)
    for s in run_headless(boxed_capture, rng, max_ticks=10):
        rec.maybe_capture(s)
    out = rec.save_npz(str(tmp_path / "rec" / "run.npz"))
    data = np.load(out)
    assert data["prey"].shape == (2, 1, 2)
    assert data["prey_ids"].tolist() == [[0], [-1]]
    assert np.isnan(data["prey"][1]).all()
    assert data["predator"].tolist() == [[0.0, 0.0], [1.0, 0.0]]
    assert data["reward"].tolist() == [0, 50]
    assert str(data["algorithm"]) == "A*"
    assert int(data["grid_size"]) == 5
    assert sorted(map(tuple, data["obstacles"].tolist())) == [(1, 1), (2, 0)]
