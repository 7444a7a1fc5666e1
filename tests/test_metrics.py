import csv

from ecochase.sim.engine import run_headless, tick
from ecochase.sim.metrics import append_csv, capture_ticks, summarize_run, summarize_tick


def test_summarize_tick(forced_approach, rng):
    row = summarize_tick(tick(forced_approach, rng))
    assert row == dict(tick=1, prey_left=1, captured=0, reward=0, predator_x=1, predator_y=0,
                       target_id=0, path_len=3, phase="running")
    assert summarize_tick(forced_approach)["target_id"] == -1


def test_summarize_run_counts_unreachable_ticks(sealed_prey, rng):
    history = run_headless(sealed_prey, rng, max_ticks=4)
    s = summarize_run(history)
    assert s["ticks"] == 4
    assert s["unreachable_ticks"] == 4
    assert s["final_reward"] == -4
    assert s["finished"] is False
    assert s["obstacles"] == 2 and s["grid_size"] == 5


def test_summarize_run_of_finished_capture(boxed_capture, rng):
    history = run_headless(boxed_capture, rng, max_ticks=10)
    s = summarize_run(history)
    assert s["captures"] == 1 and s["finished"] is True and s["final_reward"] == 50
    assert capture_ticks(history) == [1]


def test_summarize_empty_history():
    assert summarize_run([])["ticks"] == 0


def test_append_csv_writes_header_once(tmp_path):
    path = tmp_path / "out" / "ticks.csv"
    append_csv(str(path), dict(tick=1, reward=-1))
    append_csv(str(path), dict(tick=2, reward=-2))
    with open(path, newline="") as f:
        rows = list(csv.DictReader(f))
    assert rows == [dict(tick="1", reward="-1"), dict(tick="2", reward="-2")]


def test_unreachable_ticks_survive_log_trimming(sealed_prey, rng):
    history = run_headless(sealed_prey, rng, max_ticks=800)
    assert len(history[-1].log) == 500
    assert summarize_run(history)["unreachable_ticks"] == 800
