import threading

import pytest

from ecochase.sim.collaborators import GeneratedLayout, KeywordConfigGenerator
from ecochase.sim.config import RunConfig
from ecochase.sim.errors import ConfigurationError
from ecochase.sim.live import LiveSim, Pacer
from ecochase.sim.models import IDLE, PAUSED, RUNNING, Position
from ecochase.sim.placement import LAYOUT_MESSAGE


class BlockingGenerator:
    def __init__(self):
        self.release = threading.Event()

    def generate(self, prompt):
        self.release.wait(5)
        return KeywordConfigGenerator(1).generate(prompt)


class FailingGenerator:
    def generate(self, prompt):
        raise RuntimeError("boom")


class OverlappingGenerator:
    def generate(self, prompt):
        return GeneratedLayout(grid_size=5, num_prey=1, obstacle_density=0.0,
                               predator=Position(0, 0), prey=(Position(0, 0),))


@pytest.fixture
def make_live():
    made = []

    def _make(**kwargs):
        kwargs.setdefault("config", RunConfig(grid_size=10, num_prey=2, obstacle_density=0.0, seed=4))
        live = LiveSim(**kwargs)
        made.append(live)
        return live

    yield _make
    for live in made:
        live.close()


def test_step_only_advances_running_runs(make_live):
    live = make_live()
    assert live.state.phase == IDLE
    assert not live.step()
    live.start()
    assert live.step()
    assert live.state.tick == 1
    live.toggle_pause()
    assert live.state.phase == PAUSED
    assert not live.step()
    live.toggle_pause()
    assert live.state.phase == RUNNING


def test_config_is_copied(make_live):
    cfg = RunConfig(grid_size=10, seed=1)
    live = make_live(config=cfg, seed=9)
    assert live.config.seed == 9 and cfg.seed == 1


def test_reset_replaces_state_and_bumps_epoch(make_live):
    live = make_live()
    live.start()
    live.step()
    fresh = live.reset(seed=8)
    assert live.state is fresh
    assert fresh.tick == 0 and fresh.phase == IDLE
    assert live.epoch == 1
    assert live.config.seed == 8


def test_failed_reset_keeps_prior_state(make_live):
    live = make_live()
    prior = live.state
    with pytest.raises(ConfigurationError):
        live.reset(RunConfig(grid_size=2, num_prey=5))
    assert live.state is prior
    assert live.epoch == 0


def test_generated_layout_applied_as_whole_state(make_live):
    live = make_live()
    live.request_layout("a 12x12 grid with 4 prey and no obstacles")
    assert live.wait_pending(timeout=5) == ["layout"]
    assert live.state.grid_size == 12
    assert len(live.state.prey) == 4
    assert live.state.obstacles == frozenset()
    assert live.state.log[0].message == LAYOUT_MESSAGE
    assert (live.config.grid_size, live.config.num_prey) == (12, 4)
    assert live.epoch == 1
    assert not live.busy


def test_layout_arriving_after_reset_is_discarded(make_live):
    gen = BlockingGenerator()
    live = make_live(generator=gen)
    live.request_layout("20x20 grid with 3 prey")
    assert live.busy
    fresh = live.reset(seed=2)
    gen.release.set()
    assert live.wait_pending(timeout=5) == []
    assert live.state is fresh
    assert not live.busy


def test_failing_generator_becomes_a_warning(make_live):
    live = make_live(generator=FailingGenerator())
    prior = live.state
    live.request_layout("anything")
    assert live.wait_pending(timeout=5) == []
    assert live.state is prior
    assert live.warnings == ["layout request failed: boom"]


def test_invalid_generated_layout_is_rejected(make_live):
    live = make_live(generator=OverlappingGenerator())
    prior = live.state
    live.request_layout("anything")
    assert live.wait_pending(timeout=5) == []
    assert live.state is prior
    assert live.warnings[-1].startswith("generated layout rejected")


def test_explanation_needs_a_search(make_live):
    live = make_live()
    assert live.request_explanation() is None
    assert "nothing to explain" in live.warnings[-1]
    live.start()
    live.step()
    assert live.request_explanation() is not None
    assert live.wait_pending(timeout=5) == ["explain"]
    assert "no obstacle stands in the way" in live.explanation


def test_explanation_cleared_on_reset(make_live):
    live = make_live()
    live.start()
    live.step()
    live.request_explanation()
    live.wait_pending(timeout=5)
    assert live.explanation
    live.reset()
    assert live.explanation is None


def test_pacer_counts_due_ticks():
    pacer = Pacer(300)
    assert pacer.due(100) == 0
    assert pacer.due(250) == 1
    assert pacer.due(249) == 0
    assert pacer.due(1) == 1


def test_pacer_caps_catch_up_after_a_stall():
    pacer = Pacer(300, max_catchup=4)
    assert pacer.due(10_000) == 4
    assert pacer.due(299) == 0
    pacer.reset()
    assert pacer.due(299) == 0


def test_rerolled_seeds_replay_for_the_same_starting_seed(make_live):
    a, b = make_live(), make_live()
    seeds = [a.next_seed() for _ in range(5)]
    assert seeds == [b.next_seed() for _ in range(5)]
    assert all(0 <= s <= 1_000_000 for s in seeds)
    a.reset(seed=seeds[0])
    assert a.config.seed == seeds[0]
