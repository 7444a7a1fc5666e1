import pytest

from ecochase.sim.config import RunConfig, RUN, REWARDS, LOOP
from ecochase.sim.errors import ConfigurationError


def test_defaults():
    assert (RUN.grid_size, RUN.obstacle_density, RUN.num_prey, RUN.predator_algo) == (20, 0.2, 3, "A*")
    assert (REWARDS.time_cost, REWARDS.approach_bonus, REWARDS.capture_bonus) == (1, 1, 50)
    assert LOOP.finish_on_capture is False


def test_yaml_round_trip(tmp_path):
    cfg = RunConfig(grid_size=33, obstacle_density=0.15, num_prey=7, predator_algo="BFS", seed=3)
    path = tmp_path / "run.yaml"
    cfg.to_yaml(path)
    assert RunConfig.from_yaml(path) == cfg


def test_partial_yaml_uses_defaults(tmp_path):
    path = tmp_path / "run.yaml"
    path.write_text("num_prey: 5\n")
    cfg = RunConfig.from_yaml(path)
    assert cfg.num_prey == 5 and cfg.grid_size == RUN.grid_size


@pytest.mark.parametrize("text", [
    "grid: 20\n",               # unknown key
    "- 1\n- 2\n",               # not a mapping
    "predator_algo: DFS\n",
    "obstacle_density: 2.0\n",
    "grid_size: twenty\n",
    "num_prey: [1, 2]\n",
])
def test_bad_yaml_raises(tmp_path, text):
    path = tmp_path / "run.yaml"
    path.write_text(text)
    with pytest.raises(ConfigurationError):
        RunConfig.from_yaml(path)


def test_validate_returns_self():
    cfg = RunConfig()
    assert cfg.validate() is cfg
