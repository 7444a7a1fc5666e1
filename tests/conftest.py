"""Shared layouts for the simulation tests."""
import pytest

from ecochase.sim.models import RUNNING
from ecochase.sim.placement import state_from_layout
from ecochase.sim.engine import set_phase
from ecochase.sim.rng import RNG


def running(state):
    return set_phase(state, RUNNING)


@pytest.fixture
def rng():
    return RNG(1234)


@pytest.fixture
def boxed_capture():
    # prey at (1, 0) cannot move (obstacles + predator cell), predator next to it
    return running(state_from_layout(5, (0, 0), [(1, 0)], [(1, 1), (2, 0)]))


@pytest.fixture
def sealed_prey():
    # prey in the far corner walled off: no route, no prey moves
    return running(state_from_layout(5, (0, 0), [(4, 4)], [(3, 4), (4, 3)]))


@pytest.fixture
def forced_approach():
    # prey at (4, 0) has a single free neighbour (3, 0), predator closes in without capturing
    return running(state_from_layout(5, (0, 0), [(4, 0)], [(4, 1), (3, 1)]))
