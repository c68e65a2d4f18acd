import numpy as np
import pytest
import warp as wp
from simulator.softbody import Tofu

wp.init()


@pytest.fixture
def device():
    return "cpu"


@pytest.fixture
def make_tofu(device):
    def make(unit_length = 1.0, W = 1, L = 1, H = 1, rotation = None, translation = None, **kwargs):
        tofu = Tofu(unit_length, W, L, H, device = device, **kwargs)
        tofu.initialize(rotation, translation)
        return tofu
    return make


@pytest.fixture
def static_tofu(make_tofu):
    '''
    undeformed 2 x 3 x 2 grid with no external force
    '''
    return make_tofu(0.5, 2, 3, 2, gravity = np.zeros(3), start_velocity = np.zeros(3))
