import json
import numpy as np
import pytest
from simulator.base import BaseSimulator


@pytest.fixture
def config_file(tmp_path):
    def write(config):
        path = tmp_path / "config.json"
        path.write_text(json.dumps(config))
        return str(path)
    return write


def test_default_arguments():
    args = BaseSimulator.simulator_args()
    assert args["damping"] == pytest.approx(0.999)
    assert args["ground_height"] == 0.0
    assert args["gravity"] == [0.0, -9.8, 0.0]
    assert args["start_velocity"] == [0.0, 0.0, 0.0]


def test_config_overrides_defaults(config_file, device):
    path = config_file({
        "unit_length": 0.5, "W": 2, "L": 1, "H": 3,
        "mu": 5.0, "lam": 2.0, "damping": 0.99,
        "rotation": [0.0, 90.0, 0.0], "translation": [0.0, 2.0, 0.0],
        "device": device, "frames": 5
    })
    simulator = BaseSimulator(path)
    tofu = simulator.sim
    assert (tofu.n_w, tofu.n_l, tofu.n_h) == (2, 1, 3)
    assert (tofu.mu, tofu.lam, tofu.damping) == (5.0, 2.0, 0.99)
    assert simulator.dt == BaseSimulator.simulator_args()["dt"]

    # 90 degrees about y maps +x onto -z
    X = tofu.xcs.numpy()
    np.testing.assert_allclose(X[:, 1].min(), 2.0, atol = 1e-5)
    np.testing.assert_allclose(X[:, 2].min(), -1.0, atol = 1e-5)
    np.testing.assert_allclose(X[:, 2].max(), 0.0, atol = 1e-5)

    x = simulator.run()
    assert simulator.frame == 5 and tofu.frame == 5
    assert x[:, 1].max() < X[:, 1].max()


def test_unknown_keys_are_ignored(config_file, device, caplog):
    path = config_file({"device": device, "stiffness": 3.0})
    with caplog.at_level("WARNING", logger = "simulator.base"):
        simulator = BaseSimulator(path)
    assert not hasattr(simulator, "stiffness")
    assert "stiffness" in caplog.text


def test_reset_restores_placement(config_file, device):
    simulator = BaseSimulator(config_file({"device": device}))
    x0 = simulator.sim.positions()
    simulator.run(20)
    simulator.reset()
    assert simulator.frame == 0
    np.testing.assert_array_equal(simulator.sim.positions(), x0)
