import numpy as np
import pytest
from simulator.integrator import SimulationDiverged
from simulator.softbody import Tofu

g = np.array([0.0, -9.8, 0.0])


def test_free_fall_step(make_tofu):
    dt, d = 0.01, 0.999
    tofu = make_tofu(1.0, 1, 1, 1, translation = [0.0, 5.0, 0.0], damping = d)
    x0 = tofu.positions()
    tofu.step(dt)

    v1 = g * dt * d
    np.testing.assert_allclose(tofu.velocities(), np.tile(v1, (8, 1)), rtol = 1e-5, atol = 1e-7)
    np.testing.assert_allclose(tofu.positions(), x0 + 0.5 * v1 * dt, rtol = 1e-6, atol = 1e-6)
    assert tofu.kinetic_energy() == pytest.approx(0.5 * 8 * v1 @ v1, rel = 1e-4)

    tofu.step(dt)
    v2 = (v1 + g * dt) * d
    np.testing.assert_allclose(tofu.velocities(), np.tile(v2, (8, 1)), rtol = 1e-5, atol = 1e-7)
    np.testing.assert_allclose(tofu.positions(), x0 + 0.5 * v1 * dt + 0.5 * (v1 + v2) * dt, rtol = 1e-6, atol = 1e-6)
    assert tofu.frame == 2


def test_velocity_buffers_swap(make_tofu):
    tofu = make_tofu(1.0, 1, 1, 1, translation = [0.0, 5.0, 0.0], start_velocity = [0.5, 0.0, 0.0])
    v0 = tofu.velocities()
    tofu.step(0.01)
    np.testing.assert_array_equal(tofu.states.v_next.numpy(), v0)
    assert not np.array_equal(tofu.velocities(), v0)


def test_no_damping_keeps_gravity_increment(make_tofu):
    dt = 0.02
    tofu = make_tofu(1.0, 1, 1, 1, translation = [0.0, 5.0, 0.0], damping = 1.0)
    tofu.step(dt)
    np.testing.assert_allclose(tofu.velocities()[:, 1], -9.8 * dt, rtol = 1e-6)


def test_ground_clamps_position_and_vertical_velocity(make_tofu):
    tofu = make_tofu(1.0, 2, 1, 2, start_velocity = [1.0, -1.0, 0.5])
    bottom = np.isclose(tofu.positions()[:, 1], 0.0)
    tofu.step(0.01)

    x, v = tofu.positions(), tofu.velocities()
    assert np.all(x[bottom, 1] == 0.0)
    assert np.all(v[bottom, 1] == 0.0)
    # tangential velocity survives the contact
    np.testing.assert_allclose(v[bottom, 0], 0.999, rtol = 1e-4)
    np.testing.assert_allclose(v[bottom, 2], 0.4995, rtol = 1e-4)
    assert np.all(x[~bottom, 1] > 0.0)
    assert np.all(v[~bottom, 1] < 0.0)


def test_nothing_goes_below_ground(make_tofu):
    tofu = make_tofu(0.5, 2, 2, 2, translation = [0.0, 0.3, 0.0], start_velocity = [0.0, -2.0, 0.0], mu = 20.0, lam = 20.0)
    for _ in range(300):
        y_prev = tofu.positions()[:, 1]
        tofu.step(2e-3)
        y = tofu.positions()[:, 1]
        assert np.all(y >= 0.0)
        # points that reached the ground in this step lost their vertical velocity
        clamped = y == 0.0
        assert np.all(tofu.velocities()[clamped & (y_prev > 0.0), 1] == 0.0)


def test_raised_ground(make_tofu):
    tofu = make_tofu(1.0, 1, 1, 1, translation = [0.0, 0.5, 0.0], start_velocity = [0.0, -1.0, 0.0], ground_height = 0.5)
    tofu.step(0.01)
    x = tofu.positions()
    assert x[:, 1].min() == pytest.approx(0.5)
    assert np.all(x[:, 1] >= 0.5)


def run(make_tofu, dts):
    tofu = make_tofu(0.5, 2, 2, 1, translation = [0.0, 0.2, 0.0], mu = 10.0, lam = 5.0)
    traj = []
    for dt in dts:
        tofu.step(dt)
        traj.append(tofu.positions())
    return np.array(traj)


def test_identical_runs_are_identical(make_tofu):
    dts = np.random.default_rng(7).uniform(1e-3, 4e-3, size = 200)
    np.testing.assert_array_equal(run(make_tofu, dts), run(make_tofu, dts))


def test_divergence_is_detected(make_tofu):
    tofu = make_tofu(1.0, 1, 1, 1, translation = [0.0, 1.0, 0.0])
    x = tofu.positions()
    x[3] = np.nan
    tofu.states.x.assign(x)
    with pytest.raises(SimulationDiverged):
        tofu.step(0.01)


def test_step_needs_initialize(device):
    tofu = Tofu(1.0, 1, 1, 1, device = device)
    with pytest.raises(RuntimeError):
        tofu.step(0.01)


@pytest.mark.parametrize("dt", [0.0, -0.01])
def test_step_needs_positive_dt(make_tofu, dt):
    tofu = make_tofu()
    with pytest.raises(ValueError):
        tofu.step(dt)
