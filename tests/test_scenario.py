import numpy as np


def test_unit_cube_drop_settles_on_the_ground(make_tofu):
    '''
    unit cube released at y = 10 under gravity: falls until it hits the ground, then comes to rest there
    '''
    dt = 5e-3
    tofu = make_tofu(1.0, 1, 1, 1, translation = [0.0, 10.0, 0.0], gravity = [0.0, -9.8, 0.0], start_velocity = np.zeros(3))
    assert (tofu.n_nodes, tofu.n_boxes, tofu.n_tets, tofu.n_surface, tofu.surface_holder_size) == (8, 1, 5, 12, 216)

    mean_height = tofu.positions()[:, 1].mean()
    steps = 0
    while True:
        tofu.step(dt)
        steps += 1
        y = tofu.positions()[:, 1]
        if y.min() <= 0.0:
            break
        assert y.mean() < mean_height
        mean_height = y.mean()
        assert steps < 1000

    # free fall from 10 m takes about 1.43 s
    assert 250 < steps < 350

    heights = []
    for _ in range(3000):
        tofu.step(dt)
        heights.append(tofu.positions()[:, 1].mean())
    heights = np.array(heights)

    assert np.all(np.isfinite(heights))
    assert np.all(tofu.positions()[:, 1] >= 0.0)
    assert np.all(heights[-500:] < 0.05)
    assert np.ptp(heights[-500:]) < 1e-2
