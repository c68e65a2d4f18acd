import json
import logging
import numpy as np
from scipy.spatial.transform import Rotation
from fem import params
from .softbody import Tofu

logger = logging.getLogger(__name__)


class BaseSimulator:

    @classmethod
    def simulator_args(cls):
        '''
        change this method to define simulator arguments and default values (values can be overwritten by config file)
        '''

        return {
            "unit_length": params.dL,
            "W": params.n_w,
            "L": params.n_l,
            "H": params.n_h,
            "dt": params.dt,
            "frames": 2000,
            "point_mass": params.point_mass,
            "mu": params.mu,
            "lam": params.lam,
            "start_velocity": params.start_velocity_np.tolist(),
            "gravity": params.gravity_np.tolist(),
            "damping": params.damping,
            "ground_height": params.ground_height,
            # xyz euler angles in degrees
            "rotation": [0.0, 0.0, 0.0],
            "translation": [0.0, 10.0, 0.0],
            "device": None,
            "headless": False,
            "verbose": 0,
            "timer": False,
            "log_every": 100
        }

    def __init__(self, config_file = None):
        sim_args = self.simulator_args()
        config = {}
        if config_file is not None:
            with open(config_file) as f:
                config = json.load(f)
            logger.info(f"config loaded from {config_file}")

        for key, value in sim_args.items():
            if key in config:
                value = config[key]
            setattr(self, key, value)

        unknown = sorted(set(config) - set(sim_args))
        if unknown:
            logger.warning(f"ignoring unknown config keys {unknown}")

        self.sim = Tofu(self.unit_length, self.W, self.L, self.H,
            point_mass = self.point_mass,
            mu = self.mu,
            lam = self.lam,
            start_velocity = self.start_velocity,
            gravity = self.gravity,
            damping = self.damping,
            ground_height = self.ground_height,
            device = self.device,
            timer_active = self.timer)
        self.reset()

    def placement(self):
        R = Rotation.from_euler("xyz", self.rotation, degrees = True).as_matrix()
        return R, np.asarray(self.translation, dtype = float)

    def reset(self):
        self.sim.initialize(*self.placement())
        self.frame = 0

    def advance(self):
        self.sim.step(self.dt)
        self.frame += 1
        if self.verbose and self.frame % self.log_every == 0:
            x = self.sim.positions()
            logger.debug(f"frame = {self.frame}, mean height = {x[:, 1].mean():.4f}, elastic = {self.sim.elastic_energy():.4g}, kinetic = {self.sim.kinetic_energy():.4g}")

    def run(self, frames = None):
        frames = self.frames if frames is None else frames
        for _ in range(frames):
            self.advance()
        x = self.sim.positions()
        logger.info(f"{frames} frames done, mean height = {x[:, 1].mean():.4f}")
        return x
