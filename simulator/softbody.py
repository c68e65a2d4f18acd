import logging
import numbers
import warp as wp
import numpy as np
from fem import params
from fem.fem import StVKFEM
from fem.geometry import BoxGridGenerator
from .export import GeometryExporter
from .integrator import ExplicitIntegrator

logger = logging.getLogger(__name__)


class Tofu(ExplicitIntegrator, GeometryExporter, StVKFEM, BoxGridGenerator):
    '''
    Soft box of W x L x H unit cells, each split into 5 tets, falling onto the ground plane y = ground_height.

    Topology and rest state are built by initialize(); step(dt) then computes the elastic forces of every
    tet and advances all points with the explicit integrator. get_surface() / get_tetrahedra() can be
    called between steps to read back flat shaded triangles.
    '''
    def __init__(self, unit_length, W, L, H,
            point_mass = params.point_mass,
            mu = params.mu,
            lam = params.lam,
            start_velocity = params.start_velocity_np,
            gravity = params.gravity_np,
            damping = params.damping,
            ground_height = params.ground_height,
            device = None,
            timer_active = False):

        if not unit_length > 0:
            raise ValueError(f"unit length must be positive, got {unit_length}")
        for name, n in zip("WLH", (W, L, H)):
            if not isinstance(n, numbers.Integral) or n <= 0:
                raise ValueError(f"grid dimension {name} must be a positive integer, got {n}")
        if not point_mass > 0:
            raise ValueError(f"point mass must be positive, got {point_mass}")
        if not 0.0 < damping <= 1.0:
            raise ValueError(f"damping factor must be in (0, 1], got {damping}")

        self.dL = float(unit_length)
        self.n_w, self.n_l, self.n_h = int(W), int(L), int(H)
        self.device = wp.get_device(device)

        self.point_mass = float(point_mass)
        self.mu = float(mu)
        self.lam = float(lam)
        self.start_velocity = np.asarray(start_velocity, dtype = float).reshape(3)
        self.gravity = np.asarray(gravity, dtype = float).reshape(3)
        self.damping = float(damping)
        self.ground_height = float(ground_height)

        self.timer_active = timer_active
        self.initialized = False
        self.frame = 0
        super().__init__()
        logger.info(f"tofu {W} x {L} x {H}: {self.n_nodes} nodes, {self.n_tets} tets, {self.n_surface} surface triangles on {self.device}")

    def initialize(self, rotation = None, translation = None):
        '''
        builds the grid, places it with x -> rotation @ x + translation, caches the rest state and sets the start velocity
        '''
        rotation = np.identity(3) if rotation is None else rotation
        translation = np.zeros(3) if translation is None else translation

        self.initialized = False
        self.geometry()
        self.place(rotation, translation)
        self.precompute_rest_state()
        self.reset_states()
        self.frame = 0
        self.initialized = True

    def step(self, dt):
        if not self.initialized:
            raise RuntimeError("call initialize() before step()")
        if not dt > 0:
            raise ValueError(f"time step must be positive, got {dt}")

        with wp.ScopedTimer("tofu step", active = self.timer_active, synchronize = True):
            self.states.a.zero_()
            self.accumulate_elastic_forces(self.states.x, self.states.a)
            self.integrate(dt)
            self.check_divergence()
        self.frame += 1

    def compute_forces(self):
        '''
        elastic accelerations of the current positions without advancing time
        '''
        self.states.a.zero_()
        self.accumulate_elastic_forces(self.states.x, self.states.a)
        return self.accelerations()

    def elastic_energy(self):
        return float(np.sum(self.compute_Psi(self.states.x), dtype = np.float64))

    def positions(self):
        return self.states.x.numpy().copy()

    def velocities(self):
        return self.states.v.numpy().copy()

    def accelerations(self):
        return self.states.a.numpy().copy()
