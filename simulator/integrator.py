import logging
import warp as wp
import numpy as np

logger = logging.getLogger(__name__)


class SimulationDiverged(RuntimeError):
    '''
    non-finite acceleration after an integration pass, the state can not be recovered
    '''
    pass


@wp.struct
class PointState:
    x: wp.array(dtype = wp.vec3)
    v: wp.array(dtype = wp.vec3)
    v_next: wp.array(dtype = wp.vec3)
    a: wp.array(dtype = wp.vec3)


@wp.kernel
def integrate_points(state: PointState, gravity: wp.vec3, damping: float, ground: float, dt: float):
    i = wp.tid()
    v_prev = state.v[i]
    v_next = (v_prev + (state.a[i] + gravity) * dt) * damping
    x = state.x[i] + 0.5 * (v_prev + v_next) * dt

    # inelastic along the ground normal, tangential velocity kept
    if x[1] < ground:
        x = wp.vec3(x[0], ground, x[2])
        v_next = wp.vec3(v_next[0], 0.0, v_next[2])

    state.x[i] = x
    state.v_next[i] = v_next


class ExplicitIntegrator:
    '''
    trapezoidal position update with double-buffered velocities and ground collision.
    NOTE: super() should define n_nodes, xcs and device; gravity, damping, ground_height and start_velocity are read when used
    '''
    def __init__(self):
        super().__init__()
        self.states = PointState()
        self.states.x = wp.zeros((self.n_nodes, ), dtype = wp.vec3, device = self.device)
        self.states.v = wp.zeros_like(self.states.x)
        self.states.v_next = wp.zeros_like(self.states.x)
        self.states.a = wp.zeros_like(self.states.x)

    def reset_states(self):
        wp.copy(self.states.x, self.xcs)
        self.states.v.fill_(wp.vec3(*self.start_velocity))
        self.states.v_next.zero_()
        self.states.a.zero_()

    def integrate(self, dt):
        g = wp.vec3(*self.gravity)
        wp.launch(integrate_points, (self.n_nodes, ), inputs = [self.states, g, self.damping, self.ground_height, dt], device = self.device)

        # v_next becomes the current velocity of the next step
        self.states.v, self.states.v_next = self.states.v_next, self.states.v

    def check_divergence(self):
        a_mean = np.mean(self.states.a.numpy(), axis = 0)
        if not np.all(np.isfinite(a_mean)):
            raise SimulationDiverged(f"non-finite average acceleration {a_mean.tolist()}")
        return a_mean

    def kinetic_energy(self):
        v = self.states.v.numpy().astype(np.float64)
        return 0.5 * self.point_mass * np.sum(v * v)
