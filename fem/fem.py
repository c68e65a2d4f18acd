import logging
import warp as wp
import numpy as np
from .params import FEMMesh, degenerate_eps
from .stvk import nodal_force, psi

logger = logging.getLogger(__name__)

@wp.func
def pivot_frame(x: wp.array(dtype = wp.vec3), geo: FEMMesh, e: int, p: int) -> wp.mat33:
    '''
    columns are the edges from vertex p of tet e to the other three, taken in cyclic order
    '''
    xp = x[geo.T[e, p]]
    xa = x[geo.T[e, (p + 1) % 4]]
    xb = x[geo.T[e, (p + 2) % 4]]
    xc = x[geo.T[e, (p + 3) % 4]]
    return wp.matrix_from_cols(xa - xp, xb - xp, xc - xp)

@wp.func
def opposite_normal(x: wp.array(dtype = wp.vec3), geo: FEMMesh, e: int, p: int) -> wp.vec3:
    '''
    half the cross product of the face opposite to vertex p, pointing away from p
    '''
    xp = x[geo.T[e, p]]
    xa = x[geo.T[e, (p + 1) % 4]]
    xb = x[geo.T[e, (p + 2) % 4]]
    xc = x[geo.T[e, (p + 3) % 4]]

    n = 0.5 * wp.cross(xb - xa, xc - xa)
    if wp.dot(n, xp - xa) > 0.0:
        n = -n
    return n

@wp.kernel
def compute_rest_state(geo: FEMMesh, inv_Dm: wp.array2d(dtype = wp.mat33), n_star: wp.array2d(dtype = wp.vec3), det_Dm: wp.array2d(dtype = float)):
    e, p = wp.tid()

    Dm = pivot_frame(geo.xcs, geo, e, p)
    det_Dm[e, p] = wp.determinant(Dm)
    inv_Dm[e, p] = wp.inverse(Dm)
    n_star[e, p] = opposite_normal(geo.xcs, geo, e, p)

@wp.kernel
def tet_kernel(x: wp.array(dtype = wp.vec3), geo: FEMMesh, inv_Dm: wp.array2d(dtype = wp.mat33), n_star: wp.array2d(dtype = wp.vec3), lam: float, mu: float, mass: float, a: wp.array(dtype = wp.vec3)):
    e, p = wp.tid()

    Ds = pivot_frame(x, geo, e, p)
    F = Ds @ inv_Dm[e, p]
    f = nodal_force(F, n_star[e, p], lam, mu)
    wp.atomic_add(a, geo.T[e, p], f / mass)

@wp.kernel
def compute_Psi(x: wp.array(dtype = wp.vec3), geo: FEMMesh, inv_Dm: wp.array2d(dtype = wp.mat33), W: wp.array(dtype = float), lam: float, mu: float, Psi: wp.array(dtype = float)):
    e = wp.tid()
    Ds = pivot_frame(x, geo, e, 0)
    F = Ds @ inv_Dm[e, 0]
    Psi[e] = W[e] * psi(F, lam, mu)


class StVKFEM:
    '''
    St. Venant-Kirchhoff tetrahedral FEM with one precomputed rest frame per (tet, vertex) pair.
    NOTE: super() should define n_nodes, n_tets, xcs, T, dL and device; mu, lam and point_mass are read at every step
    '''
    def __init__(self):
        super().__init__()
        self.inv_Dm = wp.zeros((self.n_tets, 4), dtype = wp.mat33, device = self.device)
        self.n_star = wp.zeros((self.n_tets, 4), dtype = wp.vec3, device = self.device)
        self.det_Dm = wp.zeros((self.n_tets, 4), dtype = float, device = self.device)
        self.W = wp.zeros((self.n_tets, ), dtype = float, device = self.device)
        self.Psi = wp.zeros((self.n_tets, ), dtype = float, device = self.device)
        self.rest_volume = np.zeros(self.n_tets)

        self.geo = FEMMesh()
        self.geo.n_nodes = self.n_nodes
        self.geo.n_tets = self.n_tets
        self.geo.xcs = self.xcs
        self.geo.T = self.T

    def precompute_rest_state(self):
        wp.launch(compute_rest_state, (self.n_tets, 4), inputs = [self.geo, self.inv_Dm, self.n_star, self.det_Dm], device = self.device)

        det = self.det_Dm.numpy()
        bad = np.nonzero(np.min(np.abs(det), axis = 1) <= degenerate_eps * self.dL ** 3)[0]
        if bad.size:
            e = bad[0]
            raise ValueError(f"{bad.size} tets have a degenerate rest shape, first one is #{e} with nodes {self.T.numpy()[e].tolist()}")

        self.rest_volume = np.abs(det[:, 0]) / 6.0
        self.W.assign(self.rest_volume.astype(np.float32))
        logger.info(f"rest state computed for {self.n_tets} tets, total volume = {self.rest_volume.sum():.6g}")

    def accumulate_elastic_forces(self, x, a):
        '''
        adds f / mass of every (tet, vertex) pair to a, reading positions from x only
        '''
        wp.launch(tet_kernel, (self.n_tets, 4), inputs = [x, self.geo, self.inv_Dm, self.n_star, self.lam, self.mu, self.point_mass, a], device = self.device)

    def compute_Psi(self, x):
        wp.launch(compute_Psi, (self.n_tets, ), inputs = [x, self.geo, self.inv_Dm, self.W, self.lam, self.mu, self.Psi], device = self.device)
        return self.Psi.numpy()
