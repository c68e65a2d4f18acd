import logging
import warp as wp
import numpy as np
from .params import floats_per_face, faces_per_tet

logger = logging.getLogger(__name__)

# box corners m1..m8 as (di, dj, dk) lattice offsets
box_corners = np.array([
    [0, 0, 0],
    [1, 0, 0],
    [1, 1, 0],
    [0, 1, 0],
    [0, 0, 1],
    [1, 0, 1],
    [1, 1, 1],
    [0, 1, 1],
])

# four corner tets and the "space" tet (0, 2, 5, 7) in the middle
box_tets = np.array([
    [0, 5, 4, 7],
    [0, 1, 5, 2],
    [2, 3, 7, 0],
    [2, 7, 6, 5],
    [0, 2, 5, 7],
])

# (axis, on max side, quad) for the six outer sides of the lattice.
# quads are wound so that cross(p2 - p1, p3 - p1) points out of the solid
boundary_quads = (
    (0, False, (0, 4, 7, 3)),  # front
    (0, True, (1, 2, 6, 5)),  # back
    (2, False, (0, 3, 2, 1)),  # left
    (2, True, (4, 5, 6, 7)),  # right
    (1, False, (0, 1, 5, 4)),  # down
    (1, True, (2, 3, 7, 6)),  # up
)


@wp.kernel
def place_nodes(xcs: wp.array(dtype = wp.vec3), R: wp.mat33, t: wp.vec3):
    i = wp.tid()
    xcs[i] = R @ xcs[i] + t


def lattice_nodes(dL, W, L, H):
    '''
    node (i, j, k) is stored at i * (L + 1) * (H + 1) + j * (H + 1) + k
    '''
    i, j, k = np.meshgrid(np.arange(W + 1), np.arange(L + 1), np.arange(H + 1), indexing = "ij")
    return dL * np.stack([i.ravel(), j.ravel(), k.ravel()], axis = 1).astype(np.float32)


def box_cells(W, L, H):
    '''
    returns the (i, j, k) cell coordinates and the 8 corner node ids of every box, shape (#boxes, 3) and (#boxes, 8)
    '''
    stride_i = (L + 1) * (H + 1)
    stride_j = H + 1
    ci, cj, ck = np.meshgrid(np.arange(W), np.arange(L), np.arange(H), indexing = "ij")
    ijk = np.stack([ci.ravel(), cj.ravel(), ck.ravel()], axis = 1)
    start = ijk[:, 0] * stride_i + ijk[:, 1] * stride_j + ijk[:, 2]
    offsets = box_corners @ np.array([stride_i, stride_j, 1])
    return ijk, start[:, None] + offsets[None, :]


def box_tetrahedra(corners):
    return corners[:, box_tets].reshape(-1, 4)


def boundary_triangles(ijk, corners, dims):
    '''
    two triangles (1, 2, 3), (1, 3, 4) per boundary quad, a cell contributes one quad per outer side it touches
    '''
    tris = []
    for axis, on_max, quad in boundary_quads:
        side = dims[axis] - 1 if on_max else 0
        q = corners[ijk[:, axis] == side][:, quad]
        tris.append(np.stack([q[:, [0, 1, 2]], q[:, [0, 2, 3]]], axis = 1).reshape(-1, 3))
    return np.concatenate(tris, axis = 0)


class BoxGridGenerator:
    '''
    NOTE: need to have self.dL, self.n_w, self.n_l, self.n_h and self.device predefined before calling super().__init__()
    '''
    def __init__(self):
        super().__init__()
        W, L, H = self.n_w, self.n_l, self.n_h
        self.n_nodes = (W + 1) * (L + 1) * (H + 1)
        self.n_boxes = W * L * H
        self.n_surface = 4 * (W * L + L * H + H * W)
        self.n_tets = 5 * self.n_boxes
        self.surface_holder_size = self.n_surface * floats_per_face
        self.tetrahedra_holder_size = self.n_tets * faces_per_tet * floats_per_face

        self.xcs = wp.zeros((self.n_nodes, ), dtype = wp.vec3, device = self.device)
        self.T = wp.zeros((self.n_tets, 4), dtype = int, device = self.device)
        self.surface = wp.zeros((self.n_surface, ), dtype = wp.vec3i, device = self.device)

    def geometry(self):
        dims = (self.n_w, self.n_l, self.n_h)
        ijk, corners = box_cells(*dims)
        T = box_tetrahedra(corners)
        F = boundary_triangles(ijk, corners, dims)
        assert T.shape[0] == self.n_tets and F.shape[0] == self.n_surface

        self.xcs.assign(lattice_nodes(self.dL, *dims))
        self.T.assign(T.astype(np.int32))
        self.surface.assign(F.astype(np.int32))
        logger.debug(f"linked {F.shape[0]} surface triangles, {T.shape[0]} tets")

    def place(self, rotation, translation):
        '''
        rigid placement of the rest shape, applied once
        '''
        R = np.asarray(rotation, dtype = np.float32).reshape(3, 3)
        t = np.asarray(translation, dtype = np.float32).reshape(3)
        if not np.allclose(R.T @ R, np.identity(3), atol = 1e-4):
            logger.warning("placement rotation is not orthonormal, rest shape will be distorted")
        wp.launch(place_nodes, (self.n_nodes, ), inputs = [self.xcs, wp.mat33(*R.ravel().tolist()), wp.vec3(*t.tolist())], device = self.device)
