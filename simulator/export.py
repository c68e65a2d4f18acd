import warp as wp
import numpy as np
from fem.params import floats_per_face, faces_per_tet

@wp.func
def put_face(holder: wp.array2d(dtype = float), row: int, p1: wp.vec3, p2: wp.vec3, p3: wp.vec3):
    '''
    one row = (p1, n, p2, n, p3, n), n = normalize((p2 - p1) x (p3 - p1))
    '''
    vn = wp.normalize(wp.cross(p2 - p1, p3 - p1))
    for c in range(3):
        holder[row, c] = p1[c]
        holder[row, 3 + c] = vn[c]
        holder[row, 6 + c] = p2[c]
        holder[row, 9 + c] = vn[c]
        holder[row, 12 + c] = p3[c]
        holder[row, 15 + c] = vn[c]

@wp.kernel
def surface_kernel(x: wp.array(dtype = wp.vec3), surface: wp.array(dtype = wp.vec3i), holder: wp.array2d(dtype = float)):
    t = wp.tid()
    sf = surface[t]
    put_face(holder, t, x[sf[0]], x[sf[1]], x[sf[2]])

@wp.kernel
def tetrahedra_kernel(x: wp.array(dtype = wp.vec3), T: wp.array2d(dtype = int), holder: wp.array2d(dtype = float)):
    e = wp.tid()
    x1 = x[T[e, 0]]
    x2 = x[T[e, 1]]
    x3 = x[T[e, 2]]
    x4 = x[T[e, 3]]

    put_face(holder, e * 4 + 0, x1, x2, x3)
    put_face(holder, e * 4 + 1, x3, x2, x4)
    put_face(holder, e * 4 + 2, x4, x1, x3)
    put_face(holder, e * 4 + 3, x2, x1, x4)


class GeometryExporter:
    '''
    flat shaded triangle soup of the current positions for an external renderer.
    NOTE: super() should define n_surface, n_tets, surface, T, device and the point states
    '''
    def __init__(self):
        super().__init__()
        self.surface_holder = wp.zeros((self.n_surface, floats_per_face), dtype = float, device = self.device)
        self.tetrahedra_holder = wp.zeros((self.n_tets * faces_per_tet, floats_per_face), dtype = float, device = self.device)

    def check_initialized(self):
        if not self.initialized:
            raise RuntimeError("call initialize() before exporting geometry")

    @staticmethod
    def fill_holder(holder, buffer, size):
        if holder is None:
            holder = np.empty(size, dtype = np.float32)
        elif np.size(holder) != size:
            raise ValueError(f"holder has {np.size(holder)} floats, expected {size}")
        holder[...] = buffer.numpy().reshape(np.shape(holder))
        return holder

    def get_surface(self, holder = None):
        '''
        fills holder (surface_holder_size floats) with 18 floats per boundary triangle
        '''
        self.check_initialized()
        wp.launch(surface_kernel, (self.n_surface, ), inputs = [self.states.x, self.surface, self.surface_holder], device = self.device)
        return self.fill_holder(holder, self.surface_holder, self.surface_holder_size)

    def get_tetrahedra(self, holder = None):
        '''
        fills holder (tetrahedra_holder_size floats) with the 4 faces of every tet, 72 floats per tet
        '''
        self.check_initialized()
        wp.launch(tetrahedra_kernel, (self.n_tets, ), inputs = [self.states.x, self.T, self.tetrahedra_holder], device = self.device)
        return self.fill_holder(holder, self.tetrahedra_holder, self.tetrahedra_holder_size)
