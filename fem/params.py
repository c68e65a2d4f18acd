import warp as wp
import numpy as np
# material
point_mass = 1.0
mu, lam = 1.0, 1.0
g = 9.8
gravity_np = np.array([0.0, -g, 0.0])
start_velocity_np = np.zeros(3)

# velocity damping applied once per step
damping = 0.999
ground_height = 0.0
dt = 5e-3

# grid
dL = 1.0
n_w, n_l, n_h = 1, 1, 1

# rest frames with |det| below eps * dL^3 are rejected
degenerate_eps = 1e-6

# exported triangle = 3 vertices x (position, normal)
floats_per_face = 18
faces_per_tet = 4

@wp.struct
class FEMMesh:
    n_nodes: int
    n_tets: int
    xcs: wp.array(dtype = wp.vec3)
    T: wp.array2d(dtype = int)
