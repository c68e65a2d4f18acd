import warp as wp

@wp.func
def green_strain(F: wp.mat33) -> wp.mat33:
    '''
    E = (F^T F - I) / 2
    '''
    return 0.5 * (wp.transpose(F) @ F - wp.identity(3, dtype = float))

@wp.func
def stress(E: wp.mat33, lam: float, mu: float) -> wp.mat33:
    '''
    S = 2 mu E + lam tr(E) I
    '''
    return 2.0 * mu * E + lam * wp.trace(E) * wp.identity(3, dtype = float)

@wp.func
def nodal_force(F: wp.mat33, n_star: wp.vec3, lam: float, mu: float) -> wp.vec3:
    '''
    f = F (S n*), n* the rest-area-weighted normal of the face opposite the node
    '''
    S = stress(green_strain(F), lam, mu)
    return F @ (S @ n_star)

@wp.func
def psi(F: wp.mat33, lam: float, mu: float) -> float:
    '''
    psi = mu E : E + lam/2 (tr(E))^2
    '''
    E = green_strain(F)
    norm_E = wp.ddot(E, E)
    trE = wp.trace(E)
    return mu * norm_E + lam * 0.5 * trE * trE
