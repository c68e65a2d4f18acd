import logging
import sys
import numpy as np
import warp as wp
import polyscope as ps
import polyscope.imgui as gui
from fem.params import floats_per_face
from simulator.base import BaseSimulator
from simulator.integrator import SimulationDiverged
from simulator.logging_config import setup_logging

logger = logging.getLogger("tofu")


def triangle_soup(holder):
    '''
    splits an exported holder into (#F * 3, 3) vertices, (#F, 3) faces and (#F, 3) face normals
    '''
    rows = holder.reshape(-1, floats_per_face)
    V = rows.reshape(-1, 6)[:, :3]
    F = np.arange(V.shape[0]).reshape(-1, 3)
    N = rows[:, 3:6]
    return V, F, N


class PSViewer:
    def __init__(self, simulator: BaseSimulator):
        self.simulator = simulator
        self.tofu = simulator.sim
        self.surface = np.zeros(self.tofu.surface_holder_size, dtype = np.float32)
        self.tets = np.zeros(self.tofu.tetrahedra_holder_size, dtype = np.float32)

        V, F, N = triangle_soup(self.tofu.get_surface(self.surface))
        self.ps_mesh = ps.register_surface_mesh("tofu", V, F)
        self.ps_mesh.add_vector_quantity("normals", N, defined_on = "faces")
        V, F, _ = triangle_soup(self.tofu.get_tetrahedra(self.tets))
        self.ps_tets = ps.register_surface_mesh("tets", V, F, enabled = False)

        self.ui_pause = True
        self.ui_tets = False
        self.animate = False

    def update(self):
        V, _, N = triangle_soup(self.tofu.get_surface(self.surface))
        self.ps_mesh.update_vertex_positions(V)
        self.ps_mesh.add_vector_quantity("normals", N, defined_on = "faces")
        if self.ui_tets:
            V, _, _ = triangle_soup(self.tofu.get_tetrahedra(self.tets))
            self.ps_tets.update_vertex_positions(V)

    def callback(self):
        changed, self.ui_pause = gui.Checkbox("Pause", self.ui_pause)
        changed, self.ui_tets = gui.Checkbox("Tetrahedra", self.ui_tets)
        if changed:
            self.ps_tets.set_enabled(self.ui_tets)
            self.update()
        self.animate = gui.Button("Step") or not self.ui_pause
        if gui.Button("Reset"):
            self.simulator.reset()
            self.ui_pause = True
            self.update()

        if self.animate:
            self.simulator.advance()
            self.update()


def main(argv = None):
    argv = sys.argv[1:] if argv is None else argv
    config_file = argv[0] if argv else None

    setup_logging()
    wp.init()
    simulator = BaseSimulator(config_file)
    if simulator.verbose:
        setup_logging(logging.DEBUG)
    try:
        if simulator.headless:
            simulator.run()
        else:
            ps.init()
            ps.set_up_dir("y_up")
            ps.set_ground_plane_height(simulator.ground_height)
            viewer = PSViewer(simulator)
            ps.set_user_callback(viewer.callback)
            ps.show()
    except SimulationDiverged as e:
        logger.critical(f"simulation diverged at frame {simulator.frame}: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
