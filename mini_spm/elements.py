# mini_spm/elements.py
"""
Linear stringer and panel formulations.

STRINGER (3 grips, axial only):
    local DOFs: axial displacement at start, mid and end grip
    Kl = (Ec·Ac/L)·[[4, -6, 2], [-6, 12, -6], [2, -6, 4]]
    (linearly varying normal force, constant shear flow along the bar)

PANEL (4 edge-midpoint grips, pure shear):
    local DOFs: displacement along each edge at its midpoint
    Kl is rank 1 (a single shear mode)

Both transform to global axes with a T that places the direction cosines of
the stringer (or of each panel edge) at the (ux, uy) columns of the grip, so
K = Tᵀ·Kl·T. Direction cosines of axis-aligned members are exact zeros, which
leaves whole row-pairs of K exactly zero; the assembler relies on that.
"""

import logging
from typing import List, Sequence, Tuple

import numpy as np

from .materials import Concrete
from .model import ModelInconsistencyError, Panel, Stringer

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Stringer
# ---------------------------------------------------------------------------

def stringer_transform(l: float, m: float) -> np.ndarray:
    """
    3x6 transform from global grip DOFs to local axial DOFs.
    Global DOF order: [u0x, u0y, u1x, u1y, u2x, u2y]
    """
    T = np.array([
        [l, m, 0, 0, 0, 0],
        [0, 0, l, m, 0, 0],
        [0, 0, 0, 0, l, m],
    ], dtype=float)
    return T


def stringer_local_stiffness(E: float, A: float, L: float) -> np.ndarray:
    EA_L = E * A / L
    k = EA_L * np.array([
        [ 4.0,  -6.0,  2.0],
        [-6.0,  12.0, -6.0],
        [ 2.0,  -6.0,  4.0],
    ], dtype=float)
    return k


def stringer_global_stiffness(stringer: Stringer, concrete: Concrete) -> np.ndarray:
    l, m = stringer.direction_cosines
    T = stringer_transform(l, m)
    k_local = stringer_local_stiffness(concrete.Ec, stringer.concrete_area, stringer.length)
    return T.T @ k_local @ T


# ---------------------------------------------------------------------------
# Panel
# ---------------------------------------------------------------------------

def panel_transform(cosines: Sequence[Tuple[float, float]]) -> np.ndarray:
    """
    4x8 transform: row i holds the direction cosines of edge i at the
    columns of grip i.
    """
    T = np.zeros((4, 8), dtype=float)
    for i, (l, m) in enumerate(cosines):
        T[i, 2 * i] = l
        T[i, 2 * i + 1] = m
    return T


def rectangular_panel_stiffness(Gc: float, w: float, a: float, b: float) -> np.ndarray:
    """
    Local stiffness of a rectangular panel with edge lengths a (edges 0, 2)
    and b (edges 1, 3).
    """
    a_b = a / b
    b_a = b / a
    k = Gc * w * np.array([
        [ a_b, -1.0,  a_b, -1.0],
        [-1.0,  b_a, -1.0,  b_a],
        [ a_b, -1.0,  a_b, -1.0],
        [-1.0,  b_a, -1.0,  b_a],
    ], dtype=float)
    return k


def general_panel_stiffness(panel: Panel, Gc: float) -> np.ndarray:
    """
    Local stiffness of an arbitrary convex quadrilateral panel.

    The equilibrium parameters (edge projections c, s and vertex cross
    products r) give four 3x3 determinants k1..k4, one per left-out edge.
    Combined with the kinematic dimensions (a, b, c, d):

        kf = k1 + k2 + k3 + k4
        ku = -t1·k1 + t2·k2 - t3·k3 + t4·k4
        D  = 16·Gc·w / (kf·ku)
        B  = (-k1·l0, k2·l1, -k3·l2, k4·l3)
        Kl = D·B·Bᵀ

    On a rectangle this reduces to `rectangular_panel_stiffness`.
    """
    x, y = panel.vertex_coordinates
    a, b, c, d = panel.dimensions
    lengths = panel.lengths
    w = panel.width

    # Equilibrium parameters, edge i from vertex i to vertex i+1
    cx = np.array([x[(i + 1) % 4] - x[i] for i in range(4)])
    sy = np.array([y[(i + 1) % 4] - y[i] for i in range(4)])
    r = np.array([x[i] * y[(i + 1) % 4] - x[(i + 1) % 4] * y[i] for i in range(4)])

    # Kinematic parameters
    t1 = -b * cx[0] - c * sy[0]
    t2 = a * sy[1] + d * cx[1]
    t3 = b * cx[2] + c * sy[2]
    t4 = -a * sy[3] - d * cx[3]

    rows = np.vstack([cx, sy, r])
    k = [np.linalg.det(np.delete(rows, i, axis=1)) for i in range(4)]

    kf = k[0] + k[1] + k[2] + k[3]
    ku = -t1 * k[0] + t2 * k[1] - t3 * k[2] + t4 * k[3]
    if kf * ku <= 0.0:
        raise ModelInconsistencyError(
            f"Panel {panel.id}: stiffness is not positive (kf·ku = {kf * ku:.3e}); "
            f"vertices must start at the lower-left corner and run anticlockwise."
        )

    D = 16.0 * Gc * w / (kf * ku)
    B = np.array([
        -k[0] * lengths[0],
         k[1] * lengths[1],
        -k[2] * lengths[2],
         k[3] * lengths[3],
    ], dtype=float)

    return D * np.outer(B, B)


def panel_local_stiffness(panel: Panel, concrete: Concrete, rectangular_tolerance: float = 0.0) -> np.ndarray:
    """Pick the rectangular or the general formula for a panel."""
    Gc = concrete.Gc

    if panel.is_rectangular(rectangular_tolerance):
        if not panel.is_rectangular(0.0):
            logger.warning(
                f"Panel {panel.id} classified as rectangular within tolerance "
                f"{rectangular_tolerance:g} rad; exact comparison would use the general formula"
            )
        logger.debug(f"Panel {panel.id}: rectangular stiffness")
        lengths = panel.lengths
        return rectangular_panel_stiffness(Gc, panel.width, lengths[0], lengths[1])

    logger.debug(f"Panel {panel.id}: general quadrilateral stiffness")
    return general_panel_stiffness(panel, Gc)


def panel_global_stiffness(panel: Panel, concrete: Concrete, rectangular_tolerance: float = 0.0) -> np.ndarray:
    T = panel_transform(panel.direction_cosines)
    k_local = panel_local_stiffness(panel, concrete, rectangular_tolerance)
    return T.T @ k_local @ T


# ---------------------------------------------------------------------------
# Element behaviours
# ---------------------------------------------------------------------------

class LinearStringer:
    """
    Linear-elastic behaviour of a stringer.

    Holds the analysis state (local displacements) that the frozen Stringer
    geometry does not carry.
    """

    def __init__(self, stringer: Stringer, concrete: Concrete):
        self.element = stringer
        self.concrete = concrete
        self.ul = np.zeros(3, dtype=float)

    @property
    def id(self) -> int:
        return self.element.id

    @property
    def dof_map(self) -> List[int]:
        return self.element.dof_map

    def transform(self) -> np.ndarray:
        return stringer_transform(*self.element.direction_cosines)

    def local_stiffness(self) -> np.ndarray:
        s = self.element
        return stringer_local_stiffness(self.concrete.Ec, s.concrete_area, s.length)

    def global_stiffness(self) -> np.ndarray:
        T = self.transform()
        return T.T @ self.local_stiffness() @ T

    def set_displacements(self, u: np.ndarray) -> None:
        """Store local displacements ul = T·u_grips from the global vector."""
        self.ul = self.transform() @ u[self.dof_map]

    def forces(self) -> np.ndarray:
        """Local grip forces (N)."""
        return self.local_stiffness() @ self.ul

    def global_forces(self) -> np.ndarray:
        return self.transform().T @ self.forces()


class LinearPanel:
    """Linear-elastic behaviour of a shear panel."""

    def __init__(self, panel: Panel, concrete: Concrete, rectangular_tolerance: float = 0.0):
        self.element = panel
        self.concrete = concrete
        self.rectangular_tolerance = rectangular_tolerance
        self.ul = np.zeros(4, dtype=float)
        self._k_local = None

    @property
    def id(self) -> int:
        return self.element.id

    @property
    def dof_map(self) -> List[int]:
        return self.element.dof_map

    def transform(self) -> np.ndarray:
        return panel_transform(self.element.direction_cosines)

    def local_stiffness(self) -> np.ndarray:
        if self._k_local is None:
            self._k_local = panel_local_stiffness(self.element, self.concrete, self.rectangular_tolerance)
        return self._k_local

    def global_stiffness(self) -> np.ndarray:
        T = self.transform()
        return T.T @ self.local_stiffness() @ T

    def set_displacements(self, u: np.ndarray) -> None:
        self.ul = self.transform() @ u[self.dof_map]

    def forces(self) -> np.ndarray:
        """Local edge shear forces (N)."""
        return self.local_stiffness() @ self.ul

    def global_forces(self) -> np.ndarray:
        return self.transform().T @ self.forces()
