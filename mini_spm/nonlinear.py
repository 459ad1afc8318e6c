# mini_spm/nonlinear.py
"""
NONLINEAR STRINGER: FORCE-BASED (FLEXIBILITY) FORMULATION
=========================================================

The stringer carries a linearly varying normal force described by two
generalized stresses:
    N1 = force at the start grip side, N3 = force at the end grip side
and two generalized strains:
    e1 = u_mid − u_start, e3 = u_end − u_mid   (elongations of the halves)

Instead of differentiating an energy, the element integrates the material
flexibility along the bar and inverts it:

    sample N at 0, L/3, 2L/3, L  →  strain(N) gives (ε, dε/dN) at each point
    F = L/24·[[3d0 + 4d1 + d2, 2(d1 + d2)], [2(d1 + d2), d1 + 4d2 + 3d3]]
    K_local = Bᵀ·F⁻¹·B,   B = [[-1, 1, 0], [0, -1, 1]]

A strain increment is applied in a fixed number of explicit sub-steps, each
turning a slice of (de1, de3) into (dN1, dN3) with the current F⁻¹. The
forces are finally clamped to [Nt, Nyr].

STATE:
------
Committed state = last converged load step. `update_forces` always starts
from it, so calling it many times inside one load step gives the same result
for the same displacements. `commit` promotes the trial state once the load
step has converged.
"""

import logging
import math
from typing import List, Tuple

import numpy as np

from .materials import Concrete, MaterialNotSetError
from .model import Stringer
from .elements import stringer_transform

logger = logging.getLogger(__name__)

B_MATRIX = np.array([
    [-1.0,  1.0, 0.0],
    [ 0.0, -1.0, 1.0],
], dtype=float)


def _root(x: float) -> float:
    # arguments that are zero in exact arithmetic can round slightly negative
    return math.sqrt(max(x, 0.0))


class ClassicStringerLaw:
    """
    Classic SPM axial law of a reinforced concrete bar.

    Tension: uncracked linear, then tension stiffening after cracking, then
    steel yielding. Compression: parabolic concrete with elastic or yielding
    steel, then linear extrapolation beyond the governing capacity Nt.

    Forces in N, compression negative.
    """

    def __init__(self, concrete: Concrete, stringer: Stringer):
        concrete.check()
        reinforcement = stringer.reinforcement
        if not reinforcement.steel.is_set:
            raise MaterialNotSetError(f"Stringer {stringer.id}: steel parameters not set.")
        if stringer.steel_area <= 0.0:
            raise MaterialNotSetError(f"Stringer {stringer.id}: reinforcement not set (steel area is zero).")

        self.ec = concrete.ec
        self.ey = reinforcement.steel.yield_strain

        Ac = stringer.concrete_area
        self.EcAc = concrete.parabolic_modulus * Ac
        self.EsAs = reinforcement.stiffness
        self.xi = self.EsAs / self.EcAc
        self.t1 = self.EcAc + self.EsAs

        self.Nc = -concrete.fc * Ac
        self.Nyr = reinforcement.yield_force
        self.Ncr = concrete.cracking_strength * Ac * (1 + self.xi)
        self.Nr = self.Ncr / math.sqrt(1 + self.xi)
        self.Nt = max(self.Nc * (1 + self.xi) ** 2, self.Nc - self.Nyr)

    def strain(self, N: float) -> Tuple[float, float]:
        """Return (ε, dε/dN) for the force N."""
        if N == 0.0:
            return 0.0, 1.0 / self.t1

        if N > 0.0:
            if N <= self.Ncr:
                return self.uncracked(N)
            if N <= self.Nyr:
                return self.cracked(N)
            return self.yielding_steel(N)

        if N > self.Nt:
            return self.concrete_not_crushed(N)
        return self.concrete_crushing(N)

    # Tension
    def uncracked(self, N: float) -> Tuple[float, float]:
        return N / self.t1, 1.0 / self.t1

    def cracked(self, N: float) -> Tuple[float, float]:
        Nr2 = self.Nr * self.Nr
        e = (N * N - Nr2) / (self.EsAs * N)
        de = (N * N + Nr2) / (self.EsAs * N * N)
        return e, de

    def yielding_steel(self, N: float) -> Tuple[float, float]:
        Nyr = self.Nyr
        e = (Nyr * Nyr - self.Nr * self.Nr) / (self.EsAs * Nyr) + (N - Nyr) / self.t1
        return e, 1.0 / self.t1

    # Compression
    def concrete_not_crushed(self, N: float) -> Tuple[float, float]:
        xi1 = 1 + self.xi
        t2 = _root(xi1 * xi1 - N / self.Nc)
        e = self.ec * (xi1 - t2)

        if e < -self.ey:
            t2 = _root(1 - (N + self.Nyr) / self.Nc)
            e = self.ec * (1 - t2)

        if t2 == 0.0:
            return e, 1.0 / self.t1
        return e, 1.0 / (self.EcAc * t2)

    def concrete_crushing(self, N: float) -> Tuple[float, float]:
        # steel state fixed at Nt, linear beyond it
        e_t, _ = self.concrete_not_crushed(self.Nt)
        return e_t + (N - self.Nt) / self.t1, 1.0 / self.t1

    def plastic_force(self, N: float) -> float:
        """Clamp N to [Nt, Nyr]."""
        return min(max(N, self.Nt), self.Nyr)


class NonlinearStringer:
    """
    Stringer behaviour with the force-based nonlinear update.

    Exposes the same interface as `LinearStringer` (dof_map, local_stiffness,
    global_stiffness, set_displacements, forces, global_forces) plus
    `update_forces` and `commit` for the load-stepping driver.
    """

    def __init__(self, stringer: Stringer, concrete: Concrete, substeps: int = 10):
        self.element = stringer
        self.concrete = concrete
        self.law = ClassicStringerLaw(concrete, stringer)
        self.substeps = substeps
        self.ul = np.zeros(3, dtype=float)

        # committed
        self.gen_stresses = (0.0, 0.0)
        self.gen_strains = (0.0, 0.0)
        self.flexibility = self.initial_flexibility()

        # trial
        self.trial_stresses = self.gen_stresses
        self.trial_strains = self.gen_strains
        self.trial_flexibility = self.flexibility.copy()

    @property
    def id(self) -> int:
        return self.element.id

    @property
    def dof_map(self) -> List[int]:
        return self.element.dof_map

    @property
    def length(self) -> float:
        return self.element.length

    def initial_flexibility(self) -> np.ndarray:
        """Uncracked elastic flexibility L/(3·t1)·[[1, ½], [½, 1]]."""
        f11 = self.length / (3.0 * self.law.t1)
        return np.array([
            [f11,       0.5 * f11],
            [0.5 * f11, f11],
        ], dtype=float)

    def gen_strains_and_flexibility(self, N1: float, N3: float) -> Tuple[Tuple[float, float], np.ndarray]:
        """
        Integrate the material law along the bar for the generalized
        stresses (N1, N3).

        Returns:
            ((e1, e3), F): approximate generalized strains and the 2x2
            flexibility matrix
        """
        L = self.length
        samples = (N1, (2 * N1 + N3) / 3, (N1 + 2 * N3) / 3, N3)
        e = [0.0] * 4
        d = [0.0] * 4
        for i, N in enumerate(samples):
            e[i], d[i] = self.law.strain(N)

        e1 = L * (3 * e[0] + 6 * e[1] + 3 * e[2]) / 24
        e3 = L * (3 * e[1] + 6 * e[2] + 3 * e[3]) / 24

        f11 = L * (3 * d[0] + 4 * d[1] + d[2]) / 24
        f12 = L * (d[1] + d[2]) / 12
        f22 = L * (d[1] + 4 * d[2] + 3 * d[3]) / 24

        F = np.array([
            [f11, f12],
            [f12, f22],
        ], dtype=float)
        return (e1, e3), F

    def transform(self) -> np.ndarray:
        return stringer_transform(*self.element.direction_cosines)

    def set_displacements(self, u: np.ndarray) -> None:
        self.ul = self.transform() @ u[self.dof_map]

    def update_forces(self, u: np.ndarray = None) -> Tuple[float, float]:
        """
        Trial update of (N1, N3) for the current displacements.

        Starts from the committed state. The strain increment since the last
        commit is applied in `substeps` equal slices; each slice is converted
        to a force increment with the flexibility at the current forces.

        Args:
            u: Global displacement vector; if None the stored local
               displacements are used

        Returns:
            The trial generalized stresses (N1, N3)
        """
        if u is not None:
            self.set_displacements(u)

        ul = self.ul
        e1 = ul[1] - ul[0]
        e3 = ul[2] - ul[1]

        e1i, e3i = self.gen_strains
        de1 = (e1 - e1i) / self.substeps
        de3 = (e3 - e3i) / self.substeps

        N1, N3 = self.gen_stresses
        _, F = self.gen_strains_and_flexibility(N1, N3)

        for _ in range(self.substeps):
            det = F[0, 0] * F[1, 1] - F[0, 1] * F[1, 0]
            dN1 = ( F[1, 1] * de1 - F[0, 1] * de3) / det
            dN3 = (-F[0, 1] * de1 + F[0, 0] * de3) / det
            N1 += dN1
            N3 += dN3
            _, F = self.gen_strains_and_flexibility(N1, N3)

        N1c = self.law.plastic_force(N1)
        N3c = self.law.plastic_force(N3)
        if (N1c, N3c) != (N1, N3):
            logger.debug(f"Stringer {self.id}: forces ({N1:.4g}, {N3:.4g}) clamped to ({N1c:.4g}, {N3c:.4g})")
        N1, N3 = N1c, N3c

        self.trial_flexibility = F
        self.trial_stresses = (N1, N3)
        self.trial_strains = (e1, e3)
        return self.trial_stresses

    def commit(self) -> None:
        """Make the trial state the committed state (load step converged)."""
        self.gen_stresses = self.trial_stresses
        self.gen_strains = self.trial_strains
        self.flexibility = self.trial_flexibility.copy()

    def local_stiffness(self) -> np.ndarray:
        """Tangent Bᵀ·F⁻¹·B from the current trial flexibility."""
        return B_MATRIX.T @ np.linalg.inv(self.trial_flexibility) @ B_MATRIX

    def global_stiffness(self) -> np.ndarray:
        T = self.transform()
        return T.T @ self.local_stiffness() @ T

    def forces(self) -> np.ndarray:
        """Local grip forces (−N1, N1 − N3, N3) in N."""
        N1, N3 = self.trial_stresses
        return np.array([-N1, N1 - N3, N3], dtype=float)

    def global_forces(self) -> np.ndarray:
        return self.transform().T @ self.forces()

    # Plastic strains
    def _plastic_strain(self, e: float) -> float:
        # e is the elongation of a half-span; compare its mean strain
        L = self.length
        strain = e / (0.5 * L)
        ey = self.law.ey
        ec = self.concrete.ec

        if strain > ey:
            return L / 8 * (strain - ey)
        if strain < ec:
            return L / 8 * (strain - ec)
        return 0.0

    def plastic_generalized_strains(self) -> Tuple[float, float]:
        """Plastic part (ep1, ep3) of the committed generalized strains."""
        e1, e3 = self.gen_strains
        return self._plastic_strain(e1), self._plastic_strain(e3)

    def max_plastic_strains(self) -> Tuple[float, float]:
        """Plastic strain capacity (tension, compression)."""
        s = self.element
        steel = s.reinforcement.steel
        ec = self.concrete.ec
        ecu = self.concrete.ecu

        eput = 0.3 * steel.ultimate_strain * s.length
        et = max(ec, -steel.yield_strain)
        epuc = (ecu - et) * min(s.width, s.height)
        return eput, epuc
