# mini_spm/post.py
"""
Force recovery and result tables.

Element forces are recovered in LOCAL coordinates:
    stringer: axial force at (start, mid, end) grip
    panel:    shear force along each edge, at the edge midpoint
and reported in kN (force_unit_factor) with |f| < force_zero_tol set to 0.

Tables for the reporting side are pandas DataFrames.
"""

import logging
import math
from typing import Dict, Iterable, Mapping, Tuple

import numpy as np
import pandas as pd

from .config import AnalysisConfig, CONFIG
from .kernel.constraints import coerce_zero
from .kernel.dof import DOF_SPM
from .materials import MaterialNotSetError
from .model import ModelData, Panel

logger = logging.getLogger(__name__)


def element_local_forces(behaviour, config: AnalysisConfig = CONFIG) -> np.ndarray:
    """
    Local forces of one element in output units.

    `behaviour` must already hold its local displacements (set_displacements,
    or update_forces for nonlinear stringers).
    """
    fl = behaviour.forces() * config.force_unit_factor
    coerce_zero(fl, config.force_zero_tol)
    return fl


def recover_forces(behaviours: Iterable, u: np.ndarray, config: AnalysisConfig = CONFIG) -> Dict[int, np.ndarray]:
    """
    Set the displacements of every element and collect its local forces.

    Returns:
        {element_id: local force vector (kN)}
    """
    result = {}
    for b in behaviours:
        b.set_displacements(u)
        result[b.id] = element_local_forces(b, config)
    return result


def compute_nodal_displacements(model: ModelData, u: np.ndarray) -> Dict[int, Dict[str, float]]:
    """
    Mapping of node_id to {'ux', 'uy', 'magnitude'} (mm).
    """
    result = {}
    for node_id in sorted(model.nodes):
        ux = float(u[DOF_SPM.idx(node_id, 0)])
        uy = float(u[DOF_SPM.idx(node_id, 1)])
        result[node_id] = {
            'ux': ux,
            'uy': uy,
            'magnitude': math.hypot(ux, uy),
        }
    return result


def compute_reactions(K: np.ndarray, u: np.ndarray, F: np.ndarray) -> np.ndarray:
    """
    R = K·u − F with the UNREDUCED stiffness matrix.

    Non-zero only at supported DOFs (up to round-off).
    """
    return K @ u - F


def support_reactions(model: ModelData, R: np.ndarray, config: AnalysisConfig = CONFIG) -> Dict[int, Tuple[float, float]]:
    """Reactions (kN) at supported nodes, keyed by node id."""
    result = {}
    for node in model.nodes.values():
        if not any(node.support):
            continue
        rx, ry = (float(R[d]) * config.force_unit_factor for d in node.dofs)
        rx = rx if node.support[0] else 0.0
        ry = ry if node.support[1] else 0.0
        result[node.id] = (rx, ry)
    return result


def max_abs_force(forces: Mapping[int, np.ndarray]) -> float:
    """Largest absolute force over all elements; 0.0 when empty."""
    if not forces:
        return 0.0
    return max(float(np.max(np.abs(f))) for f in forces.values())


def panel_average_shear_stress(panel: Panel, edge_forces: np.ndarray) -> float:
    """
    Average shear stress (MPa) from the edge forces in N.

    τi = fi / (li·w),  τ = (−τ0 + τ1 − τ2 + τ3) / 4
    """
    lengths = np.asarray(panel.lengths, dtype=float)
    tau = np.asarray(edge_forces, dtype=float) / (lengths * panel.width)
    return (-tau[0] + tau[1] - tau[2] + tau[3]) / 4


def panel_principal_stresses(panel: Panel, tau: float) -> Tuple[float, float, float]:
    """
    Principal stresses by the equilibrium-plasticity truss model.

    Returns:
        (σ1, σ2, θ): σ1 = 0, σ2 the compressive strut stress (MPa) and θ
        the angle of σ2 (rad)
    """
    steel_x, steel_y = panel.reinforcement.steel
    fyx, fyy = steel_x.fy, steel_y.fy

    if fyx == fyy:
        sig2 = -2 * abs(tau)
    else:
        if fyx <= 0 or fyy <= 0:
            raise MaterialNotSetError(
                f"Panel {panel.id}: steel yield stress set in one direction only (fyx={fyx}, fyy={fyy})."
            )
        r = math.sqrt(fyx / fyy)
        sig2 = -abs(tau) * (r + 1 / r)

    theta = math.pi / 4 if tau <= 0 else -math.pi / 4
    return 0.0, sig2, theta


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

def displacement_table(model: ModelData, u: np.ndarray) -> pd.DataFrame:
    disp = compute_nodal_displacements(model, u)
    df = pd.DataFrame.from_dict(disp, orient='index')
    df.index.name = 'node'
    return df


def stringer_force_table(forces: Mapping[int, np.ndarray]) -> pd.DataFrame:
    rows = [
        {'stringer': sid, 'N_start': f[0], 'N_mid': f[1], 'N_end': f[2]}
        for sid, f in sorted(forces.items())
    ]
    return pd.DataFrame(rows, columns=['stringer', 'N_start', 'N_mid', 'N_end']).set_index('stringer')


def panel_force_table(model: ModelData, forces: Mapping[int, np.ndarray], config: AnalysisConfig = CONFIG) -> pd.DataFrame:
    """
    Edge forces (kN) plus average shear and principal stresses (MPa) per panel.

    Panels reinforced in one direction only get NaN principal stresses.
    """
    panels = {p.id: p for p in model.panels}
    rows = []
    for pid, f in sorted(forces.items()):
        panel = panels[pid]
        tau = panel_average_shear_stress(panel, f / config.force_unit_factor)
        try:
            _, sig2, theta = panel_principal_stresses(panel, tau)
        except MaterialNotSetError as exc:
            logger.warning(f"{exc} Principal stresses reported as NaN.")
            sig2 = theta = float("nan")
        rows.append({
            'panel': pid,
            'V0': f[0], 'V1': f[1], 'V2': f[2], 'V3': f[3],
            'tau': tau,
            'sigma2': sig2,
            'theta': theta,
        })
    columns = ['panel', 'V0', 'V1', 'V2', 'V3', 'tau', 'sigma2', 'theta']
    return pd.DataFrame(rows, columns=columns).set_index('panel')


def reaction_table(reactions: Mapping[int, Tuple[float, float]]) -> pd.DataFrame:
    rows = [{'node': nid, 'Rx': rx, 'Ry': ry} for nid, (rx, ry) in sorted(reactions.items())]
    return pd.DataFrame(rows, columns=['node', 'Rx', 'Ry']).set_index('node')
