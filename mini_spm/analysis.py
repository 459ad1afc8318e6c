# mini_spm/analysis.py
"""
ANALYSIS DRIVERS
================

run_linear:
    ModelData → element behaviours → global K → reduction → LU solve →
    force recovery

run_nonlinear:
    Load control with n_load_steps equal increments λ = i/n. Each step is a
    Newton-Raphson iteration:

        repeat:
            update stringer forces from u         (trial, from committed state)
            fi = internal forces, eliminated DOFs set to 0
            r  = λ·F − fi
            stop if ‖r‖ / max(‖λ·F‖, 1) ≤ tolerance
            u += K⁻¹·r

    K is the tangent from the trial stringer flexibilities, re-assembled
    every iteration. With config.modified_newton it is assembled and
    factorized once at the start of the step (committed flexibilities).

    On convergence the stringers commit; otherwise ConvergenceError.
    Panels stay linear.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from .assembly import assemble_stiffness, build_behaviours, internal_force_vector, reduce_system
from .config import AnalysisConfig, CONFIG
from .kernel.solve import ConvergenceError, factorize, solve_factorized, solve_linear
from .model import ModelData
from .post import (
    compute_nodal_displacements,
    compute_reactions,
    displacement_table,
    max_abs_force,
    panel_force_table,
    reaction_table,
    recover_forces,
    stringer_force_table,
    support_reactions,
)

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    """
    Output of one analysis run.

    Forces are in kN (config.force_unit_factor), displacements in mm.
    `reactions` is the full R vector in N; `support_reactions` the kN values
    at supported nodes.
    """
    model: ModelData
    displacements: np.ndarray
    stringer_forces: Dict[int, np.ndarray]
    panel_forces: Dict[int, np.ndarray]
    reactions: np.ndarray
    eliminated_dofs: List[int]
    config: AnalysisConfig = CONFIG
    load_factors: List[float] = field(default_factory=list)
    iterations: List[int] = field(default_factory=list)
    monitored: List[Tuple[float, float]] = field(default_factory=list)

    @property
    def nodal_displacements(self) -> Dict[int, Dict[str, float]]:
        return compute_nodal_displacements(self.model, self.displacements)

    @property
    def support_reactions(self) -> Dict[int, Tuple[float, float]]:
        return support_reactions(self.model, self.reactions, self.config)

    @property
    def max_stringer_force(self) -> float:
        return max_abs_force(self.stringer_forces)

    @property
    def max_panel_force(self) -> float:
        return max_abs_force(self.panel_forces)

    @property
    def max_displacement(self) -> float:
        disp = self.nodal_displacements
        if not disp:
            return 0.0
        return max(d['magnitude'] for d in disp.values())

    def displacement_table(self) -> pd.DataFrame:
        return displacement_table(self.model, self.displacements)

    def stringer_force_table(self) -> pd.DataFrame:
        return stringer_force_table(self.stringer_forces)

    def panel_force_table(self) -> pd.DataFrame:
        return panel_force_table(self.model, self.panel_forces, self.config)

    def reaction_table(self) -> pd.DataFrame:
        return reaction_table(self.support_reactions)

    def load_displacement_table(self) -> pd.DataFrame:
        """Monitored load-displacement history (nonlinear runs)."""
        return pd.DataFrame(self.monitored, columns=['load_factor', 'displacement'])


def run_linear(model: ModelData, config: Optional[AnalysisConfig] = None) -> AnalysisResult:
    """
    Linear SPM analysis.

    Raises:
        MaterialNotSetError: If concrete parameters are not set
        MechanismError: If the reduced system is singular or ill-conditioned
    """
    config = config or model.config
    logger.info(
        f"Linear analysis: {model.n_nodes} nodes, {len(model.stringers)} stringers, "
        f"{len(model.panels)} panels"
    )

    stringers, panels = build_behaviours(model, nonlinear=False, config=config)
    behaviours = [*stringers, *panels]

    K = assemble_stiffness(model.ndof, behaviours)
    F = model.force_vector()
    Kr, Fr, eliminated = reduce_system(model, K, F, config)

    u = solve_linear(Kr, Fr, cond_limit=config.cond_limit)

    stringer_forces = recover_forces(stringers, u, config)
    panel_forces = recover_forces(panels, u, config)
    R = compute_reactions(K, u, F)

    logger.info(f"Linear analysis done: max |u| = {np.max(np.abs(u)):.4g} mm")

    return AnalysisResult(
        model=model,
        displacements=u,
        stringer_forces=stringer_forces,
        panel_forces=panel_forces,
        reactions=R,
        eliminated_dofs=eliminated,
        config=config,
        load_factors=[1.0],
        iterations=[1],
    )


def run_nonlinear(
    model: ModelData,
    config: Optional[AnalysisConfig] = None,
    monitor_dof: Optional[int] = None,
) -> AnalysisResult:
    """
    Nonlinear SPM analysis by load control and Newton-Raphson.

    The tangent is re-assembled from the trial stringer flexibilities every
    iteration, or factorized once per load step when
    `config.modified_newton` is set.

    Args:
        model: Validated model
        config: Overrides model.config
        monitor_dof: Global DOF index whose displacement is recorded after
            every converged load step

    Raises:
        MaterialNotSetError: If concrete or stringer reinforcement is not set
        MechanismError: If a tangent system is singular
        ConvergenceError: If a load step exceeds max_iterations
    """
    config = config or model.config
    n_steps = config.n_load_steps
    logger.info(
        f"Nonlinear analysis: {len(model.stringers)} stringers, {len(model.panels)} panels, "
        f"{n_steps} load steps"
    )

    stringers, panels = build_behaviours(model, nonlinear=True, config=config)
    behaviours = [*stringers, *panels]
    ndof = model.ndof

    F = model.force_vector()
    u = np.zeros(ndof, dtype=float)

    load_factors: List[float] = []
    iterations: List[int] = []
    monitored: List[Tuple[float, float]] = []
    eliminated: List[int] = []

    for step in range(1, n_steps + 1):
        lam = step / n_steps

        K = assemble_stiffness(ndof, behaviours)
        Kr, Fr, eliminated = reduce_system(model, K, F, config)
        factor = factorize(Kr, cond_limit=config.cond_limit)

        target = lam * Fr
        reference = max(np.linalg.norm(target), 1.0)

        residual = np.inf
        for it in range(1, config.max_iterations + 1):
            for s in stringers:
                s.update_forces(u)
            for p in panels:
                p.set_displacements(u)

            fi = internal_force_vector(ndof, behaviours)
            fi[eliminated] = 0.0

            r = target - fi
            residual = np.linalg.norm(r) / reference

            if it >= config.min_iterations and residual <= config.tolerance:
                break

            if it > 1 and not config.modified_newton:
                Kt, _, _ = reduce_system(model, assemble_stiffness(ndof, behaviours), F, config)
                factor = factorize(Kt, cond_limit=config.cond_limit)

            u += solve_factorized(factor, r)
        else:
            raise ConvergenceError(
                f"Load step {step} (load factor {lam:.3f}) did not converge in "
                f"{config.max_iterations} iterations (relative residual {residual:.3e})."
            )

        for s in stringers:
            s.commit()

        load_factors.append(lam)
        iterations.append(it)
        if monitor_dof is not None:
            monitored.append((lam, float(u[monitor_dof])))

        logger.info(f"Load step {step}: {it} iterations (residual {residual:.2e})")

    stringer_forces = recover_forces(stringers, u, config)
    panel_forces = recover_forces(panels, u, config)
    R = internal_force_vector(ndof, behaviours) - F

    logger.info(f"Nonlinear analysis done: max |u| = {np.max(np.abs(u)):.4g} mm")

    return AnalysisResult(
        model=model,
        displacements=u,
        stringer_forces=stringer_forces,
        panel_forces=panel_forces,
        reactions=R,
        eliminated_dofs=eliminated,
        config=config,
        load_factors=load_factors,
        iterations=iterations,
        monitored=monitored,
    )
