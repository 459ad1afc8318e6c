# mini_spm/assembly.py
"""Model-level assembly: element behaviours → global K, internal forces, reduced system."""

import logging
from typing import List, Sequence, Tuple, Union

import numpy as np

from .config import AnalysisConfig, CONFIG
from .elements import LinearPanel, LinearStringer
from .kernel.assemble import assemble_global_F, assemble_global_K
from .kernel.constraints import apply_boundary_conditions
from .model import ModelData
from .nonlinear import NonlinearStringer

logger = logging.getLogger(__name__)

StringerBehaviour = Union[LinearStringer, NonlinearStringer]
Behaviour = Union[LinearStringer, NonlinearStringer, LinearPanel]


def build_behaviours(
    model: ModelData,
    nonlinear: bool = False,
    config: AnalysisConfig = CONFIG,
) -> Tuple[List[StringerBehaviour], List[LinearPanel]]:
    """
    Create one behaviour object per element for an analysis mode.

    Linear mode uses LinearStringer; nonlinear mode swaps in
    NonlinearStringer. Panels are linear in both modes.

    Raises:
        MaterialNotSetError: If concrete (or, for nonlinear stringers,
            reinforcement) parameters are missing
    """
    model.concrete.check()

    if nonlinear:
        stringers = [
            NonlinearStringer(s, model.concrete, config.strain_substeps) for s in model.stringers
        ]
    else:
        stringers = [LinearStringer(s, model.concrete) for s in model.stringers]

    panels = [
        LinearPanel(p, model.concrete, config.rectangular_tolerance) for p in model.panels
    ]
    return stringers, panels


def assemble_stiffness(ndof: int, behaviours: Sequence[Behaviour]) -> np.ndarray:
    """Global stiffness (unreduced) from the current element tangents."""
    contributions = [(b.dof_map, b.global_stiffness()) for b in behaviours]
    return assemble_global_K(ndof, contributions)


def internal_force_vector(ndof: int, behaviours: Sequence[Behaviour]) -> np.ndarray:
    """Global vector of element resisting forces (N)."""
    contributions = [(b.dof_map, b.global_forces()) for b in behaviours]
    return assemble_global_F(ndof, contributions)


def reduce_system(
    model: ModelData,
    K: np.ndarray,
    F: np.ndarray,
    config: AnalysisConfig = CONFIG,
) -> Tuple[np.ndarray, np.ndarray, List[int]]:
    """
    Copy (K, F) and eliminate supports and uncoupled internal DOFs.

    Returns:
        (K_reduced, F_reduced, eliminated_dofs)
    """
    Kr = K.copy()
    Fr = F.copy()
    eliminated = apply_boundary_conditions(
        Kr, Fr,
        model.constrained_dofs,
        model.internal_dofs,
        zero_tol=config.stiffness_zero_tol,
    )
    logger.debug(f"Eliminated {len(eliminated)} of {model.ndof} DOFs")
    return Kr, Fr, eliminated
