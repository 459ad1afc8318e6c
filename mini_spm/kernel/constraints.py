# mini_spm/kernel/constraints.py
"""
Boundary-condition reduction by row/column elimination.

The system keeps its full size: a DOF with u = 0 is encoded by clearing its
row and column, putting 1 on the diagonal and clearing its load entry.
"""

import numpy as np
from typing import Iterable, List, Optional


def coerce_zero(a: np.ndarray, threshold: float) -> None:
    """Set entries with |a| < threshold to exactly 0.0 (in-place)."""
    a[np.abs(a) < threshold] = 0.0


def apply_boundary_conditions(
    K: np.ndarray,
    F: Optional[np.ndarray],
    constrained_dofs: Iterable[int],
    internal_dofs: Iterable[int] = (),
    zero_tol: float = 1e-9,
) -> List[int]:
    """
    Eliminate supported and uncoupled DOFs from (K, F) in-place.

    1. Every constrained DOF i: K[i, :] = K[:, i] = 0, K[i, i] = 1, F[i] = 0.
    2. Entries with |K[i, j]| < zero_tol are set to exactly zero.
    3. Every internal-node DOF whose row of K is now zero (no element
       couples it, e.g. the normal direction of an edge-midpoint node
       without a stringer along it): K[i, i] = 1, F[i] = 0.

    Coercion runs before the zero-row test, so a row holding only round-off
    is eliminated in the first pass and a second pass changes nothing.

    Args:
        K: Assembled global stiffness matrix (ndof x ndof), modified in-place
        F: Global load vector (ndof,), modified in-place; may be None
        constrained_dofs: Supported DOF indices (u = 0)
        internal_dofs: DOF indices of internal nodes
        zero_tol: Threshold below which entries are coerced to zero

    Returns:
        Sorted list of DOF indices eliminated by this call (supports and
        uncoupled DOFs)
    """
    eliminated = set()

    for i in constrained_dofs:
        K[i, :] = 0.0
        K[:, i] = 0.0
        K[i, i] = 1.0
        if F is not None:
            F[i] = 0.0
        eliminated.add(i)

    coerce_zero(K, zero_tol)

    for i in internal_dofs:
        if i in eliminated:
            continue
        if not np.any(K[i, :] != 0.0):
            K[i, i] = 1.0
            if F is not None:
                F[i] = 0.0
            eliminated.add(i)

    return sorted(eliminated)
