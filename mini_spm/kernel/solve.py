# mini_spm/kernel/solve.py
"""Direct solution of the reduced system with mechanism detection."""

import numpy as np
import scipy.linalg
from typing import Tuple


class MechanismError(RuntimeError):
    """Raised when the reduced system is singular or ill-conditioned."""
    pass


class ConvergenceError(RuntimeError):
    """Raised when the nonlinear solution does not converge."""
    pass


LUFactor = Tuple[np.ndarray, np.ndarray]


def factorize(K: np.ndarray, cond_limit: float = 1e14) -> LUFactor:
    """
    LU-factorize a reduced stiffness matrix.

    Args:
        K: Reduced global stiffness matrix (ndof x ndof), all supports and
           uncoupled DOFs already eliminated
        cond_limit: Max condition number before raising MechanismError

    Returns:
        (lu, piv) as returned by scipy.linalg.lu_factor

    Raises:
        MechanismError: If K has a rigid-body mode left (cond > cond_limit)
            or a zero pivot
    """
    cond = np.linalg.cond(K)
    if not np.isfinite(cond) or cond > cond_limit:
        raise MechanismError(
            f"Unstable system (cond={cond:.2e}). Check supports. Need cond < {cond_limit:.0e}."
        )

    lu, piv = scipy.linalg.lu_factor(K, check_finite=True)

    pivots = np.abs(np.diag(lu))
    if np.any(pivots == 0.0):
        zero_row = int(np.argmin(pivots))
        raise MechanismError(f"Singular system: zero pivot at equation {zero_row}.")

    return lu, piv


def solve_factorized(factor: LUFactor, F: np.ndarray) -> np.ndarray:
    """
    Solve K·d = F with a factorization from `factorize`.

    Raises:
        MechanismError: If the solution is not finite
    """
    d = scipy.linalg.lu_solve(factor, F)

    if not np.all(np.isfinite(d)):
        raise MechanismError("Solution contains non-finite displacements.")

    return d


def solve_linear(
    K: np.ndarray,
    F: np.ndarray,
    cond_limit: float = 1e14
) -> np.ndarray:
    """
    Solve K·d = F on the reduced (non-singular) system.

    Args:
        K: Reduced global stiffness matrix (ndof x ndof)
        F: Reduced global load vector (ndof,)
        cond_limit: Max condition number before raising MechanismError

    Returns:
        d: Displacement vector (ndof,)

    Raises:
        MechanismError: If the structure is unstable
    """
    return solve_factorized(factorize(K, cond_limit), F)
