# mini_spm/kernel/assemble.py
"""
ASSEMBLY: Global Matrix Assembly with Exact-Zero Row Skipping
=============================================================

PURPOSE:
--------
Scatter-add of element contributions into the global stiffness matrix and
load vector. Assembly does not care about the element TYPE; it needs:
- the total number of DOFs
- for each element: its DOF map and its stiffness matrix in global axes

SPARSITY CONTRACT:
------------------
Element DOFs come in blocks of `block_size` rows (one block per grip:
ux, uy). Before a block of rows is written, it is tested for being
EXACTLY zero. If every entry of those rows is 0.0 the block is skipped.

Panels only couple the displacement component along each edge, so the
component normal to an axis-aligned edge has an exactly-zero row in the
panel matrix. Skipping it keeps that global row free of round-off noise,
which the boundary-condition reducer relies on to detect uncoupled DOFs.
The test is `!= 0.0`, never a tolerance.

USAGE:
------
    contributions = []
    for element in elements:
        dof_map = dof.element_dof_map(element.grips)
        ke = element.global_stiffness()
        contributions.append((dof_map, ke))

    K = assemble_global_K(ndof, contributions)
"""

import numpy as np
from typing import List, Sequence, Tuple


def add_element_stiffness(
    K: np.ndarray,
    dof_map: Sequence[int],
    ke: np.ndarray,
    block_size: int = 2,
) -> None:
    """
    Scatter-add one element matrix into K (in-place).

    Parameters:
    -----------
    K : np.ndarray
        Global stiffness matrix (modified in-place)
    dof_map : Sequence[int]
        Global DOF indices of the element, grouped by grip
    ke : np.ndarray
        Element stiffness in global coordinates, shape (len(dof_map), len(dof_map))
    block_size : int
        Rows per grip (2 for ux, uy)
    """
    n_element_dofs = len(dof_map)

    assert ke.shape == (n_element_dofs, n_element_dofs), \
        f"Element ke shape {ke.shape} doesn't match dof_map length {n_element_dofs}"
    assert n_element_dofs % block_size == 0, \
        f"dof_map length {n_element_dofs} is not a multiple of block size {block_size}"

    cols = np.asarray(dof_map, dtype=int)

    for start in range(0, n_element_dofs, block_size):
        local_rows = slice(start, start + block_size)
        block = ke[local_rows, :]

        # Exact-zero test: rows not coupled by this element are left untouched
        if not np.any(block != 0.0):
            continue

        rows = cols[local_rows]
        K[np.ix_(rows, cols)] += block


def assemble_global_K(
    ndof: int,
    contributions: List[Tuple[Sequence[int], np.ndarray]],
    block_size: int = 2,
) -> np.ndarray:
    """
    Assemble the global stiffness matrix from element contributions.

    ALGORITHM:
    ----------
    K = zeros(ndof × ndof)
    for each element:
        for each grip row-pair of ke:
            if the row-pair is exactly zero: skip
            K[rows, dof_map] += ke[row-pair, :]

    Parameters:
    -----------
    ndof : int
        Total number of DOFs (2 × n_nodes)
    contributions : List[Tuple[Sequence[int], np.ndarray]]
        One (dof_map, ke) tuple per element
    block_size : int
        Rows per grip

    Returns:
    --------
    np.ndarray
        Global stiffness matrix, shape (ndof, ndof). Symmetric positive
        semi-definite; it only becomes non-singular after reduction.

    Example:
    --------
    >>> dof = DOFManager()
    >>> contributions = [(dof.element_dof_map(s.grips), ke_s) for s, ke_s in ...]
    >>> K = assemble_global_K(dof.ndof(n_nodes), contributions)
    """
    K = np.zeros((ndof, ndof), dtype=float)

    for dof_map, ke in contributions:
        add_element_stiffness(K, dof_map, ke, block_size)

    return K


def extract_block(K: np.ndarray, dof_map: Sequence[int]) -> np.ndarray:
    """
    Gather the sub-matrix of K addressed by an element DOF map.

    Inverse of the scatter for a single element assembled into an empty
    matrix, which makes it the check that an element landed on the right rows.
    """
    idx = np.asarray(dof_map, dtype=int)
    return K[np.ix_(idx, idx)].copy()


def assemble_global_F(
    ndof: int,
    contributions: List[Tuple[Sequence[int], np.ndarray]],
) -> np.ndarray:
    """
    Assemble a global vector from element vectors (e.g. internal forces).

    Same scatter-add logic as assemble_global_K, for vectors.

    Parameters:
    -----------
    ndof : int
        Total number of DOFs
    contributions : List[Tuple[Sequence[int], np.ndarray]]
        One (dof_map, fe) tuple per element, fe in global coordinates

    Returns:
    --------
    np.ndarray
        Global vector, shape (ndof,)
    """
    F = np.zeros(ndof, dtype=float)

    for dof_map, fe in contributions:
        n_element_dofs = len(dof_map)

        assert fe.shape == (n_element_dofs,), \
            f"Element fe shape {fe.shape} doesn't match dof_map length {n_element_dofs}"

        np.add.at(F, np.asarray(dof_map, dtype=int), fe)

    return F


def add_nodal_load(
    F: np.ndarray,
    dof_index: int,
    value: float,
) -> None:
    """
    Add a nodal load component to the global load vector (in-place).

    Example:
    --------
    >>> F = np.zeros(8)
    >>> add_nodal_load(F, DOF_SPM.idx(2, 0), 10000.0)   # Fx at node 2
    """
    F[dof_index] += value
