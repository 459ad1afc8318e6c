# tests/test_kernel.py
"""
Kernel tests: DOF indexing, scatter-add assembly, boundary-condition
reduction and the LU solve.
"""

import numpy as np
import pytest

from mini_spm.kernel.assemble import (
    add_element_stiffness, add_nodal_load, assemble_global_F, assemble_global_K, extract_block,
)
from mini_spm.kernel.constraints import apply_boundary_conditions, coerce_zero
from mini_spm.kernel.dof import DOFManager, DOF_SPM
from mini_spm.kernel.solve import MechanismError, factorize, solve_factorized, solve_linear


class TestDOFManager:

    def test_one_based_indexing(self):
        dof = DOFManager()
        assert dof.idx(1, 0) == 0
        assert dof.idx(1, 1) == 1
        assert dof.idx(3, 1) == 5
        assert dof.ndof(4) == 8

    def test_element_map_follows_grip_order(self):
        assert DOF_SPM.element_dof_map([3, 1, 2]) == [4, 5, 0, 1, 2, 3]

    def test_node_of_inverts_idx(self):
        for node_id in range(1, 6):
            for local in (0, 1):
                assert DOF_SPM.node_of(DOF_SPM.idx(node_id, local)) == node_id


class TestAssembly:

    def test_round_trip_single_element(self):
        """Scatter one element into an empty K and gather it back."""
        rng = np.random.default_rng(0)
        a = rng.normal(size=(6, 6))
        ke = a + a.T
        dof_map = DOF_SPM.element_dof_map([2, 4, 5])

        K = assemble_global_K(DOF_SPM.ndof(5), [(dof_map, ke)])

        np.testing.assert_allclose(extract_block(K, dof_map), ke, rtol=0, atol=1e-14)

    def test_overlapping_elements_add(self):
        ke = np.eye(4)
        K = assemble_global_K(6, [([0, 1, 2, 3], ke), ([2, 3, 4, 5], ke)])
        assert K[2, 2] == 2.0
        assert K[0, 0] == 1.0
        assert K[5, 5] == 1.0

    def test_exactly_zero_row_pair_is_skipped(self):
        """
        A grip whose two rows are exactly zero must not receive anything,
        even if other rows couple into its columns.
        """
        ke = np.array([
            [1.0, 0.0, 0.5, 0.5],
            [0.0, 1.0, 0.5, 0.5],
            [0.0, 0.0, 0.0, 0.0],
            [0.0, 0.0, 0.0, 0.0],
        ])
        K = np.zeros((4, 4))
        add_element_stiffness(K, [0, 1, 2, 3], ke)

        assert np.all(K[2:, :] == 0.0)
        assert K[0, 2] == 0.5

    def test_tiny_but_nonzero_row_pair_is_written(self):
        ke = np.zeros((4, 4))
        ke[2, 2] = 1e-300
        K = np.zeros((4, 4))
        add_element_stiffness(K, [0, 1, 2, 3], ke)
        assert K[2, 2] == 1e-300

    def test_force_vector_assembly(self):
        F = assemble_global_F(6, [([0, 1, 2, 3], np.ones(4)), ([2, 3, 4, 5], np.ones(4))])
        np.testing.assert_array_equal(F, [1, 1, 2, 2, 1, 1])

        add_nodal_load(F, DOF_SPM.idx(3, 0), 10.0)
        assert F[4] == 11.0


def _bar_system():
    """Horizontal 2-node bar along x: y rows exactly zero."""
    k = 100.0
    K = np.array([
        [ k, 0.0, -k, 0.0],
        [0.0, 0.0, 0.0, 0.0],
        [-k, 0.0,  k, 0.0],
        [0.0, 0.0, 0.0, 0.0],
    ])
    F = np.array([0.0, 0.0, 5.0, 0.0])
    return K, F


class TestBoundaryConditions:

    def test_supported_dof_is_eliminated(self):
        K, F = _bar_system()
        F[0] = 3.0
        eliminated = apply_boundary_conditions(K, F, constrained_dofs=[0, 1])

        assert eliminated == [0, 1]
        assert K[0, 0] == 1.0 and K[1, 1] == 1.0
        assert np.all(K[0, 1:] == 0.0) and np.all(K[1:, 0] == 0.0)
        assert F[0] == 0.0

    def test_uncoupled_internal_dof_gets_unit_diagonal(self):
        K, F = _bar_system()
        eliminated = apply_boundary_conditions(K, F, constrained_dofs=[0, 1], internal_dofs=[2, 3])

        assert 3 in eliminated
        assert 2 not in eliminated
        assert K[3, 3] == 1.0
        assert F[3] == 0.0

    def test_uncoupled_external_dof_is_left_alone(self):
        K, F = _bar_system()
        eliminated = apply_boundary_conditions(K, F, constrained_dofs=[0, 1])
        assert 3 not in eliminated
        assert K[3, 3] == 0.0

    def test_small_entries_coerced(self):
        K, F = _bar_system()
        K[2, 3] = K[3, 2] = 1e-12
        apply_boundary_conditions(K, F, constrained_dofs=[0, 1], internal_dofs=[3])
        assert K[2, 3] == 0.0
        assert K[3, 3] == 1.0

    def test_idempotent(self):
        K, F = _bar_system()
        K[2, 3] = K[3, 2] = 1e-12
        apply_boundary_conditions(K, F, [0, 1], [2, 3])
        K_once, F_once = K.copy(), F.copy()

        apply_boundary_conditions(K, F, [0, 1], [2, 3])

        np.testing.assert_array_equal(K, K_once)
        np.testing.assert_array_equal(F, F_once)

    def test_coerce_zero(self):
        a = np.array([1e-7, -1e-7, 1e-5, 0.0])
        coerce_zero(a, 1e-6)
        np.testing.assert_array_equal(a, [0.0, 0.0, 1e-5, 0.0])


class TestSolve:

    def test_reduced_bar(self):
        K, F = _bar_system()
        apply_boundary_conditions(K, F, [0, 1], [2, 3])
        d = solve_linear(K, F)
        assert np.isclose(d[2], 5.0 / 100.0)
        assert d[0] == 0.0

    def test_unsupported_dof_raises_mechanism(self):
        K, F = _bar_system()
        apply_boundary_conditions(K, F, [0])   # y DOFs left singular
        with pytest.raises(MechanismError):
            solve_linear(K, F)

    def test_factorization_reuse(self):
        K = np.array([[4.0, 1.0], [1.0, 3.0]])
        factor = factorize(K)
        for F in (np.array([1.0, 2.0]), np.array([0.0, -1.0])):
            np.testing.assert_allclose(solve_factorized(factor, F), np.linalg.solve(K, F))
