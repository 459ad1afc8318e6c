# tests/test_elements.py
"""
Element formulation tests: stringer and panel stiffness, transforms and
the exact-zero direction cosines.
"""

import math

import numpy as np
import pytest

from mini_spm.elements import (
    LinearPanel,
    LinearStringer,
    general_panel_stiffness,
    panel_global_stiffness,
    panel_local_stiffness,
    rectangular_panel_stiffness,
    stringer_global_stiffness,
    stringer_local_stiffness,
)
from mini_spm.geometry import HALF_PI, THREE_HALF_PI, direction_cosines, is_convex, segment_angle
from mini_spm.model import ModelInconsistencyError, Panel, Stringer


def make_panel(vertices, width=100.0):
    """Panel with dummy grips; vertices in grip-point order."""
    return Panel(id=1, grips=(1, 2, 3, 4), vertices=tuple(vertices), width=width)


RECTANGLE = [(0.0, 0.0), (1000.0, 0.0), (0.0, 500.0), (1000.0, 500.0)]
TRAPEZOID = [(0.0, 0.0), (1000.0, 0.0), (200.0, 800.0), (900.0, 800.0)]
# the rectangle of x in [-500, 0], walked anticlockwise from (0, 0)
OTHER_START = [(0.0, 0.0), (0.0, 1000.0), (-500.0, 0.0), (-500.0, 1000.0)]


class TestDirectionCosines:

    @pytest.mark.parametrize("q, expected", [
        ((5.0, 0.0), (1.0, 0.0)),
        ((0.0, 5.0), (0.0, 1.0)),
        ((-5.0, 0.0), (-1.0, 0.0)),
        ((0.0, -5.0), (0.0, -1.0)),
    ])
    def test_axis_aligned_are_exact(self, q, expected):
        l, m = direction_cosines(segment_angle((0.0, 0.0), q))
        assert (l, m) == expected

    def test_plain_trig_is_not_exact(self):
        # the reason for the special cases
        assert math.cos(HALF_PI) != 0.0
        assert direction_cosines(HALF_PI)[0] == 0.0
        assert direction_cosines(THREE_HALF_PI)[0] == 0.0

    def test_angle_range(self):
        assert np.isclose(segment_angle((0.0, 0.0), (-1.0, -1.0)), 1.25 * math.pi)
        assert np.isclose(segment_angle((0.0, 0.0), (1.0, -1.0)), 1.75 * math.pi)


class TestStringer:

    def test_local_stiffness_pattern(self):
        k = stringer_local_stiffness(E=25000.0, A=10000.0, L=1000.0)
        np.testing.assert_allclose(k, 250000.0 * np.array([[4, -6, 2], [-6, 12, -6], [2, -6, 4]]))

    def test_axial_displacement(self, concrete):
        """
        Fixed start, load P at end: u_end = P·L/(E·A), u_mid = u_end/2.

        The local system is reduced by hand: drop the start DOF and solve the
        2x2 for (mid, end).
        """
        P, L, A = 10000.0, 1000.0, 10000.0
        k = stringer_local_stiffness(concrete.Ec, A, L)
        u = np.linalg.solve(k[1:, 1:], np.array([0.0, P]))

        expected = P * L / (concrete.Ec * A)
        assert np.isclose(u[1], expected)
        assert np.isclose(u[0], expected / 2)

    def test_vertical_stringer_has_exact_zero_x_rows(self, concrete):
        s = Stringer(id=1, grips=(1, 2, 3), start=(0.0, 0.0), end=(0.0, 1000.0), width=100.0, height=100.0)
        K = stringer_global_stiffness(s, concrete)
        assert np.all(K[0::2, :] == 0.0)
        assert np.all(K[1::2, 1::2] != 0.0)

    def test_inclined_stringer_ignores_transverse_motion(self, concrete):
        s = Stringer(id=1, grips=(1, 2, 3), start=(0.0, 0.0), end=(600.0, 800.0), width=100.0, height=100.0)
        K = stringer_global_stiffness(s, concrete)
        l, m = s.direction_cosines
        transverse = np.tile([-m, l], 3)
        np.testing.assert_allclose(K @ transverse, 0.0, atol=1e-6)
        np.testing.assert_allclose(K, K.T)

    def test_behaviour_forces(self, concrete):
        s = Stringer(id=7, grips=(1, 2, 3), start=(0.0, 0.0), end=(1000.0, 0.0), width=100.0, height=100.0)
        b = LinearStringer(s, concrete)
        u = np.array([0.0, 0.0, 0.02, 0.0, 0.04, 0.0])
        b.set_displacements(u)
        np.testing.assert_allclose(b.forces(), [-10000.0, 0.0, 10000.0], atol=1e-8)
        np.testing.assert_allclose(b.global_stiffness(), stringer_global_stiffness(s, concrete))


class TestPanel:

    def test_cyclic_vertex_order(self):
        p = make_panel(RECTANGLE)
        assert p.cyclic_vertices == ((0.0, 0.0), (1000.0, 0.0), (1000.0, 500.0), (0.0, 500.0))
        assert p.lengths == [1000.0, 500.0, 1000.0, 500.0]

    def test_rectangle_is_detected(self):
        assert make_panel(RECTANGLE).is_rectangular()
        assert not make_panel(TRAPEZOID).is_rectangular(1e-9)

    def test_rectangular_stiffness(self, concrete):
        p = make_panel(RECTANGLE)
        Gc, w = concrete.Gc, p.width
        k = panel_local_stiffness(p, concrete)
        expected = Gc * w * np.array([
            [2.0, -1.0, 2.0, -1.0],
            [-1.0, 0.5, -1.0, 0.5],
            [2.0, -1.0, 2.0, -1.0],
            [-1.0, 0.5, -1.0, 0.5],
        ])
        np.testing.assert_allclose(k, expected)

    @pytest.mark.parametrize("vertices", [
        RECTANGLE,
        [(0.0, 0.0), (700.0, 0.0), (0.0, 700.0), (700.0, 700.0)],
        [(100.0, 200.0), (400.0, 200.0), (100.0, 1400.0), (400.0, 1400.0)],
    ])
    def test_general_formula_matches_rectangle(self, concrete, vertices):
        p = make_panel(vertices)
        a, b = p.lengths[0], p.lengths[1]
        k_rect = rectangular_panel_stiffness(concrete.Gc, p.width, a, b)
        k_gen = general_panel_stiffness(p, concrete.Gc)
        np.testing.assert_allclose(k_gen, k_rect, rtol=1e-9)

    @pytest.mark.parametrize("vertices", [RECTANGLE, TRAPEZOID])
    def test_global_stiffness_symmetric_rank_one(self, concrete, vertices):
        K = panel_global_stiffness(make_panel(vertices), concrete, 1e-9)
        np.testing.assert_allclose(K, K.T, rtol=1e-10, atol=1e-6)
        assert np.linalg.matrix_rank(K, tol=1e-6 * np.abs(K).max()) == 1

    def test_rigid_translation_gives_no_forces(self, concrete):
        K = panel_global_stiffness(make_panel(TRAPEZOID), concrete)
        for translation in (np.tile([1.0, 0.0], 4), np.tile([0.0, 1.0], 4)):
            np.testing.assert_allclose(K @ translation, 0.0, atol=1e-6 * np.abs(K).max())

    def test_rectangle_has_exact_zero_normal_rows(self, concrete):
        """Edge-midpoint grips couple only the direction along their edge."""
        K = panel_global_stiffness(make_panel(RECTANGLE), concrete)
        # y rows of grips 0, 2 (horizontal edges), x rows of grips 1, 3
        for row in (1, 5, 2, 6):
            assert np.all(K[row, :] == 0.0)

    def test_near_rectangle_with_tolerance_warns(self, concrete, caplog):
        skewed = [(0.0, 0.0), (1000.0, 0.0), (1e-10, 500.0), (1000.0, 500.0)]
        p = make_panel(skewed)
        assert not p.is_rectangular(0.0)

        with caplog.at_level("WARNING", logger="mini_spm.elements"):
            LinearPanel(p, concrete, rectangular_tolerance=1e-9).local_stiffness()
        assert "within tolerance" in caplog.text

    def test_vertex_order_convention(self):
        assert make_panel(RECTANGLE).is_grip_point_ordered
        assert make_panel(TRAPEZOID).is_grip_point_ordered
        assert not make_panel(OTHER_START).is_grip_point_ordered

    def test_other_start_corner_is_rejected(self, concrete):
        p = make_panel(OTHER_START)
        assert is_convex(p.cyclic_vertices)
        assert not p.is_rectangular(1e-9)
        with pytest.raises(ModelInconsistencyError, match="not positive"):
            panel_local_stiffness(p, concrete, 1e-9)
