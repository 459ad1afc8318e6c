# tests/test_analysis.py
"""
End-to-end linear analyses.

TWO COLLINEAR STRINGERS:
    E = 25000 MPa, A = 10000 mm², 2 x 1000 mm, P = 10 kN at the free end
    u_free = P·L_total/(E·A) = 10000·2000/(25000·10000) = 0.08 mm
    both stringers carry 10 kN

SQUARE WALL:
    one panel framed by four stringers, statically determinate: the panel
    carries a uniform shear of V/(a·t) = 100000/(1000·100) = 1 MPa
"""

import numpy as np
import pytest

from mini_spm.analysis import run_linear
from mini_spm.config import CONFIG
from mini_spm.kernel.dof import DOF_SPM
from mini_spm.kernel.solve import MechanismError
from mini_spm.materials import MaterialNotSetError
from mini_spm.model import ModelData


class TestTwoStringers:

    def test_free_end_displacement(self, two_stringer_description):
        model = ModelData.from_description(two_stringer_description)
        result = run_linear(model)

        u = result.displacements
        assert np.isclose(u[DOF_SPM.idx(5, 0)], 0.08, rtol=1e-9)
        assert np.isclose(u[DOF_SPM.idx(3, 0)], 0.04, rtol=1e-9)
        assert np.isclose(u[DOF_SPM.idx(2, 0)], 0.02, rtol=1e-9)
        assert u[DOF_SPM.idx(1, 0)] == 0.0

    def test_stringer_forces(self, two_stringer_description):
        model = ModelData.from_description(two_stringer_description)
        result = run_linear(model)

        for sid in (1, 2):
            np.testing.assert_allclose(result.stringer_forces[sid], [-10.0, 0.0, 10.0], atol=1e-6)
        # mid-node force is coerced to exact zero
        assert result.stringer_forces[1][1] == 0.0
        assert np.isclose(result.max_stringer_force, 10.0)

    def test_reactions(self, two_stringer_description):
        model = ModelData.from_description(two_stringer_description)
        result = run_linear(model)

        reactions = result.support_reactions
        assert np.isclose(reactions[1][0], -10.0)
        assert np.isclose(reactions[1][1], 0.0, atol=1e-9)
        assert set(reactions) == {1, 3, 5}

    def test_uncoupled_mid_nodes_eliminated(self, two_stringer_description):
        model = ModelData.from_description(two_stringer_description)
        result = run_linear(model)
        # y of mid nodes 2 and 4, plus the supports
        assert result.eliminated_dofs == [0, 1, 3, 5, 7, 9]

    def test_unsupported_external_node_is_a_mechanism(self, two_stringer_description):
        two_stringer_description["nodes"][2]["support_y"] = False
        model = ModelData.from_description(two_stringer_description)
        with pytest.raises(MechanismError):
            run_linear(model)

    def test_concrete_not_set(self, two_stringer_description):
        two_stringer_description["concrete"] = {"fc": 0.0, "Ec": 0.0}
        model = ModelData.from_description(two_stringer_description)
        with pytest.raises(MaterialNotSetError):
            run_linear(model)

    def test_force_unit_factor(self, two_stringer_description):
        model = ModelData.from_description(two_stringer_description)
        result = run_linear(model, CONFIG.with_overrides(force_unit_factor=1.0))
        np.testing.assert_allclose(result.stringer_forces[2], [-10000.0, 0.0, 10000.0], atol=1e-6)


class TestSquareWall:

    @pytest.fixture
    def result(self, wall_description):
        return run_linear(ModelData.from_description(wall_description))

    def test_panel_shear(self, result):
        np.testing.assert_allclose(np.abs(result.panel_forces[1]), 100.0, rtol=1e-6)
        assert np.isclose(result.max_panel_force, 100.0)

    def test_global_equilibrium(self, result):
        R = result.reactions
        assert np.isclose(R[0::2].sum(), -100000.0)
        assert np.isclose(R[1::2].sum(), 0.0, atol=1e-6)

    def test_overturning_reactions(self, result):
        reactions = result.support_reactions
        assert np.isclose(reactions[1][0], -100.0)
        assert np.isclose(reactions[1][1], -100.0)
        assert np.isclose(reactions[3][1], 100.0)

    def test_stringer_forces_bounded_by_load(self, result):
        assert np.isclose(result.max_stringer_force, 100.0)

    def test_tables(self, result):
        disp = result.displacement_table()
        assert list(disp.columns) == ['ux', 'uy', 'magnitude']
        assert len(disp) == 8

        stringers = result.stringer_force_table()
        assert list(stringers.index) == [1, 2, 3, 4]

        panels = result.panel_force_table()
        assert np.isclose(abs(panels.loc[1, 'tau']), 1.0, rtol=1e-6)
        assert np.isclose(panels.loc[1, 'sigma2'], -2.0, rtol=1e-6)

        reactions = result.reaction_table()
        assert list(reactions.index) == [1, 3]

    def test_one_way_reinforced_panel_table(self, wall_description, caplog):
        panel = wall_description["panels"][0]
        panel["steel_y"] = {"fy": 0.0}
        panel["bar_diameter"] = [8.0, 0.0]
        result = run_linear(ModelData.from_description(wall_description))

        with caplog.at_level("WARNING", logger="mini_spm.post"):
            panels = result.panel_force_table()
        assert np.isnan(panels.loc[1, 'sigma2'])
        assert np.isclose(abs(panels.loc[1, 'tau']), 1.0, rtol=1e-6)
        assert "NaN" in caplog.text
