# tests/conftest.py
"""
Shared SPM models for the tests.

Units: N, mm, MPa.
"""

import pytest

from mini_spm.materials import Concrete


@pytest.fixture
def concrete():
    return Concrete(fc=30.0, Ec=25000.0)


@pytest.fixture
def two_stringer_description():
    """
    Two collinear horizontal stringers, 1000 mm each, 100x100 section.

        1 ── 2 ── 3 ── 4 ── 5  → 10 kN
        fixed     y         y

    Node 3 is an external node shared by both stringers.
    """
    return {
        "nodes": [
            {"id": 1, "x": 0.0, "y": 0.0, "support_x": True, "support_y": True},
            {"id": 2, "x": 500.0, "y": 0.0},
            {"id": 3, "x": 1000.0, "y": 0.0, "support_y": True},
            {"id": 4, "x": 1500.0, "y": 0.0},
            {"id": 5, "x": 2000.0, "y": 0.0, "support_y": True},
        ],
        "stringers": [
            {"id": 1, "grips": [1, 2, 3], "width": 100.0, "height": 100.0},
            {"id": 2, "grips": [3, 4, 5], "width": 100.0, "height": 100.0},
        ],
        "forces": [{"node": 5, "fx": 10000.0}],
        "concrete": {"fc": 30.0, "Ec": 25000.0},
    }


@pytest.fixture
def wall_description():
    """
    One 1000x1000 square panel framed by four stringers.

        6 ─── 7 ─── 5
        │           │
        8     P1    4
        │           │
        1 ─── 2 ─── 3
        xy          y

    100 kN horizontal load at node 6.
    """
    steel = {"fy": 500.0, "Es": 210000.0}
    bars = {"number_of_bars": 2, "bar_diameter": 10.0, "steel": steel}
    return {
        "nodes": [
            {"id": 1, "x": 0.0, "y": 0.0, "support_x": True, "support_y": True},
            {"id": 2, "x": 500.0, "y": 0.0},
            {"id": 3, "x": 1000.0, "y": 0.0, "support_y": True},
            {"id": 4, "x": 1000.0, "y": 500.0},
            {"id": 5, "x": 1000.0, "y": 1000.0},
            {"id": 6, "x": 0.0, "y": 1000.0},
            {"id": 7, "x": 500.0, "y": 1000.0},
            {"id": 8, "x": 0.0, "y": 500.0},
        ],
        "stringers": [
            {"id": 1, "grips": [1, 2, 3], "width": 100.0, "height": 200.0, **bars},
            {"id": 2, "grips": [3, 4, 5], "width": 100.0, "height": 200.0, **bars},
            {"id": 3, "grips": [6, 7, 5], "width": 100.0, "height": 200.0, **bars},
            {"id": 4, "grips": [1, 8, 6], "width": 100.0, "height": 200.0, **bars},
        ],
        "panels": [
            {
                "id": 1,
                "grips": [2, 4, 7, 8],
                "vertices": [[0.0, 0.0], [1000.0, 0.0], [0.0, 1000.0], [1000.0, 1000.0]],
                "width": 100.0,
                "bar_diameter": [8.0, 8.0],
                "bar_spacing": [200.0, 200.0],
                "steel_x": steel,
                "steel_y": steel,
            },
        ],
        "forces": [{"node": 6, "fx": 100000.0}],
        "concrete": {"fc": 30.0, "Ec": 25000.0},
    }


@pytest.fixture
def tie_description():
    """Factory for a reinforced horizontal tie (1 stringer, 1000 mm) pulled at node 3."""
    def _make(load: float):
        return {
            "nodes": [
                {"id": 1, "x": 0.0, "y": 0.0, "support_x": True, "support_y": True},
                {"id": 2, "x": 500.0, "y": 0.0},
                {"id": 3, "x": 1000.0, "y": 0.0, "support_y": True},
            ],
            "stringers": [
                {
                    "id": 1, "grips": [1, 2, 3], "width": 100.0, "height": 200.0,
                    "number_of_bars": 4, "bar_diameter": 10.0,
                    "steel": {"fy": 500.0, "Es": 210000.0},
                },
            ],
            "forces": [{"node": 3, "fx": load}],
            "concrete": {"fc": 30.0, "Ec": 25000.0},
        }
    return _make
