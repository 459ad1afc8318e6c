"""
DEEP BEAM: LINEAR SPM ANALYSIS
==============================

A 2000 x 1000 mm deep beam, 200 mm thick, modelled with two square panels
and seven stringers. Simply supported at the bottom corners, 200 kN point
load at the top middle node.

    9 ── 10 ── 11 ── 12 ── 13
    │          │↓ P        │
    6    P1    7    P2     8
    │          │           │
    1 ── 2 ─── 3 ── 4 ──── 5
    △                      ○
"""

import logging

from mini_spm import ModelData, run_linear


def build_description(load: float = 200000.0) -> dict:
    coords = {
        1: (0.0, 0.0), 2: (500.0, 0.0), 3: (1000.0, 0.0), 4: (1500.0, 0.0), 5: (2000.0, 0.0),
        6: (0.0, 500.0), 7: (1000.0, 500.0), 8: (2000.0, 500.0),
        9: (0.0, 1000.0), 10: (500.0, 1000.0), 11: (1000.0, 1000.0), 12: (1500.0, 1000.0), 13: (2000.0, 1000.0),
    }
    supports = {1: (True, True), 5: (False, True)}

    nodes = []
    for node_id, (x, y) in coords.items():
        sx, sy = supports.get(node_id, (False, False))
        nodes.append({"id": node_id, "x": x, "y": y, "support_x": sx, "support_y": sy})

    steel = {"fy": 500.0, "Es": 210000.0}
    section = {"width": 200.0, "height": 200.0, "number_of_bars": 4, "bar_diameter": 16.0, "steel": steel}
    stringer_grips = [(1, 2, 3), (3, 4, 5), (9, 10, 11), (11, 12, 13), (1, 6, 9), (3, 7, 11), (5, 8, 13)]
    stringers = [{"id": i, "grips": g, **section} for i, g in enumerate(stringer_grips, start=1)]

    web = {"width": 200.0, "bar_diameter": (10.0, 10.0), "bar_spacing": (150.0, 150.0),
           "steel_x": steel, "steel_y": steel}
    panels = [
        {"id": 1, "grips": (2, 7, 10, 6),
         "vertices": [(0.0, 0.0), (1000.0, 0.0), (0.0, 1000.0), (1000.0, 1000.0)], **web},
        {"id": 2, "grips": (4, 8, 12, 7),
         "vertices": [(1000.0, 0.0), (2000.0, 0.0), (1000.0, 1000.0), (2000.0, 1000.0)], **web},
    ]

    return {
        "nodes": nodes,
        "stringers": stringers,
        "panels": panels,
        "forces": [{"node": 11, "fy": -load}],
        "concrete": {"fc": 30.0, "Ec": 25000.0},
    }


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    model = ModelData.from_description(build_description())
    result = run_linear(model)

    print("Deep Beam - Linear SPM Analysis")
    print("=" * 50)
    print(f"Nodes: {model.n_nodes}, stringers: {len(model.stringers)}, panels: {len(model.panels)}")
    print(f"Continued stringers: {model.continued_stringers()}")
    print()
    print("Nodal displacements (mm):")
    print(result.displacement_table().round(4))
    print()
    print("Stringer forces (kN):")
    print(result.stringer_force_table().round(2))
    print()
    print("Panel forces (kN) and stresses (MPa):")
    print(result.panel_force_table().round(3))
    print()
    print("Support reactions (kN):")
    print(result.reaction_table().round(2))
    print()
    print(f"Max stringer force: {result.max_stringer_force:.2f} kN")
    print(f"Max panel force:    {result.max_panel_force:.2f} kN")


if __name__ == "__main__":
    main()
