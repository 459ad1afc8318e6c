# mini_spm/model.py
"""
SPM MODEL: Nodes, Stringers, Panels and the Model Repository
============================================================

ENGINEERING CONTEXT:
--------------------
A Stringer-Panel model of a deep beam or shear wall is made of:
- STRINGERS: 3-node bars (start, mid, end) carrying axial force only,
  representing concentrated reinforcement and the concrete around it
- PANELS: 4-node plates carrying constant shear only, connected to the
  midpoints of their edges
- NODES: 2 DOFs each (ux, uy). Stringer ends are EXTERNAL nodes; stringer
  midpoints and panel edge midpoints are INTERNAL nodes

The geometry here is frozen. Analysis state (displacements, forces,
flexibility) lives in the element behaviours of `elements.py` and
`nonlinear.py`.

PANEL VERTEX ORDER:
-------------------
Panel vertices arrive in grip-point order of the drawing entity, which
zig-zags:

    v2 ─────── v3
    │          │
    v0 ─────── v1

The element formulas walk the outline as (v0, v1, v3, v2). That reordering
is what `Panel.cyclic_vertices` returns and every edge quantity is built on
it, so edge i runs from cyclic vertex i to cyclic vertex i+1 and grip i is
its midpoint.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from .config import AnalysisConfig, CONFIG
from .geometry import (
    Point, direction_cosines, is_convex, midpoint, segment_angle, segment_length, signed_area,
    HALF_PI,
)
from .kernel.dof import DOF_SPM
from .materials import Concrete, PanelReinforcement, Steel, StringerReinforcement
from .schema import ModelDescription

logger = logging.getLogger(__name__)


class ModelInconsistencyError(ValueError):
    """Raised when the model description violates a structural invariant."""
    pass


class NodeType(Enum):
    EXTERNAL = "external"
    INTERNAL = "internal"


@dataclass(frozen=True)
class Node:
    """
    A node of the SPM mesh.

    Parameters:
    -----------
    id : int
        1-based node number (dense)
    x, y : float
        Coordinates (mm)
    support : Tuple[bool, bool]
        Restrained directions (x, y)
    node_type : NodeType
        EXTERNAL (stringer end) or INTERNAL (element midpoint)
    """
    id: int
    x: float
    y: float
    support: Tuple[bool, bool] = (False, False)
    node_type: NodeType = NodeType.EXTERNAL

    @property
    def position(self) -> Point:
        return self.x, self.y

    @property
    def dofs(self) -> List[int]:
        return DOF_SPM.node_dofs(self.id)

    @property
    def constrained_dofs(self) -> List[int]:
        return [dof for dof, fixed in zip(self.dofs, self.support) if fixed]


@dataclass(frozen=True)
class Stringer:
    """
    A stringer: 3 grips (start, mid, end) along a straight line.

    `start` and `end` are the coordinates of the end grips. Width and height
    give the gross section; the bars in `reinforcement` are deducted from it.
    """
    id: int
    grips: Tuple[int, int, int]
    start: Point
    end: Point
    width: float
    height: float
    reinforcement: StringerReinforcement = StringerReinforcement()

    @property
    def length(self) -> float:
        return segment_length(self.start, self.end)

    @property
    def angle(self) -> float:
        return segment_angle(self.start, self.end)

    @property
    def direction_cosines(self) -> Tuple[float, float]:
        return direction_cosines(self.angle)

    @property
    def steel_area(self) -> float:
        return self.reinforcement.area

    @property
    def concrete_area(self) -> float:
        return self.width * self.height - self.steel_area

    @property
    def dof_map(self) -> List[int]:
        return DOF_SPM.element_dof_map(self.grips)


@dataclass(frozen=True)
class Panel:
    """
    A shear panel: 4 edge-midpoint grips and 4 vertices (grip-point order).
    """
    id: int
    grips: Tuple[int, int, int, int]
    vertices: Tuple[Point, Point, Point, Point]
    width: float
    reinforcement: PanelReinforcement = PanelReinforcement()

    @property
    def cyclic_vertices(self) -> Tuple[Point, Point, Point, Point]:
        v = self.vertices
        return v[0], v[1], v[3], v[2]

    @property
    def edges(self) -> List[Tuple[Point, Point]]:
        cv = self.cyclic_vertices
        return [(cv[i], cv[(i + 1) % 4]) for i in range(4)]

    @property
    def lengths(self) -> List[float]:
        return [segment_length(p, q) for p, q in self.edges]

    @property
    def angles(self) -> List[float]:
        return [segment_angle(p, q) for p, q in self.edges]

    @property
    def direction_cosines(self) -> List[Tuple[float, float]]:
        return [direction_cosines(a) for a in self.angles]

    @property
    def edge_midpoints(self) -> List[Point]:
        return [midpoint(p, q) for p, q in self.edges]

    @property
    def vertex_coordinates(self) -> Tuple[np.ndarray, np.ndarray]:
        cv = self.cyclic_vertices
        return np.array([p[0] for p in cv]), np.array([p[1] for p in cv])

    @property
    def dimensions(self) -> Tuple[float, float, float, float]:
        """Kinematic dimensions (a, b, c, d) of the quadrilateral."""
        x, y = self.vertex_coordinates
        a = 0.5 * (x[1] + x[2] - x[0] - x[3])
        b = 0.5 * (y[2] + y[3] - y[0] - y[1])
        c = 0.5 * (x[2] + x[3] - x[0] - x[1])
        d = 0.5 * (y[1] + y[2] - y[0] - y[3])
        return a, b, c, d

    def is_rectangular(self, tolerance: float = 0.0) -> bool:
        """
        True when the turning angles between edges 0→1 and 2→3 are both π/2.

        With tolerance=0.0 this is the exact floating-point comparison; a
        positive tolerance accepts |turn − π/2| ≤ tolerance.
        """
        a = self.angles
        ang2 = a[1] - a[0]
        ang4 = a[3] - a[2]
        return abs(ang2 - HALF_PI) <= tolerance and abs(ang4 - HALF_PI) <= tolerance

    @property
    def is_grip_point_ordered(self) -> bool:
        """
        True when the outline runs anticlockwise from the lower-left corner:
        positive area and positive kinematic dimensions a and b.
        """
        a, b, _, _ = self.dimensions
        return signed_area(self.cyclic_vertices) > 0.0 and a > 0.0 and b > 0.0

    @property
    def dof_map(self) -> List[int]:
        return DOF_SPM.element_dof_map(self.grips)


ForceKey = Tuple[int, int]


class ModelData:
    """
    Validated repository of nodes, stringers, panels, loads and concrete.

    Built once per analysis run; the collections are not modified afterwards.

    Parameters:
    -----------
    nodes : Iterable[Node]
    stringers : Iterable[Stringer]
    panels : Iterable[Panel]
    forces : Mapping[(node_id, direction), float]
        Sparse nodal forces in N; direction 0 = x, 1 = y
    concrete : Concrete
    config : AnalysisConfig
        Tolerances used by the checks

    Raises:
    -------
    ModelInconsistencyError
        If any structural invariant is violated
    """

    def __init__(
        self,
        nodes: Iterable[Node],
        stringers: Iterable[Stringer] = (),
        panels: Iterable[Panel] = (),
        forces: Optional[Mapping[ForceKey, float]] = None,
        concrete: Concrete = Concrete(),
        config: AnalysisConfig = CONFIG,
    ):
        node_list = list(nodes)
        self.nodes: Dict[int, Node] = {n.id: n for n in node_list}
        self.stringers: Tuple[Stringer, ...] = tuple(sorted(stringers, key=lambda s: s.id))
        self.panels: Tuple[Panel, ...] = tuple(sorted(panels, key=lambda p: p.id))
        self.forces: Dict[ForceKey, float] = dict(forces or {})
        self.concrete = concrete
        self.config = config

        self._check_nodes(node_list)
        self._check_stringers()
        self._check_panels()
        self._check_forces()

        logger.debug(
            f"Model built: {len(self.nodes)} nodes, {len(self.stringers)} stringers, "
            f"{len(self.panels)} panels"
        )

    # ------------------------------------------------------------------
    # Construction from the external description
    # ------------------------------------------------------------------
    @classmethod
    def from_description(
        cls,
        description: Union[ModelDescription, Mapping],
        config: AnalysisConfig = CONFIG,
    ) -> "ModelData":
        """
        Build a model from a ModelDescription or an equivalent mapping.

        Node classification is taken from the description when given;
        otherwise nodes that are stringer mid grips or panel grips are
        INTERNAL and all others EXTERNAL.
        """
        if not isinstance(description, ModelDescription):
            description = ModelDescription.model_validate(description)

        derived_internal = set()
        for s in description.stringers:
            derived_internal.add(s.grips[1])
        for p in description.panels:
            derived_internal.update(p.grips)

        nodes = []
        for entry in description.nodes:
            internal = entry.internal if entry.internal is not None else entry.id in derived_internal
            nodes.append(Node(
                id=entry.id,
                x=entry.x,
                y=entry.y,
                support=(entry.support_x, entry.support_y),
                node_type=NodeType.INTERNAL if internal else NodeType.EXTERNAL,
            ))
        positions = {n.id: n.position for n in nodes}

        stringers = []
        for entry in description.stringers:
            for grip in entry.grips:
                if grip not in positions:
                    raise ModelInconsistencyError(
                        f"Stringer {entry.id} references unknown node {grip}."
                    )
            stringers.append(Stringer(
                id=entry.id,
                grips=entry.grips,
                start=positions[entry.grips[0]],
                end=positions[entry.grips[2]],
                width=entry.width,
                height=entry.height,
                reinforcement=StringerReinforcement(
                    number_of_bars=entry.number_of_bars,
                    bar_diameter=entry.bar_diameter,
                    steel=Steel(fy=entry.steel.fy, Es=entry.steel.Es),
                ),
            ))

        panels = []
        for entry in description.panels:
            panels.append(Panel(
                id=entry.id,
                grips=entry.grips,
                vertices=entry.vertices,
                width=entry.width,
                reinforcement=PanelReinforcement(
                    bar_diameter=entry.bar_diameter,
                    bar_spacing=entry.bar_spacing,
                    steel=(
                        Steel(fy=entry.steel_x.fy, Es=entry.steel_x.Es),
                        Steel(fy=entry.steel_y.fy, Es=entry.steel_y.Es),
                    ),
                ),
            ))

        forces: Dict[ForceKey, float] = {}
        for f in description.forces:
            if f.fx != 0.0:
                forces[(f.node, 0)] = forces.get((f.node, 0), 0.0) + f.fx
            if f.fy != 0.0:
                forces[(f.node, 1)] = forces.get((f.node, 1), 0.0) + f.fy

        c = description.concrete
        concrete = Concrete(fc=c.fc, Ec=c.Ec, ec=c.ec, ecu=c.ecu, fcr=c.fcr)

        return cls(nodes, stringers, panels, forces, concrete, config)

    # ------------------------------------------------------------------
    # Invariant checks
    # ------------------------------------------------------------------
    def _check_nodes(self, node_list: List[Node]) -> None:
        if len(self.nodes) != len(node_list):
            raise ModelInconsistencyError("Duplicate node ids in model.")
        expected = set(range(1, len(node_list) + 1))
        if set(self.nodes) != expected:
            missing = sorted(expected - set(self.nodes))
            raise ModelInconsistencyError(
                f"Node numbering must be contiguous from 1; missing {missing}."
            )

    def _check_grips(self, kind: str, element_id: int, grips: Sequence[int]) -> None:
        for grip in grips:
            if grip not in self.nodes:
                raise ModelInconsistencyError(f"{kind} {element_id} references unknown node {grip}.")
        if len(set(grips)) != len(grips):
            raise ModelInconsistencyError(f"{kind} {element_id} has duplicate grips {tuple(grips)}.")

    def _check_ids(self, kind: str, ids: List[int]) -> None:
        if len(set(ids)) != len(ids):
            raise ModelInconsistencyError(f"Duplicate {kind} ids in model.")

    def _check_stringers(self) -> None:
        self._check_ids("stringer", [s.id for s in self.stringers])
        tol = self.config.midpoint_tolerance

        for s in self.stringers:
            self._check_grips("Stringer", s.id, s.grips)
            start, mid, end = (self.nodes[g] for g in s.grips)

            if s.start != start.position or s.end != end.position:
                raise ModelInconsistencyError(
                    f"Stringer {s.id} end points do not match nodes {s.grips[0]} and {s.grips[2]}."
                )
            if s.length <= 0.0:
                raise ModelInconsistencyError(
                    f"Stringer {s.id} has zero length (nodes {s.grips[0]} and {s.grips[2]} "
                    f"at same location: {start.position})"
                )
            mx, my = midpoint(start.position, end.position)
            if abs(mid.x - mx) > tol or abs(mid.y - my) > tol:
                raise ModelInconsistencyError(
                    f"Stringer {s.id}: mid node {mid.id} at {mid.position} is not the midpoint "
                    f"({mx}, {my}) of its end nodes."
                )

    def _check_panels(self) -> None:
        self._check_ids("panel", [p.id for p in self.panels])
        tol = self.config.midpoint_tolerance

        for p in self.panels:
            self._check_grips("Panel", p.id, p.grips)
            if not is_convex(p.cyclic_vertices):
                raise ModelInconsistencyError(
                    f"Panel {p.id} is not convex with vertices {p.cyclic_vertices} "
                    f"(taken as v0, v1, v3, v2)."
                )
            if not p.is_grip_point_ordered:
                raise ModelInconsistencyError(
                    f"Panel {p.id}: vertices {p.vertices} must start at the lower-left corner "
                    f"and run anticlockwise in grip-point order (v0, v1 bottom; v2, v3 top)."
                )
            for i, (grip, (mx, my)) in enumerate(zip(p.grips, p.edge_midpoints)):
                node = self.nodes[grip]
                if abs(node.x - mx) > tol or abs(node.y - my) > tol:
                    raise ModelInconsistencyError(
                        f"Panel {p.id}: grip {i} (node {grip}) is not the midpoint ({mx}, {my}) of edge {i}."
                    )

    def _check_forces(self) -> None:
        for (node_id, direction) in self.forces:
            if node_id not in self.nodes:
                raise ModelInconsistencyError(f"Force applied to unknown node {node_id}.")
            if direction not in (0, 1):
                raise ModelInconsistencyError(f"Invalid force direction {direction} at node {node_id}.")

    # ------------------------------------------------------------------
    # DOF bookkeeping
    # ------------------------------------------------------------------
    @property
    def n_nodes(self) -> int:
        return len(self.nodes)

    @property
    def ndof(self) -> int:
        return DOF_SPM.ndof(self.n_nodes)

    @property
    def constrained_dofs(self) -> List[int]:
        dofs = []
        for node in self.nodes.values():
            dofs.extend(node.constrained_dofs)
        return sorted(dofs)

    @property
    def internal_dofs(self) -> List[int]:
        dofs = []
        for node in self.nodes.values():
            if node.node_type == NodeType.INTERNAL:
                dofs.extend(node.dofs)
        return sorted(dofs)

    def force_vector(self) -> np.ndarray:
        """Global load vector (N) built from the sparse nodal forces."""
        F = np.zeros(self.ndof, dtype=float)
        for (node_id, direction), value in self.forces.items():
            F[DOF_SPM.idx(node_id, direction)] += value
        return F

    # ------------------------------------------------------------------
    # Topology queries
    # ------------------------------------------------------------------
    def continued_stringers(self) -> List[Tuple[int, int]]:
        """
        Pairs of stringers that continue each other in a straight line.

        Two stringers are continued when they share an end node and are
        aligned within 45°: same start (or same end) node with opposite
        directions, or the start of one at the end of the other with equal
        directions. Pairs are (smaller id, larger id), sorted by the larger
        then the smaller id.
        """
        par = 0.5 * math.sqrt(2)
        pairs = set()

        for s1 in self.stringers:
            for s2 in self.stringers:
                if s1.id >= s2.id:
                    continue
                l1, m1 = s1.direction_cosines
                l2, m2 = s2.direction_cosines
                cont = l1 * l2 + m1 * m2

                same_side = s1.grips[0] == s2.grips[0] or s1.grips[2] == s2.grips[2]
                head_to_tail = s1.grips[0] == s2.grips[2] or s1.grips[2] == s2.grips[0]

                if (same_side and cont < -par) or (head_to_tail and cont > par):
                    pairs.add((s1.id, s2.id))

        return sorted(pairs, key=lambda pair: (pair[1], pair[0]))
