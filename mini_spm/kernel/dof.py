# mini_spm/kernel/dof.py
"""
DOF MANAGER: Node-to-Equation Indexing
======================================

PURPOSE:
--------
Maps (node_id, local_dof) to a row/column of the global stiffness matrix.

In the Stringer-Panel Method every node carries two translations:

    local_dof 0 → ux
    local_dof 1 → uy

Node ids are 1-based and dense, so node n owns the equations
2·(n−1) and 2·(n−1)+1.

USAGE:
------
    dof = DOFManager()
    dof.idx(node_id=3, local_dof=1)     # → 5
    dof.element_dof_map([1, 2, 3])      # → [0, 1, 2, 3, 4, 5]
"""

from dataclasses import dataclass
from typing import Iterable, List


@dataclass(frozen=True)
class DOFManager:
    """
    Degree-of-freedom indexing for a 2D SPM model.

    Attributes:
    -----------
    dof_per_node : int
        Number of DOFs per node (2: ux, uy).
    first_node_id : int
        Id of the first node (1 for SPM models).

    Examples:
    ---------
    >>> dof = DOFManager()
    >>> dof.idx(1, 0)
    0
    >>> dof.idx(2, 1)
    3
    >>> dof.ndof(4)
    8
    """
    dof_per_node: int = 2
    first_node_id: int = 1

    def idx(self, node_id: int, local_dof: int) -> int:
        """Global DOF index of a node's local DOF."""
        return self.dof_per_node * (node_id - self.first_node_id) + local_dof

    def ndof(self, n_nodes: int) -> int:
        """Total DOFs for a system with n_nodes."""
        return self.dof_per_node * n_nodes

    def node_dofs(self, node_id: int) -> List[int]:
        """
        All global DOF indices of one node.

        >>> DOFManager().node_dofs(2)
        [2, 3]
        """
        base = self.idx(node_id, 0)
        return list(range(base, base + self.dof_per_node))

    def element_dof_map(self, node_ids: Iterable[int]) -> List[int]:
        """
        Flattened DOF map of an element connecting several nodes (grips).

        The order follows the grips, so a 3-node stringer gives 6 indices
        and a 4-node panel gives 8.

        >>> DOFManager().element_dof_map([1, 4, 2])
        [0, 1, 6, 7, 2, 3]
        """
        result = []
        for node_id in node_ids:
            result.extend(self.node_dofs(node_id))
        return result

    def node_of(self, dof_index: int) -> int:
        """Inverse lookup: node id owning a global DOF."""
        return dof_index // self.dof_per_node + self.first_node_id


# Default manager for SPM models (ux, uy per node)
DOF_SPM = DOFManager()
