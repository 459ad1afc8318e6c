# mini_spm/kernel - Element-agnostic structural analysis core
"""
KERNEL: THE ELEMENT-AGNOSTIC FOUNDATION
=======================================

Assembly, reduction and solving don't care whether a matrix comes from a
stringer or a panel. They need:
- A way to map (node_id, local_dof) → global_dof_index
- Element stiffness matrices in global axes (any size)
- Supported / uncoupled DOF lists
- Load vectors

The ELEMENT formulations (stringers, panels, the nonlinear stringer) live
one level up; the kernel is plumbing.
"""

from .dof import DOFManager, DOF_SPM
from .assemble import assemble_global_K, assemble_global_F, add_element_stiffness, extract_block
from .constraints import apply_boundary_conditions, coerce_zero
from .solve import solve_linear, factorize, solve_factorized, MechanismError, ConvergenceError

__all__ = [
    'DOFManager', 'DOF_SPM',
    'assemble_global_K', 'assemble_global_F', 'add_element_stiffness', 'extract_block',
    'apply_boundary_conditions', 'coerce_zero',
    'solve_linear', 'factorize', 'solve_factorized', 'MechanismError', 'ConvergenceError',
]
