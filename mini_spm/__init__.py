# mini_spm - Stringer-Panel Method analysis of reinforced concrete walls
"""
MINI-SPM: Stringer-Panel Method Analysis Core
=============================================

This package provides:
- Linear SPM analysis of deep beams and shear walls
- Nonlinear analysis with force-based reinforced concrete stringers
- Force recovery, reactions and panel stresses as pandas tables

ARCHITECTURE:
-------------
    kernel/         Element-agnostic core (DOF indexing, assembly, BCs, solve)
    geometry.py     Segment angles and exact direction cosines
    materials.py    Concrete, steel and reinforcement
    schema.py       pydantic models of the external model description
    model.py        Nodes, stringers, panels and the validated ModelData
    elements.py     Linear stringer and panel formulations
    nonlinear.py    Classic stringer law and nonlinear stringer behaviour
    assembly.py     Model-level assembly and reduction
    post.py         Force recovery, reactions, result tables
    analysis.py     Linear and nonlinear drivers
    config.py       Numerical settings
"""

from .config import AnalysisConfig, CONFIG
from .kernel import DOFManager, DOF_SPM, MechanismError, ConvergenceError
from .materials import Concrete, Steel, StringerReinforcement, PanelReinforcement, MaterialNotSetError
from .model import ModelData, ModelInconsistencyError, Node, NodeType, Panel, Stringer
from .schema import ModelDescription
from .analysis import AnalysisResult, run_linear, run_nonlinear

__version__ = "0.1.0"
