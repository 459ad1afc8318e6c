# mini_spm/schema.py
"""
Input schema for the external model description.

The surrounding application (drawing, database, UI) hands the analysis core
a plain mapping; these models validate its shape before ModelData checks the
structural invariants. Material strengths default to 0.0, meaning "not set",
and are checked by the materials layer rather than here.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Tuple

Point = Tuple[float, float]


class SteelSpec(BaseModel):
    """Reinforcing steel."""
    fy: float = Field(0.0, ge=0.0, description="Yield stress (MPa)")
    Es: float = Field(210000.0, ge=0.0, description="Elastic modulus (MPa)")


class ConcreteSpec(BaseModel):
    """Global concrete parameters."""
    fc: float = Field(0.0, description="Compressive strength (MPa)")
    Ec: float = Field(0.0, description="Elastic modulus (MPa)")
    ec: float = Field(-0.002, lt=0.0, description="Strain at peak stress")
    ecu: float = Field(-0.0035, lt=0.0, description="Ultimate strain")
    fcr: Optional[float] = Field(None, gt=0.0, description="Cracking strength (MPa)")


class NodeSpec(BaseModel):
    """Node geometry and supports."""
    id: int = Field(..., ge=1)
    x: float
    y: float
    support_x: bool = False
    support_y: bool = False
    internal: Optional[bool] = Field(
        None, description="Node classification; derived from the elements when omitted"
    )


class StringerSpec(BaseModel):
    """Stringer: 3 grips (start, mid, end), section and bars."""
    id: int = Field(..., ge=1)
    grips: Tuple[int, int, int]
    width: float = Field(..., gt=0.0, description="Section width (mm)")
    height: float = Field(..., gt=0.0, description="Section height (mm)")
    number_of_bars: int = Field(0, ge=0)
    bar_diameter: float = Field(0.0, ge=0.0, description="Bar diameter (mm)")
    steel: SteelSpec = SteelSpec()


class PanelSpec(BaseModel):
    """Panel: 4 edge-midpoint grips and 4 vertices in grip-point order."""
    id: int = Field(..., ge=1)
    grips: Tuple[int, int, int, int]
    vertices: Tuple[Point, Point, Point, Point]
    width: float = Field(..., gt=0.0, description="Panel thickness (mm)")
    bar_diameter: Tuple[float, float] = (0.0, 0.0)
    bar_spacing: Tuple[float, float] = (0.0, 0.0)
    steel_x: SteelSpec = SteelSpec()
    steel_y: SteelSpec = SteelSpec()


class NodalForceSpec(BaseModel):
    """Concentrated force at a node (N)."""
    node: int = Field(..., ge=1)
    fx: float = 0.0
    fy: float = 0.0


class ModelDescription(BaseModel):
    """Complete SPM model as provided by the external model collaborator."""
    nodes: List[NodeSpec]
    stringers: List[StringerSpec] = []
    panels: List[PanelSpec] = []
    forces: List[NodalForceSpec] = []
    concrete: ConcreteSpec = ConcreteSpec()
