# mini_spm/materials.py
"""
Material and reinforcement definitions for SPM elements.

Sign convention: compression is NEGATIVE strain / force, tension POSITIVE.
Units: MPa for stresses and moduli, mm for lengths.
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple


class MaterialNotSetError(ValueError):
    """Raised when a required material parameter is missing or non-positive."""
    pass


@dataclass(frozen=True)
class Concrete:
    """
    Concrete parameters.

    Parameters
    ----------
    fc : float
        Compressive strength (MPa, positive).
    Ec : float
        Elastic modulus used by the linear elements (MPa).
    ec : float
        Strain at peak compressive stress (negative). Default -0.002.
    ecu : float
        Ultimate compressive strain (negative). Default -0.0035.
    fcr : float, optional
        Cracking strength (MPa). Default 0.33·√fc.
    """

    fc: float = 0.0
    Ec: float = 0.0
    ec: float = -0.002
    ecu: float = -0.0035
    fcr: Optional[float] = None

    @property
    def is_set(self) -> bool:
        return self.fc > 0 and self.Ec > 0

    def check(self) -> None:
        """Raise MaterialNotSetError unless fc and Ec are positive."""
        if not self.is_set:
            raise MaterialNotSetError(
                f"Concrete parameters not set (fc={self.fc}, Ec={self.Ec}); both must be positive."
            )

    @property
    def Gc(self) -> float:
        """Shear modulus used by panels."""
        return self.Ec / 2.4

    @property
    def cracking_strength(self) -> float:
        if self.fcr is not None:
            return self.fcr
        return 0.33 * math.sqrt(self.fc)

    @property
    def parabolic_modulus(self) -> float:
        """Initial tangent of the parabolic compression law, −2·fc/ec."""
        return -2.0 * self.fc / self.ec

    @property
    def cracking_strain(self) -> float:
        return self.cracking_strength / self.parabolic_modulus


@dataclass(frozen=True)
class Steel:
    """Elastic-perfectly plastic reinforcing steel."""

    fy: float = 0.0
    Es: float = 210000.0
    ultimate_strain: float = 0.01

    @property
    def is_set(self) -> bool:
        return self.fy > 0 and self.Es > 0

    @property
    def yield_strain(self) -> float:
        if not self.is_set:
            return 0.0
        return self.fy / self.Es


@dataclass(frozen=True)
class StringerReinforcement:
    """Longitudinal bars of a stringer."""

    number_of_bars: int = 0
    bar_diameter: float = 0.0
    steel: Steel = Steel()

    @property
    def is_set(self) -> bool:
        return self.number_of_bars > 0 and self.bar_diameter > 0

    @property
    def area(self) -> float:
        if not self.is_set:
            return 0.0
        return self.number_of_bars * math.pi * self.bar_diameter ** 2 / 4

    @property
    def stiffness(self) -> float:
        """EsAs."""
        return self.steel.Es * self.area

    @property
    def yield_force(self) -> float:
        return self.steel.fy * self.area


@dataclass(frozen=True)
class PanelReinforcement:
    """Orthogonal bar meshes of a panel (x and y directions)."""

    bar_diameter: Tuple[float, float] = (0.0, 0.0)
    bar_spacing: Tuple[float, float] = (0.0, 0.0)
    steel: Tuple[Steel, Steel] = (Steel(), Steel())

    @property
    def x_set(self) -> bool:
        return self.bar_diameter[0] > 0 and self.bar_spacing[0] > 0

    @property
    def y_set(self) -> bool:
        return self.bar_diameter[1] > 0 and self.bar_spacing[1] > 0

    @property
    def is_set(self) -> bool:
        return self.x_set or self.y_set

    def ratio(self, width: float) -> Tuple[float, float]:
        """Reinforcement ratios (ρx, ρy) for a panel of the given width (two layers)."""
        psx = psy = 0.0
        if self.x_set:
            psx = 0.5 * math.pi * self.bar_diameter[0] ** 2 / (self.bar_spacing[0] * width)
        if self.y_set:
            psy = 0.5 * math.pi * self.bar_diameter[1] ** 2 / (self.bar_spacing[1] * width)
        return psx, psy
