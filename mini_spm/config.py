# mini_spm/config.py
"""
Analysis configuration and defaults.

Units follow the model: N, mm, MPa. Forces are reported in kN through
`force_unit_factor`.
"""

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class AnalysisConfig:
    """Numerical settings shared by the linear and nonlinear drivers."""

    # Force recovery
    force_unit_factor: float = 1e-3   # N → kN
    force_zero_tol: float = 1e-6      # |f| below this is reported as 0

    # Reduction and solve
    stiffness_zero_tol: float = 1e-9
    cond_limit: float = 1e14

    # Model validation / element classification
    rectangular_tolerance: float = 1e-9   # rad
    midpoint_tolerance: float = 1e-6      # mm

    # Nonlinear stringer update
    strain_substeps: int = 10

    # Nonlinear load stepping
    n_load_steps: int = 50
    tolerance: float = 1e-6
    max_iterations: int = 100
    min_iterations: int = 1
    modified_newton: bool = False   # True: tangent factorized once per load step

    def with_overrides(self, **kwargs) -> "AnalysisConfig":
        """Copy of this config with some fields replaced."""
        return replace(self, **kwargs)


# Global config instance
CONFIG = AnalysisConfig()
