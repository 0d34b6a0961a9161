"""Golden-ratio scalars shared by both rhombohedron variants.

A golden rhombus with side 1 is drawn with its centre at the origin, the
short diagonal on the X axis and the long diagonal on the Y axis::

                B
               /|\\
              /γ|γ\\
             /  Y  \\
          C <---+-X-> A       tan(θ) = φ = Y / X
             \\  |  /          γ = 90° - θ
              \\ α /           α = 2γ
               \\|/
                D

With unit sides ``X = cos(θ)`` and ``Y = sin(θ)``. Dropping a perpendicular
from A onto BC at E gives ``AE = sin(α)`` and ``BE = cos(α)``.

All values are computed once at import time and never change.
"""

from __future__ import annotations

from dataclasses import dataclass
from math import atan, cos, pi, sin, sqrt

__all__ = [
    "PHI",
    "THETA",
    "GAMMA",
    "ALPHA",
    "X",
    "Y",
    "AE",
    "BE",
    "GoldenConstants",
    "golden_constants",
]

PHI = (1 + sqrt(5)) / 2
THETA = atan(PHI)
GAMMA = pi / 2 - THETA
ALPHA = 2 * GAMMA
X = cos(THETA)
Y = sin(THETA)
AE = sin(ALPHA)  # area of the unit golden rhombus
BE = cos(ALPHA)


@dataclass(frozen=True, slots=True)
class GoldenConstants:
    phi: float
    theta: float
    gamma: float
    alpha: float
    x: float
    y: float
    ae: float
    be: float

    def as_dict(self) -> dict[str, float]:
        return {
            "PHI": self.phi,
            "THETA": self.theta,
            "GAMMA": self.gamma,
            "ALPHA": self.alpha,
            "X": self.x,
            "Y": self.y,
            "AE": self.ae,
            "BE": self.be,
        }


_CONSTANTS = GoldenConstants(
    phi=PHI,
    theta=THETA,
    gamma=GAMMA,
    alpha=ALPHA,
    x=X,
    y=Y,
    ae=AE,
    be=BE,
)


def golden_constants() -> GoldenConstants:
    """Return the process-wide scalar set."""

    return _CONSTANTS
