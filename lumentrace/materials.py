"""
Surface materials for Whitted-style shading.

A material is plain data. Its four albedo weights scale, in order, the
diffuse, specular, reflection and refraction contributions of a hit; they
are not required to sum to one.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Tuple

from .vec3 import Color

DIFFUSE = 0
SPECULAR = 1
REFLECTION = 2
REFRACTION = 3


@dataclass(frozen=True)
class Material:
    """Shading parameters shared by every surface that references them.

    Attributes:
        refractive_index: Index of refraction of the medium behind the surface
        albedo: Weights (diffuse, specular, reflection, refraction)
        diffuse_color: Base color lit by the diffuse term
        specular_exponent: Phong exponent of the specular highlight
    """
    refractive_index: float = 1.0
    albedo: Tuple[float, float, float, float] = (1.0, 0.0, 0.0, 0.0)
    diffuse_color: Color = field(default_factory=Color)
    specular_exponent: float = 0.0

    @property
    def diffuse_weight(self) -> float:
        return self.albedo[DIFFUSE]

    @property
    def specular_weight(self) -> float:
        return self.albedo[SPECULAR]

    @property
    def reflection_weight(self) -> float:
        return self.albedo[REFLECTION]

    @property
    def refraction_weight(self) -> float:
        return self.albedo[REFRACTION]


# Presets from the classic showcase scene
IVORY = Material(1.0, (0.6, 0.3, 0.1, 0.0), Color(0.4, 0.4, 0.3), 50.0)
GLASS = Material(1.5, (0.0, 0.5, 0.1, 0.8), Color(0.6, 0.7, 0.8), 125.0)
RED_RUBBER = Material(1.0, (0.9, 0.1, 0.0, 0.0), Color(0.3, 0.1, 0.1), 10.0)
MIRROR = Material(1.0, (0.0, 10.0, 0.8, 0.0), Color(1.0, 1.0, 1.0), 1425.0)
BLUE_RUBBER = Material(1.0, (0.9, 0.1, 0.0, 0.0), Color(0.1, 0.1, 0.3), 10.0)
