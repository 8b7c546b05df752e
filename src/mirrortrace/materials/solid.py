"""Solid color material with mirror reflectivity.

A material describes how a surface looks:

- ``color``: the RGBA base color, unclamped
- ``reflective``: fraction of the final color taken from the mirror ray,
  in [0, 1]
- ``refractive``: stored for completeness, never read by the renderer
- ``appearance``: where the base color comes from. Only solid colors are
  implemented; image-mapped materials are rejected when registered.

Materials are registered in Structure-of-Arrays Taichi fields and looked up
by id from the integrator.

Example:
    >>> from mirrortrace.materials.solid import Material
    >>> mirror = Material.solid((0.9, 0.9, 0.9), reflective=0.7)
    >>> mirror.color
    (0.9, 0.9, 0.9, 1.0)
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass
from enum import IntEnum

import taichi as ti
import taichi.math as tm

from mirrortrace.core.color import as_rgba

# Type aliases
vec3 = tm.vec3
vec4 = tm.vec4


class Appearance(IntEnum):
    """Source of a material's base color."""

    SOLID_COLOR = 0
    IMAGE_MAPPED = 1


@dataclass(frozen=True)
class Material:
    """Surface appearance of a primitive.

    Attributes:
        color: Base color as (r, g, b, a). Values are not clamped.
        reflective: Mirror reflectivity in [0, 1].
        refractive: Reserved refraction coefficient (unused).
        appearance: Source of the base color.
    """

    color: tuple[float, float, float, float] = (1.0, 1.0, 1.0, 1.0)
    reflective: float = 0.0
    refractive: float = 0.0
    appearance: Appearance = Appearance.SOLID_COLOR

    def __post_init__(self) -> None:
        """Validate the material.

        Raises:
            ValueError: If the color is malformed or reflective is outside
                [0, 1].
        """
        object.__setattr__(self, "color", as_rgba(self.color))
        if not all(math.isfinite(c) for c in self.color):
            raise ValueError(f"Material color must be finite, got {self.color}")
        if not 0.0 <= self.reflective <= 1.0:
            raise ValueError(f"reflective must be in [0, 1], got {self.reflective}")

    @classmethod
    def solid(cls, color: Sequence[float], reflective: float = 0.0) -> "Material":
        """Create a solid color material.

        Args:
            color: (r, g, b) or (r, g, b, a) base color.
            reflective: Mirror reflectivity in [0, 1].

        Returns:
            A new Material.
        """
        return cls(color=as_rgba(color), reflective=reflective)

    def color_at(self, position: Sequence[float]) -> tuple[float, float, float, float]:
        """Get the base color at a surface position.

        Solid colors ignore the position.

        Args:
            position: The surface point.

        Returns:
            The RGBA base color.

        Raises:
            NotImplementedError: For image-mapped materials.
        """
        if self.appearance != Appearance.SOLID_COLOR:
            raise NotImplementedError("Image-mapped materials are not supported")
        return self.color


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of distinct materials in the scene
MAX_MATERIALS = 1024

# Storage for material properties
material_colors = ti.Vector.field(4, dtype=ti.f32, shape=MAX_MATERIALS)
material_reflectivities = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_refractivities = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_materials() -> None:
    """Clear all materials.

    Resets the material count to zero. Existing data in the fields will be
    overwritten when new materials are added.
    """
    num_materials[None] = 0


def add_material(material: Material) -> int:
    """Add a material to the material registry.

    Args:
        material: The material to register.

    Returns:
        The index of the added material.

    Raises:
        NotImplementedError: If the material is not a solid color.
        RuntimeError: If the maximum number of materials is exceeded.
    """
    if material.appearance != Appearance.SOLID_COLOR:
        raise NotImplementedError("Image-mapped materials are not supported")

    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    r, g, b, a = material.color
    material_colors[idx] = vec4(r, g, b, a)
    material_reflectivities[idx] = material.reflective
    material_refractivities[idx] = material.refractive
    num_materials[None] = idx + 1
    return idx


def get_material_count() -> int:
    """Get the number of materials in the registry."""
    return int(num_materials[None])


@ti.func
def get_material_color(material_idx: ti.i32, position: vec3) -> vec4:
    """Get the base color of a material at a surface position.

    Args:
        material_idx: The index of the material in the registry.
        position: The surface point (ignored by solid colors).

    Returns:
        The RGBA base color.
    """
    return material_colors[material_idx]


@ti.func
def get_material_reflectivity(material_idx: ti.i32) -> ti.f32:
    """Get the mirror reflectivity of a material by index.

    Args:
        material_idx: The index of the material in the registry.

    Returns:
        The reflectivity in [0, 1].
    """
    return material_reflectivities[material_idx]
