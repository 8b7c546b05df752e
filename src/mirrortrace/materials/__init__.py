"""Materials module.

Components:
    solid: Solid color material with mirror reflectivity

Each material provides a base color lookup and a reflectivity used to blend
the locally shaded color with the mirror reflection. Refraction is not
modeled; the refractive coefficient is stored but never read.
"""

from .solid import (
    MAX_MATERIALS,
    Appearance,
    Material,
    add_material,
    clear_materials,
    get_material_color,
    get_material_count,
    get_material_reflectivity,
)

__all__ = [
    "Appearance",
    "Material",
    "add_material",
    "clear_materials",
    "get_material_count",
    "get_material_color",
    "get_material_reflectivity",
    "MAX_MATERIALS",
]
