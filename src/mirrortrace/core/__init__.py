"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    ray: Ray data structure, reflection and host-side vector validation
    color: RGBA scaling, blending and byte conversion
    integrator: Whitted-style shading, shadows and mirror reflection

Colors stay unclamped through shading and are saturated only when the
final pixel buffer is produced.
"""

from .color import as_rgba, mix, scale_rgb, to_rgba8, vec4
from .ray import (
    Ray,
    length_squared,
    make_ray,
    normalized,
    ray_at,
    reflect,
    reflect_ray,
    require_direction,
    require_vector,
    vec3,
)

# Note: integrator is NOT imported here to avoid circular imports.
# Import directly from mirrortrace.core.integrator when needed.

__all__ = [
    "Ray",
    "make_ray",
    "ray_at",
    "reflect",
    "reflect_ray",
    "length_squared",
    "require_vector",
    "require_direction",
    "normalized",
    "vec3",
    "vec4",
    "as_rgba",
    "scale_rgb",
    "mix",
    "to_rgba8",
]
