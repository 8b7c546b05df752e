"""Scene module for primitives, intersection queries and scene management.

Components:
    primitives: Host-side Sphere, Plane, Hit and PointLight
    intersection: Taichi primitive table with nearest-hit and shadow queries
    manager: Scene coordinating primitives, materials, light and camera
    demo: Demo scene of mirrored spheres over a reflective floor

Scene data is organized for parallel access:
    - One Structure-of-Arrays table for every primitive kind
    - Contiguous material ID arrays
"""

from .intersection import (
    MAX_PRIMITIVES,
    PrimitiveKind,
    SceneHitRecord,
    add_plane,
    add_sphere,
    clear_scene,
    get_primitive_count,
    intersect_scene,
    intersect_scene_any,
)
from .primitives import Hit, Plane, PointLight, Primitive, Sphere

# Note: manager and demo are NOT imported here to avoid circular imports
# with the integrator. Import Scene from mirrortrace.scene.manager and
# create_demo_scene from mirrortrace.scene.demo.

__all__ = [
    # Host primitives
    "Hit",
    "Sphere",
    "Plane",
    "Primitive",
    "PointLight",
    # Intersection module
    "PrimitiveKind",
    "SceneHitRecord",
    "add_sphere",
    "add_plane",
    "clear_scene",
    "get_primitive_count",
    "intersect_scene",
    "intersect_scene_any",
    "MAX_PRIMITIVES",
]
