"""Geometry module for shape primitives.

This module provides geometric primitives and intersection algorithms:

Components:
    sphere: Sphere primitive with ray-sphere intersection
    plane: Infinite single-sided plane with ray-plane intersection

All intersection routines are implemented as Taichi functions (@ti.func)
and share one world coordinate frame; there are no per-primitive transforms.

Ray-object intersection follows the pattern:
    record = hit_shape(ray, shape_data, hit_epsilon)
"""

from .plane import PARALLEL_EPSILON, PlaneData, hit_plane
from .sphere import HitRecord, SphereData, hit_sphere, make_miss

__all__ = [
    "SphereData",
    "HitRecord",
    "hit_sphere",
    "make_miss",
    "PlaneData",
    "hit_plane",
    "PARALLEL_EPSILON",
]
