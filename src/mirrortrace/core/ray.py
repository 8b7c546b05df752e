"""Ray data structure and vector utilities for the ray tracer.

This module provides the Ray dataclass, the ray constructors used by the
integrator (primary, shadow and mirror rays) and the host-side validation of
direction vectors. Device functions are designed to run inside Taichi kernels.

Ray directions are always unit length: ``make_ray`` and ``reflect_ray``
normalize on construction. Normalizing a zero-length direction is a caller
contract violation; host code rejects such vectors with
``require_direction`` before they ever reach a kernel.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -2.0)
    >>> # Inside a kernel:
    >>> # ray = make_ray(origin, direction)  # direction becomes (0, 0, -1)
    >>> # point = ray_at(ray, 5.0)
"""

import math
from collections.abc import Sequence

import numpy as np
import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Ray:
    """A ray with an origin point and a unit direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction of the ray (vec3, unit length).
    """

    origin: vec3
    direction: vec3


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray, normalizing its direction.

    Args:
        origin: The starting point of the ray.
        direction: The direction vector. Must not be zero-length.

    Returns:
        A new Ray with a unit direction.
    """
    return Ray(origin=origin, direction=tm.normalize(direction))


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (unit length).

    Returns:
        The mirrored direction vector.
    """
    return incident - 2.0 * tm.dot(normal, incident) * normal


@ti.func
def reflect_ray(ray: Ray, normal: vec3, origin: vec3) -> Ray:
    """Derive the mirror ray of ``ray`` about ``normal``, departing ``origin``.

    The normal is normalized before use, so surfaces may report normals of
    any positive length.

    Args:
        ray: The incoming ray.
        normal: The surface normal at the reflection point.
        origin: The origin of the reflected ray, usually a point pulled back
            slightly along the incoming ray.

    Returns:
        The reflected Ray with a unit direction.
    """
    return make_ray(origin, reflect(ray.direction, tm.normalize(normal)))


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector.

    Args:
        v: The input vector.

    Returns:
        The squared Euclidean length of the vector.
    """
    return tm.dot(v, v)


# =============================================================================
# Host-side Validation
# =============================================================================


def require_vector(value: Sequence[float], name: str) -> tuple[float, float, float]:
    """Validate a 3-component vector given from Python.

    Args:
        value: The vector as a sequence of three numbers.
        name: Name used in error messages.

    Returns:
        The vector as a tuple of floats.

    Raises:
        ValueError: If the vector does not have three finite components.
    """
    if len(value) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(value)}")
    result = (float(value[0]), float(value[1]), float(value[2]))
    if not all(math.isfinite(c) for c in result):
        raise ValueError(f"{name} must be finite, got {result}")
    return result


def require_direction(value: Sequence[float], name: str = "direction") -> tuple[float, float, float]:
    """Validate a direction vector that will be normalized on the device.

    Normalizing a zero-length vector is geometrically undefined, so such a
    direction is rejected instead of being silently repaired.

    Args:
        value: The direction as a sequence of three numbers.
        name: Name used in error messages.

    Returns:
        The direction as a tuple of floats (not normalized).

    Raises:
        ValueError: If the vector is not finite or has zero length.
    """
    result = require_vector(value, name)
    if np.linalg.norm(np.array(result, dtype=np.float32)) == 0.0:
        raise ValueError(f"{name} must not be zero-length")
    return result


def normalized(value: Sequence[float], name: str = "direction") -> tuple[float, float, float]:
    """Return a unit-length copy of a direction vector (host-side).

    Args:
        value: The direction as a sequence of three numbers.
        name: Name used in error messages.

    Returns:
        The normalized direction as a tuple of floats.

    Raises:
        ValueError: If the vector is not finite or has zero length.
    """
    v = np.array(require_direction(value, name), dtype=np.float32)
    v = v / np.linalg.norm(v)
    return (float(v[0]), float(v[1]), float(v[2]))
