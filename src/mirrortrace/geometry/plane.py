"""Infinite single-sided plane primitive.

A plane is defined by a point on it and a unit normal. Only the front face
(the side the normal points to) is visible: rays travelling along the normal,
or parallel to the plane, never hit it.

Ray-plane intersection uses the parametric plane test with the inverted
normal:

    d = dot(direction, -normal)
    t = dot(point - origin, -normal) / d

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from mirrortrace.geometry.plane import PlaneData, hit_plane
    >>> # Floor at y=0 facing up
    >>> floor = PlaneData(point=ti.math.vec3(0, 0, 0), normal=ti.math.vec3(0, 1, 0))
    >>> # Use hit_plane within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from mirrortrace.core.color import is_nan
from mirrortrace.core.ray import Ray, ray_at

from .sphere import HitRecord, make_miss

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Rays whose direction has no more than this component against the normal
# are treated as parallel to the plane
PARALLEL_EPSILON = 1e-6


@ti.dataclass
class PlaneData:
    """A plane defined by a point and a unit normal.

    Attributes:
        point: Any point on the plane (vec3).
        normal: The unit normal of the visible face (vec3).
    """

    point: vec3
    normal: vec3


@ti.func
def hit_plane(ray: Ray, plane: PlaneData, hit_epsilon: ti.f32) -> HitRecord:
    """Test for ray-plane intersection.

    Args:
        ray: The ray to test (unit direction).
        plane: The plane to test against.
        hit_epsilon: Distance subtracted from t when computing the position.

    Returns:
        A HitRecord. Hits require the ray to face the front side of the
        plane and a finite ``t >= 0``.
    """
    inverted = -plane.normal
    d = tm.dot(ray.direction, inverted)

    result = make_miss()

    if d > PARALLEL_EPSILON:
        t = tm.dot(plane.point - ray.origin, inverted) / d
        if t >= 0.0 and is_nan(t) == 0:
            result = HitRecord(
                hit=1,
                t=t,
                position=ray_at(ray, t - hit_epsilon),
                normal=plane.normal,
            )

    return result
