"""Sphere primitive with ray-sphere intersection.

The intersection solves the quadratic

    |origin + t * direction - center|^2 = radius^2

in its textbook form ``a*t^2 + b*t + c = 0`` and tests the near root before
the far root, so a ray starting inside the sphere reports the exit point. Both
roots must be strictly in front of the ray origin to count.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from mirrortrace.geometry.sphere import SphereData, hit_sphere
    >>> sphere = SphereData(center=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from mirrortrace.core.color import is_nan
from mirrortrace.core.ray import Ray, ray_at

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class SphereData:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: Whether the ray intersected the primitive (1 if hit, 0 if miss).
        t: Signed distance along the ray. Only valid if hit == 1.
        position: The hit point, pulled back by ``hit_epsilon`` along the ray
            so that secondary rays do not start below the surface.
            Only valid if hit == 1.
        normal: The unit surface normal. Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    position: vec3
    normal: vec3


@ti.func
def make_miss() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        position=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
    )


@ti.func
def hit_sphere(ray: Ray, sphere: SphereData, hit_epsilon: ti.f32) -> HitRecord:
    """Test for ray-sphere intersection.

    With ``offset = origin - center`` the quadratic coefficients are:
        a = dot(direction, direction)   (1 for a unit direction)
        b = 2 * dot(offset, direction)
        c = dot(offset, offset) - radius^2

    A negative discriminant is a miss. Otherwise the near root is accepted
    when its numerator ``-b - sqrt(disc)`` is strictly positive, then the far
    root under the same test. A NaN numerator (from non-finite input) is a
    miss. A tangent ray collapses both roots to the same value and therefore
    reports exactly one hit.

    Args:
        ray: The ray to test (unit direction).
        sphere: The sphere to test against.
        hit_epsilon: Distance subtracted from t when computing the position.

    Returns:
        A HitRecord. The normal points from the center to the hit point,
        also when the ray starts inside the sphere.
    """
    offset = ray.origin - sphere.center

    a = tm.dot(ray.direction, ray.direction)
    b = 2.0 * tm.dot(offset, ray.direction)
    c = tm.dot(offset, offset) - sphere.radius * sphere.radius
    discriminant = b * b - 4.0 * a * c

    result = make_miss()

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        numerator = -b - sqrt_d
        valid = numerator > 0.0
        if not valid:
            numerator = -b + sqrt_d
            valid = numerator > 0.0

        if valid and is_nan(numerator) == 0:
            t = numerator / (2.0 * a)
            position = ray_at(ray, t - hit_epsilon)
            result = HitRecord(
                hit=1,
                t=t,
                position=position,
                normal=tm.normalize(position - sphere.center),
            )

    return result
