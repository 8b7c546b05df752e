"""Host-side scene primitives and light.

These are the objects a caller assembles a scene from. Each primitive exposes
a ``position`` and an ``intersect`` query; the query runs the same Taichi
intersection routine the renderer uses, so probing a primitive from Python
gives exactly the numbers a render sees.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from mirrortrace.materials import Material
    >>> from mirrortrace.scene.primitives import Sphere
    >>> ball = Sphere((0.0, 0.0, 0.0), 1.0, Material.solid((0.9, 0.2, 0.2)))
    >>> hit = ball.intersect((0.0, 0.0, 5.0), (0.0, 0.0, -1.0))
    >>> round(hit.t, 4)
    4.0
"""

import math
from dataclasses import dataclass, field

import taichi as ti
import taichi.math as tm

from mirrortrace.config import DEFAULT_HIT_EPSILON
from mirrortrace.core.color import as_rgba
from mirrortrace.core.ray import make_ray, normalized, require_direction, require_vector
from mirrortrace.geometry.plane import PlaneData, hit_plane
from mirrortrace.geometry.sphere import HitRecord, SphereData, hit_sphere
from mirrortrace.materials.solid import Material

vec3 = tm.vec3

Vector = tuple[float, float, float]
Color = tuple[float, float, float, float]


@dataclass(frozen=True)
class Hit:
    """A ray-primitive intersection.

    Attributes:
        t: Signed distance along the ray (unit direction).
        position: Hit point, pulled back slightly toward the ray origin.
        normal: Unit surface normal.
        material: Material of the primitive that was hit.
    """

    t: float
    position: Vector
    normal: Vector
    material: Material


@dataclass(frozen=True)
class Sphere:
    """A sphere primitive.

    Attributes:
        center: Center point in world space.
        radius: Radius, strictly positive.
        material: Surface material.
    """

    center: Vector
    radius: float
    material: Material = field(default_factory=Material)

    def __post_init__(self) -> None:
        object.__setattr__(self, "center", require_vector(self.center, "center"))
        if not (math.isfinite(self.radius) and self.radius > 0.0):
            raise ValueError(f"Sphere radius must be positive, got {self.radius}")

    @property
    def position(self) -> Vector:
        return self.center

    def intersect(
        self,
        origin: Vector,
        direction: Vector,
        hit_epsilon: float = DEFAULT_HIT_EPSILON,
    ) -> Hit | None:
        """Intersect a ray with this sphere.

        Args:
            origin: Ray origin.
            direction: Ray direction (normalized here; must not be zero).
            hit_epsilon: Pull-back applied to the hit position.

        Returns:
            The Hit, or None if the ray misses.
        """
        origin = require_vector(origin, "origin")
        direction = require_direction(direction)
        _probe_sphere_kernel(
            vec3(*origin), vec3(*direction), vec3(*self.center), self.radius, hit_epsilon
        )
        return _read_probe(self.material)


@dataclass(frozen=True)
class Plane:
    """An infinite single-sided plane.

    Attributes:
        point: Any point on the plane.
        normal: Normal of the visible face, normalized on construction.
        material: Surface material.
    """

    point: Vector
    normal: Vector
    material: Material = field(default_factory=Material)

    def __post_init__(self) -> None:
        object.__setattr__(self, "point", require_vector(self.point, "point"))
        object.__setattr__(self, "normal", normalized(self.normal, "normal"))

    @property
    def position(self) -> Vector:
        return self.point

    def intersect(
        self,
        origin: Vector,
        direction: Vector,
        hit_epsilon: float = DEFAULT_HIT_EPSILON,
    ) -> Hit | None:
        """Intersect a ray with the visible face of this plane.

        Args:
            origin: Ray origin.
            direction: Ray direction (normalized here; must not be zero).
            hit_epsilon: Pull-back applied to the hit position.

        Returns:
            The Hit, or None if the ray misses or faces the back side.
        """
        origin = require_vector(origin, "origin")
        direction = require_direction(direction)
        _probe_plane_kernel(
            vec3(*origin), vec3(*direction), vec3(*self.point), vec3(*self.normal), hit_epsilon
        )
        return _read_probe(self.material)


Primitive = Sphere | Plane


@dataclass(frozen=True)
class PointLight:
    """A point light with inverse-square falloff.

    Attributes:
        position: Light position in world space.
        intensity: RGBA intensity; color channels are divided by the squared
            distance to the shaded point.
    """

    position: Vector = (0.0, 10.0, 5.0)
    intensity: Color = (100.0, 100.0, 100.0, 1.0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", require_vector(self.position, "position"))
        object.__setattr__(self, "intensity", as_rgba(self.intensity))


# =============================================================================
# Intersection Probes
# =============================================================================

_probe_hit = ti.field(dtype=ti.i32, shape=())
_probe_t = ti.field(dtype=ti.f32, shape=())
_probe_position = ti.Vector.field(3, dtype=ti.f32, shape=())
_probe_normal = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.func
def _store_probe(rec: HitRecord):
    _probe_hit[None] = rec.hit
    _probe_t[None] = rec.t
    _probe_position[None] = rec.position
    _probe_normal[None] = rec.normal


@ti.kernel
def _probe_sphere_kernel(
    origin: vec3, direction: vec3, center: vec3, radius: ti.f32, hit_epsilon: ti.f32
):
    ray = make_ray(origin, direction)
    _store_probe(hit_sphere(ray, SphereData(center=center, radius=radius), hit_epsilon))


@ti.kernel
def _probe_plane_kernel(
    origin: vec3, direction: vec3, point: vec3, normal: vec3, hit_epsilon: ti.f32
):
    ray = make_ray(origin, direction)
    _store_probe(hit_plane(ray, PlaneData(point=point, normal=normal), hit_epsilon))


def _read_probe(material: Material) -> Hit | None:
    if _probe_hit[None] == 0:
        return None
    p = _probe_position[None]
    n = _probe_normal[None]
    return Hit(
        t=float(_probe_t[None]),
        position=(float(p[0]), float(p[1]), float(p[2])),
        normal=(float(n[0]), float(n[1]), float(n[2])),
        material=material,
    )
