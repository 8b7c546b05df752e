"""Scene-level primitive intersection testing.

Primitives of every kind live in a single table in insertion order, tagged
with a PrimitiveKind. The kind selects the intersection routine, and the
remaining columns are interpreted per kind:

    kind      position   normal    radius
    SPHERE    center     unused    radius
    PLANE     point      normal    unused

Two queries are provided: ``intersect_scene`` returns the nearest hit with its
material id, ``intersect_scene_any`` reports whether anything lies in front of
a ray (shadow query).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from mirrortrace.scene.intersection import add_sphere, add_plane, clear_scene
    >>> clear_scene()
    >>> add_sphere(vec3(0, 0, -1), 0.5, material_id=0)
    >>> add_plane(vec3(0, -0.5, 0), vec3(0, 1, 0), material_id=1)
    >>> # Use intersect_scene within a Taichi kernel
"""

from enum import IntEnum

import taichi as ti
import taichi.math as tm

from mirrortrace.core.ray import Ray
from mirrortrace.geometry.plane import PlaneData, hit_plane
from mirrortrace.geometry.sphere import HitRecord, SphereData, hit_sphere, make_miss

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


class PrimitiveKind(IntEnum):
    """Tag selecting the intersection routine of a table row."""

    SPHERE = 0
    PLANE = 1


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection with material information.

    Attributes:
        hit: Whether the ray intersected any primitive (1 if hit, 0 if miss).
        t: Signed distance along the ray. Only valid if hit == 1.
        position: The (epsilon-offset) hit point. Only valid if hit == 1.
        normal: The unit surface normal. Only valid if hit == 1.
        material_id: The material ID of the hit primitive.
            Only valid if hit == 1. -1 indicates a miss.
    """

    hit: ti.i32
    t: ti.f32
    position: vec3
    normal: vec3
    material_id: ti.i32


# Maximum number of primitives supported in the scene
MAX_PRIMITIVES = 1024

# Primitive storage: Structure of Arrays layout
primitive_kinds = ti.field(dtype=ti.i32, shape=MAX_PRIMITIVES)
primitive_positions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PRIMITIVES)
primitive_normals = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PRIMITIVES)
primitive_radii = ti.field(dtype=ti.f32, shape=MAX_PRIMITIVES)
primitive_material_ids = ti.field(dtype=ti.i32, shape=MAX_PRIMITIVES)
num_primitives = ti.field(dtype=ti.i32, shape=())

# Distance subtracted from t when computing hit positions
_hit_epsilon = ti.field(dtype=ti.f32, shape=())


def clear_scene() -> None:
    """Clear all primitives from the scene.

    Resets the primitive count to zero. The actual field data is not
    cleared but will be overwritten when new primitives are added.
    """
    num_primitives[None] = 0


def set_hit_epsilon(epsilon: float) -> None:
    """Set the distance hit positions are pulled back along the ray."""
    _hit_epsilon[None] = epsilon


def _next_index() -> int:
    idx = num_primitives[None]
    if idx >= MAX_PRIMITIVES:
        raise RuntimeError(f"Maximum number of primitives ({MAX_PRIMITIVES}) exceeded")
    return idx


def add_sphere(center: vec3, radius: float, material_id: int = 0) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere (should be positive).
        material_id: The material ID to associate with this sphere.

    Returns:
        The index of the added primitive.

    Raises:
        RuntimeError: If the maximum number of primitives is exceeded.
    """
    idx = _next_index()
    primitive_kinds[idx] = int(PrimitiveKind.SPHERE)
    primitive_positions[idx] = center
    primitive_normals[idx] = vec3(0.0, 0.0, 0.0)
    primitive_radii[idx] = radius
    primitive_material_ids[idx] = material_id
    num_primitives[None] = idx + 1
    return idx


def add_plane(point: vec3, normal: vec3, material_id: int = 0) -> int:
    """Add a single-sided plane to the scene.

    Args:
        point: Any point on the plane.
        normal: The unit normal of the visible face.
        material_id: The material ID to associate with this plane.

    Returns:
        The index of the added primitive.

    Raises:
        RuntimeError: If the maximum number of primitives is exceeded.
    """
    idx = _next_index()
    primitive_kinds[idx] = int(PrimitiveKind.PLANE)
    primitive_positions[idx] = point
    primitive_normals[idx] = normal
    primitive_radii[idx] = 0.0
    primitive_material_ids[idx] = material_id
    num_primitives[None] = idx + 1
    return idx


def get_primitive_count() -> int:
    """Get the number of primitives in the scene."""
    return int(num_primitives[None])


@ti.func
def hit_primitive(ray: Ray, i: ti.i32) -> HitRecord:
    """Intersect a ray with the i-th primitive, dispatching on its kind.

    Args:
        ray: The ray to test.
        i: Index into the primitive table.

    Returns:
        The HitRecord from the kind-specific intersection routine.
    """
    rec = make_miss()
    kind = primitive_kinds[i]
    if kind == int(PrimitiveKind.SPHERE):
        sphere = SphereData(center=primitive_positions[i], radius=primitive_radii[i])
        rec = hit_sphere(ray, sphere, _hit_epsilon[None])
    elif kind == int(PrimitiveKind.PLANE):
        plane = PlaneData(point=primitive_positions[i], normal=primitive_normals[i])
        rec = hit_plane(ray, plane, _hit_epsilon[None])
    return rec


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        hit=0,
        t=0.0,
        position=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        material_id=-1,
    )


@ti.func
def intersect_scene(ray: Ray) -> SceneHitRecord:
    """Find the nearest intersection of a ray with the scene.

    Every primitive is tested. A hit replaces the current best only when the
    best distance compares strictly greater than the candidate, so distances
    that cannot be ordered (NaN) are treated as equal and the earlier hit is
    kept instead of aborting the search.

    Args:
        ray: The ray to trace.

    Returns:
        A SceneHitRecord for the nearest hit, or a miss record.
    """
    result = _make_miss_record()

    for i in range(num_primitives[None]):
        rec = hit_primitive(ray, i)
        if rec.hit == 1:
            if result.hit == 0 or result.t > rec.t:
                result = SceneHitRecord(
                    hit=1,
                    t=rec.t,
                    position=rec.position,
                    normal=rec.normal,
                    material_id=primitive_material_ids[i],
                )

    return result


@ti.func
def intersect_scene_any(ray: Ray) -> ti.i32:
    """Test if any primitive lies in front of the ray (shadow query).

    The query has no maximum distance: primitives beyond the light also
    occlude it. Testing stops at the first primitive reporting t > 0.

    Args:
        ray: The shadow ray.

    Returns:
        1 if any primitive reports a hit with t > 0, 0 otherwise.
    """
    hit_any = 0

    for i in range(num_primitives[None]):
        if hit_any == 0:
            rec = hit_primitive(ray, i)
            if rec.hit == 1 and rec.t > 0.0:
                hit_any = 1

    return hit_any
