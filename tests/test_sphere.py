"""Unit tests for sphere intersection.

Tests cover:
- Ray hitting sphere from outside (near root)
- Ray missing sphere
- Ray starting inside sphere (far root)
- Ray tangent to sphere (single hit)
- Sphere entirely behind the ray origin
- Host-side Sphere primitive
"""

import math

import pytest
import taichi as ti


def _probe(origin, direction, center, radius, hit_epsilon=0.0):
    """Run hit_sphere in a kernel and return (hit, t, position, normal)."""
    from mirrortrace.core.ray import make_ray, vec3
    from mirrortrace.geometry.sphere import SphereData, hit_sphere

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    position = ti.field(dtype=ti.math.vec3, shape=())
    normal = ti.field(dtype=ti.math.vec3, shape=())

    @ti.kernel
    def test_kernel(o: vec3, d: vec3, c: vec3, r: ti.f32, eps: ti.f32):
        ray = make_ray(o, d)
        record = hit_sphere(ray, SphereData(center=c, radius=r), eps)
        hit[None] = record.hit
        t_val[None] = record.t
        position[None] = record.position
        normal[None] = record.normal

    test_kernel(vec3(*origin), vec3(*direction), vec3(*center), radius, hit_epsilon)
    return hit[None], t_val[None], list(position[None]), list(normal[None])


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    def test_direct_hit(self):
        """Test ray hitting sphere head-on from outside."""
        hit, t, position, normal = _probe((0, 0, 5), (0, 0, -1), (0, 0, 0), 1.0)
        assert hit == 1
        assert abs(t - 4.0) < 1e-5
        assert position == pytest.approx([0.0, 0.0, 1.0], abs=1e-5)
        assert normal == pytest.approx([0.0, 0.0, 1.0], abs=1e-5)

    def test_t_is_distance_minus_radius(self):
        """Test t equals distance to center minus radius for central rays."""
        distance = 7.0
        radius = 2.5
        origin = (distance / math.sqrt(3.0),) * 3
        hit, t, _, _ = _probe(origin, (-1, -1, -1), (0, 0, 0), radius)
        assert hit == 1
        assert abs(t - (distance - radius)) < 1e-4

    def test_miss(self):
        """Test ray missing sphere entirely."""
        hit, _, _, _ = _probe((5, 0, 0), (0, 0, -1), (0, 0, 0), 1.0)
        assert hit == 0

    def test_inside_uses_far_root(self):
        """Test ray starting at the center hits the far side."""
        hit, t, _, normal = _probe((0, 0, 0), (0, 0, 1), (0, 0, 0), 2.0)
        assert hit == 1
        assert abs(t - 2.0) < 1e-5
        # Normal points away from the center, also from inside
        assert normal == pytest.approx([0.0, 0.0, 1.0], abs=1e-5)

    def test_sphere_behind_origin(self):
        """Test a sphere behind the ray origin is not hit."""
        hit, _, _, _ = _probe((0, 0, 5), (0, 0, 1), (0, 0, 0), 1.0)
        assert hit == 0

    def test_tangent_ray_single_hit(self):
        """Test a tangent ray reports exactly one hit at the touching point."""
        hit, t, position, _ = _probe((1, 0, 5), (0, 0, -1), (0, 0, 0), 1.0)
        assert hit == 1
        assert abs(t - 5.0) < 1e-5
        assert position == pytest.approx([1.0, 0.0, 0.0], abs=1e-5)

    def test_hit_position_pulled_back(self):
        """Test the hit position is offset toward the ray origin."""
        _, t, position, _ = _probe((0, 0, 5), (0, 0, -1), (0, 0, 0), 1.0, hit_epsilon=0.01)
        assert abs(t - 4.0) < 1e-5
        assert abs(position[2] - 1.01) < 1e-5

    def test_unnormalized_direction(self):
        """Test a long direction still reports a unit-ray distance."""
        hit, t, _, _ = _probe((0, 0, 5), (0, 0, -700), (0, 0, 0), 1.0)
        assert hit == 1
        assert abs(t - 4.0) < 1e-5


class TestSpherePrimitive:
    """Tests for the host-side Sphere."""

    def test_intersect(self):
        from mirrortrace.materials import Material
        from mirrortrace.scene.primitives import Sphere

        material = Material.solid((0.9, 0.2, 0.2))
        sphere = Sphere((0.0, 0.0, 0.0), 1.0, material)
        hit = sphere.intersect((0.0, 0.0, 5.0), (0.0, 0.0, -1.0))

        assert hit is not None
        assert hit.t == pytest.approx(4.0, abs=1e-5)
        assert hit.normal == pytest.approx((0.0, 0.0, 1.0), abs=1e-5)
        assert hit.material is material

    def test_intersect_miss_returns_none(self):
        from mirrortrace.scene.primitives import Sphere

        sphere = Sphere((0.0, 0.0, 0.0), 1.0)
        assert sphere.intersect((5.0, 0.0, 5.0), (0.0, 0.0, -1.0)) is None

    def test_position_is_center(self):
        from mirrortrace.scene.primitives import Sphere

        assert Sphere((1, 2, 3), 0.5).position == (1.0, 2.0, 3.0)

    @pytest.mark.parametrize("radius", [0.0, -1.0, float("nan")])
    def test_invalid_radius(self, radius):
        from mirrortrace.scene.primitives import Sphere

        with pytest.raises(ValueError, match="radius"):
            Sphere((0.0, 0.0, 0.0), radius)

    def test_zero_direction_rejected(self):
        from mirrortrace.scene.primitives import Sphere

        with pytest.raises(ValueError, match="zero-length"):
            Sphere((0.0, 0.0, 0.0), 1.0).intersect((0.0, 0.0, 5.0), (0.0, 0.0, 0.0))
