"""Tests for the Whitted-style integrator.

Tests cover:
- Background color for rays that hit nothing
- Inverse-square light attenuation and the clamped diffuse term
- Hard shadows scaled by the shadow factor
- Mirror blending for reflective = 0, 0.5 and 1
- Bounded reflection between two parallel mirrors
"""

import math

import pytest

BACKGROUND = (0.2, 0.2, 0.4, 1.0)
DIAGONAL_ORIGIN = (5.0, 5.0, 0.0)
DIAGONAL_DOWN = (-1.0, -1.0, 0.0)


def _mirror_origin():
    """Origin of the mirror ray spawned where DIAGONAL_DOWN meets the floor."""
    offset = 1e-4 / math.sqrt(2.0)
    return (offset, offset, 0.0)


def _floor_scene(reflective=0.0, light_position=(0.0, 10.0, 0.0), config=None):
    from mirrortrace.materials import Material
    from mirrortrace.scene.manager import Scene
    from mirrortrace.scene.primitives import PointLight

    scene = Scene(config=config, light=PointLight(light_position, (100.0, 100.0, 100.0, 1.0)))
    scene.add_plane((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), Material.solid((1.0, 1.0, 1.0), reflective))
    return scene


class TestBackground:
    """Tests for rays that escape the scene."""

    def test_empty_scene_returns_background(self):
        from mirrortrace.scene.manager import Scene

        scene = Scene()
        color = scene.evaluate_primary((0.0, 0.0, 0.0), (0.3, -0.2, 1.0))
        assert color == pytest.approx(BACKGROUND, abs=1e-6)

    def test_missing_every_primitive_returns_background(self):
        scene = _floor_scene()
        scene.add_sphere((0.0, 5.0, -10.0), 1.0)
        color = scene.evaluate((0.0, 1.0, 0.0), (0.0, 1.0, 0.0), depth=5)
        assert color == pytest.approx(BACKGROUND, abs=1e-6)

    def test_custom_background(self):
        from mirrortrace.config import RenderConfig
        from mirrortrace.scene.manager import Scene

        scene = Scene(config=RenderConfig(background=(1.0, 0.0, 0.0, 0.5)))
        color = scene.evaluate((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert color == pytest.approx((1.0, 0.0, 0.0, 0.5))


class TestLocalShading:
    """Tests for light attenuation, diffuse term and shadows."""

    def test_lit_point_below_light(self):
        """Test rgb * intensity / d^2 with cos = 1."""
        scene = _floor_scene()
        color = scene.evaluate(DIAGONAL_ORIGIN, DIAGONAL_DOWN, depth=0)
        assert color == pytest.approx((1.0, 1.0, 1.0, 1.0), rel=1e-4)

    def test_inverse_square_falloff(self):
        near = _floor_scene(light_position=(0.0, 10.0, 0.0))
        near_color = near.evaluate(DIAGONAL_ORIGIN, DIAGONAL_DOWN, depth=0)
        far = _floor_scene(light_position=(0.0, 20.0, 0.0))
        far_color = far.evaluate(DIAGONAL_ORIGIN, DIAGONAL_DOWN, depth=0)
        assert far_color[0] == pytest.approx(near_color[0] / 4.0, rel=1e-4)
        # Alpha is scaled by the light alpha only
        assert far_color[3] == pytest.approx(1.0)

    def test_diffuse_term_uses_light_angle(self):
        """Test the Lambert factor for a light at 60 degrees from the normal."""
        distance = 10.0
        angle = math.radians(60.0)
        light = (distance * math.sin(angle), distance * math.cos(angle), 0.0)
        scene = _floor_scene(light_position=light)

        color = scene.evaluate(DIAGONAL_ORIGIN, DIAGONAL_DOWN, depth=0)
        expected = 100.0 / distance**2 * math.cos(angle)
        assert color[0] == pytest.approx(expected, rel=1e-4)

    def test_diffuse_term_clamped_at_zero(self):
        """Test a point facing away from the light is black, not negative."""
        from mirrortrace.materials import Material
        from mirrortrace.scene.manager import Scene
        from mirrortrace.scene.primitives import PointLight

        scene = Scene(light=PointLight((0.0, 0.0, -10.0), (100.0, 100.0, 100.0, 1.0)))
        scene.add_sphere((0.0, 0.0, 0.0), 1.0, Material.solid((1.0, 1.0, 1.0)))

        color = scene.evaluate((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), depth=0)
        assert color[:3] == pytest.approx((0.0, 0.0, 0.0), abs=1e-6)
        assert color[3] == pytest.approx(1.0)

    def test_shadow_scales_by_shadow_factor(self):
        """Test an occluder between the point and the light scales by 0.05."""
        lit = _floor_scene().evaluate(DIAGONAL_ORIGIN, DIAGONAL_DOWN, depth=0)

        scene = _floor_scene()
        scene.add_sphere((0.0, 5.0, 0.0), 1.0)
        shadowed = scene.evaluate(DIAGONAL_ORIGIN, DIAGONAL_DOWN, depth=0)

        for c in range(3):
            assert shadowed[c] == pytest.approx(lit[c] * 0.05, rel=1e-5)
        assert shadowed[3] == pytest.approx(lit[3])

    def test_custom_shadow_factor(self):
        from mirrortrace.config import RenderConfig

        scene = _floor_scene(config=RenderConfig(shadow_factor=0.5))
        scene.add_sphere((0.0, 5.0, 0.0), 1.0)
        color = scene.evaluate(DIAGONAL_ORIGIN, DIAGONAL_DOWN, depth=0)
        assert color[0] == pytest.approx(0.5, rel=1e-4)


class TestReflection:
    """Tests for mirror blending."""

    def _add_target(self, scene):
        from mirrortrace.materials import Material

        # Sits on the mirror ray of DIAGONAL_DOWN off the floor
        scene.add_sphere((-8.0, 8.0, 0.0), 1.0, Material.solid((0.3, 0.3, 0.9)))

    def test_full_mirror_returns_reflected_color(self):
        scene = _floor_scene(reflective=1.0)
        self._add_target(scene)

        color = scene.evaluate(DIAGONAL_ORIGIN, DIAGONAL_DOWN, depth=5)
        reflected = scene.evaluate(_mirror_origin(), (-1.0, 1.0, 0.0), depth=4)

        assert reflected != pytest.approx(BACKGROUND, abs=1e-3)
        assert color == pytest.approx(reflected, abs=1e-4)

    def test_full_mirror_at_depth_zero_returns_local(self):
        scene = _floor_scene(reflective=1.0)
        self._add_target(scene)

        color = scene.evaluate(DIAGONAL_ORIGIN, DIAGONAL_DOWN, depth=0)
        assert color == pytest.approx((1.0, 1.0, 1.0, 1.0), rel=1e-4)

    def test_matte_surface_ignores_depth(self):
        scene = _floor_scene(reflective=0.0)
        self._add_target(scene)

        colors = [scene.evaluate(DIAGONAL_ORIGIN, DIAGONAL_DOWN, depth=d) for d in (0, 1, 5)]
        assert colors[0] == colors[1] == colors[2]

    def test_half_mirror_blends(self):
        scene = _floor_scene(reflective=0.5)
        self._add_target(scene)

        local = scene.evaluate(DIAGONAL_ORIGIN, DIAGONAL_DOWN, depth=0)
        reflected = scene.evaluate(_mirror_origin(), (-1.0, 1.0, 0.0), depth=2)
        color = scene.evaluate(DIAGONAL_ORIGIN, DIAGONAL_DOWN, depth=3)

        expected = tuple(0.5 * r + 0.5 * c for r, c in zip(reflected, local))
        assert color == pytest.approx(expected, abs=1e-4)

    def test_mirror_to_sky_returns_background(self):
        scene = _floor_scene(reflective=1.0)
        color = scene.evaluate(DIAGONAL_ORIGIN, DIAGONAL_DOWN, depth=1)
        assert color == pytest.approx(BACKGROUND, abs=1e-6)

    def test_alpha_stays_opaque(self):
        scene = _floor_scene(reflective=0.7)
        self._add_target(scene)
        color = scene.evaluate(DIAGONAL_ORIGIN, DIAGONAL_DOWN, depth=5)
        assert color[3] == pytest.approx(1.0, abs=1e-6)


class TestBoundedRecursion:
    """Tests for two mirrors facing each other."""

    def _corridor(self, max_depth):
        from mirrortrace.config import RenderConfig
        from mirrortrace.materials import Material
        from mirrortrace.scene.manager import Scene
        from mirrortrace.scene.primitives import PointLight

        mirror = Material.solid((1.0, 1.0, 1.0), reflective=1.0)
        scene = Scene(
            config=RenderConfig(max_depth=max_depth),
            light=PointLight((0.0, 5.0, 0.0), (100.0, 100.0, 100.0, 1.0)),
        )
        scene.add_plane((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), mirror)
        scene.add_plane((0.0, 10.0, 0.0), (0.0, -1.0, 0.0), mirror)
        return scene

    def test_terminates_at_configured_depth(self):
        """Test the color is the local color of the (depth + 1)-th surface."""
        scene = self._corridor(max_depth=3)
        color = scene.evaluate_primary((0.0, 5.0, 0.0), (1.0, -1.0, 0.0))

        # Hits at x = 5, 15, 25, 35; the last one is on the ceiling
        d2 = 35.0**2 + 5.0**2
        cos_theta = 5.0 / math.sqrt(d2)
        # Every shadow ray between the mirrors meets the opposite plane
        expected = 0.05 * 100.0 / d2 * cos_theta

        for c in range(3):
            assert color[c] == pytest.approx(expected, rel=1e-3)
        assert color[3] == pytest.approx(1.0)

    def test_deep_recursion_is_finite(self):
        from mirrortrace.config import MAX_DEPTH_LIMIT

        scene = self._corridor(max_depth=MAX_DEPTH_LIMIT)
        color = scene.evaluate_primary((0.0, 5.0, 0.0), (1.0, -1.0, 0.0))
        assert all(math.isfinite(c) for c in color)


class TestEvaluateValidation:
    """Tests for argument checking of the evaluation API."""

    def test_zero_direction(self):
        from mirrortrace.scene.manager import Scene

        with pytest.raises(ValueError, match="zero-length"):
            Scene().evaluate((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))

    def test_negative_depth(self):
        from mirrortrace.scene.manager import Scene

        with pytest.raises(ValueError, match="depth"):
            Scene().evaluate((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=-1)

    def test_evaluate_ray_defaults_to_configured_depth(self):
        from mirrortrace.core.integrator import evaluate_ray, get_max_depth

        scene = _floor_scene(reflective=1.0)
        assert get_max_depth() == scene.config.max_depth
        color = evaluate_ray(DIAGONAL_ORIGIN, DIAGONAL_DOWN)
        assert color == pytest.approx(BACKGROUND, abs=1e-6)
