"""Whitted-style integrator: shading, shadows and mirror reflection.

This module implements the per-ray evaluation and the rendering kernel that
fans it out over every pixel of the viewport.

For one ray with ``depth`` bounces remaining, the integrator:

1. Finds the nearest hit over every primitive (background color on a miss)
2. Looks up the material base color at the hit
3. Attenuates it by the point light (intensity / squared distance)
4. Applies the clamped Lambert term against the direction to the light
5. Casts a shadow ray toward the light and applies the shadow factor when
   anything is in the way
6. If the material is reflective and ``depth > 0``, traces the mirror ray
   with ``depth - 1`` and blends ``r * reflected + (1 - r) * local``

Taichi functions cannot recurse, so step 6 is evaluated iteratively: each
bounce adds its local color weighted by the product of the reflectivities
above it, which is the same expression as the recursive blend expanded.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from mirrortrace.core.integrator import evaluate_ray, setup_light
    >>> setup_light((0.0, 10.0, 5.0), (100.0, 100.0, 100.0, 1.0))
    >>> # An empty scene returns the background color
    >>> color = evaluate_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=5)
"""

import logging
import time
from collections.abc import Sequence
from typing import Any

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from mirrortrace.camera.pinhole import get_ray
from mirrortrace.config import MAX_DEPTH_LIMIT, RenderConfig
from mirrortrace.core.color import mix, scale_rgb, to_rgba8
from mirrortrace.core.ray import Ray, make_ray, ray_at, reflect_ray, require_direction, require_vector
from mirrortrace.materials.solid import get_material_color, get_material_reflectivity
from mirrortrace.scene.intersection import (
    SceneHitRecord,
    intersect_scene,
    intersect_scene_any,
    set_hit_epsilon,
)

logger = logging.getLogger(__name__)

# Type aliases
vec3 = tm.vec3
vec4 = tm.vec4

# =============================================================================
# Light Source Configuration
# =============================================================================

DEFAULT_LIGHT_POSITION = (0.0, 10.0, 5.0)
DEFAULT_LIGHT_INTENSITY = (100.0, 100.0, 100.0, 1.0)

_light_position = ti.Vector.field(3, dtype=ti.f32, shape=())
_light_intensity = ti.Vector.field(4, dtype=ti.f32, shape=())


def setup_light(
    position: tuple[float, float, float],
    intensity: tuple[float, float, float, float],
) -> None:
    """Configure the point light.

    Args:
        position: The light position in world space.
        intensity: The light intensity as RGBA. Color channels are usually
            far above 1.0 since they are divided by the squared distance.
    """
    _light_position[None] = [position[0], position[1], position[2]]
    _light_intensity[None] = [intensity[0], intensity[1], intensity[2], intensity[3]]


# =============================================================================
# Shading Parameters
# =============================================================================

_max_depth = ti.field(dtype=ti.i32, shape=())
_shadow_factor = ti.field(dtype=ti.f32, shape=())
_background = ti.Vector.field(4, dtype=ti.f32, shape=())
_ray_epsilon = ti.field(dtype=ti.f32, shape=())
_min_reflectivity = ti.field(dtype=ti.f32, shape=())


def setup_shading(config: RenderConfig) -> None:
    """Upload the shading parameters of a render configuration.

    Args:
        config: The configuration to apply to subsequent evaluations.
    """
    _max_depth[None] = config.max_depth
    _shadow_factor[None] = config.shadow_factor
    bg = config.background
    _background[None] = [bg[0], bg[1], bg[2], bg[3]]
    _ray_epsilon[None] = config.ray_epsilon
    _min_reflectivity[None] = config.min_reflectivity
    set_hit_epsilon(config.hit_epsilon)


def get_max_depth() -> int:
    """Get the configured default number of mirror bounces."""
    return int(_max_depth[None])


# =============================================================================
# Shading
# =============================================================================


@ti.func
def apply_light(color: vec4, position: vec3) -> vec4:
    """Attenuate a color by the point light with inverse-square falloff.

    Color channels are multiplied by ``intensity / |position - light|^2``;
    alpha is multiplied by the light's alpha.

    Args:
        color: The material base color.
        position: The shaded point.

    Returns:
        The lit color.
    """
    offset = position - _light_position[None]
    falloff = 1.0 / tm.dot(offset, offset)
    light = scale_rgb(_light_intensity[None], falloff)
    return color * light


@ti.func
def apply_shading(color: vec4, normal: vec3, shadow_dir: vec3) -> vec4:
    """Apply the clamped Lambert term.

    Args:
        color: The lit color.
        normal: The surface normal (normalized before use).
        shadow_dir: Unit direction from the shaded point to the light.

    Returns:
        The color scaled by clamp(dot(shadow_dir, normal), 0, 1).
    """
    cos_theta = tm.clamp(tm.dot(shadow_dir, tm.normalize(normal)), 0.0, 1.0)
    return scale_rgb(color, cos_theta)


@ti.func
def in_shadow(position: vec3, shadow_dir: vec3) -> ti.i32:
    """Check whether a point is occluded from the light.

    The shadow ray starts ``ray_epsilon`` toward the light so that it does
    not hit the surface it leaves.

    Args:
        position: The shaded point.
        shadow_dir: Unit direction from the point to the light.

    Returns:
        1 if any primitive lies in front of the shadow ray, 0 otherwise.
    """
    shadow_ray = make_ray(position + shadow_dir * _ray_epsilon[None], shadow_dir)
    return intersect_scene_any(shadow_ray)


@ti.func
def shade_hit(rec: SceneHitRecord) -> vec4:
    """Compute the local (non-reflected) color of a hit.

    Args:
        rec: The nearest hit of a ray.

    Returns:
        The lit, diffusely shaded and shadowed color.
    """
    base = get_material_color(rec.material_id, rec.position)
    shadow_dir = tm.normalize(_light_position[None] - rec.position)

    color = apply_light(base, rec.position)
    color = apply_shading(color, rec.normal, shadow_dir)

    if in_shadow(rec.position, shadow_dir) == 1:
        color = scale_rgb(color, _shadow_factor[None])

    return color


@ti.func
def trace_ray(ray: Ray, depth: ti.i32) -> vec4:
    """Evaluate the color seen along a ray.

    Equivalent to the recursive definition

        eval(ray, d) = background                          on a miss
                     = local                               if d == 0 or r <= min
                     = r * eval(mirror, d - 1) + (1 - r) * local

    evaluated front to back with a running weight. The loop runs at most
    ``depth + 1`` times, once per surface visited.

    Args:
        ray: The ray to trace (unit direction).
        depth: Number of mirror bounces still allowed.

    Returns:
        The unclamped RGBA color.
    """
    color = vec4(0.0, 0.0, 0.0, 0.0)
    weight = 1.0
    remaining = depth
    current = ray

    # Active flag for path continuation
    active = 1

    for _ in range(depth + 1):
        if active == 1:
            rec = intersect_scene(current)

            if rec.hit == 0:
                color += weight * _background[None]
                active = 0
            else:
                local = shade_hit(rec)
                reflectivity = get_material_reflectivity(rec.material_id)

                if remaining == 0 or reflectivity <= _min_reflectivity[None]:
                    color += weight * local
                    active = 0
                else:
                    color += weight * mix(local, vec4(0.0, 0.0, 0.0, 0.0), reflectivity)
                    weight *= reflectivity
                    origin = ray_at(current, rec.t - _ray_epsilon[None])
                    current = reflect_ray(current, rec.normal, origin)
                    remaining -= 1

    return color


# =============================================================================
# Single-ray Evaluation
# =============================================================================


@ti.kernel
def _evaluate_kernel(origin: vec3, direction: vec3, depth: ti.i32) -> vec4:
    """Evaluate one ray. Used by the Python-side evaluation API."""
    return trace_ray(make_ray(origin, direction), depth)


def evaluate_ray(
    origin: Sequence[float],
    direction: Sequence[float],
    depth: int | None = None,
) -> tuple[float, float, float, float]:
    """Evaluate the color seen along a single ray.

    This is a Python-callable function for testing and probing. For full
    frames, use render_image() which processes all pixels in parallel.

    Args:
        origin: The ray origin.
        direction: The ray direction (normalized here; must not be zero).
        depth: Mirror bounces allowed. Defaults to the configured max depth.

    Returns:
        Tuple of (R, G, B, A) color values, unclamped.

    Raises:
        ValueError: If the direction is zero-length or depth is out of range.
    """
    origin = require_vector(origin, "origin")
    direction = require_direction(direction)
    if depth is None:
        depth = get_max_depth()
    if not 0 <= depth <= MAX_DEPTH_LIMIT:
        raise ValueError(f"depth must be in [0, {MAX_DEPTH_LIMIT}], got {depth}")

    color = _evaluate_kernel(vec3(*origin), vec3(*direction), depth)
    return (float(color[0]), float(color[1]), float(color[2]), float(color[3]))


# =============================================================================
# Render Target (Image Buffers)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Row-major buffers indexed [row, column]; row 0 is the top of the image
_color_buffer = ti.Vector.field(4, dtype=ti.f32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))
_pixel_buffer = ti.Vector.field(4, dtype=ti.u8, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

# Dimensions of the last completed render
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# One compiled kernel per worker count
_render_kernels: dict[int | None, Any] = {}


def _get_render_kernel(workers: int | None) -> Any:
    """Get or create the pixel loop kernel for a worker count.

    The worker count is baked into the kernel as a loop directive, so each
    distinct value is compiled once. None leaves the thread count to Taichi.
    """
    if workers not in _render_kernels:
        if workers is None:

            @ti.kernel
            def _kernel(width: ti.i32, height: ti.i32, depth: ti.i32):
                for j, i in ti.ndrange(height, width):
                    color = trace_ray(get_ray(i, j, width, height), depth)
                    _color_buffer[j, i] = color
                    _pixel_buffer[j, i] = to_rgba8(color)

        else:

            @ti.kernel
            def _kernel(width: ti.i32, height: ti.i32, depth: ti.i32):
                ti.loop_config(parallelize=workers)
                for j, i in ti.ndrange(height, width):
                    color = trace_ray(get_ray(i, j, width, height), depth)
                    _color_buffer[j, i] = color
                    _pixel_buffer[j, i] = to_rgba8(color)

        _render_kernels[workers] = _kernel
    return _render_kernels[workers]


def check_image_dimensions(width: int, height: int) -> None:
    """Validate render dimensions against the preallocated buffers.

    Raises:
        ValueError: If a dimension is not positive or exceeds the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )


def render_image(width: int, height: int, workers: int | None = None) -> None:
    """Render every pixel of a width x height viewport.

    The camera must have been uploaded with setup_camera(). Each pixel is an
    independent evaluation writing only its own buffer slot, so the result
    does not depend on the number of workers or their scheduling.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).
        workers: Maximum CPU threads for the pixel loop. None uses every
            thread Taichi was initialized with.

    Raises:
        ValueError: If the dimensions or worker count are invalid.
    """
    check_image_dimensions(width, height)
    if workers is not None and workers < 1:
        raise ValueError(f"workers must be at least 1, got {workers}")

    start = time.perf_counter()
    _get_render_kernel(workers)(width, height, get_max_depth())
    ti.sync()

    _image_width[None] = width
    _image_height[None] = height
    logger.debug(
        "Rendered %dx%d (workers=%s) in %.3fs",
        width,
        height,
        workers,
        time.perf_counter() - start,
    )


def get_image_dimensions() -> tuple[int, int]:
    """Get the dimensions of the last render.

    Returns:
        Tuple of (width, height). (0, 0) before the first render.
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_rendered() -> tuple[int, int]:
    width, height = get_image_dimensions()
    if width == 0 or height == 0:
        raise RuntimeError("Nothing rendered yet. Call render_image() first.")
    return width, height


def get_pixel_buffer() -> npt.NDArray[np.uint8]:
    """Get the last render as a flat row-major RGBA8 buffer.

    Returns:
        A uint8 array of length width * height * 4, top row first.

    Raises:
        RuntimeError: If nothing has been rendered yet.
    """
    width, height = _check_rendered()
    pixels = _pixel_buffer.to_numpy()[:height, :width, :]
    return np.ascontiguousarray(pixels).reshape(-1)


def get_color_image_numpy() -> npt.NDArray[np.float32]:
    """Get the unclamped float colors of the last render.

    Returns:
        A float32 array of shape (height, width, 4), top row first.

    Raises:
        RuntimeError: If nothing has been rendered yet.
    """
    width, height = _check_rendered()
    image = _color_buffer.to_numpy()[:height, :width, :]
    return image.astype(np.float32)
