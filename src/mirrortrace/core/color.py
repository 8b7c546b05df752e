"""RGBA color utilities.

Colors are 4-component (r, g, b, a) float vectors that are never clamped
while shading: light intensities are routinely far above 1.0 and the
attenuated result is only saturated when converted to bytes for display.

Scaling follows the convention of the shading pipeline: ``scale_rgb`` scales
the three color channels and leaves alpha untouched, ``mix`` blends all four
channels.
"""

from collections.abc import Sequence

import taichi as ti
import taichi.math as tm

# Type alias for RGBA colors
vec4 = tm.vec4


@ti.func
def scale_rgb(color: vec4, factor: ti.f32) -> vec4:
    """Multiply the color channels by a scalar, keeping alpha.

    Args:
        color: The input color.
        factor: The scale factor.

    Returns:
        (r * factor, g * factor, b * factor, a).
    """
    return vec4(color.x * factor, color.y * factor, color.z * factor, color.w)


@ti.func
def mix(local: vec4, reflected: vec4, reflectivity: ti.f32) -> vec4:
    """Blend a locally shaded color with a reflected color.

    The weights always sum to one, on every channel including alpha.

    Args:
        local: The locally shaded color.
        reflected: The color seen along the mirror ray.
        reflectivity: Fraction of the reflected color in [0, 1].

    Returns:
        reflectivity * reflected + (1 - reflectivity) * local.
    """
    return reflectivity * reflected + (1.0 - reflectivity) * local


@ti.func
def is_nan(value: ti.f32) -> ti.i32:
    """Test for NaN on the bit pattern, which holds under fast math."""
    bits = ti.bit_cast(value, ti.u32) & ti.u32(0x7FFFFFFF)
    return bits > ti.u32(0x7F800000)


@ti.func
def to_rgba8(color: vec4):
    """Convert a float color to four unsigned bytes.

    Components are saturated to [0, 1] and scaled to [0, 255] with
    truncation. NaN components map to 0.

    Args:
        color: The float color (unclamped).

    Returns:
        A 4-component u8 vector.
    """
    result = ti.Vector([0, 0, 0, 0], dt=ti.u8)
    for c in ti.static(range(4)):
        value = color[c]
        if is_nan(value):
            value = 0.0
        value = tm.clamp(value, 0.0, 1.0)
        result[c] = ti.cast(value * 255.0, ti.u8)
    return result


def as_rgba(color: Sequence[float]) -> tuple[float, float, float, float]:
    """Normalize a color given from Python to an RGBA tuple.

    Three-component colors get an alpha of 1.0.

    Args:
        color: An (r, g, b) or (r, g, b, a) sequence.

    Returns:
        The color as an (r, g, b, a) tuple of floats.

    Raises:
        ValueError: If the color does not have 3 or 4 components.
    """
    if len(color) == 3:
        return (float(color[0]), float(color[1]), float(color[2]), 1.0)
    if len(color) == 4:
        return (float(color[0]), float(color[1]), float(color[2]), float(color[3]))
    raise ValueError(f"Color must have 3 or 4 components, got {len(color)}")
