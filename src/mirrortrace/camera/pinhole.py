"""Pixel-offset camera for primary ray generation.

The camera is described by a position, a view direction and an up vector.
Rays are generated per pixel by offsetting the view direction in pixel units:

    left = normalize(cross(direction, up))
    x    = i - width // 2            (column offset)
    y    = height // 2 - j           (row offset, rows run top to bottom)
    ray  = (position, normalize(direction + left * x + up * y))

The length of ``direction`` therefore acts as the focal length in pixels: a
longer direction gives a narrower field of view.

All ray generation is Taichi-compatible; the camera state is uploaded into
0-d fields by setup_camera() before each render.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from mirrortrace.camera.pinhole import Camera, Viewport
    >>> camera = Camera(position=(10.0, 1.0, 0.0), direction=(-700.0, 0.0, 0.0))
    >>> camera.move_forward(0.5)
    >>> camera.position
    (9.5, 1.0, 0.0)
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from mirrortrace.core.ray import Ray, make_ray, normalized, require_direction, require_vector, vec3

if TYPE_CHECKING:
    from mirrortrace.scene.manager import Scene

logger = logging.getLogger(__name__)

# Largest supported viewport; matches the preallocated render buffers
MAX_VIEWPORT_WIDTH = 2048
MAX_VIEWPORT_HEIGHT = 2048


@dataclass(frozen=True)
class Viewport:
    """Pixel dimensions of a render target.

    Attributes:
        width: Number of pixel columns.
        height: Number of pixel rows.
    """

    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Viewport must be positive, got {self.width}x{self.height}")
        if self.width > MAX_VIEWPORT_WIDTH or self.height > MAX_VIEWPORT_HEIGHT:
            raise ValueError(
                f"Viewport ({self.width}x{self.height}) exceeds maximum supported "
                f"({MAX_VIEWPORT_WIDTH}x{MAX_VIEWPORT_HEIGHT})"
            )

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    @property
    def buffer_size(self) -> int:
        """Size in bytes of an RGBA8 buffer for this viewport."""
        return self.pixel_count * 4


class Camera:
    """A movable camera generating one ray per pixel.

    Attributes:
        position: Camera position in world space.
        direction: View direction; its length is the focal length in pixels.
        up: Unit up vector.
    """

    def __init__(
        self,
        position: tuple[float, float, float],
        direction: tuple[float, float, float],
        up: tuple[float, float, float] = (0.0, 1.0, 0.0),
    ) -> None:
        """Create a camera.

        Raises:
            ValueError: If direction or up is zero-length or not finite, or
                if they are parallel (the left vector would be undefined).
        """
        self.position = require_vector(position, "position")
        self.direction = require_direction(direction)
        self.up = normalized(up, "up")

        cross = np.cross(np.array(self.direction), np.array(self.up))
        if np.linalg.norm(cross) == 0.0:
            raise ValueError("Camera direction must not be parallel to up")

    def __repr__(self) -> str:
        return f"Camera(position={self.position}, direction={self.direction}, up={self.up})"

    @property
    def left(self) -> tuple[float, float, float]:
        """Unit vector normalize(cross(direction, up))."""
        left = np.cross(np.array(self.direction, dtype=np.float64), np.array(self.up, dtype=np.float64))
        left = left / np.linalg.norm(left)
        return (float(left[0]), float(left[1]), float(left[2]))

    # -------------------------------------------------------------------------
    # Movement
    # -------------------------------------------------------------------------

    def _translate(self, offset: npt.NDArray[np.float64]) -> None:
        position = np.array(self.position, dtype=np.float64) + offset
        self.position = (float(position[0]), float(position[1]), float(position[2]))

    def move_left(self, amount: float) -> None:
        """Translate the camera by -left * amount."""
        self._translate(np.array(self.left) * -amount)

    def move_right(self, amount: float) -> None:
        """Translate the camera by left * amount."""
        self._translate(np.array(self.left) * amount)

    def move_forward(self, amount: float) -> None:
        """Translate the camera along the view direction."""
        self._translate(np.array(normalized(self.direction)) * amount)

    def move_back(self, amount: float) -> None:
        """Translate the camera against the view direction."""
        self._translate(np.array(normalized(self.direction)) * -amount)

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def render(
        self,
        scene: "Scene",
        viewport: Viewport | None = None,
        workers: int | None = None,
    ) -> npt.NDArray[np.uint8]:
        """Render the scene into a flat RGBA8 buffer.

        Every pixel is evaluated independently and written to its own slot,
        so the buffer is byte-identical for any worker count.

        Args:
            scene: The scene to render. Its tables must be the active ones.
            viewport: Output size. Defaults to the scene configuration size.
            workers: Maximum CPU threads. Defaults to the scene configuration.

        Returns:
            A uint8 array of length width * height * 4, row-major with the
            top row first. Channels are trunc(clamp(c, 0, 1) * 255).
        """
        from mirrortrace.core.integrator import get_pixel_buffer, render_image

        config = scene.config
        if viewport is None:
            viewport = Viewport(config.width, config.height)
        if workers is None:
            workers = config.workers

        scene.activate()
        setup_camera(self)
        render_image(viewport.width, viewport.height, workers)
        return get_pixel_buffer()


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_position = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_direction = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_left = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_up = ti.Vector.field(3, dtype=ti.f32, shape=())


def setup_camera(camera: Camera) -> None:
    """Upload the camera state for ray generation.

    Args:
        camera: The camera to render from.
    """
    left = camera.left
    _camera_position[None] = list(camera.position)
    _camera_direction[None] = list(camera.direction)
    _camera_left[None] = list(left)
    _camera_up[None] = list(camera.up)
    logger.debug("Camera at %s, direction %s, left %s", camera.position, camera.direction, left)


@ti.func
def get_ray(i: ti.i32, j: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Generate the primary ray of pixel (i, j).

    Args:
        i: Pixel column (0 = left edge).
        j: Pixel row (0 = top edge).
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        A Ray from the camera position with a unit direction.
    """
    x = ti.cast(i - width // 2, ti.f32)
    y = ti.cast(height // 2 - j, ti.f32)
    direction = _camera_direction[None] + _camera_left[None] * x + _camera_up[None] * y
    return make_ray(_camera_position[None], direction)


@ti.func
def get_camera_position() -> vec3:
    """Get the camera position in world space."""
    return _camera_position[None]


@ti.kernel
def _primary_direction_kernel(i: ti.i32, j: ti.i32, width: ti.i32, height: ti.i32) -> tm.vec3:
    return get_ray(i, j, width, height).direction


def primary_direction(i: int, j: int, viewport: Viewport) -> tuple[float, float, float]:
    """Get the unit direction of a pixel's primary ray (debugging aid).

    setup_camera() must have been called first.
    """
    d = _primary_direction_kernel(i, j, viewport.width, viewport.height)
    return (float(d[0]), float(d[1]), float(d[2]))


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get the uploaded camera state for debugging.

    Returns:
        Dictionary with position, direction, left and up.
    """
    fields = {
        "position": _camera_position,
        "direction": _camera_direction,
        "left": _camera_left,
        "up": _camera_up,
    }
    info = {}
    for name, field in fields.items():
        v = field[None]
        info[name] = (float(v[0]), float(v[1]), float(v[2]))
    return info
