"""Scene manager coordinating primitives, materials, light and camera.

The Scene is the high-level API of the renderer. It keeps the host-side list
of primitives and mirrors it into the Taichi primitive and material tables
used by the integrator:

- Primitives are appended in insertion order; every primitive is tested for
  every ray, so the order never changes the image
- Materials are registered once per distinct value and shared by id
- The light and the shading parameters of the RenderConfig are uploaded
  whenever the scene becomes active

Taichi tables are module-level, so only one Scene is active at a time.
Activating another scene (by evaluating or rendering it) re-uploads its
primitives.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from mirrortrace.camera import Camera
    >>> from mirrortrace.materials import Material
    >>> from mirrortrace.scene.manager import Scene
    >>> scene = Scene(camera=Camera((0.0, 1.0, 5.0), (0.0, 0.0, -640.0)))
    >>> scene.add_sphere((0.0, 1.0, 0.0), 1.0, Material.solid((0.9, 0.2, 0.2)))
    0
    >>> pixels = scene.render()
"""

import logging
from collections.abc import Sequence

import numpy as np
import numpy.typing as npt

from mirrortrace.camera.pinhole import Camera, Viewport
from mirrortrace.config import MAX_DEPTH_LIMIT, RenderConfig
from mirrortrace.core.integrator import evaluate_ray, setup_light, setup_shading
from mirrortrace.core.ray import require_direction, require_vector
from mirrortrace.materials.solid import Material, add_material, clear_materials, get_material_count
from mirrortrace.scene import intersection
from mirrortrace.scene.primitives import Hit, Plane, PointLight, Primitive, Sphere, vec3

logger = logging.getLogger(__name__)

Color = tuple[float, float, float, float]

# The scene whose primitives are currently in the Taichi tables
_active_scene: "Scene | None" = None


class Scene:
    """A renderable scene: primitives, one point light and a camera.

    Attributes:
        camera: The camera used by render(). May be moved between renders.
        config: Shading and output parameters.
        light: The point light.
    """

    def __init__(
        self,
        camera: Camera | None = None,
        config: RenderConfig | None = None,
        light: PointLight | None = None,
    ) -> None:
        """Create an empty scene and make it the active one.

        Args:
            camera: Camera for render(). Defaults to a camera at the origin
                looking down -z with a focal length of the configured width.
            config: Render configuration. Defaults to RenderConfig().
            light: Point light. Defaults to PointLight().
        """
        self.config = config if config is not None else RenderConfig()
        self.camera = camera if camera is not None else Camera(
            (0.0, 0.0, 0.0), (0.0, 0.0, -float(self.config.width))
        )
        self.light = light if light is not None else PointLight()

        self._primitives: list[Primitive] = []
        self._material_ids: dict[Material, int] = {}
        self._upload_all()

    def __repr__(self) -> str:
        return (
            f"Scene(primitives={len(self._primitives)}, "
            f"materials={len(self._material_ids)}, camera={self.camera!r})"
        )

    # -------------------------------------------------------------------------
    # Device synchronization
    # -------------------------------------------------------------------------

    def _upload_all(self) -> None:
        """Rewrite the Taichi tables from this scene's host state."""
        global _active_scene

        intersection.clear_scene()
        clear_materials()
        self._material_ids = {}
        for primitive in self._primitives:
            self._upload_primitive(primitive)

        self._upload_parameters()
        _active_scene = self
        logger.debug(
            "Uploaded scene: %d primitives, %d materials",
            len(self._primitives),
            len(self._material_ids),
        )

    def _upload_parameters(self) -> None:
        setup_light(self.light.position, self.light.intensity)
        setup_shading(self.config)

    def _register_material(self, material: Material) -> int:
        material_id = self._material_ids.get(material)
        if material_id is None:
            material_id = add_material(material)
            self._material_ids[material] = material_id
        return material_id

    def _upload_primitive(self, primitive: Primitive) -> int:
        material_id = self._register_material(primitive.material)
        if isinstance(primitive, Sphere):
            return intersection.add_sphere(vec3(*primitive.center), primitive.radius, material_id)
        return intersection.add_plane(vec3(*primitive.point), vec3(*primitive.normal), material_id)

    def activate(self) -> None:
        """Make this scene the one the renderer reads.

        Re-uploads the primitive and material tables when another scene was
        active, and always refreshes the light and shading parameters.
        """
        if _active_scene is not self:
            self._upload_all()
        else:
            self._upload_parameters()

    # -------------------------------------------------------------------------
    # Building
    # -------------------------------------------------------------------------

    def add(self, primitive: Primitive) -> int:
        """Append a primitive.

        Args:
            primitive: A Sphere or a Plane.

        Returns:
            The index of the primitive in insertion order.

        Raises:
            TypeError: If the object is not a supported primitive.
            NotImplementedError: If its material is not a solid color.
            RuntimeError: If primitive or material capacity is exceeded.
        """
        if not isinstance(primitive, (Sphere, Plane)):
            raise TypeError(f"Unsupported primitive type: {type(primitive).__name__}")

        self.activate()
        idx = self._upload_primitive(primitive)
        self._primitives.append(primitive)
        return idx

    def add_sphere(
        self,
        center: Sequence[float],
        radius: float,
        material: Material | None = None,
    ) -> int:
        """Add a sphere.

        Args:
            center: Center point.
            radius: Positive radius.
            material: Surface material. Defaults to opaque white.

        Returns:
            The index of the primitive.
        """
        return self.add(Sphere(tuple(center), radius, material or Material()))

    def add_plane(
        self,
        point: Sequence[float],
        normal: Sequence[float],
        material: Material | None = None,
    ) -> int:
        """Add a single-sided plane.

        Args:
            point: Any point on the plane.
            normal: Normal of the visible face (normalized here).
            material: Surface material. Defaults to opaque white.

        Returns:
            The index of the primitive.
        """
        return self.add(Plane(tuple(point), tuple(normal), material or Material()))

    def clear(self) -> None:
        """Remove every primitive and material."""
        self._primitives = []
        self._upload_all()

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def primitives(self) -> tuple[Primitive, ...]:
        return tuple(self._primitives)

    def get_primitive_count(self) -> int:
        return len(self._primitives)

    def get_material_count(self) -> int:
        """Get the number of distinct materials registered."""
        self.activate()
        return get_material_count()

    def intersect(self, origin: Sequence[float], direction: Sequence[float]) -> Hit | None:
        """Find the nearest primitive hit by a ray.

        A hit replaces the current best only when the best distance compares
        greater than the candidate, so the first primitive wins ties and
        unordered (NaN) distances never displace an earlier hit.

        Args:
            origin: Ray origin.
            direction: Ray direction (must not be zero).

        Returns:
            The nearest Hit, or None if no primitive is hit.
        """
        best: Hit | None = None
        for primitive in self._primitives:
            hit = primitive.intersect(origin, direction, self.config.hit_epsilon)
            if hit is not None and (best is None or best.t > hit.t):
                best = hit
        return best

    def evaluate(
        self,
        origin: Sequence[float],
        direction: Sequence[float],
        depth: int | None = None,
    ) -> Color:
        """Evaluate the color seen along a ray.

        Args:
            origin: Ray origin.
            direction: Ray direction (normalized here; must not be zero).
            depth: Mirror bounces allowed. Defaults to config.max_depth.

        Returns:
            The unclamped RGBA color.

        Raises:
            ValueError: If the direction is zero-length or depth is out of
                range.
        """
        origin = require_vector(origin, "origin")
        direction = require_direction(direction)
        if depth is None:
            depth = self.config.max_depth
        if not 0 <= depth <= MAX_DEPTH_LIMIT:
            raise ValueError(f"depth must be in [0, {MAX_DEPTH_LIMIT}], got {depth}")

        self.activate()
        return evaluate_ray(origin, direction, depth)

    def evaluate_primary(self, origin: Sequence[float], direction: Sequence[float]) -> Color:
        """Evaluate a ray at the default reflection depth."""
        return self.evaluate(origin, direction, self.config.max_depth)

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def render(
        self,
        viewport: Viewport | None = None,
        workers: int | None = None,
    ) -> npt.NDArray[np.uint8]:
        """Render the scene from its camera.

        Args:
            viewport: Output size. Defaults to the configured size.
            workers: Maximum CPU threads. Defaults to config.workers.

        Returns:
            A flat RGBA8 buffer of length width * height * 4.
        """
        pixels = self.camera.render(self, viewport, workers)
        logger.debug("Rendered %d primitives into %d bytes", len(self._primitives), pixels.size)
        return pixels
