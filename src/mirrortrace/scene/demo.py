"""Demo scene: mirrored spheres over a reflective floor.

The scene consists of:
- A reflective light gray floor at y = 0
- A column of bronze spheres (radius 5) behind the origin, half reflective
- Two stacked bronze mirror spheres (radius 5, reflectivity 0.9)
- Three small spheres around the origin: blue, green and matte yellow
- The default point light at (0, 10, 5)

The camera sits at (10, 1, 0) looking down -x with a focal length of 700
pixels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from mirrortrace.scene.demo import create_demo_scene
    >>> scene = create_demo_scene()
    >>> scene.get_primitive_count()
    14
"""

from mirrortrace.camera.pinhole import Camera
from mirrortrace.config import RenderConfig
from mirrortrace.materials.solid import Material
from mirrortrace.scene.manager import Scene

DEMO_CAMERA_POSITION = (10.0, 1.0, 0.0)
DEMO_CAMERA_DIRECTION = (-700.0, 0.0, 0.0)

FLOOR = Material.solid((0.9, 0.9, 0.9), reflective=0.7)
BRONZE = Material.solid((0.6, 0.3, 0.0), reflective=0.5)
BRONZE_MIRROR = Material.solid((0.6, 0.3, 0.0), reflective=0.9)
BLUE = Material.solid((0.3, 0.3, 0.9), reflective=0.3)
GREEN = Material.solid((0.5, 0.9, 0.5), reflective=0.4)
YELLOW = Material.solid((0.9, 0.9, 0.5))


def create_demo_scene(config: RenderConfig | None = None) -> Scene:
    """Create the demo scene.

    Args:
        config: Render configuration. Defaults to RenderConfig().

    Returns:
        The populated Scene with its camera.
    """
    camera = Camera(DEMO_CAMERA_POSITION, DEMO_CAMERA_DIRECTION)
    scene = Scene(camera=camera, config=config)

    scene.add_plane((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), FLOOR)

    # Column of spheres at x = -30
    for j in range(4):
        for k in range(2):
            scene.add_sphere((-30.0, j * 10.0, 20.0 + k * 10.0), 5.0, BRONZE)

    scene.add_sphere((-10.0, 1.0, 0.0), 5.0, BRONZE_MIRROR)
    scene.add_sphere((-10.0, 11.0, 0.0), 5.0, BRONZE_MIRROR)

    scene.add_sphere((0.0, 1.0, 0.0), 1.0, BLUE)
    scene.add_sphere((0.0, 1.0, -2.0), 1.0, GREEN)
    scene.add_sphere((0.0, 1.0, 2.0), 1.0, YELLOW)

    return scene
