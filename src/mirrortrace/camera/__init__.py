"""Camera module for view and ray generation.

Components:
    pinhole: Movable camera generating one ray per pixel

Rays are generated in pixel units around the view direction:
    x = i - width // 2   (columns, left to right)
    y = height // 2 - j  (rows, top to bottom)
"""

from .pinhole import (
    Camera,
    Viewport,
    get_camera_info,
    get_camera_position,
    get_ray,
    primary_direction,
    setup_camera,
)

__all__ = [
    "Camera",
    "Viewport",
    "setup_camera",
    "get_ray",
    "get_camera_position",
    "get_camera_info",
    "primary_direction",
]
