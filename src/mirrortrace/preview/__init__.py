"""Preview module for output and visualization.

Components:
    export: Pixel buffer reshaping and PNG export (Pillow)
    interactive: Taichi GGUI window with keyboard camera movement

Example:
    >>> from mirrortrace.preview import InteractivePreview, save_png
    >>> from mirrortrace.scene.demo import create_demo_scene
    >>>
    >>> scene = create_demo_scene()
    >>> InteractivePreview(scene).run()
"""

from mirrortrace.preview.export import pixels_to_array, pixels_to_image, save_png
from mirrortrace.preview.interactive import InteractivePreview

__all__ = [
    "InteractivePreview",
    "pixels_to_array",
    "pixels_to_image",
    "save_png",
]
