"""Image export utilities for rendered pixel buffers.

Renders produce flat row-major RGBA8 buffers (top row first). This module
reshapes them into images and writes them with Pillow.

Supported formats:
    - PNG (8-bit RGBA via Pillow)

Example:
    >>> from mirrortrace.camera import Viewport
    >>> from mirrortrace.preview.export import save_png
    >>> from mirrortrace.scene.demo import create_demo_scene
    >>>
    >>> scene = create_demo_scene()
    >>> viewport = Viewport(640, 480)
    >>> save_png(scene.render(viewport), viewport, "demo.png")
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from mirrortrace.camera.pinhole import Viewport

logger = logging.getLogger(__name__)


def pixels_to_array(pixels: npt.NDArray[np.uint8], viewport: Viewport) -> npt.NDArray[np.uint8]:
    """Reshape a flat RGBA8 buffer into a (height, width, 4) image array.

    Args:
        pixels: Flat buffer of length width * height * 4.
        viewport: The dimensions the buffer was rendered at.

    Returns:
        A uint8 array of shape (height, width, 4), top row first.

    Raises:
        ValueError: If the buffer size does not match the viewport.
    """
    if pixels.size != viewport.buffer_size:
        raise ValueError(
            f"Pixel buffer has {pixels.size} bytes, expected {viewport.buffer_size} "
            f"for {viewport.width}x{viewport.height}"
        )
    return np.asarray(pixels, dtype=np.uint8).reshape(viewport.height, viewport.width, 4)


def pixels_to_image(pixels: npt.NDArray[np.uint8], viewport: Viewport) -> PILImage.Image:
    """Wrap a flat RGBA8 buffer in a Pillow image.

    Args:
        pixels: Flat buffer of length width * height * 4.
        viewport: The dimensions the buffer was rendered at.

    Returns:
        An RGBA Pillow image.
    """
    return PILImage.fromarray(pixels_to_array(pixels, viewport), mode="RGBA")


def save_png(pixels: npt.NDArray[np.uint8], viewport: Viewport, filepath: str | Path) -> None:
    """Save a flat RGBA8 buffer as a PNG file.

    Args:
        pixels: Flat buffer of length width * height * 4.
        viewport: The dimensions the buffer was rendered at.
        filepath: Output file path (should end in .png).
    """
    pixels_to_image(pixels, viewport).save(filepath, format="PNG")
    logger.info("Saved %dx%d image to %s", viewport.width, viewport.height, filepath)
