"""Interactive preview window using Taichi GGUI.

This module shows a scene in a ti.ui.Window, re-rendering every frame from
the scene's camera, and moves the camera from the keyboard:

    W / S      move forward / back by ``move_step`` per key press
    A / D      move left / right by ``move_step`` per key press,
               and by ``hold_step`` every frame while held
    Escape     close the window

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from mirrortrace.preview.interactive import InteractivePreview
    >>> from mirrortrace.scene.demo import create_demo_scene
    >>>
    >>> preview = InteractivePreview(create_demo_scene())
    >>> preview.run()
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import TYPE_CHECKING

import numpy as np
import taichi as ti

from mirrortrace.camera.pinhole import Viewport
from mirrortrace.preview.export import pixels_to_array

if TYPE_CHECKING:
    import numpy.typing as npt

    from mirrortrace.scene.manager import Scene

logger = logging.getLogger(__name__)


class InteractivePreview:
    """Interactive preview window using Taichi GGUI.

    Attributes:
        scene: The scene being displayed. Its camera is moved by the keys.
        viewport: Render and window size.
        display_image: Taichi field storing the display image (RGB float).
    """

    def __init__(
        self,
        scene: Scene,
        viewport: Viewport | None = None,
        *,
        title: str = "mirrortrace",
    ) -> None:
        """Initialize the interactive preview.

        Args:
            scene: The scene to render.
            viewport: Window size. Defaults to the scene configuration size.
            title: Window title.

        Note:
            The window is created lazily on first use so that the object can
            be built in headless environments.
        """
        self.scene = scene
        self.viewport = viewport if viewport is not None else Viewport(
            scene.config.width, scene.config.height
        )
        self._title = title
        self._is_initialized = False
        self._last_pixels: npt.NDArray[np.uint8] | None = None

        self._window: ti.ui.Window | None = None
        self._canvas: ti.ui.Canvas | None = None

        # Shape is (width, height) for Taichi field, RGB values stored as vec3
        self.display_image: ti.MatrixField = ti.Vector.field(
            3, dtype=ti.f32, shape=(self.viewport.width, self.viewport.height)
        )

    @property
    def width(self) -> int:
        return self.viewport.width

    @property
    def height(self) -> int:
        return self.viewport.height

    def _initialize_window(self) -> None:
        if self._is_initialized:
            return

        self._window = ti.ui.Window(
            name=self._title,
            res=(self.width, self.height),
            vsync=True,
        )
        self._canvas = self._window.get_canvas()
        self._is_initialized = True

    @property
    def window(self) -> ti.ui.Window:
        """Get the Taichi GGUI window, initializing if needed."""
        if self._window is None:
            self._initialize_window()
        assert self._window is not None
        return self._window

    @property
    def canvas(self) -> ti.ui.Canvas:
        """Get the canvas for rendering."""
        if self._canvas is None:
            self._initialize_window()
        assert self._canvas is not None
        return self._canvas

    def update_image(self, pixels: npt.NDArray[np.uint8]) -> None:
        """Update the display image from a rendered RGBA8 buffer.

        Args:
            pixels: Flat row-major buffer of length width * height * 4.

        Raises:
            ValueError: If the buffer size doesn't match the viewport.
        """
        image = pixels_to_array(pixels, self.viewport)[:, :, :3].astype(np.float32) / 255.0

        # NumPy images are (height, width, channels) with the top row first;
        # Taichi fields are (x, y) with the origin at bottom-left
        image_transposed = np.ascontiguousarray(np.transpose(np.flipud(image), (1, 0, 2)))
        self.display_image.from_numpy(image_transposed)
        self._last_pixels = pixels

    # =========================================================================
    # Input Handling
    # =========================================================================

    def handle_key(self, key: str) -> bool:
        """Apply a key press to the camera.

        Args:
            key: The Taichi key name (e.g. "w", ti.ui.ESCAPE).

        Returns:
            False if the key requests closing the window, True otherwise.
        """
        camera = self.scene.camera
        step = self.scene.config.move_step
        if key == ti.ui.ESCAPE:
            return False
        if key == "w":
            camera.move_forward(step)
        elif key == "s":
            camera.move_back(step)
        elif key == "a":
            camera.move_left(step)
        elif key == "d":
            camera.move_right(step)
        return True

    def handle_held_keys(self, left: bool, right: bool) -> None:
        """Apply the per-frame movement of held A/D keys."""
        step = self.scene.config.hold_step
        if left:
            self.scene.camera.move_left(step)
        if right:
            self.scene.camera.move_right(step)

    def _process_input(self) -> None:
        window = self.window
        for event in window.get_events(ti.ui.PRESS):
            if not self.handle_key(event.key):
                window.running = False
        self.handle_held_keys(window.is_pressed("a"), window.is_pressed("d"))

    # =========================================================================
    # Main Loop
    # =========================================================================

    def is_running(self) -> bool:
        """Check if the window is still open."""
        return self.window.running

    def render_frame(self) -> None:
        """Render the scene from its current camera into the display image."""
        self.update_image(self.scene.render(self.viewport))

    def show_frame(self) -> None:
        """Present the current display image."""
        self._draw_gui_panel()
        self.canvas.set_image(self.display_image)
        self.window.show()

    def run(self) -> None:
        """Run the event loop until the window is closed or Escape is pressed."""
        self._initialize_window()

        while self.is_running():
            self._process_input()
            if not self.is_running():
                break
            self.render_frame()
            self.show_frame()

    def close(self) -> None:
        """Close the preview window."""
        if self._window is not None:
            self._window.running = False

    def _draw_gui_panel(self) -> None:
        with self.window.GUI.sub_window("Export", 0.02, 0.02, 0.2, 0.08) as gui:
            if gui.button("Export PNG"):
                self._export_png()

    def _export_png(self) -> None:
        """Export the last rendered frame to a timestamped PNG file."""
        from mirrortrace.preview.export import save_png

        if self._last_pixels is None:
            logger.warning("Nothing rendered yet, skipping export")
            return

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = f"mirrortrace_{timestamp}.png"
        save_png(self._last_pixels, self.viewport, filename)
        logger.info("Exported: %s", filename)

    @staticmethod
    def is_display_available() -> bool:
        """Check if a display is available for GUI rendering.

        Returns:
            True if a display is available, False for headless environments.
        """
        display = os.environ.get("DISPLAY")
        wayland = os.environ.get("WAYLAND_DISPLAY")

        if os.name == "nt":
            return True

        # On macOS, display is available unless in SSH without X forwarding
        if os.uname().sysname == "Darwin":
            ssh_connection = os.environ.get("SSH_CONNECTION")
            return not (ssh_connection and not display)

        return bool(display or wayland)
