#!/usr/bin/env python3
"""Interactive viewer for the demo scene.

This script opens a window showing the demo scene and re-renders it every
frame from a camera driven by the keyboard.

Usage:
    python -m examples.interactive_demo [--width W] [--height H]

Controls:
    - W / S: Move forward / back
    - A / D: Move left / right (hold for continuous movement)
    - Export PNG: Save the current frame with a timestamp
    - Escape: Quit
"""

from __future__ import annotations

import argparse
import platform
import sys
from pathlib import Path

# Ensure the src directory is in the Python path for direct execution
_src_root = Path(__file__).parent.parent / "src"
if str(_src_root) not in sys.path:
    sys.path.insert(0, str(_src_root))

import taichi as ti  # noqa: E402


def initialize_taichi() -> str:
    """Initialize Taichi with the best available backend.

    On macOS, prefers Metal. Falls back to CPU if GPU is unavailable.

    Returns:
        Name of the backend being used.
    """
    if platform.system() == "Darwin":
        try:
            ti.init(arch=ti.metal)
            return "Metal (GPU)"
        except Exception:
            pass

    try:
        ti.init(arch=ti.gpu)
        return "GPU"
    except Exception:
        pass

    ti.init(arch=ti.cpu)
    return "CPU"


def main() -> int:
    """Main entry point for the interactive viewer.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    parser = argparse.ArgumentParser(description="Interactive mirrortrace demo.")
    parser.add_argument("--width", type=int, default=640, help="Window width (default: 640)")
    parser.add_argument("--height", type=int, default=480, help="Window height (default: 480)")
    args = parser.parse_args()

    # Initialize Taichi first (before importing modules that use ti.kernel)
    backend = initialize_taichi()
    print(f"Taichi backend: {backend}")

    from mirrortrace.config import RenderConfig
    from mirrortrace.preview.interactive import InteractivePreview
    from mirrortrace.scene.demo import create_demo_scene

    if not InteractivePreview.is_display_available():
        print("Error: No display available. Cannot run interactive preview.")
        print("This script requires a graphical display environment.")
        return 1

    scene = create_demo_scene(RenderConfig(width=args.width, height=args.height))

    print(f"Creating interactive preview window ({args.width}x{args.height})...")
    preview = InteractivePreview(scene)

    print("Starting interactive rendering...")
    print("  - W/A/S/D to move the camera")
    print("  - Click 'Export PNG' to save the current frame")
    print("  - Escape or close the window to exit")
    print()

    try:
        preview.run()
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
    finally:
        preview.close()
        print("Preview window closed.")

    return 0


if __name__ == "__main__":
    sys.exit(main())
