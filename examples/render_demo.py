#!/usr/bin/env python3
"""Render the demo scene to a PNG file.

This script builds the demo scene (mirrored spheres over a reflective
floor), renders one frame from its camera and saves it.

Usage:
    python -m examples.render_demo [options]

Options:
    --width WIDTH       Image width in pixels (default: 640)
    --height HEIGHT     Image height in pixels (default: 480)
    --depth DEPTH       Maximum mirror bounces (default: 5)
    --workers N         Maximum CPU threads (default: all)
    --cpu               Force the CPU backend
    --output OUTPUT     Output file path (default: demo.png)
    --quiet             Suppress progress output

Example:
    python -m examples.render_demo --width 320 --height 240 --workers 4
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

# Ensure the src directory is in the Python path for direct execution
_src_root = Path(__file__).parent.parent / "src"
if str(_src_root) not in sys.path:
    sys.path.insert(0, str(_src_root))

import taichi as ti  # noqa: E402


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the mirrortrace demo scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=640, help="Image width in pixels (default: 640)")
    parser.add_argument("--height", type=int, default=480, help="Image height in pixels (default: 480)")
    parser.add_argument("--depth", type=int, default=5, help="Maximum mirror bounces (default: 5)")
    parser.add_argument("--workers", type=int, default=None, help="Maximum CPU threads (default: all)")
    parser.add_argument("--cpu", action="store_true", help="Force the CPU backend")
    parser.add_argument("--output", type=str, default="demo.png", help="Output file path (default: demo.png)")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args()


def render_demo(
    width: int = 640,
    height: int = 480,
    max_depth: int = 5,
    workers: int | None = None,
    output_path: str = "demo.png",
    quiet: bool = False,
) -> Path:
    """Render the demo scene and save to file.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        max_depth: Maximum mirror bounces per pixel.
        workers: Maximum CPU threads for the pixel loop.
        output_path: Output file path (PNG).
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from mirrortrace.camera.pinhole import Viewport
    from mirrortrace.config import RenderConfig
    from mirrortrace.preview.export import save_png
    from mirrortrace.scene.demo import create_demo_scene

    config = RenderConfig(width=width, height=height, max_depth=max_depth, workers=workers)

    if not quiet:
        print(f"Creating demo scene ({width}x{height})...")
    scene = create_demo_scene(config)

    if not quiet:
        print(f"Rendering {scene.get_primitive_count()} primitives at depth {max_depth}...")

    start_time = time.time()
    viewport = Viewport(width, height)
    pixels = scene.render(viewport)
    render_time = time.time() - start_time

    output_file = Path(output_path)
    save_png(pixels, viewport, output_file)

    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Render time: {render_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize Taichi
    # Use GPU if available, fall back to CPU
    if args.cpu or args.workers is not None:
        ti.init(arch=ti.cpu)
        if not args.quiet:
            print("Using CPU backend")
    else:
        try:
            ti.init(arch=ti.gpu)
            if not args.quiet:
                print("Using GPU backend")
        except Exception:
            ti.init(arch=ti.cpu)
            if not args.quiet:
                print("Using CPU backend")

    try:
        render_demo(
            width=args.width,
            height=args.height,
            max_depth=args.depth,
            workers=args.workers,
            output_path=args.output,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
