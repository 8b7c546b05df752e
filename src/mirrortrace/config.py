"""Render configuration shared by the scene, camera and integrator.

All tunable constants of the renderer live in a single frozen dataclass so that
scenes can be parameterized independently (tests use tiny viewports and
shallow reflection depths, for example).

Example:
    >>> from mirrortrace.config import RenderConfig
    >>> config = RenderConfig(width=64, height=48, max_depth=2)
    >>> config.shadow_factor
    0.05
"""

import math
from dataclasses import dataclass

# Default output size in pixels
DEFAULT_WIDTH = 640
DEFAULT_HEIGHT = 480

# Number of mirror bounces evaluated after the primary hit
DEFAULT_MAX_DEPTH = 5

# Factor applied to the color of a point that cannot see the light
DEFAULT_SHADOW_FACTOR = 0.05

# Color returned for rays that escape the scene
DEFAULT_BACKGROUND = (0.2, 0.2, 0.4, 1.0)

# Distance secondary rays are moved off a surface
DEFAULT_RAY_EPSILON = 1e-4

# Distance hit positions are pulled back along the incoming ray
DEFAULT_HIT_EPSILON = 1e-10

# Reflectivity at or below which no mirror ray is traced
DEFAULT_MIN_REFLECTIVITY = 1e-5

# Camera translation per key press and per frame while a key is held
DEFAULT_MOVE_STEP = 0.5
DEFAULT_HOLD_STEP = 0.1

# Hard limit on mirror bounces (keeps the unrolled trace loop bounded)
MAX_DEPTH_LIMIT = 64


@dataclass(frozen=True)
class RenderConfig:
    """Tunable constants for a render.

    Attributes:
        width: Default viewport width in pixels.
        height: Default viewport height in pixels.
        max_depth: Number of mirror bounces evaluated after the primary hit.
        shadow_factor: Multiplier applied to the color of shadowed points.
        background: RGBA color returned for rays that hit nothing.
        ray_epsilon: Offset used when spawning shadow and mirror rays.
        hit_epsilon: Distance subtracted from t when computing hit positions.
        min_reflectivity: Reflectivity threshold below which no mirror ray
            is traced.
        workers: Maximum number of CPU threads for the pixel loop. None uses
            every thread Taichi was initialized with.
        move_step: Camera translation per key press in the interactive preview.
        hold_step: Camera translation per frame while a key is held.
    """

    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    max_depth: int = DEFAULT_MAX_DEPTH
    shadow_factor: float = DEFAULT_SHADOW_FACTOR
    background: tuple[float, float, float, float] = DEFAULT_BACKGROUND
    ray_epsilon: float = DEFAULT_RAY_EPSILON
    hit_epsilon: float = DEFAULT_HIT_EPSILON
    min_reflectivity: float = DEFAULT_MIN_REFLECTIVITY
    workers: int | None = None
    move_step: float = DEFAULT_MOVE_STEP
    hold_step: float = DEFAULT_HOLD_STEP

    def __post_init__(self) -> None:
        """Validate the configuration.

        Raises:
            ValueError: If any field is out of range.
        """
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Viewport dimensions must be positive, got {self.width}x{self.height}"
            )
        if not 0 <= self.max_depth <= MAX_DEPTH_LIMIT:
            raise ValueError(
                f"max_depth must be in [0, {MAX_DEPTH_LIMIT}], got {self.max_depth}"
            )
        if not 0.0 <= self.shadow_factor <= 1.0:
            raise ValueError(f"shadow_factor must be in [0, 1], got {self.shadow_factor}")
        if len(self.background) != 4:
            raise ValueError(
                f"background must have 4 components (RGBA), got {len(self.background)}"
            )
        if not all(math.isfinite(c) for c in self.background):
            raise ValueError(f"background must be finite, got {self.background}")
        for name in ("ray_epsilon", "hit_epsilon", "min_reflectivity"):
            value = getattr(self, name)
            if value < 0.0 or not math.isfinite(value):
                raise ValueError(f"{name} must be a finite non-negative number, got {value}")
        if self.workers is not None and self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")
