"""Pytest configuration for ray tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene data before each test.

    This ensures tests are isolated from each other.
    """
    # Import here to avoid circular imports and ensure Taichi is initialized
    from mirrortrace.config import RenderConfig
    from mirrortrace.core.integrator import (
        DEFAULT_LIGHT_INTENSITY,
        DEFAULT_LIGHT_POSITION,
        setup_light,
        setup_shading,
    )
    from mirrortrace.materials.solid import clear_materials
    from mirrortrace.scene import manager
    from mirrortrace.scene.intersection import clear_scene

    def _clear_all():
        clear_scene()
        clear_materials()
        manager._active_scene = None
        setup_light(DEFAULT_LIGHT_POSITION, DEFAULT_LIGHT_INTENSITY)
        setup_shading(RenderConfig())

    _clear_all()

    yield

    _clear_all()


@pytest.fixture
def small_config():
    """A render configuration with a tiny viewport."""
    from mirrortrace.config import RenderConfig

    return RenderConfig(width=8, height=6)
