"""Pytest configuration for raytracer tests.

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
    """Reset spheres, materials, lights, environment and bounce limit around each test."""
    # Import here so Taichi is initialized before any field is declared
    from src.whitted.materials.blinn_phong import clear_materials
    from src.whitted.scene.environment import clear_environment
    from src.whitted.scene.intersection import clear_scene
    from src.whitted.scene.lights import clear_lights
    from src.whitted.scene.limits import DEFAULT_BOUNCE_LIMIT, set_bounce_limit

    def _clear_all():
        clear_scene()
        clear_materials()
        clear_lights()
        clear_environment()
        set_bounce_limit(DEFAULT_BOUNCE_LIMIT)

        try:
            from src.whitted.core.integrator import clear_render_target

            clear_render_target()
        except (ImportError, RuntimeError):
            pass

    _clear_all()

    yield

    _clear_all()


@pytest.fixture
def single_sphere_camera():
    """Camera at the origin looking down -z with a 60 degree field of view."""
    from src.whitted.camera.pinhole import PinholeCamera, setup_camera

    camera = PinholeCamera(
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=60.0,
        aspect_ratio=1.0,
    )
    setup_camera(camera)
    return camera
