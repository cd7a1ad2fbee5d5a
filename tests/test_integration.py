"""Integration tests for the end-to-end rendering pipeline.

This module tests the complete pipeline from scene creation through final
image output, using the demonstration scenes and the example script.

Tests use small images so the full pipeline stays fast.

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run.
"""

from __future__ import annotations

import json
import math
from pathlib import Path

import numpy as np
import pytest
from PIL import Image as PILImage


def _render_demo(name: str, width: int, height: int) -> np.ndarray:
    from src.whitted.camera.pinhole import setup_camera
    from src.whitted.core.renderer import Renderer
    from src.whitted.scene.demo_scenes import create_scene

    _, camera = create_scene(name, aspect_ratio=width / height)
    setup_camera(camera)
    renderer = Renderer(width, height)
    renderer.render()
    return renderer.get_image_numpy()


class TestSingleSphere:
    """End-to-end checks on the single-sphere scene."""

    def test_center_pixel_matches_hand_computed_value(self) -> None:
        """Test the center pixel equals 0.5 * N.L for the overhead light."""
        image = _render_demo("single", 3, 3)
        expected = 0.5 * 4.0 / math.sqrt(41.0)
        np.testing.assert_allclose(image[1, 1, :3], [expected] * 3, atol=1e-5)
        assert image[1, 1, 3] == 1.0

    def test_background_is_black_and_uncovered(self) -> None:
        """Test pixels that miss the sphere are black with zero coverage."""
        image = _render_demo("single", 3, 3)
        np.testing.assert_array_equal(image[0, 0], [0.0, 0.0, 0.0, 0.0])

    def test_lit_from_above(self) -> None:
        """Test the top of the sphere is brighter than the bottom."""
        image = _render_demo("single", 33, 33)
        column = image[:, 16, 0]
        covered = np.nonzero(image[:, 16, 3])[0]
        top, bottom = covered.min(), covered.max()
        assert column[top] > column[bottom]


class TestFacingMirrors:
    """End-to-end checks on the facing-mirrors scene."""

    def test_reflections_pick_up_environment(self) -> None:
        """Test reflections add sky color compared to a render without bounces."""
        from src.whitted.camera.pinhole import setup_camera
        from src.whitted.core.renderer import Renderer
        from src.whitted.scene.demo_scenes import create_facing_mirrors_scene

        scene, camera = create_facing_mirrors_scene(aspect_ratio=2.0)
        setup_camera(camera)
        renderer = Renderer(32, 16)

        renderer.render()
        with_bounces = renderer.get_image_numpy()

        scene.set_bounce_limit(0)
        renderer.render()
        without_bounces = renderer.get_image_numpy()

        covered = with_bounces[:, :, 3] == 1.0
        assert covered.any()
        assert with_bounces[covered][:, :3].sum() > without_bounces[covered][:, :3].sum()
        # Coverage depends only on primary hits
        np.testing.assert_array_equal(with_bounces[:, :, 3], without_bounces[:, :, 3])

    def test_uncovered_pixels_show_environment(self) -> None:
        """Test primary misses carry the sky color."""
        image = _render_demo("mirrors", 16, 16)
        missed = image[:, :, 3] == 0.0
        assert missed.any()
        np.testing.assert_allclose(image[missed][:, :3], np.tile((0.5, 0.7, 1.0), (missed.sum(), 1)), atol=1e-6)


class TestShowcase:
    """End-to-end checks on the showcase scene."""

    def test_output_is_finite_and_non_negative(self) -> None:
        """Test the showcase render contains no NaN, inf or negative values."""
        image = _render_demo("showcase", 48, 27)
        assert image.shape == (27, 48, 4)
        assert np.all(np.isfinite(image))
        assert np.all(image >= 0.0)
        assert image[:, :, :3].sum() > 0.0

    def test_cubemap_background(self) -> None:
        """Test a cubemap replaces the constant background for primary misses."""
        from src.whitted.camera.pinhole import setup_camera
        from src.whitted.core.renderer import Renderer
        from src.whitted.scene.demo_scenes import create_showcase_scene

        scene, camera = create_showcase_scene(aspect_ratio=2.0)
        faces = np.zeros((6, 4, 4, 3), dtype=np.float32)
        faces[:, :, :, 1] = 0.75
        scene.set_environment_cubemap(faces)
        setup_camera(camera)

        renderer = Renderer(16, 8)
        renderer.render()
        image = renderer.get_image_numpy()
        missed = image[:, :, 3] == 0.0
        assert missed.any()
        np.testing.assert_allclose(image[missed][:, 1], 0.75, atol=1e-5)
        np.testing.assert_allclose(image[missed][:, 0], 0.0, atol=1e-6)


class TestExampleScript:
    """Tests for the render_spheres example script."""

    def test_render_demo_scene_to_png(self, tmp_path: Path) -> None:
        """Test the example renders a demo scene to an RGBA PNG."""
        from examples.render_spheres import render_spheres

        output = tmp_path / "single.png"
        result = render_spheres(
            width=16,
            height=12,
            scene_name="single",
            output_path=str(output),
            include_alpha=True,
            quiet=True,
        )
        assert result == output
        with PILImage.open(output) as img:
            assert img.mode == "RGBA"
            assert img.size == (16, 12)

    def test_render_scene_file(self, tmp_path: Path) -> None:
        """Test the example loads a JSON scene with a camera section."""
        from examples.render_spheres import render_spheres

        scene_file = tmp_path / "scene.json"
        scene_file.write_text(
            json.dumps(
                {
                    "materials": [{"diffuse": [0.6, 0.3, 0.3], "specular": [0.2, 0.2, 0.2], "shininess": 30}],
                    "spheres": [{"center": [0, 0, -4], "radius": 1, "material_id": 0}],
                    "lights": [{"position": [3, 5, 0], "intensity": [1, 1, 1]}],
                    "environment_color": [0.1, 0.1, 0.2],
                    "bounce_limit": 2,
                    "camera": {"lookfrom": [0, 0, 1], "lookat": [0, 0, -4], "vfov": 45},
                }
            )
        )
        output = tmp_path / "file.png"
        render_spheres(width=8, height=8, scene_file=str(scene_file), output_path=str(output), quiet=True)
        with PILImage.open(output) as img:
            assert img.mode == "RGB"
            pixels = np.asarray(img)
        # The sphere fills the center of the frame
        assert pixels[4, 4].sum() > 0

    def test_bounce_override_is_clamped(self, tmp_path: Path) -> None:
        """Test an oversized --bounces value is clamped to MAX_BOUNCES."""
        from examples.render_spheres import render_spheres
        from src.whitted.scene.limits import MAX_BOUNCES, get_bounce_limit

        render_spheres(
            width=8,
            height=8,
            scene_name="mirrors",
            bounces=999,
            output_path=str(tmp_path / "mirrors.png"),
            quiet=True,
        )
        assert get_bounce_limit() == MAX_BOUNCES

    def test_unknown_scene_raises(self, tmp_path: Path) -> None:
        """Test an unknown scene name raises ValueError."""
        from examples.render_spheres import render_spheres

        with pytest.raises(ValueError, match="Unknown scene"):
            render_spheres(width=8, height=8, scene_name="nope", output_path=str(tmp_path / "x.png"), quiet=True)
