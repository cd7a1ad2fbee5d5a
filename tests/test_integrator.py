"""Tests for the Whitted integrator.

This module tests the reflection driver and pixel driver:
- Render target setup and validation
- Primary misses take the environment with zero coverage
- Direct shading at primary hits
- Mirror reflection chains, attenuation and the bounce limit
- Full-image rendering, orientation and sanitized output

Note: Imports are done inside test methods because the modules declare
Taichi fields at import time and Taichi is initialized by conftest.py.
"""

import math

import numpy as np
import pytest

# Per-hit radiance of the facing-mirror ping-pong: kd * N.L for a light at (0, 10, -5)
PING_PONG_COS = 1.0 / math.sqrt(101.0)


def _add_sphere(center, radius, diffuse, specular, shininess=1.0):
    from src.whitted.materials.blinn_phong import add_material
    from src.whitted.scene.intersection import add_sphere

    mat_id = add_material(diffuse, specular, shininess)
    add_sphere(center, radius, mat_id)
    return mat_id


class TestRenderTargetSetup:
    """Test render target initialization and management."""

    def test_setup_render_target_sets_dimensions(self):
        """Test that setup_render_target records the active size."""
        from src.whitted.core.integrator import get_image, get_image_dimensions, setup_render_target

        setup_render_target(64, 48)
        assert get_image_dimensions() == (64, 48)
        assert get_image() is not None

    def test_setup_render_target_rejects_bad_sizes(self):
        """Test non-positive and oversized dimensions raise ValueError."""
        from src.whitted.core.integrator import MAX_IMAGE_WIDTH, setup_render_target

        with pytest.raises(ValueError, match="positive"):
            setup_render_target(0, 10)
        with pytest.raises(ValueError, match="exceed maximum"):
            setup_render_target(MAX_IMAGE_WIDTH + 1, 10)

    def test_clear_render_target(self):
        """Test clear_render_target zeroes the RGBA buffer."""
        from src.whitted.core.integrator import (
            clear_render_target,
            get_image_numpy,
            render_image,
            setup_render_target,
        )
        from src.whitted.scene.environment import set_environment_color

        setup_render_target(4, 4)
        set_environment_color((1.0, 1.0, 1.0))
        render_image()
        assert get_image_numpy()[:, :, :3].max() > 0.0

        clear_render_target()
        assert np.all(get_image_numpy() == 0.0)


class TestPrimaryRays:
    """Tests for primary ray hits and misses."""

    def test_miss_returns_environment_with_zero_coverage(self):
        """Test a primary miss returns the environment color and coverage 0."""
        from src.whitted.core.integrator import trace
        from src.whitted.scene.environment import set_environment_color

        _add_sphere((0.0, 0.0, -5.0), 1.0, (0.5, 0.5, 0.5), (0.0, 0.0, 0.0))
        set_environment_color((0.1, 0.2, 0.3))

        r, g, b, a = trace((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert abs(r - 0.1) < 1e-6
        assert abs(g - 0.2) < 1e-6
        assert abs(b - 0.3) < 1e-6
        assert a == 0.0

    def test_tangent_ray_returns_environment(self):
        """Test a ray grazing a sphere takes the environment with zero coverage."""
        from src.whitted.core.integrator import trace
        from src.whitted.scene.environment import set_environment_color
        from src.whitted.scene.lights import add_light

        _add_sphere((0.0, 0.0, -5.0), 1.0, (0.5, 0.5, 0.5), (0.9, 0.9, 0.9))
        add_light((0.0, 5.0, 0.0), (1.0, 1.0, 1.0))
        set_environment_color((0.1, 0.2, 0.3))

        r, g, b, a = trace((1.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert (r, g, b) == pytest.approx((0.1, 0.2, 0.3), abs=1e-6)
        assert a == 0.0

    def test_unlit_hit_has_full_coverage(self):
        """Test a hit without lights is black but still covered."""
        from src.whitted.core.integrator import trace

        _add_sphere((0.0, 0.0, -5.0), 1.0, (0.5, 0.5, 0.5), (0.0, 0.0, 0.0))
        r, g, b, a = trace((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert (r, g, b) == pytest.approx((0.0, 0.0, 0.0), abs=1e-6)
        assert a == 1.0

    def test_lit_hit_matches_blinn_phong(self):
        """Test the single-sphere reference value 0.5 * 4 / sqrt(41)."""
        from src.whitted.core.integrator import trace
        from src.whitted.scene.lights import add_light
        from src.whitted.scene.limits import set_bounce_limit

        _add_sphere((0.0, 0.0, -5.0), 1.0, (0.5, 0.5, 0.5), (0.0, 0.0, 0.0))
        add_light((0.0, 5.0, 0.0), (1.0, 1.0, 1.0))
        set_bounce_limit(0)

        r, g, b, a = trace((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        expected = 0.5 * 4.0 / math.sqrt(41.0)
        assert abs(r - expected) < 1e-5
        assert abs(g - expected) < 1e-5
        assert abs(b - expected) < 1e-5
        assert a == 1.0


class TestReflections:
    """Tests for the mirror reflection chain."""

    def test_single_mirror_reflects_environment(self):
        """Test a mirror seen head-on returns specular * environment."""
        from src.whitted.core.integrator import trace
        from src.whitted.scene.environment import set_environment_color

        _add_sphere((0.0, 0.0, -5.0), 1.0, (0.0, 0.0, 0.0), (0.8, 0.5, 0.2))
        set_environment_color((1.0, 1.0, 1.0))

        r, g, b, a = trace((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert (r, g, b) == pytest.approx((0.8, 0.5, 0.2), abs=1e-5)
        assert a == 1.0

    def test_zero_bounce_limit_disables_reflections(self):
        """Test bounce limit 0 leaves only the direct term."""
        from src.whitted.core.integrator import trace
        from src.whitted.scene.environment import set_environment_color
        from src.whitted.scene.limits import set_bounce_limit

        _add_sphere((0.0, 0.0, -5.0), 1.0, (0.0, 0.0, 0.0), (0.8, 0.8, 0.8))
        set_environment_color((1.0, 1.0, 1.0))
        set_bounce_limit(0)

        r, g, b, _ = trace((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert (r, g, b) == pytest.approx((0.0, 0.0, 0.0), abs=1e-6)

    @pytest.mark.parametrize("limit, expected_hits", [(0, 1), (1, 2), (2, 3), (5, 3), (16, 3)])
    def test_mask_shrinks_each_bounce(self, limit, expected_hits):
        """Test a ray bouncing between two mirrors picks up one specular factor per hit.

        The ray leaves (0, 0, -5) slightly upward, hits the right sphere, then
        the left one, and escapes. The environment is only reached once the
        limit allows the second bounce, and is attenuated by specular squared.
        """
        from src.whitted.core.integrator import trace
        from src.whitted.scene.environment import set_environment_color
        from src.whitted.scene.limits import set_bounce_limit

        specular = (0.8, 0.5, 0.2)
        _add_sphere((-2.0, 0.0, -5.0), 1.0, (0.0, 0.0, 0.0), specular)
        _add_sphere((2.0, 0.0, -5.0), 1.0, (0.0, 0.0, 0.0), specular)
        set_environment_color((1.0, 1.0, 1.0))
        set_bounce_limit(limit)

        r, g, b, a = trace((0.0, 0.0, -5.0), (1.0, 0.05, 0.0))
        assert a == 1.0
        if expected_hits < 3:
            # Limit reached while still between the mirrors
            assert (r, g, b) == pytest.approx((0.0, 0.0, 0.0), abs=1e-6)
        else:
            expected = tuple(s * s for s in specular)
            assert (r, g, b) == pytest.approx(expected, abs=1e-4)

    @pytest.mark.parametrize("limit", [0, 1, 3, 16])
    def test_bounce_limit_caps_reflection_chain(self, limit):
        """Test a ray trapped between perfect mirrors stops at the bounce limit.

        Each hit adds the same direct term, so the result counts the hits.
        """
        from src.whitted.core.integrator import trace
        from src.whitted.scene.lights import add_light
        from src.whitted.scene.limits import set_bounce_limit

        _add_sphere((-2.0, 0.0, -5.0), 1.0, (0.1, 0.1, 0.1), (1.0, 1.0, 1.0), shininess=100.0)
        _add_sphere((2.0, 0.0, -5.0), 1.0, (0.1, 0.1, 0.1), (1.0, 1.0, 1.0), shininess=100.0)
        add_light((0.0, 10.0, -5.0), (1.0, 1.0, 1.0))
        set_bounce_limit(limit)

        r, _, _, a = trace((0.0, 0.0, -5.0), (1.0, 0.0, 0.0))
        assert a == 1.0
        assert abs(r - (limit + 1) * 0.1 * PING_PONG_COS) < 1e-4

    def test_bounce_limit_is_clamped_to_static_bound(self):
        """Test an oversized bounce limit behaves like MAX_BOUNCES."""
        from src.whitted.core.integrator import trace
        from src.whitted.scene.lights import add_light
        from src.whitted.scene.limits import MAX_BOUNCES, get_bounce_limit, set_bounce_limit

        _add_sphere((-2.0, 0.0, -5.0), 1.0, (0.1, 0.1, 0.1), (1.0, 1.0, 1.0), shininess=100.0)
        _add_sphere((2.0, 0.0, -5.0), 1.0, (0.1, 0.1, 0.1), (1.0, 1.0, 1.0), shininess=100.0)
        add_light((0.0, 10.0, -5.0), (1.0, 1.0, 1.0))

        assert set_bounce_limit(1000) == MAX_BOUNCES
        assert get_bounce_limit() == MAX_BOUNCES
        r, _, _, _ = trace((0.0, 0.0, -5.0), (1.0, 0.0, 0.0))
        assert abs(r - (MAX_BOUNCES + 1) * 0.1 * PING_PONG_COS) < 1e-4

    def test_negative_bounce_limit_clamps_to_zero(self):
        """Test negative limits clamp to 0."""
        from src.whitted.scene.limits import set_bounce_limit

        assert set_bounce_limit(-3) == 0

    def test_non_reflective_hit_stops_chain(self):
        """Test a zero specular material ends the chain after the direct term."""
        from src.whitted.core.integrator import trace
        from src.whitted.scene.environment import set_environment_color

        _add_sphere((0.0, 0.0, -5.0), 1.0, (0.5, 0.5, 0.5), (0.0, 0.0, 0.0))
        set_environment_color((1.0, 1.0, 1.0))

        r, g, b, _ = trace((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert (r, g, b) == pytest.approx((0.0, 0.0, 0.0), abs=1e-6)


class TestImageRendering:
    """Tests for full-image rendering."""

    def test_render_without_setup_raises_error(self):
        """Test rendering before setup_render_target raises RuntimeError."""
        from src.whitted.core import integrator

        integrator._render_target_initialized[None] = 0
        with pytest.raises(RuntimeError, match="not set up"):
            integrator.render_image()

    def test_image_shape_and_coverage(self, single_sphere_camera):
        """Test a 3x3 render hits the sphere in the center pixel only."""
        from src.whitted.core.integrator import get_image_numpy, render_image, setup_render_target
        from src.whitted.scene.environment import set_environment_color
        from src.whitted.scene.lights import add_light

        _add_sphere((0.0, 0.0, -5.0), 1.0, (0.5, 0.5, 0.5), (0.0, 0.0, 0.0))
        add_light((0.0, 5.0, 0.0), (1.0, 1.0, 1.0))
        set_environment_color((0.1, 0.2, 0.3))

        setup_render_target(3, 3)
        render_image()
        image = get_image_numpy()

        assert image.shape == (3, 3, 4)
        assert image.dtype == np.float32
        expected_alpha = np.array([[0, 0, 0], [0, 1, 0], [0, 0, 0]], dtype=np.float32)
        np.testing.assert_array_equal(image[:, :, 3], expected_alpha)
        np.testing.assert_allclose(image[0, 0, :3], (0.1, 0.2, 0.3), atol=1e-6)
        np.testing.assert_allclose(image[1, 1, :3], [0.5 * 4.0 / math.sqrt(41.0)] * 3, atol=1e-5)

    def test_image_top_row_first(self, single_sphere_camera):
        """Test the returned array has the top of the image in row 0."""
        from src.whitted.core.integrator import get_image_numpy, render_image, setup_render_target

        _add_sphere((0.0, 2.0, -5.0), 0.8, (0.5, 0.5, 0.5), (0.0, 0.0, 0.0))
        setup_render_target(1, 3)
        render_image()
        alpha = get_image_numpy()[:, 0, 3]
        np.testing.assert_array_equal(alpha, [1.0, 0.0, 0.0])

    def test_render_pixel_matches_image(self, single_sphere_camera):
        """Test render_pixel returns the same value as the full render."""
        from src.whitted.core.integrator import (
            get_image_numpy,
            render_image,
            render_pixel,
            setup_render_target,
        )
        from src.whitted.scene.lights import add_light

        _add_sphere((0.0, 0.0, -5.0), 1.0, (0.5, 0.5, 0.5), (0.3, 0.3, 0.3), shininess=20.0)
        add_light((2.0, 5.0, 0.0), (1.0, 0.9, 0.8))

        setup_render_target(5, 5)
        render_image()
        image = get_image_numpy()
        pixel = render_pixel(2, 2)
        np.testing.assert_allclose(image[2, 2], pixel, atol=1e-6)

    def test_output_is_finite_and_non_negative(self, single_sphere_camera):
        """Test rendered values are never NaN, infinite or negative."""
        from src.whitted.core.integrator import get_image_numpy, render_image, setup_render_target
        from src.whitted.scene.environment import set_environment_color
        from src.whitted.scene.lights import add_light

        _add_sphere((0.0, 0.0, -5.0), 1.0, (0.5, 0.2, 0.2), (0.5, 0.5, 0.5), shininess=50.0)
        _add_sphere((1.5, 0.5, -4.0), 0.5, (0.1, 0.1, 0.1), (0.9, 0.9, 0.9), shininess=300.0)
        add_light((0.0, 5.0, 0.0), (1.0, 1.0, 1.0))
        add_light((-3.0, 1.0, -1.0), (0.5, 0.5, 0.5))
        set_environment_color((0.2, 0.3, 0.5))

        setup_render_target(16, 16)
        render_image()
        image = get_image_numpy()
        assert np.all(np.isfinite(image))
        assert np.all(image >= 0.0)
