"""Pinhole camera model for primary ray generation.

This module implements the camera that feeds the pixel driver. The camera
supports:
- Look-at positioning (lookfrom, lookat, vup)
- Vertical field of view setting
- Arbitrary aspect ratios

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

Each pixel gets exactly one ray through its center; there is no jitter.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.camera.pinhole import PinholeCamera, setup_camera
    >>>
    >>> camera = PinholeCamera(
    ...     lookfrom=(0.0, 0.0, 0.0),
    ...     lookat=(0.0, 0.0, -1.0),
    ...     vup=(0.0, 1.0, 0.0),
    ...     vfov=60.0,
    ...     aspect_ratio=1.0,
    ... )
    >>> setup_camera(camera)
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from src.whitted.core.ray import Ray, make_ray, vec3

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class PinholeCamera:
    """Configuration for a pinhole (perspective) camera.

    Attributes:
        lookfrom: Camera position in world space (x, y, z).
        lookat: Point the camera is looking at in world space (x, y, z).
        vup: Up direction vector for camera orientation (typically (0, 1, 0)).
        vfov: Vertical field of view in degrees.
        aspect_ratio: Width divided by height of the output image.
    """

    lookfrom: tuple[float, float, float]
    lookat: tuple[float, float, float]
    vup: tuple[float, float, float]
    vfov: float
    aspect_ratio: float


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())
_viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())


def setup_camera(camera: PinholeCamera) -> None:
    """Initialize camera state from configuration.

    The viewport is a virtual image plane at unit distance from the camera.

    Args:
        camera: Camera configuration with position, orientation, and FOV.

    Raises:
        ValueError: If the view direction is zero or parallel to vup, or the
            field of view is outside (0, 180).
    """
    if not 0.0 < camera.vfov < 180.0:
        raise ValueError(f"Vertical field of view must be in (0, 180), got {camera.vfov}")

    theta = math.radians(camera.vfov)
    h = math.tan(theta / 2.0)
    viewport_height = 2.0 * h
    viewport_width = camera.aspect_ratio * viewport_height

    lookfrom = np.array(camera.lookfrom, dtype=np.float32)
    lookat = np.array(camera.lookat, dtype=np.float32)
    vup = np.array(camera.vup, dtype=np.float32)

    # w points from lookat toward lookfrom (backward)
    w = lookfrom - lookat
    w_len = np.linalg.norm(w)
    if w_len == 0.0:
        raise ValueError("Camera lookfrom and lookat must differ")
    w = w / w_len

    u = np.cross(vup, w)
    u_len = np.linalg.norm(u)
    if u_len == 0.0:
        raise ValueError("Camera vup must not be parallel to the view direction")
    u = u / u_len

    v = np.cross(w, u)

    horizontal = viewport_width * u
    vertical = viewport_height * v
    lower_left = lookfrom - w - horizontal / 2.0 - vertical / 2.0

    _camera_origin[None] = lookfrom.tolist()
    _viewport_horizontal[None] = horizontal.tolist()
    _viewport_vertical[None] = vertical.tolist()
    _lower_left_corner[None] = lower_left.tolist()


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def get_ray(u: ti.f32, v: ti.f32) -> Ray:
    """Generate a ray through normalized image coordinates (u, v).

    Args:
        u: Horizontal coordinate in [0, 1] (left to right).
        v: Vertical coordinate in [0, 1] (bottom to top).

    Returns:
        A Ray from the camera position toward the point on the image plane.
    """
    point_on_viewport = (
        _lower_left_corner[None] + u * _viewport_horizontal[None] + v * _viewport_vertical[None]
    )
    origin = _camera_origin[None]
    direction = tm.normalize(point_on_viewport - origin)
    return make_ray(origin, direction)


@ti.func
def get_ray_for_pixel(pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Generate the primary ray through the center of a pixel.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        The primary Ray for the pixel.
    """
    u = (ti.cast(pixel_i, ti.f32) + 0.5) / ti.cast(width, ti.f32)
    v = (ti.cast(pixel_j, ti.f32) + 0.5) / ti.cast(height, ti.f32)
    return get_ray(u, v)


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, horizontal, vertical and lower_left vectors.
    """

    def _as_tuple(field: "ti.MatrixField") -> tuple[float, float, float]:
        value = field[None]
        return (float(value[0]), float(value[1]), float(value[2]))

    return {
        "origin": _as_tuple(_camera_origin),
        "horizontal": _as_tuple(_viewport_horizontal),
        "vertical": _as_tuple(_viewport_vertical),
        "lower_left": _as_tuple(_lower_left_corner),
    }
