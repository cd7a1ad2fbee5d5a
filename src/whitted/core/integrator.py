"""Whitted-style integrator: reflection driver and per-pixel render kernel.

Each pixel traces a single primary ray from the pinhole camera. If the ray
misses every sphere, the pixel takes the environment color and a coverage of
0. Otherwise the hit point is shaded directly from the point lights and a
chain of mirror reflections is followed:

    color     = shade(primary hit)
    refl_mask = specular(primary hit)
    repeat up to MAX_BOUNCES times, stopping at the runtime bounce limit:
        stop if refl_mask carries no energy
        reflect the view direction about the current normal
        on a hit:  color += refl_mask * shade(hit); refl_mask *= specular(hit)
        on a miss: color += refl_mask * environment(direction); stop

The loop is an explicit bounded loop; MAX_BOUNCES is the static bound and the
bounce limit is the dynamic one. Coverage is 1 for every primary hit.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.core.integrator import render_image, setup_render_target
    >>> from src.whitted.scene.demo_scenes import create_single_sphere_scene
    >>> from src.whitted.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_single_sphere_scene()
    >>> setup_camera(camera)
    >>> setup_render_target(256, 256)
    >>> render_image()
"""

import logging

import numpy as np
import taichi as ti
import taichi.math as tm

from src.whitted.camera.pinhole import get_ray_for_pixel
from src.whitted.core.ray import channel_sum, reflect
from src.whitted.core.shading import shade
from src.whitted.materials.blinn_phong import get_material
from src.whitted.scene.environment import sample_environment
from src.whitted.scene.intersection import intersect_scene
from src.whitted.scene.limits import MAX_BOUNCES, bounce_limit

# Type aliases for vectors
vec3 = tm.vec3
vec4 = tm.vec4

logger = logging.getLogger(__name__)

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# RGBA buffer: RGB radiance plus coverage in the alpha channel
_color_buffer = ti.Vector.field(4, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffer.

    Args:
        width: Image width in pixels (1 to MAX_IMAGE_WIDTH).
        height: Image height in pixels (1 to MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum.
    """
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffer to zero."""
    _color_buffer.fill(0.0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def get_image() -> "ti.MatrixField":
    """Get the RGBA buffer field.

    Note: This returns the full preallocated buffer. Use get_image_dimensions()
    to determine the active region.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    return _color_buffer


# =============================================================================
# Reflection Driver
# =============================================================================


@ti.func
def trace_ray(ray_origin: vec3, ray_direction: vec3) -> vec4:
    """Trace a primary ray with direct shading and mirror reflections.

    Args:
        ray_origin: The ray origin.
        ray_direction: The ray direction (need not be normalized).

    Returns:
        vec4(r, g, b, coverage). Coverage is 1 if the primary ray hit a
        sphere and 0 if the color came from the environment alone.
    """
    result = vec4(0.0, 0.0, 0.0, 0.0)
    hit = intersect_scene(ray_origin, ray_direction)

    if hit.hit == 0:
        background = sample_environment(ray_direction)
        result = vec4(background.x, background.y, background.z, 0.0)
    else:
        view_dir = tm.normalize(-ray_direction)
        material = get_material(hit.material_id)
        color = shade(material, hit.position, hit.normal, view_dir)
        refl_mask = material.specular
        limit = bounce_limit[None]

        # Active flag for loop continuation
        active = 1
        for bounce in range(MAX_BOUNCES):
            if active == 1:
                if bounce >= limit:
                    active = 0
                elif channel_sum(refl_mask) <= 0.0:
                    active = 0
                else:
                    refl_dir = tm.normalize(reflect(-view_dir, hit.normal))
                    refl_hit = intersect_scene(hit.position, refl_dir)
                    if refl_hit.hit == 1:
                        view_dir = tm.normalize(-refl_dir)
                        refl_material = get_material(refl_hit.material_id)
                        color += refl_mask * shade(
                            refl_material, refl_hit.position, refl_hit.normal, view_dir
                        )
                        refl_mask *= refl_material.specular
                        hit = refl_hit
                    else:
                        # Escaped rays cannot bounce again
                        color += refl_mask * sample_environment(refl_dir)
                        active = 0

        result = vec4(color.x, color.y, color.z, 1.0)

    return result


@ti.func
def _sanitize(color: vec4) -> vec4:
    """Replace negative, NaN and infinite channels with zero."""
    result = color
    for c in ti.static(range(4)):
        if tm.isnan(result[c]) or tm.isinf(result[c]) or result[c] < 0.0:
            result[c] = 0.0
    return result


# =============================================================================
# Pixel Driver
# =============================================================================


@ti.kernel
def _render_kernel(width: ti.i32, height: ti.i32):
    """Trace one primary ray per pixel into the RGBA buffer.

    Pixels are independent: each iteration reads only scene fields and writes
    exactly one buffer slot.
    """
    for i, j in ti.ndrange(width, height):
        ray = get_ray_for_pixel(i, j, width, height)
        _color_buffer[i, j] = _sanitize(trace_ray(ray.origin, ray.direction))


@ti.kernel
def _render_single_pixel(pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32) -> vec4:
    ray = get_ray_for_pixel(pixel_i, pixel_j, width, height)
    return _sanitize(trace_ray(ray.origin, ray.direction))


@ti.kernel
def _trace_kernel(origin: vec3, direction: vec3) -> vec4:
    return trace_ray(origin, direction)


# =============================================================================
# Public Rendering API
# =============================================================================


def trace(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
) -> tuple[float, float, float, float]:
    """Trace a single ray from Python.

    Args:
        origin: Ray origin as (x, y, z).
        direction: Ray direction as (x, y, z), need not be normalized.

    Returns:
        Tuple of (R, G, B, coverage).
    """
    color = _trace_kernel(vec3(*origin), vec3(*direction))
    return (float(color[0]), float(color[1]), float(color[2]), float(color[3]))


def render_pixel(pixel_i: int, pixel_j: int) -> tuple[float, float, float, float]:
    """Render one pixel through the camera without touching the buffer.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).

    Returns:
        Tuple of (R, G, B, coverage).

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    color = _render_single_pixel(pixel_i, pixel_j, width, height)
    return (float(color[0]), float(color[1]), float(color[2]), float(color[3]))


def render_image() -> None:
    """Render every pixel of the render target.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    _render_kernel(width, height)


def get_image_numpy() -> np.ndarray:
    """Get the rendered RGBA image as a NumPy array.

    Colors are linear radiance and are not clamped. The array shape is
    (height, width, 4) with the top image row first; channel 3 holds the
    coverage flag.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    full_image = _color_buffer.to_numpy()

    # Extract active region
    image = full_image[:width, :height, :]

    # Transpose from (width, height, 4) to (height, width, 4) for standard image format
    image = np.transpose(image, (1, 0, 2))

    # Flip vertically (Taichi uses bottom-left origin, images use top-left)
    image = np.flipud(image)

    return np.ascontiguousarray(image, dtype=np.float32)
