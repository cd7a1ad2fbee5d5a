"""Core rendering module.

This module contains the building blocks of the Whitted-style tracer:

Components:
    ray: Ray data structure and vector utilities
    shading: Blinn-Phong local illumination with hard shadows
    integrator: Reflection driver (bounce loop) and per-pixel render kernel
    renderer: Object wrapper around the render target

Each pixel traces one primary ray. Surfaces are shaded directly from the
point lights, and mirror reflections are followed iteratively while the
attenuation mask still carries energy and the bounce limit allows it.

All compute-intensive operations use Taichi kernels.
"""

from .ray import (
    Ray,
    channel_sum,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    ray_at,
    reflect,
    safe_normalize,
    vec3,
    vec4,
)

# Note: shading, integrator and renderer are NOT imported here to avoid
# circular imports. Import directly from src.whitted.core.integrator or
# src.whitted.core.renderer when needed.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "vec4",
    "length",
    "length_squared",
    "normalize",
    "safe_normalize",
    "dot",
    "cross",
    "reflect",
    "near_zero",
    "channel_sum",
]
