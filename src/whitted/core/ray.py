"""Ray data structure and vector utilities.

This module provides the Ray dataclass and the small set of vector helpers the
tracer needs. All operations are Taichi functions so they can be called from
inside kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

# Type aliases for vectors using Taichi's math module
vec3 = tm.vec3
vec4 = tm.vec4


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Callers need not
            normalize it; the intersection engine normalizes on first use.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    The result is undefined for the zero vector; use safe_normalize() when
    the input may be degenerate.
    """
    return tm.normalize(v)


@ti.func
def safe_normalize(v: vec3) -> vec3:
    """Normalize a vector, leaving zero-length inputs unchanged.

    Args:
        v: The input vector.

    Returns:
        A unit vector in the direction of v, or v itself if its length is
        below 1e-12.
    """
    result = v
    len_sq = tm.dot(v, v)
    if len_sq > 1e-24:
        result = v / ti.sqrt(len_sq)
    return result


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product of two vectors."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product of two vectors."""
    return tm.cross(a, b)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Computes the mirror reflection R = I - 2(I . N)N. The normal should be
    unit length for correct results.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check if a vector is near zero in all components.

    Returns:
        1 if all components are below 1e-8 in magnitude, 0 otherwise.
    """
    s = 1e-8
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


@ti.func
def channel_sum(v: vec3) -> ti.f32:
    """Sum the three channels of a color or mask vector."""
    return v.x + v.y + v.z
