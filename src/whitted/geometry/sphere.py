"""Sphere primitive with geometric ray-sphere intersection.

The intersection uses the half-b form of the ray-sphere quadratic for a unit
direction d:

    to_center    = origin - center
    b            = dot(d, to_center)
    c            = dot(to_center, to_center) - radius^2
    discriminant = b^2 - c

Only the near root t = -b - sqrt(discriminant) is considered, so a ray that
starts inside a sphere does not see its far wall. Tangent rays
(discriminant == 0) are reported as misses.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.geometry.sphere import Sphere, HitRecord, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -5), radius=1.0)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Ray parameter reported by a miss
T_INFINITY = 1e30

# Smallest accepted ray parameter (suppresses self-intersection)
HIT_EPSILON = 1e-4


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-sphere intersection.

    Attributes:
        hit: 1 if the ray intersected the sphere, 0 otherwise.
        t: The ray parameter of the intersection, T_INFINITY on a miss.
        position: The intersection point. Only valid if hit == 1.
        normal: The outward unit normal at the intersection point.
            Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    position: vec3
    normal: vec3


@ti.func
def make_miss_hit_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=T_INFINITY,
        position=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
    )


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-sphere intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray. Must be unit length; the
            half-b discriminant assumes dot(d, d) == 1.
        sphere: The sphere to test intersection against.
        t_min: The near root must be strictly greater than this value.
        t_max: The near root must be strictly less than this value.

    Returns:
        A HitRecord. Check the hit field to determine if intersection occurred.
    """
    to_center = ray_origin - sphere.center
    b = tm.dot(ray_direction, to_center)
    c = tm.dot(to_center, to_center) - sphere.radius * sphere.radius
    discriminant = b * b - c

    result = make_miss_hit_record()

    # Strict inequality: tangent rays are misses
    if discriminant > 0.0:
        t = -b - ti.sqrt(discriminant)
        if t > t_min and t < t_max:
            position = ray_origin + t * ray_direction
            result = HitRecord(
                hit=1,
                t=t,
                position=position,
                normal=tm.normalize(position - sphere.center),
            )

    return result


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius."""
    return Sphere(center=center, radius=radius)
