"""Scene-level sphere intersection testing.

This module stores the scene's spheres in Taichi fields and answers two ray
queries against them:
- intersect_scene(): the closest hit, with the material of the hit sphere
- is_occluded(): whether anything blocks a segment (shadow rays)

The closest hit is tracked incrementally in a single pass over the spheres,
so the result does not depend on sphere order.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.scene.intersection import add_sphere, clear_scene
    >>> clear_scene()
    >>> add_sphere(vec3(0, 0, -5), 1.0, material_id=0)
    >>> # Use intersect_scene within a Taichi kernel
"""

import logging

import taichi as ti
import taichi.math as tm

from src.whitted.geometry.sphere import (
    HIT_EPSILON,
    T_INFINITY,
    Sphere,
    hit_sphere,
)

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

logger = logging.getLogger(__name__)


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection with material information.

    Attributes:
        hit: 1 if the ray intersected any sphere, 0 otherwise.
        t: The ray parameter of the closest intersection, T_INFINITY on a miss.
        position: The intersection point. Only valid if hit == 1.
        normal: The outward unit normal at the intersection point.
            Only valid if hit == 1.
        material_id: The material ID of the hit sphere, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    position: vec3
    normal: vec3
    material_id: ti.i32


# Maximum number of spheres supported in the scene
MAX_SPHERES = 256

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all spheres from the scene.

    Resets the sphere count to zero. The field data is overwritten when new
    spheres are added.
    """
    num_spheres[None] = 0


def add_sphere(center: vec3, radius: float, material_id: int = 0) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere (must be positive).
        material_id: The material ID to associate with this sphere.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
        ValueError: If the radius is not positive.
    """
    if radius <= 0.0:
        raise ValueError(f"Sphere radius must be positive, got {radius}")
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = center
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    logger.debug("Added sphere %d: radius=%s material=%d", idx, radius, material_id)
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        hit=0,
        t=T_INFINITY,
        position=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        material_id=-1,
    )


@ti.func
def intersect_scene(ray_origin: vec3, ray_direction: vec3) -> SceneHitRecord:
    """Find the closest sphere hit along a ray.

    The direction is normalized before testing, so the returned t is a
    distance along the ray. Hits with t <= HIT_EPSILON are ignored.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray (need not be unit length,
            must not be zero).

    Returns:
        A SceneHitRecord for the closest intersection, or a miss record.
    """
    direction = tm.normalize(ray_direction)
    closest_t = T_INFINITY
    result = _make_miss_record()

    # Closest-hit search carries state across iterations
    ti.loop_config(serialize=True)
    for i in range(num_spheres[None]):
        sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
        rec = hit_sphere(ray_origin, direction, sphere, HIT_EPSILON, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = SceneHitRecord(
                hit=1,
                t=rec.t,
                position=rec.position,
                normal=rec.normal,
                material_id=sphere_material_ids[i],
            )

    return result


@ti.func
def is_occluded(ray_origin: vec3, ray_direction: vec3, max_distance: ti.f32) -> ti.i32:
    """Test whether anything blocks a ray before max_distance.

    Args:
        ray_origin: The starting point of the shadow ray.
        ray_direction: The direction toward the light.
        max_distance: Hits at or beyond this distance do not occlude.

    Returns:
        1 if the closest hit lies strictly before max_distance, 0 otherwise.
    """
    rec = intersect_scene(ray_origin, ray_direction)
    return rec.hit == 1 and rec.t < max_distance


# =============================================================================
# Python-callable Queries
# =============================================================================

_query_hit = ti.field(dtype=ti.i32, shape=())
_query_t = ti.field(dtype=ti.f32, shape=())
_query_position = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_normal = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_material_id = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _query_intersection_kernel(origin: vec3, direction: vec3):
    rec = intersect_scene(origin, direction)
    _query_hit[None] = rec.hit
    _query_t[None] = rec.t
    _query_position[None] = rec.position
    _query_normal[None] = rec.normal
    _query_material_id[None] = rec.material_id


def query_intersection(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
) -> dict:
    """Run a closest-hit query from Python.

    Useful for tests and tooling; rendering calls intersect_scene() directly
    inside kernels.

    Args:
        origin: Ray origin as (x, y, z).
        direction: Ray direction as (x, y, z), need not be normalized.

    Returns:
        Dictionary with keys hit (bool), t, position, normal, material_id.
    """
    _query_intersection_kernel(vec3(*origin), vec3(*direction))
    position = _query_position[None]
    normal = _query_normal[None]
    return {
        "hit": bool(_query_hit[None]),
        "t": float(_query_t[None]),
        "position": (float(position[0]), float(position[1]), float(position[2])),
        "normal": (float(normal[0]), float(normal[1]), float(normal[2])),
        "material_id": int(_query_material_id[None]),
    }
