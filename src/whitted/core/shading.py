"""Local illumination with hard shadows.

For each point light the shading evaluator casts a shadow ray from the surface
point (pushed off the surface along the normal) toward the light. A light is
occluded if the closest hit along that ray lies before the light. Unoccluded
lights contribute Blinn-Phong diffuse plus specular reflectance scaled by the
light intensity. There is no ambient term.
"""

import taichi as ti
import taichi.math as tm

from src.whitted.materials.blinn_phong import BlinnPhongMaterial, eval_blinn_phong
from src.whitted.scene.intersection import is_occluded
from src.whitted.scene.lights import get_light, num_lights

# Type alias for 3D vectors
vec3 = tm.vec3

# Shadow ray origin offset and occlusion slack near the light
SHADOW_EPSILON = 1e-3


@ti.func
def light_visible(position: vec3, normal: vec3, light_dir: vec3, light_dist: ti.f32) -> ti.i32:
    """Test whether a light is visible from a surface point.

    Args:
        position: The surface point.
        normal: The outward unit normal at the point.
        light_dir: Unit direction from the point toward the light.
        light_dist: Distance from the point to the light.

    Returns:
        1 if no surface blocks the light, 0 otherwise.
    """
    shadow_origin = position + normal * SHADOW_EPSILON
    return not is_occluded(shadow_origin, light_dir, light_dist - SHADOW_EPSILON)


@ti.func
def shade(
    material: BlinnPhongMaterial,
    position: vec3,
    normal: vec3,
    view_dir: vec3,
) -> vec3:
    """Compute the radiance leaving a surface point toward the viewer.

    Args:
        material: The surface material.
        position: The surface point.
        normal: The outward unit normal at the point.
        view_dir: Unit direction from the point toward the viewer.

    Returns:
        The sum over all lights of the shadowed Blinn-Phong contribution (RGB).
    """
    total = vec3(0.0, 0.0, 0.0)
    ti.loop_config(serialize=True)
    for i in range(num_lights[None]):
        light = get_light(i)
        light_vec = light.position - position
        light_dist = tm.length(light_vec)
        # A light sitting on the surface point has no direction
        if light_dist > 0.0:
            light_dir = light_vec / light_dist
            if light_visible(position, normal, light_dir, light_dist):
                total += eval_blinn_phong(material, normal, light_dir, view_dir) * light.intensity
    return total
