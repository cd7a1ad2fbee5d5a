"""Blinn-Phong material implementation.

A Blinn-Phong material has three parameters:
    diffuse:   reflectance of the diffuse (Lambertian cosine) term
    specular:  reflectance of the specular highlight and, for the reflection
               driver, the per-bounce mirror attenuation
    shininess: exponent applied to the half-vector cosine

The reflected radiance from a single unoccluded point light is:

    L = (k_d * max(N.L, 0) + k_s * max(N.H, 0)^n) * I

where H = normalize(L + V) is the half vector between the light and view
directions. A light with N.L <= 0 contributes nothing, specular included.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.materials.blinn_phong import add_material
    >>> gray = add_material(diffuse=(0.5, 0.5, 0.5), specular=(0.0, 0.0, 0.0), shininess=1.0)
"""

import logging

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3

logger = logging.getLogger(__name__)


@ti.dataclass
class BlinnPhongMaterial:
    """Blinn-Phong material properties.

    Attributes:
        diffuse: Diffuse reflectance (RGB).
        specular: Specular reflectance (RGB). Also used as the mirror
            attenuation applied to every reflection bounce.
        shininess: Specular exponent (non-negative).
    """

    diffuse: vec3
    specular: vec3
    shininess: ti.f32


@ti.func
def eval_blinn_phong(
    material: BlinnPhongMaterial,
    normal: vec3,
    light_dir: vec3,
    view_dir: vec3,
) -> vec3:
    """Evaluate the Blinn-Phong reflectance for one light direction.

    The caller multiplies the result by the light intensity. Lights below the
    horizon (N.L <= 0) contribute nothing, including no specular highlight.

    Args:
        material: The surface material.
        normal: The unit surface normal.
        light_dir: Unit direction from the surface point toward the light.
        view_dir: Unit direction from the surface point toward the viewer.

    Returns:
        The diffuse plus specular reflectance (RGB).
    """
    result = vec3(0.0, 0.0, 0.0)
    diff = tm.dot(normal, light_dir)
    if diff > 0.0:
        diffuse = material.diffuse * diff
        halfway = tm.normalize(light_dir + view_dir)
        spec_angle = ti.max(tm.dot(normal, halfway), 0.0)
        specular = material.specular * ti.pow(spec_angle, material.shininess)
        result = diffuse + specular
    return result


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of materials in the scene
MAX_MATERIALS = 256

# Storage for material properties: Structure of Arrays layout
material_diffuse = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_specular = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_shininess = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_materials() -> None:
    """Clear all materials.

    Resets the material count to zero. Existing data in the fields will be
    overwritten when new materials are added.
    """
    num_materials[None] = 0


def add_material(
    diffuse: tuple[float, float, float],
    specular: tuple[float, float, float],
    shininess: float,
) -> int:
    """Add a Blinn-Phong material to the material registry.

    Args:
        diffuse: Diffuse reflectance as (R, G, B), each component >= 0.
        specular: Specular reflectance as (R, G, B), each component >= 0.
        shininess: Specular exponent, >= 0.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any reflectance component or the shininess is negative.
    """
    for name, color in (("Diffuse", diffuse), ("Specular", specular)):
        for i, component in enumerate(color):
            if component < 0.0:
                raise ValueError(f"{name} component {i} = {component} must be non-negative")
    if shininess < 0.0:
        raise ValueError(f"Shininess must be non-negative, got {shininess}")

    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    material_diffuse[idx] = vec3(diffuse[0], diffuse[1], diffuse[2])
    material_specular[idx] = vec3(specular[0], specular[1], specular[2])
    material_shininess[idx] = shininess
    num_materials[None] = idx + 1
    logger.debug("Added material %d: diffuse=%s specular=%s shininess=%s", idx, diffuse, specular, shininess)
    return idx


def get_material_count() -> int:
    """Get the number of materials in the registry."""
    return int(num_materials[None])


@ti.func
def get_material(material_idx: ti.i32) -> BlinnPhongMaterial:
    """Get a material by index.

    Args:
        material_idx: The index of the material in the registry.

    Returns:
        The BlinnPhongMaterial stored at that index.
    """
    return BlinnPhongMaterial(
        diffuse=material_diffuse[material_idx],
        specular=material_specular[material_idx],
        shininess=material_shininess[material_idx],
    )

