"""Materials module.

Components:
    blinn_phong: Blinn-Phong material (diffuse + specular highlight) and the
        material registry stored in Taichi fields

The specular reflectance doubles as the mirror attenuation for reflection
bounces, so a material with zero specular terminates the bounce chain.
"""

from .blinn_phong import (
    MAX_MATERIALS,
    BlinnPhongMaterial,
    add_material,
    clear_materials,
    eval_blinn_phong,
    get_material,
    get_material_count,
)

__all__ = [
    "BlinnPhongMaterial",
    "eval_blinn_phong",
    "add_material",
    "clear_materials",
    "get_material",
    "get_material_count",
    "MAX_MATERIALS",
]
