"""Scene module for scene storage and ray-scene queries.

Components:
    intersection: Sphere storage and closest-hit / shadow queries
    lights: Point light storage
    environment: Background sampler (constant color or cubemap)
    limits: Static and runtime reflection bounce limits
    manager: SceneManager coordinating everything above
    demo_scenes: Ready-made demonstration scenes

Scene data lives in Taichi fields in Structure-of-Arrays layout and is
written from Python before a render; kernels only read it.
"""

from .demo_scenes import (
    SCENE_NAMES,
    create_facing_mirrors_scene,
    create_scene,
    create_showcase_scene,
    create_single_sphere_scene,
)
from .environment import (
    ENV_CONSTANT,
    ENV_CUBEMAP,
    MAX_CUBEMAP_SIZE,
    clear_environment,
    load_cubemap,
    query_environment,
    sample_environment,
    set_environment_color,
    set_environment_cubemap,
)
from .intersection import (
    MAX_SPHERES,
    SceneHitRecord,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
    is_occluded,
    query_intersection,
)
from .lights import (
    MAX_LIGHTS,
    PointLight,
    add_light,
    clear_lights,
    get_light,
    get_light_count,
)
from .limits import (
    DEFAULT_BOUNCE_LIMIT,
    MAX_BOUNCES,
    get_bounce_limit,
    set_bounce_limit,
)
from .manager import (
    LightInfo,
    MaterialInfo,
    SceneConfig,
    SceneManager,
    SphereInfo,
)

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "is_occluded",
    "query_intersection",
    "MAX_SPHERES",
    # Lights module
    "PointLight",
    "add_light",
    "clear_lights",
    "get_light",
    "get_light_count",
    "MAX_LIGHTS",
    # Environment module
    "ENV_CONSTANT",
    "ENV_CUBEMAP",
    "MAX_CUBEMAP_SIZE",
    "clear_environment",
    "load_cubemap",
    "query_environment",
    "sample_environment",
    "set_environment_color",
    "set_environment_cubemap",
    # Limits module
    "MAX_BOUNCES",
    "DEFAULT_BOUNCE_LIMIT",
    "get_bounce_limit",
    "set_bounce_limit",
    # Manager module
    "SceneManager",
    "SceneConfig",
    "MaterialInfo",
    "SphereInfo",
    "LightInfo",
    # Demo scenes
    "SCENE_NAMES",
    "create_scene",
    "create_single_sphere_scene",
    "create_facing_mirrors_scene",
    "create_showcase_scene",
]
