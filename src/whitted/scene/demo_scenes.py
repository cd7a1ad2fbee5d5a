"""Ready-made demonstration scenes.

Each factory builds a scene through SceneManager and returns it together with
a PinholeCamera framing it:

    create_single_sphere_scene:  one matte sphere lit from above, no reflections
    create_facing_mirrors_scene: two mirror spheres facing each other
    create_showcase_scene:       several glossy spheres on a large ground sphere

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.scene.demo_scenes import create_showcase_scene
    >>> from src.whitted.camera.pinhole import setup_camera
    >>> scene, camera = create_showcase_scene()
    >>> setup_camera(camera)
"""

from src.whitted.camera.pinhole import PinholeCamera
from src.whitted.scene.manager import SceneManager

# Scene names accepted by create_scene()
SCENE_NAMES = ("single", "mirrors", "showcase")


def _default_camera(aspect_ratio: float, lookfrom=(0.0, 0.0, 0.0), lookat=(0.0, 0.0, -1.0)):
    return PinholeCamera(
        lookfrom=lookfrom,
        lookat=lookat,
        vup=(0.0, 1.0, 0.0),
        vfov=60.0,
        aspect_ratio=aspect_ratio,
    )


def create_single_sphere_scene(aspect_ratio: float = 1.0) -> tuple[SceneManager, PinholeCamera]:
    """Create a single matte gray sphere lit by one light, with no reflections.

    The sphere sits at (0, 0, -5) with radius 1. The light is above and in
    front of it at (0, 5, 0), so the point facing the camera is lit.

    Args:
        aspect_ratio: Image width divided by height.

    Returns:
        Tuple of (scene, camera).
    """
    scene = SceneManager()
    scene.add_sphere_with_material(
        center=(0.0, 0.0, -5.0),
        radius=1.0,
        diffuse=(0.5, 0.5, 0.5),
        specular=(0.0, 0.0, 0.0),
        shininess=1.0,
    )
    scene.add_light(position=(0.0, 5.0, 0.0), intensity=(1.0, 1.0, 1.0))
    scene.set_bounce_limit(0)
    return scene, _default_camera(aspect_ratio)


def create_facing_mirrors_scene(
    aspect_ratio: float = 1.0,
    specular: tuple[float, float, float] = (0.8, 0.8, 0.8),
    bounce_limit: int = 4,
) -> tuple[SceneManager, PinholeCamera]:
    """Create two mirror spheres facing each other across the view axis.

    The spheres have radius 1 and centers (-2, 0, -5) and (2, 0, -5). A sky
    colored environment makes escaping reflections visible.

    Args:
        aspect_ratio: Image width divided by height.
        specular: Mirror reflectance of both spheres.
        bounce_limit: Reflection bounce limit.

    Returns:
        Tuple of (scene, camera).
    """
    scene = SceneManager()
    mirror = scene.add_material(diffuse=(0.05, 0.05, 0.05), specular=specular, shininess=100.0)
    scene.add_sphere((-2.0, 0.0, -5.0), 1.0, mirror)
    scene.add_sphere((2.0, 0.0, -5.0), 1.0, mirror)
    scene.add_light(position=(0.0, 10.0, 0.0), intensity=(1.0, 1.0, 1.0))
    scene.set_environment_color((0.5, 0.7, 1.0))
    scene.set_bounce_limit(bounce_limit)
    return scene, _default_camera(aspect_ratio)


def create_showcase_scene(aspect_ratio: float = 16.0 / 9.0) -> tuple[SceneManager, PinholeCamera]:
    """Create several glossy spheres resting on a large ground sphere.

    Args:
        aspect_ratio: Image width divided by height.

    Returns:
        Tuple of (scene, camera).
    """
    scene = SceneManager()

    ground = scene.add_material(diffuse=(0.4, 0.4, 0.4), specular=(0.2, 0.2, 0.2), shininess=50.0)
    scene.add_sphere((0.0, -1001.0, 0.0), 1000.0, ground)

    scene.add_sphere_with_material(
        center=(-2.2, 0.0, -6.0),
        radius=1.0,
        diffuse=(0.7, 0.1, 0.1),
        specular=(0.3, 0.3, 0.3),
        shininess=80.0,
    )
    scene.add_sphere_with_material(
        center=(0.0, 0.0, -6.5),
        radius=1.0,
        diffuse=(0.05, 0.05, 0.05),
        specular=(0.9, 0.9, 0.9),
        shininess=500.0,
    )
    scene.add_sphere_with_material(
        center=(2.2, 0.0, -6.0),
        radius=1.0,
        diffuse=(0.1, 0.2, 0.7),
        specular=(0.3, 0.3, 0.3),
        shininess=80.0,
    )
    scene.add_sphere_with_material(
        center=(0.0, -0.6, -4.2),
        radius=0.4,
        diffuse=(0.8, 0.7, 0.1),
        specular=(0.5, 0.5, 0.5),
        shininess=200.0,
    )

    scene.add_light(position=(-5.0, 8.0, 0.0), intensity=(0.7, 0.7, 0.7))
    scene.add_light(position=(6.0, 5.0, -2.0), intensity=(0.4, 0.4, 0.5))
    scene.set_environment_color((0.6, 0.75, 0.95))
    scene.set_bounce_limit(5)

    camera = _default_camera(aspect_ratio, lookfrom=(0.0, 1.0, 2.0), lookat=(0.0, 0.0, -5.0))
    return scene, camera


def create_scene(name: str, aspect_ratio: float = 1.0) -> tuple[SceneManager, PinholeCamera]:
    """Create a demonstration scene by name.

    Args:
        name: One of SCENE_NAMES.
        aspect_ratio: Image width divided by height.

    Raises:
        ValueError: If the name is unknown.
    """
    if name == "single":
        return create_single_sphere_scene(aspect_ratio)
    if name == "mirrors":
        return create_facing_mirrors_scene(aspect_ratio)
    if name == "showcase":
        return create_showcase_scene(aspect_ratio)
    raise ValueError(f"Unknown scene: {name!r} (expected one of {', '.join(SCENE_NAMES)})")
