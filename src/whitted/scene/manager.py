"""Unified scene manager coordinating spheres, materials, lights and environment.

This module provides the host-side API for building the per-frame scene. The
Taichi fields it writes are read-only for the duration of a render.

The SceneManager maintains:
- The Blinn-Phong material registry
- Sphere storage with a material ID per sphere
- Point lights
- The environment (constant color or cubemap)
- The reflection bounce limit, clamped to [0, MAX_BOUNCES]
- Scene serialization to and from plain dictionaries

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> gray = scene.add_material(diffuse=(0.5, 0.5, 0.5))
    >>> scene.add_sphere((0, 0, -5), 1.0, gray)
    >>> scene.add_light(position=(0, 5, -5), intensity=(1, 1, 1))
    >>> scene.set_bounce_limit(0)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import numpy.typing as npt
import taichi.math as tm

from src.whitted.materials.blinn_phong import (
    MAX_MATERIALS,
    add_material,
    clear_materials,
    get_material_count,
)
from src.whitted.scene.environment import (
    ENV_CUBEMAP,
    clear_environment,
    get_environment_color,
    get_environment_mode,
    set_environment_color,
    set_environment_cubemap,
)
from src.whitted.scene.intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
)
from src.whitted.scene.lights import (
    MAX_LIGHTS,
    add_light,
    clear_lights,
    get_light_count,
)
from src.whitted.scene.limits import (
    DEFAULT_BOUNCE_LIMIT,
    MAX_BOUNCES,
    get_bounce_limit,
    set_bounce_limit,
)

# Type alias for 3D vectors
vec3 = tm.vec3

logger = logging.getLogger(__name__)


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The material ID.
        diffuse: Diffuse reflectance.
        specular: Specular reflectance (also the mirror attenuation).
        shininess: Specular exponent.
    """

    material_id: int
    diffuse: tuple[float, float, float]
    specular: tuple[float, float, float]
    shininess: float


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        sphere_index: The index in the sphere storage arrays.
        center: The center of the sphere.
        radius: The radius of the sphere.
        material_id: The material ID assigned to the sphere.
    """

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class LightInfo:
    """Information about a point light in the scene."""

    light_index: int
    position: tuple[float, float, float]
    intensity: tuple[float, float, float]


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        materials: List of material configurations.
        spheres: List of sphere configurations. A sphere refers to a material
            either by "material_id" or with an inline "material" dict.
        lights: List of light configurations.
        bounce_limit: Reflection bounce limit.
        environment_color: Constant background color.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)
    lights: list[dict[str, Any]] = field(default_factory=list)
    bounce_limit: int = DEFAULT_BOUNCE_LIMIT
    environment_color: tuple[float, float, float] = (0.0, 0.0, 0.0)


def _as_vec3_tuple(values: Any, name: str) -> tuple[float, float, float]:
    """Convert a 3-element sequence to a float tuple."""
    if len(values) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(values)}")
    return (float(values[0]), float(values[1]), float(values[2]))


class SceneManager:
    """Scene builder coordinating spheres, materials, lights and environment.

    Creating a SceneManager clears any previous scene, so one instance
    describes one frame.

    Attributes:
        materials: List of MaterialInfo for all registered materials.
        spheres: List of SphereInfo for all spheres in the scene.
        lights: List of LightInfo for all lights in the scene.

    Example:
        >>> scene = SceneManager()
        >>> mirror = scene.add_material(specular=(0.9, 0.9, 0.9), shininess=200.0)
        >>> scene.add_sphere((-1.5, 0, -5), 1.0, mirror)
        >>> scene.add_sphere((1.5, 0, -5), 1.0, mirror)
        >>> scene.add_light((0, 10, 0), (1, 1, 1))
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self.lights: list[LightInfo] = []
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        clear_scene()
        clear_materials()
        clear_lights()
        clear_environment()
        set_bounce_limit(DEFAULT_BOUNCE_LIMIT)
        self.materials.clear()
        self.spheres.clear()
        self.lights.clear()

    def clear(self) -> None:
        """Clear the entire scene and reset the bounce limit to its default."""
        self._clear_all()

    # =========================================================================
    # Material Management
    # =========================================================================

    def add_material(
        self,
        diffuse: tuple[float, float, float] = (0.0, 0.0, 0.0),
        specular: tuple[float, float, float] = (0.0, 0.0, 0.0),
        shininess: float = 1.0,
    ) -> int:
        """Add a Blinn-Phong material to the scene.

        Args:
            diffuse: Diffuse reflectance as (R, G, B).
            specular: Specular reflectance as (R, G, B). Channels in [0, 1]
                keep the reflection chain from gaining energy.
            shininess: Specular exponent, >= 0.

        Returns:
            The material ID.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any parameter is negative.
        """
        material_id = add_material(diffuse, specular, shininess)
        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                diffuse=tuple(diffuse),
                specular=tuple(specular),
                shininess=shininess,
            )
        )
        return material_id

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        return get_material_count()

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material by ID, or None if not found."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    # =========================================================================
    # Primitive Management
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere (must be positive).
            material_id: The material ID to assign to the sphere.

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If material_id is invalid or the radius is not positive.
        """
        if material_id < 0 or material_id >= get_material_count():
            raise ValueError(f"Invalid material_id: {material_id}")

        center_vec = vec3(center[0], center[1], center[2])
        sphere_index = add_sphere(center_vec, radius, material_id)

        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=tuple(center),
                radius=radius,
                material_id=material_id,
            )
        )
        return sphere_index

    def add_sphere_with_material(
        self,
        center: tuple[float, float, float],
        radius: float,
        diffuse: tuple[float, float, float] = (0.0, 0.0, 0.0),
        specular: tuple[float, float, float] = (0.0, 0.0, 0.0),
        shininess: float = 1.0,
    ) -> tuple[int, int]:
        """Add a sphere with a new material in one call.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_material(diffuse, specular, shininess)
        sphere_index = self.add_sphere(center, radius, material_id)
        return sphere_index, material_id

    # =========================================================================
    # Lights, Environment and Bounce Limit
    # =========================================================================

    def add_light(
        self,
        position: tuple[float, float, float],
        intensity: tuple[float, float, float],
    ) -> int:
        """Add a point light.

        Returns:
            The index of the added light.

        Raises:
            RuntimeError: If the maximum number of lights is exceeded.
            ValueError: If any intensity component is negative.
        """
        light_index = add_light(position, intensity)
        self.lights.append(
            LightInfo(light_index=light_index, position=tuple(position), intensity=tuple(intensity))
        )
        return light_index

    def set_environment_color(self, color: tuple[float, float, float]) -> None:
        """Use a constant background color."""
        set_environment_color(color)

    def set_environment_cubemap(self, faces: npt.NDArray) -> None:
        """Use a cubemap background; see environment.set_environment_cubemap()."""
        set_environment_cubemap(faces)

    def set_bounce_limit(self, limit: int) -> int:
        """Set the reflection bounce limit, clamped to [0, MAX_BOUNCES].

        Returns:
            The bounce limit actually stored.
        """
        return set_bounce_limit(limit)

    @property
    def bounce_limit(self) -> int:
        """The current reflection bounce limit."""
        return get_bounce_limit()

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return get_sphere_count()

    def get_light_count(self) -> int:
        """Get the number of lights in the scene."""
        return get_light_count()

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object.

        Cubemap environments are not serialized; only the constant color is.
        """
        if get_environment_mode() == ENV_CUBEMAP:
            logger.warning("Cubemap environment is not serialized; exporting constant color")

        config = SceneConfig(
            bounce_limit=self.bounce_limit,
            environment_color=get_environment_color(),
        )
        for mat in self.materials:
            config.materials.append(
                {
                    "diffuse": list(mat.diffuse),
                    "specular": list(mat.specular),
                    "shininess": mat.shininess,
                }
            )
        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                }
            )
        for light in self.lights:
            config.lights.append(
                {
                    "position": list(light.position),
                    "intensity": list(light.intensity),
                }
            )
        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene first.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        self.clear()

        # Materials first (spheres refer to them by ID)
        for mat_config in config.materials:
            self.add_material(
                diffuse=_as_vec3_tuple(mat_config.get("diffuse", [0.0, 0.0, 0.0]), "diffuse"),
                specular=_as_vec3_tuple(mat_config.get("specular", [0.0, 0.0, 0.0]), "specular"),
                shininess=float(mat_config.get("shininess", 1.0)),
            )

        for sphere_config in config.spheres:
            center = _as_vec3_tuple(sphere_config.get("center", [0.0, 0.0, 0.0]), "center")
            radius = float(sphere_config.get("radius", 1.0))
            if "material" in sphere_config:
                inline = sphere_config["material"]
                material_id = self.add_material(
                    diffuse=_as_vec3_tuple(inline.get("diffuse", [0.0, 0.0, 0.0]), "diffuse"),
                    specular=_as_vec3_tuple(inline.get("specular", [0.0, 0.0, 0.0]), "specular"),
                    shininess=float(inline.get("shininess", 1.0)),
                )
            else:
                material_id = int(sphere_config.get("material_id", 0))
            self.add_sphere(center, radius, material_id)

        for light_config in config.lights:
            self.add_light(
                position=_as_vec3_tuple(light_config.get("position", [0.0, 0.0, 0.0]), "position"),
                intensity=_as_vec3_tuple(light_config.get("intensity", [1.0, 1.0, 1.0]), "intensity"),
            )

        self.set_environment_color(_as_vec3_tuple(config.environment_color, "environment_color"))
        self.set_bounce_limit(config.bounce_limit)
        logger.debug(
            "Loaded scene: %d materials, %d spheres, %d lights, bounce limit %d",
            len(self.materials),
            len(self.spheres),
            len(self.lights),
            self.bounce_limit,
        )

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {
            "materials": config.materials,
            "spheres": config.spheres,
            "lights": config.lights,
            "bounce_limit": config.bounce_limit,
            "environment_color": list(config.environment_color),
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary.

        Args:
            data: Dictionary with 'materials', 'spheres', 'lights',
                'bounce_limit' and 'environment_color' keys (all optional).
        """
        config = SceneConfig(
            materials=data.get("materials", []),
            spheres=data.get("spheres", []),
            lights=data.get("lights", []),
            bounce_limit=int(data.get("bounce_limit", DEFAULT_BOUNCE_LIMIT)),
            environment_color=tuple(data.get("environment_color", (0.0, 0.0, 0.0))),
        )
        self.from_config(config)

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_spheres() -> int:
        """Get the maximum number of spheres supported."""
        return MAX_SPHERES

    @staticmethod
    def get_max_lights() -> int:
        """Get the maximum number of lights supported."""
        return MAX_LIGHTS

    @staticmethod
    def get_max_materials() -> int:
        """Get the maximum number of materials supported."""
        return MAX_MATERIALS

    @staticmethod
    def get_max_bounces() -> int:
        """Get the static upper bound on the bounce limit."""
        return MAX_BOUNCES
