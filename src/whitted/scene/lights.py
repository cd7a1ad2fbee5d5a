"""Point light storage.

Lights are stored in Taichi fields with a fixed maximum count. Each light has
a position and a per-channel intensity; intensities are unbounded but must be
non-negative.
"""

import logging

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3

logger = logging.getLogger(__name__)


@ti.dataclass
class PointLight:
    """A point light source.

    Attributes:
        position: The light position in world space.
        intensity: Per-channel radiance (RGB, non-negative).
    """

    position: vec3
    intensity: vec3


# Maximum number of lights in the scene
MAX_LIGHTS = 16

light_positions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_intensities = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())


def clear_lights() -> None:
    """Remove all lights from the scene."""
    num_lights[None] = 0


def add_light(
    position: tuple[float, float, float],
    intensity: tuple[float, float, float],
) -> int:
    """Add a point light.

    Args:
        position: Light position as (x, y, z).
        intensity: Light intensity as (R, G, B), each component >= 0.

    Returns:
        The index of the added light.

    Raises:
        RuntimeError: If the maximum number of lights is exceeded.
        ValueError: If any intensity component is negative.
    """
    for i, component in enumerate(intensity):
        if component < 0.0:
            raise ValueError(f"Intensity component {i} = {component} must be non-negative")

    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")

    light_positions[idx] = vec3(position[0], position[1], position[2])
    light_intensities[idx] = vec3(intensity[0], intensity[1], intensity[2])
    num_lights[None] = idx + 1
    logger.debug("Added light %d at %s", idx, position)
    return idx


def get_light_count() -> int:
    """Get the number of lights in the scene."""
    return int(num_lights[None])


@ti.func
def get_light(light_idx: ti.i32) -> PointLight:
    """Get a light by index."""
    return PointLight(
        position=light_positions[light_idx],
        intensity=light_intensities[light_idx],
    )
