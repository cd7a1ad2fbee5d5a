"""Environment sampler for rays that escape the scene.

The environment maps a ray direction to a background color. Two modes are
supported:
    ENV_CONSTANT: a single color for every direction (default black)
    ENV_CUBEMAP:  six square faces sampled with bilinear filtering

Cubemap axis convention:
    Scene directions are y-up while the cubemap faces are authored z-up, so a
    direction (x, y, z) is looked up as (x, z, y). Face selection and face
    coordinates then follow the OpenGL cube map table, with faces ordered
    +X, -X, +Y, -Y, +Z, -Z. Row 0 of each face is t = 0. This mapping is a
    fixed contract with the cubemap assets; changing it flips the background.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.scene.environment import load_cubemap, set_environment_cubemap
    >>> faces = load_cubemap(["px.png", "nx.png", "py.png", "ny.png", "pz.png", "nz.png"])
    >>> set_environment_cubemap(faces)
"""

import logging
from collections.abc import Sequence
from pathlib import Path

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm
from PIL import Image as PILImage

# Type alias for 3D vectors
vec3 = tm.vec3

logger = logging.getLogger(__name__)

# Environment modes
ENV_CONSTANT = 0
ENV_CUBEMAP = 1

# Largest supported cubemap face edge (preallocated to avoid kernel recompilation)
MAX_CUBEMAP_SIZE = 512

# Cube face indices, OpenGL order
FACE_POS_X = 0
FACE_NEG_X = 1
FACE_POS_Y = 2
FACE_NEG_Y = 3
FACE_POS_Z = 4
FACE_NEG_Z = 5

_env_mode = ti.field(dtype=ti.i32, shape=())
_env_color = ti.Vector.field(3, dtype=ti.f32, shape=())
_cubemap_size = ti.field(dtype=ti.i32, shape=())
_cubemap_faces = ti.Vector.field(
    3, dtype=ti.f32, shape=(6, MAX_CUBEMAP_SIZE, MAX_CUBEMAP_SIZE)
)


def clear_environment() -> None:
    """Reset the environment to a constant black background."""
    _env_mode[None] = ENV_CONSTANT
    _env_color[None] = [0.0, 0.0, 0.0]
    _cubemap_size[None] = 0


def set_environment_color(color: tuple[float, float, float]) -> None:
    """Use a constant background color for every direction.

    Args:
        color: Background color as (R, G, B), each component >= 0.

    Raises:
        ValueError: If any component is negative.
    """
    for i, component in enumerate(color):
        if component < 0.0:
            raise ValueError(f"Environment color component {i} = {component} must be non-negative")
    _env_mode[None] = ENV_CONSTANT
    _env_color[None] = [color[0], color[1], color[2]]


def get_environment_mode() -> int:
    """Get the active environment mode (ENV_CONSTANT or ENV_CUBEMAP)."""
    return int(_env_mode[None])


def get_environment_color() -> tuple[float, float, float]:
    """Get the constant background color."""
    c = _env_color[None]
    return (float(c[0]), float(c[1]), float(c[2]))


@ti.kernel
def _upload_faces(faces: ti.types.ndarray(), size: ti.i32):
    for f, r, c in ti.ndrange(6, size, size):
        _cubemap_faces[f, r, c] = vec3(faces[f, r, c, 0], faces[f, r, c, 1], faces[f, r, c, 2])


def set_environment_cubemap(faces: npt.NDArray) -> None:
    """Upload six cube faces and switch the environment to cubemap mode.

    Args:
        faces: Array of shape (6, N, N, 3) in +X, -X, +Y, -Y, +Z, -Z order.
            uint8 arrays are scaled to [0, 1]; float arrays are used as-is
            (linear radiance, may exceed 1).

    Raises:
        ValueError: If the array shape is wrong or N exceeds MAX_CUBEMAP_SIZE.
    """
    faces = np.asarray(faces)
    if faces.ndim != 4 or faces.shape[0] != 6 or faces.shape[3] != 3:
        raise ValueError(f"Cubemap faces must have shape (6, N, N, 3), got {faces.shape}")
    if faces.shape[1] != faces.shape[2]:
        raise ValueError(f"Cubemap faces must be square, got {faces.shape[1]}x{faces.shape[2]}")
    size = faces.shape[1]
    if size < 1 or size > MAX_CUBEMAP_SIZE:
        raise ValueError(
            f"Cubemap face size {size} outside supported range [1, {MAX_CUBEMAP_SIZE}]"
        )

    if faces.dtype == np.uint8:
        data = faces.astype(np.float32) / 255.0
    else:
        data = faces.astype(np.float32)

    _upload_faces(np.ascontiguousarray(data), size)
    _cubemap_size[None] = size
    _env_mode[None] = ENV_CUBEMAP
    logger.debug("Uploaded %dx%d cubemap", size, size)


def load_cubemap(paths: Sequence[str | Path]) -> npt.NDArray[np.uint8]:
    """Load six cube face images with Pillow.

    Args:
        paths: Six image paths in +X, -X, +Y, -Y, +Z, -Z order.

    Returns:
        uint8 array of shape (6, N, N, 3) ready for set_environment_cubemap().

    Raises:
        ValueError: If there are not six paths or the faces are not equally
            sized squares.
    """
    if len(paths) != 6:
        raise ValueError(f"A cubemap needs exactly 6 face images, got {len(paths)}")

    faces = []
    for path in paths:
        with PILImage.open(path) as img:
            faces.append(np.asarray(img.convert("RGB"), dtype=np.uint8))

    shape = faces[0].shape
    for path, face in zip(paths, faces):
        if face.shape != shape or face.shape[0] != face.shape[1]:
            raise ValueError(
                f"Cubemap face {path} has size {face.shape[1]}x{face.shape[0]}, "
                f"expected square faces of {shape[1]}x{shape[0]}"
            )

    return np.stack(faces, axis=0)


# =============================================================================
# Sampling (Taichi-compatible)
# =============================================================================


@ti.func
def cubemap_face_coords(direction: vec3):
    """Select the cube face and face coordinates for a cubemap-space direction.

    Args:
        direction: A non-zero direction already in cubemap axis order.

    Returns:
        A tuple (face, s, t) with s, t in [0, 1].
    """
    x = direction.x
    y = direction.y
    z = direction.z
    ax = ti.abs(x)
    ay = ti.abs(y)
    az = ti.abs(z)

    face = 0
    ma = 1.0
    sc = 0.0
    tc = 0.0
    if ax >= ay and ax >= az:
        ma = ax
        tc = -y
        if x > 0.0:
            face = FACE_POS_X
            sc = -z
        else:
            face = FACE_NEG_X
            sc = z
    elif ay >= az:
        ma = ay
        sc = x
        if y > 0.0:
            face = FACE_POS_Y
            tc = z
        else:
            face = FACE_NEG_Y
            tc = -z
    else:
        ma = az
        tc = -y
        if z > 0.0:
            face = FACE_POS_Z
            sc = x
        else:
            face = FACE_NEG_Z
            sc = -x

    s = 0.5 * (sc / ma + 1.0)
    t = 0.5 * (tc / ma + 1.0)
    return face, s, t


@ti.func
def _sample_face_bilinear(face: ti.i32, s: ti.f32, t: ti.f32) -> vec3:
    """Bilinearly sample one cube face with clamp-to-edge addressing."""
    size = _cubemap_size[None]
    x = s * ti.cast(size, ti.f32) - 0.5
    y = t * ti.cast(size, ti.f32) - 0.5
    x0 = ti.cast(ti.floor(x), ti.i32)
    y0 = ti.cast(ti.floor(y), ti.i32)
    fx = x - ti.cast(x0, ti.f32)
    fy = y - ti.cast(y0, ti.f32)

    c0 = ti.min(ti.max(x0, 0), size - 1)
    c1 = ti.min(ti.max(x0 + 1, 0), size - 1)
    r0 = ti.min(ti.max(y0, 0), size - 1)
    r1 = ti.min(ti.max(y0 + 1, 0), size - 1)

    top = _cubemap_faces[face, r0, c0] * (1.0 - fx) + _cubemap_faces[face, r0, c1] * fx
    bottom = _cubemap_faces[face, r1, c0] * (1.0 - fx) + _cubemap_faces[face, r1, c1] * fx
    return top * (1.0 - fy) + bottom * fy


@ti.func
def sample_environment(direction: vec3) -> vec3:
    """Look up the background color for an escaping ray direction.

    Args:
        direction: The ray direction in scene (y-up) coordinates. Need not be
            normalized.

    Returns:
        The environment color (RGB).
    """
    color = _env_color[None]
    if _env_mode[None] == ENV_CUBEMAP:
        # Scene y-up to cubemap z-up: (x, y, z) -> (x, z, y)
        face, s, t = cubemap_face_coords(vec3(direction.x, direction.z, direction.y))
        color = _sample_face_bilinear(face, s, t)
    return color


@ti.kernel
def _query_environment_kernel(direction: vec3) -> vec3:
    return sample_environment(direction)


def query_environment(direction: tuple[float, float, float]) -> tuple[float, float, float]:
    """Sample the environment from Python.

    Args:
        direction: Direction as (x, y, z) in scene coordinates.

    Returns:
        The environment color as (R, G, B).
    """
    color = _query_environment_kernel(vec3(*direction))
    return (float(color[0]), float(color[1]), float(color[2]))
