"""Renderer wrapper around the pixel driver.

This module provides a convenient class around the integrator functions that:
- Owns the image dimensions and sets up the render target
- Renders a full frame with one primary ray per pixel
- Exposes the RGBA buffer as color, coverage or 8-bit arrays
- Saves finished frames through Pillow

The integrator state lives in global Taichi fields, so one Renderer is active
at a time; creating a new one resets the shared render target.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from src.whitted.core.renderer import Renderer
    >>> from src.whitted.scene.demo_scenes import create_showcase_scene
    >>> from src.whitted.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_showcase_scene()
    >>> setup_camera(camera)
    >>>
    >>> renderer = Renderer(640, 360)
    >>> renderer.render()
    >>> image = renderer.get_image_numpy()
"""

import logging
import time
from typing import Any

import numpy as np
import numpy.typing as npt

from src.whitted.core.integrator import (
    clear_render_target,
    get_image,
    get_image_numpy,
    render_image,
    setup_render_target,
)
from src.whitted.scene.limits import get_bounce_limit

logger = logging.getLogger(__name__)


class Renderer:
    """Renders the current scene into an RGBA buffer.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
    """

    def __init__(self, width: int, height: int) -> None:
        """Initialize the renderer.

        Args:
            width: Image width in pixels (max 2048).
            height: Image height in pixels (max 2048).

        Raises:
            ValueError: If dimensions are not positive or exceed the maximum.
        """
        self._width = width
        self._height = height
        self._frame_count = 0
        setup_render_target(width, height)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def frame_count(self) -> int:
        """Get the number of frames rendered since the last reset."""
        return self._frame_count

    def reset(self) -> None:
        """Clear the RGBA buffer without changing the image dimensions."""
        clear_render_target()
        self._frame_count = 0

    def resize(self, width: int, height: int) -> None:
        """Resize the render target and clear it.

        Raises:
            ValueError: If dimensions are not positive or exceed the maximum.
        """
        setup_render_target(width, height)
        self._width = width
        self._height = height
        self._frame_count = 0

    def render(self) -> float:
        """Render one full frame of the current scene.

        Returns:
            Wall-clock render time in seconds.
        """
        start = time.perf_counter()
        render_image()
        elapsed = time.perf_counter() - start
        self._frame_count += 1
        logger.debug(
            "Rendered %dx%d frame (bounce limit %d) in %.3fs",
            self._width,
            self._height,
            get_bounce_limit(),
            elapsed,
        )
        return elapsed

    def get_image(self) -> Any:
        """Get the raw Taichi RGBA buffer field.

        Note: This returns the full preallocated buffer. Use width/height
        properties to determine the active region.
        """
        return get_image()

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Get the rendered RGBA image as linear, unclamped floats.

        Returns:
            NumPy array of shape (height, width, 4) with dtype float32.
        """
        return get_image_numpy()

    def get_color_numpy(self, gamma: float = 1.0) -> npt.NDArray[np.float32]:
        """Get the RGB channels clamped to [0, 1] and optionally gamma corrected.

        Args:
            gamma: Gamma correction value. Default 1.0 (linear).
                Use 2.2 for sRGB display.

        Returns:
            NumPy array of shape (height, width, 3) with dtype float32.
        """
        image = np.clip(get_image_numpy()[:, :, :3], 0.0, 1.0)

        if gamma != 1.0:
            image = np.power(image, 1.0 / gamma)

        return image.astype(np.float32)

    def get_coverage_numpy(self) -> npt.NDArray[np.float32]:
        """Get the coverage mask: 1 where a sphere was hit, 0 elsewhere.

        Returns:
            NumPy array of shape (height, width) with dtype float32.
        """
        return np.ascontiguousarray(get_image_numpy()[:, :, 3])

    def get_image_uint8(self, gamma: float = 2.2, include_alpha: bool = False) -> npt.NDArray[np.uint8]:
        """Get the rendered image as an 8-bit NumPy array.

        Args:
            gamma: Gamma correction value. Default 2.2 for sRGB.
            include_alpha: Append the coverage mask as a fourth channel.

        Returns:
            NumPy array of shape (height, width, 3) or (height, width, 4)
            with dtype uint8.
        """
        color = self.get_color_numpy(gamma=gamma)
        if include_alpha:
            coverage = np.clip(self.get_coverage_numpy(), 0.0, 1.0)
            color = np.concatenate([color, coverage[:, :, np.newaxis]], axis=2)
        return (color * 255).astype(np.uint8)

    def save_image(self, filepath: str, gamma: float = 2.2, include_alpha: bool = False) -> None:
        """Save the rendered image to a file.

        Args:
            filepath: Path to save the image (e.g., "output.png").
            gamma: Gamma correction value. Default 2.2 for sRGB.
            include_alpha: Store the coverage mask as the alpha channel.
        """
        from PIL import Image as PILImage

        image_uint8 = self.get_image_uint8(gamma=gamma, include_alpha=include_alpha)
        mode = "RGBA" if include_alpha else "RGB"
        pil_image = PILImage.fromarray(image_uint8)
        pil_image.save(filepath)
        logger.debug("Saved %s image to %s", mode, filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return f"Renderer(width={self.width}, height={self.height}, frames={self.frame_count})"
