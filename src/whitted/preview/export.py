"""Image export utilities for rendered images.

Saves 8-bit PNG files through Pillow. RGBA input keeps the coverage mask as
the PNG alpha channel.

Example:
    >>> from src.whitted.preview.export import save_png
    >>> from src.whitted.core.renderer import Renderer
    >>>
    >>> renderer = Renderer(512, 512)
    >>> renderer.render()
    >>> save_png(renderer, "output.png", tone_map="reinhard")
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from src.whitted.preview.display import ToneMapMethod, process_image_for_display

if TYPE_CHECKING:
    from src.whitted.core.renderer import Renderer

logger = logging.getLogger(__name__)


def image_to_uint8(
    image: npt.NDArray[np.float32],
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
    exposure: float = 1.0,
) -> npt.NDArray[np.uint8]:
    """Convert a linear float32 image to uint8 for display/export.

    Args:
        image: Linear image of shape (H, W, 3) or (H, W, 4).
        tone_map: Tone mapping method ("none", "reinhard", or "exposure").
        gamma: Gamma correction value (default 2.2 for sRGB).
        exposure: Exposure value for exposure tone mapping (default 1.0).

    Returns:
        8-bit image array with the same channel count as the input.
    """
    processed = process_image_for_display(
        image,
        tone_map=tone_map,
        gamma=gamma,
        exposure=exposure,
    )
    return (processed * 255).astype(np.uint8)


def save_png_from_array(
    image: npt.NDArray[np.float32],
    filepath: str,
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
    exposure: float = 1.0,
) -> None:
    """Save a NumPy array as an 8-bit PNG file.

    Args:
        image: Linear image of shape (H, W, 3) or (H, W, 4). Four-channel
            images are written as RGBA.
        filepath: Output file path (should end in .png).
        tone_map: Tone mapping method ("none", "reinhard", or "exposure").
        gamma: Gamma correction value (default 2.2 for sRGB).
        exposure: Exposure value for exposure tone mapping (default 1.0).
    """
    image_uint8 = image_to_uint8(image, tone_map=tone_map, gamma=gamma, exposure=exposure)
    mode = "RGBA" if image_uint8.shape[2] == 4 else "RGB"

    pil_image = PILImage.fromarray(image_uint8)
    pil_image.save(filepath)
    logger.debug("Wrote %dx%d %s PNG to %s", image_uint8.shape[1], image_uint8.shape[0], mode, filepath)


def save_png(
    renderer: Renderer,
    filepath: str,
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
    exposure: float = 1.0,
    include_alpha: bool = False,
) -> None:
    """Save the renderer's current image as a PNG file.

    Args:
        renderer: The Renderer whose buffer to save.
        filepath: Output file path (should end in .png).
        tone_map: Tone mapping method ("none", "reinhard", or "exposure").
        gamma: Gamma correction value (default 2.2 for sRGB).
        exposure: Exposure value for exposure tone mapping (default 1.0).
        include_alpha: Write the coverage mask as the alpha channel.

    Example:
        >>> renderer = Renderer(512, 512)
        >>> renderer.render()
        >>> save_png(renderer, "output.png", tone_map="reinhard", gamma=2.2)
    """
    image = renderer.get_image_numpy()
    if not include_alpha:
        image = image[:, :, :3]

    save_png_from_array(image, filepath, tone_map=tone_map, gamma=gamma, exposure=exposure)


def compute_rmse(
    image_a: npt.NDArray[np.floating[npt.NBitBase]],
    image_b: npt.NDArray[np.floating[npt.NBitBase]],
) -> float:
    """Compute root mean squared error between two images.

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
