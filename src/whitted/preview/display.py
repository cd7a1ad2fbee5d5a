"""Tone mapping and compositing for rendered RGBA images.

Rendered images are linear radiance with a coverage flag in the alpha channel.
The functions here turn them into displayable [0, 1] images while leaving the
coverage channel untouched, and composite them over a background.

Example:
    >>> from src.whitted.preview.display import process_image_for_display
    >>> from src.whitted.core.renderer import Renderer
    >>>
    >>> renderer = Renderer(320, 240)
    >>> renderer.render()
    >>> rgba = process_image_for_display(renderer.get_image_numpy(), tone_map="reinhard")
"""

from __future__ import annotations

from typing import Literal

import numpy as np
import numpy.typing as npt

# Type alias for tone mapping options
ToneMapMethod = Literal["none", "reinhard", "exposure"]


def _split_alpha(
    image: npt.NDArray[np.float32],
) -> tuple[npt.NDArray[np.float32], npt.NDArray[np.float32] | None]:
    """Split an (H, W, 3) or (H, W, 4) image into color and optional alpha."""
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise ValueError(f"Expected an (H, W, 3) or (H, W, 4) image, got shape {image.shape}")
    if image.shape[2] == 4:
        return image[:, :, :3], image[:, :, 3:]
    return image, None


def tone_map_reinhard(
    image: npt.NDArray[np.float32],
) -> npt.NDArray[np.float32]:
    """Apply Reinhard tone mapping: L / (1 + L).

    Args:
        image: Linear HDR color array of shape (H, W, 3).

    Returns:
        Tone mapped image in [0, 1) range.
    """
    image = np.maximum(image, 0.0)
    result = image / (1.0 + image)
    return result.astype(np.float32)


def tone_map_exposure(
    image: npt.NDArray[np.float32],
    exposure: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Apply exposure-based tone mapping: 1 - exp(-c * exposure).

    Args:
        image: Linear HDR color array of shape (H, W, 3).
        exposure: Exposure value (default 1.0). Higher values brighten the image.

    Returns:
        Tone mapped image in [0, 1) range.
    """
    image = np.maximum(image, 0.0)
    result = 1.0 - np.exp(-image * exposure)
    return result.astype(np.float32)


def apply_gamma(
    image: npt.NDArray[np.float32],
    gamma: float = 2.2,
) -> npt.NDArray[np.float32]:
    """Apply gamma encoding: out = clamp(in)^(1/gamma).

    A gamma of 1.0 returns the input unchanged.
    """
    if gamma == 1.0:
        return image

    # Clamp first so negative values cannot produce NaN
    image = np.clip(image, 0.0, 1.0)
    result = np.power(image, 1.0 / gamma)
    return result.astype(np.float32)


def process_image_for_display(
    image: npt.NDArray[np.float32],
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
    exposure: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Tone map, gamma correct and clamp an image for display.

    The color channels go through tone mapping, then gamma correction, then a
    final clamp to [0, 1]. An alpha channel, if present, is only clamped.

    Args:
        image: Linear image of shape (H, W, 3) or (H, W, 4).
        tone_map: Tone mapping method ("none", "reinhard", or "exposure").
        gamma: Gamma correction value (default 2.2 for sRGB).
        exposure: Exposure value for exposure tone mapping (default 1.0).

    Returns:
        Processed image of the same shape, in [0, 1] range.

    Raises:
        ValueError: If the tone mapping method is unknown or the image shape
            is not supported.
    """
    color, alpha = _split_alpha(image)
    result = color.copy()

    if tone_map == "reinhard":
        result = tone_map_reinhard(result)
    elif tone_map == "exposure":
        result = tone_map_exposure(result, exposure)
    elif tone_map != "none":
        raise ValueError(f"Unknown tone mapping method: {tone_map}")

    result = apply_gamma(result, gamma)
    result = np.clip(result, 0.0, 1.0)

    if alpha is not None:
        result = np.concatenate([result, np.clip(alpha, 0.0, 1.0)], axis=2)

    return result.astype(np.float32)


def composite_over(
    image: npt.NDArray[np.float32],
    background: npt.NDArray[np.float32] | tuple[float, float, float],
) -> npt.NDArray[np.float32]:
    """Composite an RGBA image over a background using its coverage.

    Covered pixels keep their color and uncovered pixels take the background:
    out = alpha * color + (1 - alpha) * background.

    Args:
        image: Image of shape (H, W, 4).
        background: An (H, W, 3) image or a single RGB color.

    Returns:
        Composited (H, W, 3) image.

    Raises:
        ValueError: If the image has no alpha channel or the background shape
            does not match.
    """
    color, alpha = _split_alpha(image)
    if alpha is None:
        raise ValueError("composite_over requires an (H, W, 4) image with coverage")

    bg = np.asarray(background, dtype=np.float32)
    if bg.ndim == 1:
        bg = np.broadcast_to(bg.reshape(1, 1, 3), color.shape)
    elif bg.shape != color.shape:
        raise ValueError(f"Background shape {bg.shape} does not match image {color.shape}")

    alpha = np.clip(alpha, 0.0, 1.0)
    result = alpha * color + (1.0 - alpha) * bg
    return result.astype(np.float32)
