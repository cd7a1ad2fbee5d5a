"""Preview module for output of rendered images.

Components:
    display: Tone mapping, gamma correction and coverage compositing
    export: PNG export through Pillow

Rendered buffers hold linear radiance plus a coverage flag. Tone mapping
brings HDR values into [0, 1]; the coverage channel passes through unchanged
and can be used to composite the render over any background.

Example:
    >>> from src.whitted.preview import composite_over, save_png
    >>> from src.whitted.core.renderer import Renderer
    >>>
    >>> renderer = Renderer(512, 512)
    >>> renderer.render()
    >>> save_png(renderer, "output.png", gamma=2.2, include_alpha=True)
"""

from src.whitted.preview.display import (
    ToneMapMethod,
    apply_gamma,
    composite_over,
    process_image_for_display,
    tone_map_exposure,
    tone_map_reinhard,
)
from src.whitted.preview.export import (
    compute_rmse,
    image_to_uint8,
    save_png,
    save_png_from_array,
)

__all__ = [
    # Tone mapping
    "tone_map_reinhard",
    "tone_map_exposure",
    "apply_gamma",
    "process_image_for_display",
    "composite_over",
    "ToneMapMethod",
    # Export functions
    "save_png",
    "save_png_from_array",
    "image_to_uint8",
    "compute_rmse",
]
