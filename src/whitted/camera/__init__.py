"""Camera module for primary ray generation.

Components:
    pinhole: Pinhole (perspective) camera with look-at positioning

Ray generation uses normalized image coordinates:
    u in [0, 1]: left to right across image
    v in [0, 1]: bottom to top across image

The pixel driver asks the camera for one ray through each pixel center.
"""

from .pinhole import (
    PinholeCamera,
    get_camera_info,
    get_ray,
    get_ray_for_pixel,
    setup_camera,
)

__all__ = [
    "PinholeCamera",
    "setup_camera",
    "get_ray",
    "get_ray_for_pixel",
    "get_camera_info",
]
