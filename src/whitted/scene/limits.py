"""Reflection bounce limits.

MAX_BOUNCES is the static bound on the reflection loop. The bounce limit is
the runtime cap chosen per scene and is always kept within [0, MAX_BOUNCES].
"""

import logging

import taichi as ti

logger = logging.getLogger(__name__)

# Static upper bound on reflection bounces
MAX_BOUNCES = 16

# Bounce limit used when a scene does not set one
DEFAULT_BOUNCE_LIMIT = 5

bounce_limit = ti.field(dtype=ti.i32, shape=())


def set_bounce_limit(limit: int) -> int:
    """Set the runtime reflection bounce limit.

    Args:
        limit: Requested number of reflection bounces. Values outside
            [0, MAX_BOUNCES] are clamped.

    Returns:
        The bounce limit actually stored.
    """
    clamped = max(0, min(int(limit), MAX_BOUNCES))
    if clamped != limit:
        logger.debug("Bounce limit %s clamped to %d", limit, clamped)
    bounce_limit[None] = clamped
    return clamped


def get_bounce_limit() -> int:
    """Get the runtime reflection bounce limit."""
    return int(bounce_limit[None])
