"""Geometry module for shape primitives.

This module provides the sphere primitive and its intersection routine:

Components:
    sphere: Sphere primitive with ray-sphere intersection

Intersection routines are Taichi functions (@ti.func) so they can be called
from the render kernel. Scene-level closest-hit and shadow queries live in
src.whitted.scene.intersection.
"""

from .sphere import (
    HIT_EPSILON,
    T_INFINITY,
    HitRecord,
    Sphere,
    hit_sphere,
    make_miss_hit_record,
    make_sphere,
)

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
    "make_miss_hit_record",
    "HIT_EPSILON",
    "T_INFINITY",
]
