"""Taichi-based Whitted-style ray tracer for sphere scenes.

This package traces one primary ray per pixel through a scene of spheres and
combines:
- Blinn-Phong local illumination from point lights
- Hard shadows via shadow rays
- A bounded chain of mirror reflections
- Environment (cubemap) lookups for escaping rays

Subpackages:
    core: Ray and vector utilities, shading, reflection driver and render loop
    geometry: Sphere primitive and ray-sphere intersection
    materials: Blinn-Phong material registry
    scene: Scene storage, lights, environment sampler and scene manager
    camera: Pinhole camera ray generation
    preview: Tone mapping, compositing and image export
"""

__version__ = "0.1.0"
