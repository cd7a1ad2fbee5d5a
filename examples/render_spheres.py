#!/usr/bin/env python3
"""Render one of the demonstration sphere scenes.

Creates a scene, sets up the camera, renders one primary ray per pixel with
Whitted-style mirror reflections and saves the result as a PNG.

Usage:
    python -m examples.render_spheres [options]

Options:
    --width WIDTH         Image width in pixels (default: 640)
    --height HEIGHT       Image height in pixels (default: 360)
    --scene NAME          Demo scene: single, mirrors or showcase (default: showcase)
    --scene-file PATH     Load the scene from a JSON file instead
    --bounces N           Override the scene's reflection bounce limit
    --cubemap PATHS       Six face images (+X -X +Y -Y +Z -Z) for the environment
    --output OUTPUT       Output file path (default: spheres.png)
    --alpha               Store the coverage mask as the PNG alpha channel
    --cpu                 Force the CPU backend
    --quiet               Suppress progress output

Example:
    python -m examples.render_spheres --scene mirrors --bounces 8 --width 320 --height 320
"""

from __future__ import annotations

import argparse
import json
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a Whitted-style sphere scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=640,
        help="Image width in pixels (default: 640)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=360,
        help="Image height in pixels (default: 360)",
    )
    parser.add_argument(
        "--scene",
        type=str,
        default="showcase",
        choices=["single", "mirrors", "showcase"],
        help="Demo scene to render (default: showcase)",
    )
    parser.add_argument(
        "--scene-file",
        type=str,
        default=None,
        help="JSON scene description to render instead of a demo scene",
    )
    parser.add_argument(
        "--bounces",
        type=int,
        default=None,
        help="Reflection bounce limit (default: the scene's own)",
    )
    parser.add_argument(
        "--cubemap",
        type=str,
        nargs=6,
        default=None,
        metavar="FACE",
        help="Cubemap face images in +X -X +Y -Y +Z -Z order",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="spheres.png",
        help="Output file path (default: spheres.png)",
    )
    parser.add_argument(
        "--alpha",
        action="store_true",
        help="Write the coverage mask as the alpha channel",
    )
    parser.add_argument(
        "--cpu",
        action="store_true",
        help="Force the CPU backend",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def _load_scene_file(path: str, aspect_ratio: float):
    """Load a JSON scene file with an optional "camera" section."""
    from src.whitted.camera.pinhole import PinholeCamera
    from src.whitted.scene.manager import SceneManager

    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    scene = SceneManager()
    scene.from_dict(data)

    camera_data = data.get("camera", {})
    camera = PinholeCamera(
        lookfrom=tuple(camera_data.get("lookfrom", (0.0, 0.0, 0.0))),
        lookat=tuple(camera_data.get("lookat", (0.0, 0.0, -1.0))),
        vup=tuple(camera_data.get("vup", (0.0, 1.0, 0.0))),
        vfov=float(camera_data.get("vfov", 60.0)),
        aspect_ratio=aspect_ratio,
    )
    return scene, camera


def render_spheres(
    width: int = 640,
    height: int = 360,
    scene_name: str = "showcase",
    scene_file: str | None = None,
    bounces: int | None = None,
    cubemap: list[str] | None = None,
    output_path: str = "spheres.png",
    include_alpha: bool = False,
    quiet: bool = False,
) -> Path:
    """Render a sphere scene and save to file.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        scene_name: Name of the demo scene.
        scene_file: Optional JSON scene file; overrides scene_name.
        bounces: Optional bounce limit overriding the scene's own.
        cubemap: Optional six cubemap face image paths.
        output_path: Output file path (PNG).
        include_alpha: Store coverage as the PNG alpha channel.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.whitted.camera.pinhole import setup_camera
    from src.whitted.core.renderer import Renderer
    from src.whitted.preview.export import save_png
    from src.whitted.scene.demo_scenes import create_scene
    from src.whitted.scene.environment import load_cubemap

    aspect_ratio = width / height

    if scene_file is not None:
        if not quiet:
            print(f"Loading scene from {scene_file} ({width}x{height})...")
        scene, camera = _load_scene_file(scene_file, aspect_ratio)
    else:
        if not quiet:
            print(f"Creating '{scene_name}' scene ({width}x{height})...")
        scene, camera = create_scene(scene_name, aspect_ratio)

    if cubemap is not None:
        scene.set_environment_cubemap(load_cubemap(cubemap))

    if bounces is not None:
        applied = scene.set_bounce_limit(bounces)
        if applied != bounces and not quiet:
            print(f"Bounce limit clamped to {applied}")

    setup_camera(camera)

    renderer = Renderer(width, height)

    if not quiet:
        print(
            f"Rendering {scene.get_sphere_count()} spheres, {scene.get_light_count()} lights, "
            f"bounce limit {scene.bounce_limit}..."
        )

    start_time = time.time()
    render_time = renderer.render()

    output_file = Path(output_path)
    save_png(
        renderer,
        str(output_file),
        tone_map="none",
        gamma=2.2,
        include_alpha=include_alpha,
    )

    total_time = time.time() - start_time
    if not quiet:
        print(f"Render time: {render_time:.3f}s")
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    # Use GPU if available, fall back to CPU
    if args.cpu:
        ti.init(arch=ti.cpu)
        if not args.quiet:
            print("Using CPU backend")
    else:
        try:
            ti.init(arch=ti.gpu)
            if not args.quiet:
                print("Using GPU backend")
        except Exception:
            ti.init(arch=ti.cpu)
            if not args.quiet:
                print("Using CPU backend")

    try:
        render_spheres(
            width=args.width,
            height=args.height,
            scene_name=args.scene,
            scene_file=args.scene_file,
            bounces=args.bounces,
            cubemap=args.cubemap,
            output_path=args.output,
            include_alpha=args.alpha,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
