#!/usr/bin/env python3
"""
lumentrace - A Python Whitted-style Ray Tracer

Renders the showcase scene, optionally as a sequence of frames with the
camera orbiting the point of interest.
"""

import argparse
import sys
import time
from pathlib import Path

from lumentrace.vec3 import Vec3, Color, Point3
from lumentrace.camera import Camera
from lumentrace.lights import Light
from lumentrace.materials import IVORY, GLASS, RED_RUBBER, MIRROR, BLUE_RUBBER
from lumentrace.mesh import build_model
from lumentrace.shapes import Sphere, Plane, Scene, Model
from lumentrace.render import RenderSettings, RenderState
from lumentrace.renderer import Renderer


def create_octahedron(center: Point3, size: float) -> Model:
    """A glass octahedron built from an indexed mesh."""
    points = [
        center + Vec3(size, 0, 0), center + Vec3(-size, 0, 0),
        center + Vec3(0, size, 0), center + Vec3(0, -size, 0),
        center + Vec3(0, 0, size), center + Vec3(0, 0, -size),
    ]
    faces = []
    for sx in (1, -1):
        for sy in (1, -1):
            for sz in (1, -1):
                x = 0 if sx > 0 else 1
                y = 2 if sy > 0 else 3
                z = 4 if sz > 0 else 5
                # Keep the winding counter-clockwise seen from outside
                faces.append([x, y, z] if sx * sy * sz > 0 else [x, z, y])
    return build_model(points, faces, GLASS)


def create_showcase_scene() -> Scene:
    """Four spheres and a mesh inside a box of planes."""
    world = Scene()

    world.add(create_octahedron(Point3(3.0, 3.0, -13.0), 1.5))

    world.add(Sphere(Point3(-3.0, 0.0, -16.0), 2.0, IVORY))
    world.add(Sphere(Point3(-1.0, -1.5, -12.0), 2.0, GLASS))
    world.add(Sphere(Point3(1.5, -0.5, -18.0), 3.0, RED_RUBBER))
    world.add(Sphere(Point3(7.0, 5.0, -18.0), 4.0, MIRROR))

    world.add(Plane(Point3(0, -4, 0), Vec3(0, 1, 0), IVORY))
    world.add(Plane(Point3(0, 60, 0), Vec3(0, -1, 0), RED_RUBBER))
    world.add(Plane(Point3(0, 0, -60), Vec3(0, 0, 1), BLUE_RUBBER))
    world.add(Plane(Point3(0, 0, 60), Vec3(0, 0, -1), MIRROR))
    world.add(Plane(Point3(35, 0, 0), Vec3(-1, 0, 0), RED_RUBBER))
    world.add(Plane(Point3(-35, 0, 0), Vec3(1, 0, 0), MIRROR))

    return world


def create_lights() -> tuple:
    return (
        Light(Point3(-20, 20, 20), 1.5),
        Light(Point3(30, 50, -25), 1.8),
        Light(Point3(30, 20, 30), 1.7),
        Light(Point3(-20, -20, -30), 10.0),
    )


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='lumentrace - A Python Whitted-style Ray Tracer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python main.py --output render.png
  python main.py --width 200 --height 150 --depth 4 --output small.png
  python main.py --frames 30 --output orbit/frame.png
        '''
    )

    parser.add_argument('--width', type=int, default=400, help='Image width (default: 400)')
    parser.add_argument('--height', type=int, default=300, help='Image height (default: 300)')
    parser.add_argument('--fov', type=float, default=0.95, help='Field of view in radians (default: 0.95)')
    parser.add_argument('--depth', type=int, default=7, help='Recursion limit (default: 7)')
    parser.add_argument('--threads', type=int, default=0, help='Number of threads (0=auto)')
    parser.add_argument('--frames', type=int, default=1,
                        help='Frames to render; more than one orbits the camera (default: 1)')
    parser.add_argument('--output', type=str, default='output/render.png', help='Output filename')

    args = parser.parse_args()

    print("=" * 60)
    print("lumentrace Ray Tracer")
    print("=" * 60)

    settings = RenderSettings(
        width=args.width,
        height=args.height,
        fov=args.fov,
        recursion_limit=args.depth,
        background_color=Color(0.2, 0.7, 0.8)
    )

    print(f"\nRender Settings:")
    print(f"  Resolution: {settings.width}x{settings.height}")
    print(f"  Recursion depth: {settings.recursion_limit}")

    world = create_showcase_scene()
    lights = create_lights()
    state = RenderState(settings=settings, camera=Camera(), scene=world, lights=lights)

    print(f"  Entities in scene: {len(world)}")
    print(f"  Lights: {len(lights)}")

    renderer = Renderer(num_threads=args.threads)

    last_progress = [0]

    def progress_callback(progress: float):
        pct = int(progress * 100)
        if pct > last_progress[0]:
            last_progress[0] = pct
            bar_len = 40
            filled = int(bar_len * progress)
            bar = '█' * filled + '░' * (bar_len - filled)
            print(f'\rRendering: [{bar}] {pct}%', end='', flush=True)

    renderer.set_progress_callback(progress_callback)

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    for frame in range(args.frames):
        if args.frames > 1:
            # State for frame N is only replaced once frame N-1 is finished
            state = state.with_camera(state.camera.orbit((frame + 1) / 20.0))
            filename = output_path.with_name(f"{output_path.stem}_{frame:03d}{output_path.suffix}")
        else:
            filename = output_path

        last_progress[0] = 0
        print(f"\nFrame {frame + 1}/{args.frames}")
        start_time = time.time()

        image = renderer.render(state)

        elapsed = time.time() - start_time
        print(f"\nRender completed in {elapsed:.2f} seconds")
        print(f"  Primary rays per second: {settings.pixel_count / max(elapsed, 1e-9):.0f}")

        print(f"Saving to: {filename}")
        renderer.save_image(image, str(filename))

    print("\nDone!")
    return 0


if __name__ == '__main__':
    sys.exit(main())
