#!/usr/bin/env python3
"""
Render a preset as a turntable PDF and/or an animated SVG frame sequence.

The SVG sequence is stepped through the same spin animation an
interactive view uses, starting from the engine's initial angle.

Usage:
    python scripts/render_preview.py --engine corner --pdf output/corner.pdf
    python scripts/render_preview.py --config configs/home_0001.json --svg-dir output/frames --frames 120
"""

import argparse
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

import config
import interaction
from preview_generator import PreviewGenerator

ShelfConfig = config.ShelfConfig


def animation_angles(engine_name, frames, dt):
    """Rotation angle at each animation step."""
    settings = interaction.motion_settings(engine_name)
    state = interaction.initial_state(engine_name)
    angles = []
    for _ in range(frames):
        angles.append(state.rotation)
        state = interaction.advance(state, dt, settings)
    return angles


def main():
    parser = argparse.ArgumentParser(
        description='Render wavy shelf turntable previews'
    )
    parser.add_argument(
        '--config', '-c',
        type=Path,
        help='Preset JSON file (default: engine defaults)'
    )
    parser.add_argument(
        '--engine', '-e',
        choices=config.ENGINES,
        default=config.ENGINE_FLAT,
        help='Engine to use when no preset is given (default: flat)'
    )
    parser.add_argument(
        '--pdf',
        type=Path,
        help='Write a turntable contact sheet PDF here'
    )
    parser.add_argument(
        '--svg-dir',
        type=Path,
        help='Write an SVG frame sequence into this directory'
    )
    parser.add_argument(
        '--frames', '-n',
        type=int,
        default=12,
        help='Number of frames (default: 12)'
    )
    parser.add_argument(
        '--fps',
        type=float,
        default=60.0,
        help='Animation rate for the SVG sequence (default: 60)'
    )

    args = parser.parse_args()

    if not args.pdf and not args.svg_dir:
        print("Error: Must specify --pdf and/or --svg-dir")
        sys.exit(1)
    if args.frames < 1 or args.fps <= 0:
        print("Error: --frames and --fps must be positive")
        sys.exit(1)

    try:
        if args.config:
            print(f"Loading preset from {args.config}")
            preset = ShelfConfig.from_file(args.config)
        else:
            print(f"Using default {args.engine} preset")
            preset = ShelfConfig.for_engine(args.engine)
    except (OSError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    generator = PreviewGenerator(preset)
    print(f"  Engine: {preset.engine}")
    print(f"  Shelves: {len(generator.geometry.shelves)}, columns: {len(generator.geometry.columns)}")
    print(f"  View box: {generator.view_box.as_attribute()}")

    if args.pdf:
        pages = generator.generate_pdf(args.pdf, frames=args.frames)
        print(f"PDF generated: {args.pdf} ({pages} pages)")

    if args.svg_dir:
        angles = animation_angles(preset.engine, args.frames, 1.0 / args.fps)
        written = generator.export_svg_sequence(args.svg_dir, angles)
        print(f"SVG frames: {len(written)} written to {args.svg_dir}")


if __name__ == '__main__':
    main()
