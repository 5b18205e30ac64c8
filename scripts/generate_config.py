#!/usr/bin/env python3
"""
Generate shelf parameter presets.

Usage:
    python scripts/generate_config.py --engine flat --output configs/flat_0000.json
    python scripts/generate_config.py --base configs/corner_0000.json --set depth=12 --auto-version
    python scripts/generate_config.py --engine home --set width=60 --set height=40 --auto-version
"""

import argparse
import sys
from dataclasses import asdict
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

import config
import engines

ShelfConfig = config.ShelfConfig


def parse_assignment(text):
    """Parse a NAME=VALUE override into (name, number)."""
    if '=' not in text:
        raise argparse.ArgumentTypeError(f"Expected NAME=VALUE, got {text!r}")
    name, value = text.split('=', 1)
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Value for {name} must be a number, got {value!r}")
    if number.is_integer() and name.endswith('_count'):
        number = int(number)
    return name.strip(), number


def main():
    parser = argparse.ArgumentParser(
        description='Generate a wavy shelf parameter preset'
    )
    parser.add_argument(
        '--engine', '-e',
        choices=config.ENGINES,
        default=config.ENGINE_FLAT,
        help='Shelf engine (default: flat)'
    )
    parser.add_argument(
        '--output', '-o',
        type=Path,
        help='Output JSON file path'
    )
    parser.add_argument(
        '--base', '-b',
        type=Path,
        help='Base preset to copy parameters from'
    )
    parser.add_argument(
        '--set',
        dest='overrides',
        type=parse_assignment,
        action='append',
        default=[],
        metavar='NAME=VALUE',
        help='Override one parameter (repeatable)'
    )
    parser.add_argument(
        '--auto-version', '-a',
        action='store_true',
        help='Automatically determine next version number'
    )
    parser.add_argument(
        '--config-dir',
        type=Path,
        default=Path('configs'),
        help='Preset directory used with --auto-version (default: configs)'
    )

    args = parser.parse_args()

    # Load or create preset
    try:
        if args.base:
            print(f"Loading base preset from {args.base}")
            preset = ShelfConfig.from_file(args.base)
        else:
            print(f"Creating new default {args.engine} preset")
            preset = ShelfConfig.for_engine(args.engine)

        for name, value in args.overrides:
            preset.params[name] = value
        preset.validate()
    except (OSError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    # Store the clamped values so the file shows what will be built
    params = preset.to_params()
    preset.params.update(asdict(params))

    # Determine output path
    if args.auto_version:
        version = preset.get_next_version_number(args.config_dir)
        output_path = args.config_dir / f'{preset.engine}_{version}.json'
    elif args.output:
        output_path = args.output
    else:
        print("Error: Must specify --output or --auto-version")
        sys.exit(1)

    # Update version in preset
    version_str = output_path.stem.split('_')[1] if '_' in output_path.stem else "0000"
    preset.version = version_str

    print(f"Saving preset to {output_path}")
    preset.to_file(output_path)

    # Print summary
    print("\nPreset Summary:")
    print(f"  Version: {preset.version}")
    print(f"  Engine: {preset.engine}")
    for name, value in preset.params.items():
        print(f"  {name}: {value}")

    if preset.engine == config.ENGINE_HOME:
        derived = engines.engine_params(preset)
        print("\nDerived corner parameters:")
        for name, value in asdict(derived).items():
            print(f"  {name}: {value:.3f}" if isinstance(value, float) else f"  {name}: {value}")


if __name__ == '__main__':
    main()
