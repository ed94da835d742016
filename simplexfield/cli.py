"""CLI for rendering simplexfield generators to PPM images."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .fractal import GENERATORS, FractalGenerator
from .plane_map import PlaneMapBuilder, save_ppm
from .simplex import Simplex


def _generators() -> List[str]:
    return ["simplex"] + list(GENERATORS)


def _build_source(args: argparse.Namespace):
    if args.generator == "simplex":
        return Simplex(args.seed)
    cls = GENERATORS[args.generator]
    source: FractalGenerator = cls(args.seed)
    changes = {}
    if args.octaves is not None:
        changes["octaves"] = args.octaves
    if args.frequency is not None:
        changes["frequency"] = args.frequency
    return source.with_params(**changes) if changes else source


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Render simplex noise to a PPM image")
    parser.add_argument("generator", nargs="?", help="Generator name")
    parser.add_argument("--list", action="store_true", help="List available generators")
    parser.add_argument("--seed", type=int, default=Simplex.DEFAULT_SEED)
    parser.add_argument("--width", type=int, default=256)
    parser.add_argument("--height", type=int, default=256)
    parser.add_argument("--octaves", type=int, default=None, help="Fractal generators only")
    parser.add_argument("--frequency", type=float, default=None, help="Fractal generators only")
    parser.add_argument(
        "--bounds", type=float, nargs=4, metavar=("X0", "X1", "Y0", "Y1"),
        default=(-1.0, 1.0, -1.0, 1.0),
    )
    parser.add_argument("--output", type=Path, default=None, help="Output path (.ppm)")
    args = parser.parse_args(argv)

    if args.list or not args.generator:
        print("Available generators:")
        for name in _generators():
            print(f"  - {name}")
        return

    if args.generator not in _generators():
        print(f"Unknown generator '{args.generator}'. Use --list to see options.")
        sys.exit(1)

    try:
        source = _build_source(args)
        x0, x1, y0, y1 = args.bounds
        builder = PlaneMapBuilder(source, args.width, args.height, (x0, x1), (y0, y1))
        noise_map = builder.build()
    except (TypeError, ValueError) as exc:
        print(f"Error: {exc}")
        sys.exit(1)

    output = args.output or Path(f"{args.generator}.ppm")
    save_ppm(noise_map, output)
    print(f"Saved {args.width}x{args.height} {args.generator} map to {output}")


if __name__ == "__main__":
    main()
