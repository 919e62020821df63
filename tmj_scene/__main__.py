#!/usr/bin/env python3

"""
TMJ Scene - compile a Tiled JSON map and print what the host would receive

Usage:
    python -m tmj_scene <map.tmj> [tileset.tsj ...] [options]

Options:
    --merge row|column   Merge solid tiles into collision runs
    --batched            Draw tile layers with one batched plan
    --tileset NAME       Tileset used for all tile layers (default: first)
    --strict             Fail on the first diagnostic
    -v                   Verbose logging
"""

import argparse
import logging
import sys
from collections import Counter
from pathlib import Path

from .diagnostics import Diagnostics
from .errors import TiledSceneError
from .importer import TiledImporter
from .scene.tile_layer import CollisionOptimization, CompileOptions


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tmj_scene",
                                     description="Compile a Tiled JSON map into scene descriptors")
    parser.add_argument("map", help="Path to the .tmj map")
    parser.add_argument("tilesets", nargs="*",
                        help="External .tsj tilesets (default: tilesets embedded in the map)")
    parser.add_argument("--merge", choices=["row", "column"], default=None)
    parser.add_argument("--batched", action="store_true")
    parser.add_argument("--tileset", default=None)
    parser.add_argument("--strict", action="store_true")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    if not Path(args.map).exists():
        print(f"Error: File '{args.map}' not found")
        return 1

    options = CompileOptions(
        collision_optimization=CollisionOptimization(args.merge or "none"),
        batched_draw=args.batched,
    )
    diagnostics = Diagnostics(strict=args.strict)
    importer = TiledImporter(args.map, args.tilesets or None, diagnostics)

    try:
        importer.load()
        tileset_index = 0
        if args.tileset is not None:
            tileset_index = importer.get_tileset_index(args.tileset)
            if tileset_index is None:
                print(f"Error: No tileset named '{args.tileset}'")
                return 1
        root = importer.add_all_layers(options=options, tileset_index=tileset_index)
    except (TiledSceneError, OSError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    print(f"\n=== {Path(args.map).name} ===")
    for entry in importer.get_layers():
        print(f"  [{entry.index}] {entry.name} ({entry.kind.name.lower()})")

    counts = Counter()
    for entity in root:
        for component in entity.components:
            counts[type(component).__name__] += 1
    print(f"\nEntities: {len(root)}")
    for name, count in sorted(counts.items()):
        print(f"  {name}: {count}")
    print(f"Diagnostics: {len(diagnostics)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
