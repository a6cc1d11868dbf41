"""Generate a level and print it.

Usage:
    python -m undercroft --depth 3 --pipeline waveform --seed 42
"""

from __future__ import annotations

import argparse
import logging

from undercroft import config
from undercroft.environment.generators import PIPELINE_NAMES, generate_level
from undercroft.util import rng


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Generate an undercroft level")
    parser.add_argument("--depth", type=int, default=1, help="Dungeon depth")
    parser.add_argument(
        "--seed",
        type=str,
        default=config.RANDOM_SEED,
        help="Master random seed",
    )
    parser.add_argument(
        "--pipeline",
        choices=PIPELINE_NAMES,
        default=None,
        help="Builder chain to use (default: chosen by depth)",
    )
    parser.add_argument("--width", type=int, default=config.MAP_WIDTH)
    parser.add_argument("--height", type=int, default=config.MAP_HEIGHT)
    parser.add_argument(
        "--history",
        action="store_true",
        help="Print every recorded build snapshot before the final map",
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    rng.init(args.seed)
    level = generate_level(
        args.depth,
        rng.get("map.level"),
        width=args.width,
        height=args.height,
        pipeline=args.pipeline,
        record_history=args.history,
    )

    if args.history:
        for step, snapshot in enumerate(level.history):
            print(f"--- step {step} ---")
            print(snapshot.to_ascii())

    start_x, start_y = level.starting_position
    overlay = {index: tag[0].lower() for index, tag in level.spawn_list.items()}
    overlay[level.map.coordinate_to_index(start_x, start_y)] = "@"
    print(f"Depth {args.depth}, pipeline {level.pipeline_name}")
    print(level.map.to_ascii(overlay))
    print(f"{len(level.spawn_list)} spawns")


if __name__ == "__main__":
    main()
