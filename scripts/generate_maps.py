#!/usr/bin/env python3
"""Generate dungeon floors and print them.

Usage:
    python scripts/generate_maps.py --seed 42 --count 3
    python scripts/generate_maps.py --config configs/game.yaml --width 12 --height 12
"""

import argparse
import logging
import os
import random
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dungeonchess.config import load_config
from dungeonchess.dungeon.generator import DungeonGenerator, GenerationError
from dungeonchess.dungeon.population import populate_floor
from dungeonchess.game.board import render_board
from dungeonchess.campaign.session import STARTING_ROSTER

logger = logging.getLogger("dungeonchess.generate")


def main():
    parser = argparse.ArgumentParser(description="Generate Dungeon Chess floors")
    parser.add_argument("--config", type=str, default="configs/game.yaml")
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--count", type=int, default=1,
                        help="Number of floors to generate")
    parser.add_argument("--width", type=int, default=None)
    parser.add_argument("--height", type=int, default=None)
    parser.add_argument("--populate", action="store_true",
                        help="Also place the starting roster and enemies")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO,
                        format="%(asctime)s [%(name)s] %(message)s")

    config = load_config(args.config if os.path.exists(args.config) else None)
    dungeon_cfg = config["dungeon"]
    width = args.width or dungeon_cfg["width"]
    height = args.height or dungeon_cfg["height"]

    rng = random.Random(args.seed)
    gen = DungeonGenerator(rng, width, height, max_attempts=dungeon_cfg["max_attempts"])

    for floor in range(1, args.count + 1):
        try:
            result = gen.generate()
        except GenerationError as e:
            logger.error(f"{e}")
            sys.exit(1)

        units = []
        if args.populate:
            units = populate_floor(result.grid, result.start_pos, STARTING_ROSTER,
                                   floor, rng, last_floor=config["campaign"]["last_floor"])

        print(render_board(result.grid, units, floor=floor))
        print(f"start {result.start_pos}, {len(result.rooms)} rooms, "
              f"{result.attempts} attempt(s)")
        print()


if __name__ == "__main__":
    main()
