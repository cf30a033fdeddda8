#!/usr/bin/env python3
"""Play a dungeon chess run in the terminal against the minimax AI.

Usage:
    python scripts/play.py                       # Reference settings
    python scripts/play.py --seed 7 --depth 3    # Seeded run, faster AI
    python scripts/play.py --config my.yaml -v   # Custom config, debug logs
"""

import argparse
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dungeonchess.campaign.session import Campaign, Phase
from dungeonchess.config import load_config
from dungeonchess.game.board import render_board
from dungeonchess.game.notation import move_to_notation, notation_to_move, square_name
from dungeonchess.game.rules import generate_legal_moves
from dungeonchess.game.state import BUY_PRICE, PIECE_CHARS, PIECE_DESCRIPTIONS, PieceType, Team


def display_state(campaign: Campaign):
    """Print the current floor."""
    label = "Player Turn" if campaign.player_turn else "Enemy Turn"
    print(render_board(campaign.state.grid, campaign.state.units,
                       turn_label=label, material=campaign.material,
                       floor=campaign.floor))
    print()


def human_turn(campaign: Campaign) -> bool:
    """Get and play the player's move. Returns False to quit."""
    state = campaign.state
    moves = generate_legal_moves(state, Team.PLAYER)
    if not moves:
        print("No legal moves! Type 'g' to give up.")

    names = [move_to_notation(state, m) for m in moves]
    for i, name in enumerate(names):
        print(f"  {i+1:3d}. {name}")
    print(f"\nEnter move number (1-{len(moves)}), notation, 'g' to give up, or 'q' to quit:")

    while True:
        inp = input("> ").strip()
        if inp.lower() == "q":
            return False
        if inp.lower() == "g":
            campaign.give_up()
            return True

        # Try as number
        if inp.isdigit():
            idx = int(inp) - 1
            if 0 <= idx < len(moves):
                campaign.play_player_move(moves[idx])
                return True
            print(f"Invalid number. Enter 1-{len(moves)}.")
            continue

        # Try as notation
        try:
            campaign.play_player_move(notation_to_move(inp))
            return True
        except ValueError as e:
            print(f"{e}")


def ai_turn(campaign: Campaign):
    move = campaign.play_ai_move()
    if move is None:
        print("Enemy has no moves and passes.")
        return
    unit = campaign.state.unit_at(move.to_pos)
    print(f"Enemy plays: {unit.char}{square_name(move.from_pos)}-{square_name(move.to_pos)}"
          f"  (score {campaign.last_search.score:.1f}, {campaign.last_search.nodes} nodes)")


def print_shop(campaign: Campaign):
    print(f"\n=== Shop (after floor {campaign.floor}) === Material: {campaign.material}")
    for entry in sorted(campaign.roster, key=lambda e: (e.offset[1], e.offset[0])):
        print(f"  {entry.piece_type.name:<10} at {entry.offset}")
    print("\nFor sale:")
    for char, kind in PIECE_CHARS.items():
        if kind == PieceType.KING:
            continue
        print(f"  {char}  {kind.name:<10} {BUY_PRICE[kind]:>2}  {PIECE_DESCRIPTIONS[kind]}")
    print("\nCommands: buy <letter> | sell <dx> <dy> | move <dx> <dy> <dx> <dy> | go | q")


def shop_turn(campaign: Campaign) -> bool:
    """Run one shop command. Returns False to quit."""
    print_shop(campaign)
    parts = input("> ").strip().split()
    if not parts:
        return True
    cmd = parts[0].lower()
    try:
        if cmd == "q":
            return False
        if cmd == "go":
            campaign.descend()
        elif cmd == "buy" and len(parts) == 2:
            kind = PIECE_CHARS.get(parts[1].upper())
            if kind is None:
                print(f"Unknown piece {parts[1]!r}")
            else:
                campaign.buy(kind)
        elif cmd == "sell" and len(parts) == 3:
            campaign.sell((int(parts[1]), int(parts[2])))
        elif cmd == "move" and len(parts) == 5:
            campaign.move_in_shop((int(parts[1]), int(parts[2])),
                                  (int(parts[3]), int(parts[4])))
        else:
            print("Unknown command.")
    except ValueError as e:
        print(f"{e}")
    return True


def play_campaign(campaign: Campaign):
    """Play a full run."""
    campaign.start()

    print("=" * 60)
    print("  Dungeon Chess")
    print("=" * 60)
    print(f"  AI search depth: {campaign.search.depth}")
    print("=" * 60)

    while campaign.phase not in (Phase.WON, Phase.LOST):
        if campaign.phase == Phase.SHOPPING:
            if not shop_turn(campaign):
                print("Run aborted.")
                return
            continue

        display_state(campaign)
        if campaign.player_turn:
            if not human_turn(campaign):
                print("Run aborted.")
                return
        else:
            ai_turn(campaign)

    if campaign.phase == Phase.WON:
        print(f"You captured the enemy King on floor {campaign.floor}. You win!")
    else:
        print(f"Your King fell on floor {campaign.floor}. Game over.")


def main():
    parser = argparse.ArgumentParser(description="Play Dungeon Chess")
    parser.add_argument("--config", type=str, default="configs/game.yaml")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for map generation and enemy placement")
    parser.add_argument("--depth", type=int, default=None,
                        help="Override the AI search depth")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Show debug logging")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(asctime)s [%(name)s] %(message)s")

    overrides = {"campaign": {}, "search": {}}
    if args.seed is not None:
        overrides["campaign"]["seed"] = args.seed
    if args.depth is not None:
        overrides["search"]["depth"] = args.depth
    config = load_config(args.config if os.path.exists(args.config) else None, overrides)

    play_campaign(Campaign(config))


if __name__ == "__main__":
    main()
