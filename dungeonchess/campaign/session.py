"""Campaign controller: floors, turns, captures, and the shop between floors.

The controller owns the live board and the player's roster. A front end
asks it for legal moves, hands it the player's chosen move, lets the AI
answer, and drives the shop once a player unit reaches the stairs.
"""

from __future__ import annotations

import functools
import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from dungeonchess.config import load_config
from dungeonchess.dungeon.generator import DungeonGenerator, GenerationResult
from dungeonchess.dungeon.population import populate_floor
from dungeonchess.engine.evaluation import evaluate
from dungeonchess.engine.minimax import MinimaxSearch, SearchResult
from dungeonchess.game.board import Position, TileGrid
from dungeonchess.game.rules import (
    apply_move, generate_legal_moves, generate_unit_moves, is_on_win_tile,
)
from dungeonchess.game.state import (
    BUY_PRICE, MATERIAL_REWARD, BoardState, Move, PieceType, Team, Unit,
)

logger = logging.getLogger("dungeonchess.campaign")

# The shop is a 5x5 formation around the King, who keeps the centre
SHOP_RADIUS = 2
KING_OFFSET = (0, 0)

STARTING_ROSTER = [
    (PieceType.KING, (0, 0)),
    (PieceType.KNIGHT, (1, 0)),
    (PieceType.BISHOP, (-1, 0)),
]


class Phase(Enum):
    PLAYING = "playing"
    SHOPPING = "shopping"
    WON = "won"
    LOST = "lost"


@dataclass
class RosterEntry:
    """A player unit carried between floors and where it starts."""
    piece_type: PieceType
    offset: Position


class Campaign:
    """A single run through the dungeon, from floor 1 to the AI King."""

    def __init__(self, config: Optional[dict] = None,
                 rng: Optional[random.Random] = None):
        self.config = config if config is not None else load_config()
        dungeon_cfg = self.config["dungeon"]
        search_cfg = self.config["search"]
        campaign_cfg = self.config["campaign"]

        self.rng = rng if rng is not None else random.Random(campaign_cfg["seed"])
        self.width = dungeon_cfg["width"]
        self.height = dungeon_cfg["height"]
        self.max_attempts = dungeon_cfg["max_attempts"]
        self.last_floor = campaign_cfg["last_floor"]
        self.starting_material = campaign_cfg["starting_material"]

        evaluator = functools.partial(
            evaluate, chase_player_king=search_cfg["chase_player_king"]
        )
        self.search = MinimaxSearch(depth=search_cfg["depth"], evaluator=evaluator)

        self.phase = Phase.SHOPPING
        self.material = self.starting_material
        self.floor = 0
        self.roster: list[RosterEntry] = []
        self.grid: Optional[TileGrid] = None
        self.state: Optional[BoardState] = None
        self.start_pos: Optional[Position] = None
        self.player_turn = True
        self.last_search: Optional[SearchResult] = None
        # Live player units paired with their roster offsets
        self._formation: list[tuple[Unit, Position]] = []

    # ------------------------------------------------------------------
    # Run lifecycle
    # ------------------------------------------------------------------

    def start(self):
        """Begin a new run on floor 1 with the starting roster."""
        self.material = self.starting_material
        self.floor = 0
        self.roster = [RosterEntry(kind, offset) for kind, offset in STARTING_ROSTER]
        self.phase = Phase.SHOPPING
        self.descend()

    def descend(self) -> GenerationResult:
        """Leave the shop and generate the next floor."""
        self._require_phase(Phase.SHOPPING)
        self.floor += 1

        gen = DungeonGenerator(random.Random(self.rng.getrandbits(64)),
                               self.width, self.height,
                               max_attempts=self.max_attempts)
        result = gen.generate()

        roster = [(e.piece_type, e.offset) for e in self.roster]
        units = populate_floor(result.grid, result.start_pos, roster, self.floor,
                               self.rng, last_floor=self.last_floor)
        self.load_floor(result.grid, units, result.start_pos)

        enemies = len(self.state.units_of(Team.AI))
        logger.info(f"Floor {self.floor}: {enemies} enemies, start {self.start_pos}")
        return result

    def load_floor(self, grid: TileGrid, units: list[Unit], start_pos: Position):
        """Install a floor and start the player's turn on it.

        Player units remember their offset from start_pos as their roster
        slot for the shop.
        """
        self.grid = grid
        self.start_pos = start_pos
        self.state = BoardState.from_grid(grid, units)
        self._formation = [
            (u, (u.pos[0] - start_pos[0], u.pos[1] - start_pos[1]))
            for u in self.state.units if u.team == Team.PLAYER
        ]
        self.player_turn = True
        self.phase = Phase.PLAYING

    def give_up(self):
        """Concede the run: the player's King leaves the board."""
        self._require_phase(Phase.PLAYING)
        king = self.state.find_king(Team.PLAYER)
        if king is not None:
            self.state.units.remove(king)
        self.phase = Phase.LOST
        logger.info(f"Player gave up on floor {self.floor}")

    # ------------------------------------------------------------------
    # Turns
    # ------------------------------------------------------------------

    def board_state(self) -> BoardState:
        """Snapshot of the live floor that can be searched or mutated freely."""
        return self.state.clone()

    def player_moves(self, pos: Position) -> list[Move]:
        """Legal moves for the player unit on pos (empty if there is none)."""
        self._require_phase(Phase.PLAYING)
        unit = self.state.unit_at(pos)
        if unit is None or unit.team != Team.PLAYER:
            return []
        return generate_unit_moves(self.state, unit)

    def player_has_moves(self) -> bool:
        return bool(generate_legal_moves(self.state, Team.PLAYER))

    def play_player_move(self, move: Move) -> Optional[Unit]:
        """Apply the player's move and return the captured unit, if any.

        Raises:
            ValueError: If it is not the player's turn or the move is illegal.
        """
        self._require_phase(Phase.PLAYING)
        if not self.player_turn:
            raise ValueError("It is not the player's turn")
        unit = self.state.unit_at(move.from_pos)
        if unit is None or unit.team != Team.PLAYER:
            raise ValueError(f"No player unit at {move.from_pos}")
        if move not in generate_unit_moves(self.state, unit):
            raise ValueError(f"Illegal move {move.from_pos} -> {move.to_pos}")

        captured = apply_move(self.state, move)
        self._resolve_capture(captured)

        if self.phase == Phase.PLAYING:
            if is_on_win_tile(self.state):
                self._enter_shop()
            else:
                self.player_turn = False
        return captured

    def play_ai_move(self) -> Optional[Move]:
        """Let the AI search and play. Returns its move, or None if it has none."""
        self._require_phase(Phase.PLAYING)
        if self.player_turn:
            raise ValueError("It is not the AI's turn")

        self.last_search = self.search.search(self.state, Team.AI)
        move = self.last_search.move
        if move is not None:
            mover = self.state.unit_at(move.from_pos)
            assert mover is not None and mover.team == Team.AI
            captured = apply_move(self.state, move)
            self._resolve_capture(captured)
        self.player_turn = True
        return move

    def _resolve_capture(self, captured: Optional[Unit]):
        if captured is None:
            return
        if captured.team == Team.AI:
            reward = MATERIAL_REWARD[captured.piece_type]
            self.material += reward
            logger.info(f"Captured AI {captured.piece_type.name} (+{reward} material)")
            if captured.piece_type == PieceType.KING:
                self.phase = Phase.WON
                logger.info(f"AI King captured on floor {self.floor}: run won")
        else:
            self._formation = [(u, o) for u, o in self._formation if u is not captured]
            logger.info(f"Lost player {captured.piece_type.name}")
            if captured.piece_type == PieceType.KING:
                self.phase = Phase.LOST
                logger.info(f"Player King captured on floor {self.floor}: run lost")

    # ------------------------------------------------------------------
    # Shop
    # ------------------------------------------------------------------

    def _enter_shop(self):
        # Survivors keep the formation slot they started the floor in
        self.roster = [RosterEntry(u.piece_type, offset) for u, offset in self._formation]
        self.phase = Phase.SHOPPING
        logger.info(f"Reached the stairs of floor {self.floor} "
                    f"with {len(self.roster)} units")

    def roster_at(self, offset: Position) -> Optional[RosterEntry]:
        for entry in self.roster:
            if entry.offset == offset:
                return entry
        return None

    def _check_shop_square(self, offset: Position):
        dx, dy = offset
        if max(abs(dx), abs(dy)) > SHOP_RADIUS or offset == KING_OFFSET:
            raise ValueError(f"{offset} is not a free shop square")

    def buy(self, piece_type: PieceType) -> RosterEntry:
        """Buy a unit and put it on the first free shop square."""
        self._require_phase(Phase.SHOPPING)
        if piece_type == PieceType.KING:
            raise ValueError("The King is not for sale")
        price = BUY_PRICE[piece_type]
        if price > self.material:
            raise ValueError(f"{piece_type.name} costs {price}, "
                             f"only {self.material} material left")
        for y in range(-SHOP_RADIUS, SHOP_RADIUS + 1):
            for x in range(-SHOP_RADIUS, SHOP_RADIUS + 1):
                if (x, y) == KING_OFFSET or self.roster_at((x, y)) is not None:
                    continue
                entry = RosterEntry(piece_type, (x, y))
                self.roster.append(entry)
                self.material -= price
                logger.debug(f"Bought {piece_type.name} at {entry.offset}")
                return entry
        raise ValueError("The shop formation is full")

    def sell(self, offset: Position) -> int:
        """Sell the unit at offset for its full price. Returns the refund."""
        self._require_phase(Phase.SHOPPING)
        self._check_shop_square(offset)
        entry = self.roster_at(offset)
        if entry is None:
            raise ValueError(f"No unit at {offset}")
        refund = BUY_PRICE[entry.piece_type]
        self.roster.remove(entry)
        self.material += refund
        logger.debug(f"Sold {entry.piece_type.name} at {offset} for {refund}")
        return refund

    def move_in_shop(self, src: Position, dst: Position):
        """Move a unit to another shop square, swapping with any unit there."""
        self._require_phase(Phase.SHOPPING)
        self._check_shop_square(src)
        self._check_shop_square(dst)
        entry = self.roster_at(src)
        if entry is None:
            raise ValueError(f"No unit at {src}")
        other = self.roster_at(dst)
        if other is not None:
            other.offset = src
        entry.offset = dst

    def _require_phase(self, phase: Phase):
        if self.phase != phase:
            raise ValueError(f"Action needs phase {phase.value}, "
                             f"campaign is {self.phase.value}")
