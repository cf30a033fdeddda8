"""Floor generation and population."""

from dungeonchess.dungeon.generator import (
    DungeonGenerator, GenerationError, GenerationResult, Room,
)
from dungeonchess.dungeon.population import enemy_roster, populate_floor

__all__ = [
    "DungeonGenerator", "GenerationError", "GenerationResult", "Room",
    "enemy_roster", "populate_floor",
]
