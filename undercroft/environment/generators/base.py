"""Shared types for level generation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from undercroft.environment.map import GameMap
    from undercroft.types import SpawnList, WorldTilePos


class MapBuildError(Exception):
    """Raised when a builder chain is wired up wrong.

    A stage needed something an earlier stage should have produced (rooms, a
    starting position, a well-formed template...) and it isn't there. This is
    a programming error in the chain's composition, not a runtime condition,
    so it is never recovered from: the level cannot be shown.
    """


@dataclass
class GeneratedLevel:
    """Everything a finished level hands to the game.

    Attributes:
        map: The finished tile grid.
        starting_position: Where the player starts.
        spawn_list: Tile index -> entity tag, in generation order.
        history: Snapshots of the map taken while it was built. Diagnostic
            only; discarded on the next level.
        pipeline_name: Which named pipeline produced the level, if any.
    """

    map: GameMap
    starting_position: WorldTilePos
    spawn_list: SpawnList
    history: list[GameMap] = field(default_factory=list)
    pipeline_name: str | None = None
