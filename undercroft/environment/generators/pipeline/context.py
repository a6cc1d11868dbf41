"""Build context for the builder chain.

The BuildContext is a mutable container that holds all state during level
generation. The chain creates one per build and every stage receives the same
instance and modifies it in place. This avoids copying the tile array between
stages; only history snapshots are copied.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from undercroft import config
from undercroft.environment.generators.base import MapBuildError
from undercroft.environment.map import GameMap
from undercroft.types import SpawnList, TileIndex, WorldTilePos
from undercroft.util.coordinates import Rect

logger = logging.getLogger(__name__)


@dataclass
class BuildContext:
    """Mutable state container passed through the builder chain.

    Attributes:
        map: The working tile grid.
        starting_position: Player start, unset until some stage places it.
        rooms: Room rectangles. Only room-based generators fill this in.
        spawn_list: Tile index -> entity tag, in the order stages added them.
        spawn_regions: Region id -> tile indices, stored by the spawn-region
            stage for the spawning phase to resolve into entities.
        history: Deep-copied map snapshots, oldest first.
        record_history: Whether ``take_snapshot`` records anything.
    """

    map: GameMap
    starting_position: WorldTilePos | None = None
    rooms: list[Rect] | None = None
    spawn_list: SpawnList = field(default_factory=dict)
    spawn_regions: dict[int, list[TileIndex]] = field(default_factory=dict)
    history: list[GameMap] = field(default_factory=list)
    record_history: bool = config.SHOW_MAPGEN_VISUALISER

    @classmethod
    def create_empty(
        cls,
        depth: int,
        width: int,
        height: int,
        record_history: bool = config.SHOW_MAPGEN_VISUALISER,
    ) -> BuildContext:
        """Create a context around a fresh all-wall map."""
        return cls(map=GameMap(depth, width, height), record_history=record_history)

    @property
    def depth(self) -> int:
        return self.map.depth

    def take_snapshot(self, game_map: GameMap | None = None) -> None:
        """Append a copy of the map (or of ``game_map``) to the history.

        Snapshots are fully revealed so the visualiser can draw every tile.
        """
        if not self.record_history:
            return
        snapshot = (game_map if game_map is not None else self.map).copy()
        snapshot.revealed[:] = True
        self.history.append(snapshot)

    # -------------------------------------------------------------------------
    # Preconditions
    # -------------------------------------------------------------------------

    def require_rooms(self, stage: str) -> list[Rect]:
        """Return the room list, or fail if no earlier stage produced one."""
        if not self.rooms:
            raise MapBuildError(f"{stage} requires a builder with room structures")
        return self.rooms

    def require_starting_position(self, stage: str) -> WorldTilePos:
        """Return the starting position, or fail if none has been placed."""
        if self.starting_position is None:
            raise MapBuildError(f"{stage} requires a starting position")
        return self.starting_position

    def starting_index(self, stage: str) -> TileIndex:
        x, y = self.require_starting_position(stage)
        return self.map.coordinate_to_index(x, y)

    def set_starting_position(
        self, pos: WorldTilePos, overwrite: bool = False
    ) -> bool:
        """Place the player start unless one is already set.

        Returns:
            True if the position was stored.
        """
        if self.starting_position is not None and not overwrite:
            logger.debug(
                f"Keeping existing start {self.starting_position}, ignoring {pos}"
            )
            return False
        if not self.map.in_bounds(*pos):
            raise MapBuildError(f"Starting position {pos} is outside the map")
        self.starting_position = pos
        return True
