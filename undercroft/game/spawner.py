"""Turning generated spawn data into entities.

Level generation never builds entities itself. It produces a spawn list
(tile index -> entity tag) and hands each entry to an ``EntityFactory``
supplied by the game, which resolves the tag against its own catalog.

This module holds that seam plus the depth-scaled spawn tables used to fill
Voronoi regions with tags.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Protocol

from undercroft import config
from undercroft.types import SpawnList, TileIndex
from undercroft.util.dice import roll_dice
from undercroft.util.rng import RNG

logger = logging.getLogger(__name__)


# =============================================================================
# Entity factory seam
# =============================================================================


class PlacementKind(Enum):
    AT_TILE = auto()
    CARRIED = auto()
    EQUIPPED = auto()


@dataclass(frozen=True)
class SpawnPlacement:
    """Where a spawned entity goes.

    Attributes:
        kind: On the map, in someone's pack, or in someone's hands.
        tile_index: Map tile for AT_TILE placements.
        owner: The carrying/equipping entity for the other kinds.
    """

    kind: PlacementKind
    tile_index: TileIndex | None = None
    owner: Any = None

    @classmethod
    def at_tile(cls, tile_index: TileIndex) -> SpawnPlacement:
        return cls(PlacementKind.AT_TILE, tile_index=tile_index)

    @classmethod
    def carried_by(cls, owner: Any) -> SpawnPlacement:
        return cls(PlacementKind.CARRIED, owner=owner)

    @classmethod
    def equipped_by(cls, owner: Any) -> SpawnPlacement:
        return cls(PlacementKind.EQUIPPED, owner=owner)


class EntityFactory(Protocol):
    """Materializes a named entity. Returns None if the tag is unknown."""

    def spawn_named_entity(self, tag: str, placement: SpawnPlacement) -> Any | None:
        ...


# =============================================================================
# Spawn tables
# =============================================================================


@dataclass(frozen=True)
class SpawnTableEntry:
    """One row of a spawn table.

    Attributes:
        name: Entity tag handed to the factory.
        weight: Relative likelihood.
        min_depth: Shallowest depth the entry appears at.
        max_depth: Deepest depth the entry appears at.
        add_map_depth_to_weight: Grow the weight with depth, so the entry gets
            more common the deeper the player goes.
    """

    name: str
    weight: int
    min_depth: int = 1
    max_depth: int = 100
    add_map_depth_to_weight: bool = False


DEFAULT_SPAWN_TABLE: tuple[SpawnTableEntry, ...] = (
    SpawnTableEntry("Goblin", 10),
    SpawnTableEntry("Orc", 1, min_depth=3, add_map_depth_to_weight=True),
    SpawnTableEntry("Health Potion", 7),
    SpawnTableEntry("Fireball Scroll", 2, min_depth=3, add_map_depth_to_weight=True),
    SpawnTableEntry("Confusion Scroll", 2, min_depth=2, add_map_depth_to_weight=True),
    SpawnTableEntry("Magic Missile Scroll", 4),
    SpawnTableEntry("Dagger", 3),
    SpawnTableEntry("Shield", 3),
    SpawnTableEntry("Longsword", 1, min_depth=4),
    SpawnTableEntry("Tower Shield", 1, min_depth=4),
    SpawnTableEntry("Rations", 10),
    SpawnTableEntry("Magic Mapping Scroll", 2, min_depth=2),
    SpawnTableEntry("Bear Trap", 5, min_depth=2),
)


class RandomTable:
    """Weighted table rolled with a single 1d(total weight)."""

    def __init__(self) -> None:
        self.entries: list[tuple[str, int]] = []
        self.total_weight = 0

    def add(self, name: str, weight: int) -> RandomTable:
        if weight > 0:
            self.entries.append((name, weight))
            self.total_weight += weight
        return self

    def roll(self, rng: RNG) -> str | None:
        """Pick an entry name, or None if the table is empty."""
        if self.total_weight == 0:
            return None

        roll = roll_dice(rng, 1, self.total_weight) - 1
        for name, weight in self.entries:
            if roll < weight:
                return name
            roll -= weight
        return None


def spawn_table_for_depth(
    entries: Iterable[SpawnTableEntry], depth: int
) -> RandomTable:
    """Build the table of entries allowed at this depth."""
    table = RandomTable()
    for entry in entries:
        if not entry.min_depth <= depth <= entry.max_depth:
            continue
        weight = entry.weight
        if entry.add_map_depth_to_weight:
            weight += depth
        table.add(entry.name, weight)
    return table


def spawn_region(
    area: Sequence[TileIndex],
    depth: int,
    rng: RNG,
    table: RandomTable,
    max_spawns: int = config.MAX_SPAWNS_PER_REGION,
) -> SpawnList:
    """Pick distinct tiles in one region and a tag for each.

    The count is ``1d(max_spawns + 3) + depth - 4``, capped at the region's
    size; a zero or negative count spawns nothing.

    Returns:
        Tile index -> tag for this region, in the order they were rolled.
    """
    spawns: SpawnList = {}
    candidates = list(area)
    num_spawns = min(len(candidates), roll_dice(rng, 1, max_spawns + 3) + depth - 4)

    for _ in range(num_spawns):
        if len(candidates) == 1:
            array_index = 0
        else:
            array_index = roll_dice(rng, 1, len(candidates)) - 1
        tile_index = candidates.pop(array_index)
        tag = table.roll(rng)
        if tag is not None:
            spawns[tile_index] = tag

    return spawns
