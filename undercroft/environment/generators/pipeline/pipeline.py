"""Builder chain that orchestrates level generation.

A BuilderChain runs one InitialMapBuilder, then each MetaMapBuilder in
order, all against one BuildContext. This keeps each algorithm small and
lets the same stage (say, DistantExit) finish off very different layouts.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from enum import Enum, auto
from typing import Any

from undercroft import config
from undercroft.environment.generators.base import MapBuildError
from undercroft.environment.tile_types import TileType
from undercroft.game.spawner import (
    DEFAULT_SPAWN_TABLE,
    EntityFactory,
    SpawnPlacement,
    SpawnTableEntry,
    spawn_region,
    spawn_table_for_depth,
)
from undercroft.types import TileCoord
from undercroft.util.rng import RNG

from .context import BuildContext
from .layer import InitialMapBuilder, MetaMapBuilder

logger = logging.getLogger(__name__)


class BuildState(Enum):
    CONFIGURED = auto()
    BUILT = auto()
    SPAWNS_GENERATED = auto()


class BuilderChain:
    """One initial builder plus an ordered list of meta builders.

    Example:
        chain = BuilderChain(
            initial=SimpleRoomsBuilder(),
            layers=[
                RoomDrawer(),
                DoglegCorridors(),
                RoomBasedStartingPosition(),
                DistantExit(),
                VoronoiSpawning(),
            ],
            depth=3,
        )
        ctx = chain.build(rng)
        chain.spawn_entities(factory)

    A chain builds once. ``context`` is only available after a successful
    ``build()``; a failed build leaves nothing behind.
    """

    def __init__(
        self,
        initial: InitialMapBuilder | None = None,
        layers: Iterable[MetaMapBuilder] = (),
        depth: int = 1,
        map_width: TileCoord = config.MAP_WIDTH,
        map_height: TileCoord = config.MAP_HEIGHT,
        record_history: bool = config.SHOW_MAPGEN_VISUALISER,
        spawn_table: Sequence[SpawnTableEntry] = DEFAULT_SPAWN_TABLE,
        name: str | None = None,
    ) -> None:
        """Initialize the chain.

        Args:
            initial: The builder that produces the first draft.
            layers: Meta builders, applied in order after the initial one.
            depth: Dungeon depth of the level. Scales the spawn table.
            map_width: Width of the map in tiles.
            map_height: Height of the map in tiles.
            record_history: Keep map snapshots of every step.
            spawn_table: Entries that spawn regions are filled from.
            name: Label for logs and the generated level.
        """
        self.initial = initial
        self.layers: list[MetaMapBuilder] = list(layers)
        self.depth = depth
        self.map_width = map_width
        self.map_height = map_height
        self.record_history = record_history
        self.spawn_table = spawn_table
        self.name = name
        self._state = BuildState.CONFIGURED
        self._context: BuildContext | None = None

    @property
    def state(self) -> BuildState:
        return self._state

    @property
    def context(self) -> BuildContext:
        """The finished build context.

        Raises:
            MapBuildError: If the chain has not been built.
        """
        if self._context is None:
            raise MapBuildError("BuilderChain has not been built yet")
        return self._context

    def start_with(self, initial: InitialMapBuilder) -> BuilderChain:
        if self.initial is not None:
            raise MapBuildError("BuilderChain already has an initial builder")
        self.initial = initial
        return self

    def add(self, layer: MetaMapBuilder) -> BuilderChain:
        if self._state is not BuildState.CONFIGURED:
            raise MapBuildError("Cannot add stages to a chain that has been built")
        self.layers.append(layer)
        return self

    def build(self, rng: RNG) -> BuildContext:
        """Run every stage and fill the spawn regions.

        Args:
            rng: Random source shared by every stage, in order.

        Returns:
            The finished build context.

        Raises:
            MapBuildError: If a stage's preconditions are missing, or the
                chain has already been built or has no initial builder.
        """
        if self._state is not BuildState.CONFIGURED:
            raise MapBuildError("BuilderChain can only be built once")
        if self.initial is None:
            raise MapBuildError("BuilderChain needs an initial builder")

        ctx = BuildContext.create_empty(
            depth=self.depth,
            width=self.map_width,
            height=self.map_height,
            record_history=self.record_history,
        )

        logger.debug(
            f"Building {self.name or 'chain'} at depth {self.depth} "
            f"starting with {type(self.initial).__name__}"
        )
        self.initial.generate(ctx, rng)
        for layer in self.layers:
            logger.debug(f"Applying {type(layer).__name__}")
            layer.transform(ctx, rng)

        self._fill_spawn_regions(ctx, rng)

        self._context = ctx
        self._state = BuildState.BUILT
        return ctx

    def _fill_spawn_regions(self, ctx: BuildContext, rng: RNG) -> None:
        """Roll spawns for every region into the spawn list.

        The start tile, non-floor tiles and tiles that already hold a spawn
        are never picked.
        """
        if not ctx.spawn_regions:
            return

        table = spawn_table_for_depth(self.spawn_table, ctx.depth)
        start_index = (
            ctx.map.coordinate_to_index(*ctx.starting_position)
            if ctx.starting_position is not None
            else None
        )
        for region_id in sorted(ctx.spawn_regions):
            area = [
                index
                for index in ctx.spawn_regions[region_id]
                if index != start_index
                and ctx.map.tiles[index] == TileType.FLOOR
                and index not in ctx.spawn_list
            ]
            for index, tag in spawn_region(area, ctx.depth, rng, table).items():
                ctx.spawn_list[index] = tag

        logger.debug(f"Spawn list holds {len(ctx.spawn_list)} entries")

    def spawn_entities(self, factory: EntityFactory) -> list[Any]:
        """Hand every spawn entry to the entity factory.

        Tags the factory does not recognise are logged and skipped.

        Returns:
            The entity handles the factory created, in spawn-list order.

        Raises:
            MapBuildError: If the chain has not been built.
        """
        ctx = self.context
        spawned: list[Any] = []
        for index, tag in ctx.spawn_list.items():
            entity = factory.spawn_named_entity(tag, SpawnPlacement.at_tile(index))
            if entity is None:
                logger.warning(f"Entity factory did not recognise {tag!r}, skipped")
                continue
            spawned.append(entity)

        self._state = BuildState.SPAWNS_GENERATED
        return spawned
