"""Wave Function Collapse as a builder stage.

The map built so far is the training data. WaveformCollapseBuilder learns
its N x N patterns and adjacency rules, then throws the geometry away and
solves a brand new map that is locally made of the same pieces.
"""

from __future__ import annotations

import logging

from undercroft import config
from undercroft.environment.generators.base import MapBuildError
from undercroft.environment.generators.pipeline.context import BuildContext
from undercroft.environment.generators.pipeline.layer import MetaMapBuilder
from undercroft.environment.generators.wfc_solver import (
    MapChunk,
    Solver,
    build_patterns,
    patterns_to_constraints,
    render_pattern_to_map,
)
from undercroft.environment.map import GameMap
from undercroft.environment.tile_types import TileType
from undercroft.util.rng import RNG

logger = logging.getLogger(__name__)


class WaveformCollapseBuilder(MetaMapBuilder):
    """Regenerates the map with Wave Function Collapse.

    Solving restarts from an empty grid whenever an attempt hits a
    contradiction. Snapshots of a dead attempt are dropped from the history
    along with the attempt.

    Because the whole layout is replaced, rooms, the start, the spawn list
    and spawn regions from earlier stages are cleared. Place them again with
    later stages.
    """

    def __init__(
        self,
        chunk_size: int = config.WFC_CHUNK_SIZE,
        stride: int = config.WFC_PATTERN_STRIDE,
        include_rotations: bool = config.WFC_INCLUDE_ROTATIONS,
        include_mirrors: bool = config.WFC_INCLUDE_MIRRORS,
        wrap: bool = False,
        max_attempts: int = config.WFC_MAX_ATTEMPTS,
        render_gallery: bool = config.WFC_RENDER_TILE_GALLERY,
    ) -> None:
        """Initialize the builder.

        Args:
            chunk_size: Side of each learned pattern, in tiles.
            stride: Step between sampled windows in the source map.
            include_rotations: Learn rotated copies of every window.
            include_mirrors: Learn mirrored copies of every window.
            wrap: Sample windows that wrap around the source map's edges.
            max_attempts: Solve attempts before giving up.
            render_gallery: Snapshot the learned patterns before solving.
        """
        self.chunk_size = chunk_size
        self.stride = stride
        self.include_rotations = include_rotations
        self.include_mirrors = include_mirrors
        self.wrap = wrap
        self.max_attempts = max_attempts
        self.render_gallery = render_gallery

    def transform(self, ctx: BuildContext, rng: RNG) -> None:
        source = ctx.map.copy()
        source.tiles[source.tiles == TileType.DOWN_STAIRS] = TileType.FLOOR

        patterns = build_patterns(
            source,
            self.chunk_size,
            include_rotations=self.include_rotations,
            include_mirrors=self.include_mirrors,
            stride=self.stride,
            wrap=self.wrap,
        )
        constraints = patterns_to_constraints(patterns, self.chunk_size)
        if not constraints:
            raise MapBuildError(
                f"WaveformCollapseBuilder found no {self.chunk_size}x"
                f"{self.chunk_size} patterns in a {source.width}x{source.height} map"
            )
        logger.debug(f"Learned {len(constraints)} patterns")

        if self.render_gallery:
            self.render_tile_gallery(ctx, constraints)

        ctx.map = self.solve(ctx, constraints, rng)
        ctx.rooms = None
        ctx.starting_position = None
        ctx.spawn_list = {}
        ctx.spawn_regions = {}
        ctx.take_snapshot()

    def solve(
        self, ctx: BuildContext, constraints: list[MapChunk], rng: RNG
    ) -> GameMap:
        """Run solve attempts until one completes.

        Raises:
            MapBuildError: If every attempt ends in a contradiction.
        """
        width, height = ctx.map.width, ctx.map.height
        for attempt in range(1, self.max_attempts + 1):
            history_mark = len(ctx.history)
            target = GameMap(ctx.depth, width, height)
            solver = Solver(constraints, self.chunk_size, width, height)
            while not solver.iteration(target, rng):
                ctx.take_snapshot(target)

            if solver.possible:
                logger.debug(f"WFC solved on attempt {attempt}")
                return target

            logger.debug(f"WFC attempt {attempt} hit a contradiction, restarting")
            del ctx.history[history_mark:]

        raise MapBuildError(
            f"WaveformCollapseBuilder gave up after {self.max_attempts} attempts"
        )

    def render_tile_gallery(
        self, ctx: BuildContext, constraints: list[MapChunk]
    ) -> None:
        """Snapshot every learned pattern, laid out on a grid with 1-tile gaps.

        Patterns that don't fit on one map-sized page spill onto the next.
        """
        width, height = ctx.map.width, ctx.map.height
        step = self.chunk_size + 1
        if step >= width or step >= height:
            return

        page = GameMap(ctx.depth, width, height)
        x, y = 1, 1
        for chunk in constraints:
            render_pattern_to_map(page, chunk, self.chunk_size, x, y)
            x += step
            if x + self.chunk_size > width:
                x = 1
                y += step
                if y + self.chunk_size > height:
                    ctx.take_snapshot(page)
                    page = GameMap(ctx.depth, width, height)
                    y = 1
        ctx.take_snapshot(page)
