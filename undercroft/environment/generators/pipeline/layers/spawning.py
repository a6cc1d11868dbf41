from __future__ import annotations

import logging

from undercroft import config
from undercroft.environment.generators.pipeline.context import BuildContext
from undercroft.environment.generators.pipeline.layer import MetaMapBuilder
from undercroft.environment.voronoi import voronoi_regions
from undercroft.util.rng import RNG

logger = logging.getLogger(__name__)


class VoronoiSpawning(MetaMapBuilder):
    """Partitions the floor into spawn regions.

    Creates no entities. The chain fills each region from the depth's spawn
    table once every stage has run.
    """

    def __init__(self, seed_count: int = config.VORONOI_SEED_COUNT) -> None:
        self.seed_count = seed_count

    def transform(self, ctx: BuildContext, rng: RNG) -> None:
        ctx.spawn_regions = voronoi_regions(ctx.map, self.seed_count, rng)
        logger.debug(f"Partitioned floor into {len(ctx.spawn_regions)} regions")
