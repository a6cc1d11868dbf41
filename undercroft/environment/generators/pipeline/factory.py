"""Factory functions for creating pre-configured builder chains.

Available chains:
- "caves": cellular automata caves
- "rooms": rooms joined by dogleg corridors
- "waveform": caves, then regenerated by Wave Function Collapse
- "prefab": the hand-built level template
- "fort": caves with the underground fort stamped on the right edge

Every chain ends with a start, an exit reachable from it, and spawn regions.
"""

from __future__ import annotations

import logging

from undercroft import config
from undercroft.environment.generators.base import GeneratedLevel
from undercroft.util.rng import RNG

from .layer import MetaMapBuilder
from .layers import (
    HAND_BUILT_LEVEL,
    UNDERGROUND_FORT,
    AreaStartingPosition,
    CellularAutomataBuilder,
    CullUnreachable,
    DistantExit,
    DoglegCorridors,
    PrefabBuilder,
    PrefabSectionBuilder,
    RoomBasedStartingPosition,
    RoomDrawer,
    SimpleRoomsBuilder,
    VoronoiSpawning,
    WaveformCollapseBuilder,
    XStart,
    YStart,
)
from .pipeline import BuilderChain

logger = logging.getLogger(__name__)

PIPELINE_NAMES = ("caves", "rooms", "waveform", "prefab", "fort")


def _finishing_layers(x: XStart = XStart.CENTER) -> list[MetaMapBuilder]:
    """Start, cull, exit and spawn regions for a layout without rooms."""
    return [
        AreaStartingPosition(x, YStart.CENTER),
        CullUnreachable(),
        DistantExit(),
        VoronoiSpawning(),
    ]


def create_pipeline(
    name: str,
    depth: int = 1,
    width: int = config.MAP_WIDTH,
    height: int = config.MAP_HEIGHT,
    record_history: bool = config.SHOW_MAPGEN_VISUALISER,
) -> BuilderChain:
    """Create a pre-configured builder chain by name.

    Args:
        name: One of ``PIPELINE_NAMES``.
        depth: Dungeon depth of the level.
        width: Map width in tiles.
        height: Map height in tiles.
        record_history: Keep map snapshots of every step.

    Returns:
        A configured BuilderChain ready to build.

    Raises:
        ValueError: If the pipeline name is not recognized.
    """
    chain = BuilderChain(
        depth=depth,
        map_width=width,
        map_height=height,
        record_history=record_history,
        name=name,
    )

    if name == "caves":
        chain.start_with(CellularAutomataBuilder())
        layers = _finishing_layers()
    elif name == "rooms":
        chain.start_with(SimpleRoomsBuilder())
        layers = [
            RoomDrawer(),
            DoglegCorridors(),
            RoomBasedStartingPosition(),
            DistantExit(),
            VoronoiSpawning(),
        ]
    elif name == "waveform":
        chain.start_with(CellularAutomataBuilder())
        layers = [WaveformCollapseBuilder(), *_finishing_layers()]
    elif name == "prefab":
        chain.start_with(PrefabBuilder(HAND_BUILT_LEVEL))
        layers = _finishing_layers()
    elif name == "fort":
        chain.start_with(CellularAutomataBuilder())
        layers = [
            PrefabSectionBuilder(UNDERGROUND_FORT),
            *_finishing_layers(XStart.LEFT),
        ]
    else:
        raise ValueError(f"Unknown pipeline name: {name!r}")

    for layer in layers:
        chain.add(layer)
    return chain


def level_builder(
    depth: int,
    rng: RNG,
    width: int = config.MAP_WIDTH,
    height: int = config.MAP_HEIGHT,
    record_history: bool = config.SHOW_MAPGEN_VISUALISER,
) -> BuilderChain:
    """Pick the chain for a depth.

    Depths listed in ``config.DEPTH_PIPELINES`` always use their pipeline;
    any other depth picks one at random.
    """
    name = config.DEPTH_PIPELINES.get(depth)
    if name is None:
        name = rng.choice(PIPELINE_NAMES)
    logger.debug(f"Depth {depth} uses the {name!r} pipeline")
    return create_pipeline(name, depth, width, height, record_history)


def generate_level(
    depth: int,
    rng: RNG,
    width: int = config.MAP_WIDTH,
    height: int = config.MAP_HEIGHT,
    pipeline: str | None = None,
    record_history: bool = config.SHOW_MAPGEN_VISUALISER,
) -> GeneratedLevel:
    """Generate a complete level.

    Args:
        depth: Dungeon depth of the level.
        rng: Random source for every generation step.
        width: Map width in tiles.
        height: Map height in tiles.
        pipeline: Pipeline name. Chosen by depth when None.
        record_history: Keep map snapshots of every step.

    Returns:
        The map, starting position, spawn list and build history.

    Raises:
        MapBuildError: If the chosen chain fails to build.
        ValueError: If the pipeline name is not recognized.
    """
    if pipeline is None:
        chain = level_builder(depth, rng, width, height, record_history)
    else:
        chain = create_pipeline(pipeline, depth, width, height, record_history)

    ctx = chain.build(rng)
    return GeneratedLevel(
        map=ctx.map,
        starting_position=ctx.require_starting_position("generate_level"),
        spawn_list=ctx.spawn_list,
        history=ctx.history,
        pipeline_name=chain.name,
    )
