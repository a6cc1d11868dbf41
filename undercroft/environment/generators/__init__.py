"""Level generation for undercroft.

Levels are built by builder chains: one initial builder lays down a first
draft, then meta builders refine it in order. The named chains are:
- caves: cellular automata caves
- rooms: rooms joined by dogleg corridors
- waveform: caves regenerated by Wave Function Collapse
- prefab: the hand-built level template
- fort: caves with the underground fort stamped on one edge

The Wave Function Collapse solver is usable on its own:
- build_patterns / patterns_to_constraints: learn patterns from a map
- Solver: collapse a fresh map from those patterns
"""

from .base import GeneratedLevel, MapBuildError
from .pipeline import (
    PIPELINE_NAMES,
    BuildContext,
    BuilderChain,
    BuildState,
    InitialMapBuilder,
    MetaMapBuilder,
    create_pipeline,
    generate_level,
    level_builder,
)
from .wfc_solver import (
    MapChunk,
    Solver,
    WFCContradiction,
    build_patterns,
    patterns_to_constraints,
)

__all__ = [
    "PIPELINE_NAMES",
    "BuildContext",
    "BuildState",
    "BuilderChain",
    "GeneratedLevel",
    "InitialMapBuilder",
    "MapBuildError",
    "MapChunk",
    "MetaMapBuilder",
    "Solver",
    "WFCContradiction",
    "build_patterns",
    "create_pipeline",
    "generate_level",
    "level_builder",
    "patterns_to_constraints",
]
