"""Wave Function Collapse over tile patterns learned from a source map.

The solver works in two phases:

1. Pattern extraction (``build_patterns`` / ``patterns_to_constraints``):
   slide an N x N window over the source map, record every window (plus its
   rotations and mirror image, if enabled), deduplicate while counting how
   often each variant occurred, then work out which patterns may sit next to
   which. Pattern B may be A's neighbour in direction D when A's edge facing D
   equals B's opposite edge tile for tile.

2. Collapse (``Solver``): a chunk-resolution grid where every cell starts
   with every pattern possible. Each ``iteration()`` resolves one cell: the
   one with the fewest possibilities left, choosing among them weighted by
   occurrence count, then propagates the choice to the neighbours until
   nothing changes. A cell left with no possibilities is a contradiction and
   kills the attempt; the caller starts a fresh solver rather than trying to
   repair the partial grid.

Performance notes:
    The wave is a numpy boolean array of shape (chunks_y, chunks_x, patterns),
    and compatibility is one (patterns, patterns) boolean matrix per
    direction. Propagating from a cell is then a single row-select and
    ``any()`` per direction: the union of every pattern compatible with
    anything still possible in the source cell.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TypeAlias

import numpy as np

from undercroft.environment.map import GameMap
from undercroft.util.rng import RNG

logger = logging.getLogger(__name__)

Pattern: TypeAlias = tuple[int, ...]

# Direction utilities. Index order is used for MapChunk.compatible_with.
DIRECTIONS = ["N", "E", "S", "W"]
OPPOSITE_DIR = {"N": "S", "E": "W", "S": "N", "W": "E"}
DIR_OFFSETS = {"N": (0, -1), "E": (1, 0), "S": (0, 1), "W": (-1, 0)}

# identity, rot90, rot180, rot270, mirror, mirror+rot90, mirror+rot180,
# mirror+rot270
VARIANT_COUNT = 8


class WFCContradiction(Exception):
    """Raised when propagation leaves a cell with no possible pattern.

    Only ever raised and caught inside the solver; callers see it as
    ``Solver.possible`` turning False.
    """


@dataclass(frozen=True)
class MapChunk:
    """A single N x N pattern with its adjacency rules.

    Attributes:
        pattern: Tile values, row-major, length N * N.
        compatible_with: Pattern indices allowed next to this one, one tuple
            per direction in ``DIRECTIONS`` order (N, E, S, W).
        variant_counts: How often each of the 8 rotation/mirror variants of a
            source window produced this pattern.
    """

    pattern: Pattern
    compatible_with: tuple[tuple[int, ...], ...]
    variant_counts: tuple[int, ...]

    @property
    def weight(self) -> int:
        return sum(self.variant_counts)

    def compatible(self, direction: str) -> tuple[int, ...]:
        return self.compatible_with[DIRECTIONS.index(direction)]


# =============================================================================
# Phase 1: pattern extraction
# =============================================================================


def _variants(
    window: np.ndarray, include_rotations: bool, include_mirrors: bool
) -> list[tuple[int, np.ndarray]]:
    """Return (variant slot, array) pairs for one window."""
    variants = [(0, window)]
    if include_rotations:
        variants.extend((k, np.rot90(window, -k)) for k in (1, 2, 3))
    if include_mirrors:
        mirrored = np.fliplr(window)
        variants.append((4, mirrored))
        if include_rotations:
            variants.extend((4 + k, np.rot90(mirrored, -k)) for k in (1, 2, 3))
    return variants


def build_patterns(
    source: GameMap,
    chunk_size: int,
    include_rotations: bool = True,
    include_mirrors: bool = True,
    stride: int = 1,
    wrap: bool = False,
) -> dict[Pattern, list[int]]:
    """Extract every distinct N x N pattern from a source map.

    Args:
        source: The training map.
        chunk_size: N, the side of each square pattern.
        include_rotations: Also record 90/180/270 degree rotations.
        include_mirrors: Also record the horizontal mirror image (and its
            rotations, if those are enabled).
        stride: Step between window positions. 1 visits every position;
            ``chunk_size`` tiles the map without overlap.
        wrap: Let windows run off the right/bottom edge and wrap around.
            Otherwise windows that don't fit are skipped.

    Returns:
        Pattern -> 8 per-variant occurrence counts, in first-seen order.
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    if stride < 1:
        raise ValueError(f"stride must be positive, got {stride}")

    grid = source.grid()
    if wrap:
        last_x, last_y = source.width, source.height
    else:
        last_x = source.width - chunk_size + 1
        last_y = source.height - chunk_size + 1

    patterns: dict[Pattern, list[int]] = {}
    offsets = np.arange(chunk_size)
    for y in range(0, max(last_y, 0), stride):
        rows = (y + offsets) % source.height
        for x in range(0, max(last_x, 0), stride):
            cols = (x + offsets) % source.width
            window = grid[np.ix_(rows, cols)]
            for slot, variant in _variants(window, include_rotations, include_mirrors):
                key: Pattern = tuple(int(t) for t in variant.ravel())
                counts = patterns.setdefault(key, [0] * VARIANT_COUNT)
                counts[slot] += 1

    logger.debug(
        f"Extracted {len(patterns)} distinct {chunk_size}x{chunk_size} patterns"
    )
    return patterns


def _edges(pattern_arrays: np.ndarray) -> dict[str, np.ndarray]:
    """Per-direction edge rows for a (P, N, N) stack of patterns."""
    return {
        "N": pattern_arrays[:, 0, :],
        "S": pattern_arrays[:, -1, :],
        "W": pattern_arrays[:, :, 0],
        "E": pattern_arrays[:, :, -1],
    }


def patterns_to_constraints(
    patterns: dict[Pattern, list[int]] | Sequence[Pattern], chunk_size: int
) -> list[MapChunk]:
    """Work out directional compatibility between every pair of patterns.

    Args:
        patterns: Output of ``build_patterns``, or a plain sequence of
            patterns (each then counts as a single identity occurrence).
        chunk_size: N, the side of each pattern.

    Returns:
        One MapChunk per pattern, in input order.
    """
    if isinstance(patterns, dict):
        keys = list(patterns.keys())
        counts = [tuple(patterns[k]) for k in keys]
    else:
        keys = list(patterns)
        counts = [(1,) + (0,) * (VARIANT_COUNT - 1) for _ in keys]

    if not keys:
        return []

    for key in keys:
        if len(key) != chunk_size * chunk_size:
            raise ValueError(
                f"Pattern of length {len(key)} is not {chunk_size}x{chunk_size}"
            )

    arrays = np.array(keys, dtype=np.uint8).reshape(-1, chunk_size, chunk_size)
    edges = _edges(arrays)

    compatibility: dict[str, np.ndarray] = {}
    for direction in DIRECTIONS:
        facing = edges[direction]
        opposite = edges[OPPOSITE_DIR[direction]]
        # [a, b] is True when b's opposite edge matches a's facing edge.
        compatibility[direction] = np.all(
            facing[:, None, :] == opposite[None, :, :], axis=2
        )

    chunks: list[MapChunk] = []
    for i, key in enumerate(keys):
        compatible_with = tuple(
            tuple(int(j) for j in np.flatnonzero(compatibility[d][i]))
            for d in DIRECTIONS
        )
        chunks.append(
            MapChunk(
                pattern=key, compatible_with=compatible_with, variant_counts=counts[i]
            )
        )
    return chunks


def render_pattern_to_map(
    target: GameMap, chunk: MapChunk, chunk_size: int, start_x: int, start_y: int
) -> None:
    """Write a pattern's tiles into a map with its top-left at (start_x, start_y).

    Tiles that would fall outside the map are skipped.
    """
    tiles = np.array(chunk.pattern, dtype=np.uint8).reshape(chunk_size, chunk_size)
    grid = target.grid()
    x_end = min(start_x + chunk_size, target.width)
    y_end = min(start_y + chunk_size, target.height)
    if start_x >= x_end or start_y >= y_end:
        return
    grid[start_y:y_end, start_x:x_end] = tiles[: y_end - start_y, : x_end - start_x]


# =============================================================================
# Phase 2: collapse
# =============================================================================


class Solver:
    """One WFC solve attempt over a chunk grid.

    Drive it by calling ``iteration()`` until it returns True, then check
    ``possible``: True means the target map is complete, False means the
    attempt hit a contradiction and should be discarded.
    """

    def __init__(
        self,
        constraints: Sequence[MapChunk],
        chunk_size: int,
        width: int,
        height: int,
    ) -> None:
        """Initialize a fresh attempt.

        Args:
            constraints: Patterns with adjacency rules.
            chunk_size: N, the side of each pattern.
            width: Target map width in tiles.
            height: Target map height in tiles.
        """
        if not constraints:
            raise ValueError("Solver needs at least one pattern")

        self.constraints = list(constraints)
        self.chunk_size = chunk_size
        self.chunks_x = width // chunk_size
        self.chunks_y = height // chunk_size
        self.num_patterns = len(self.constraints)

        self.weights = np.array(
            [max(chunk.weight, 1) for chunk in self.constraints], dtype=np.float64
        )

        # compatibility[d][a, b]: pattern b may sit in direction d of pattern a.
        self.compatibility = np.zeros(
            (len(DIRECTIONS), self.num_patterns, self.num_patterns), dtype=bool
        )
        for a, chunk in enumerate(self.constraints):
            for d, allowed in enumerate(chunk.compatible_with):
                self.compatibility[d, a, list(allowed)] = True

        self.wave = np.ones(
            (self.chunks_y, self.chunks_x, self.num_patterns), dtype=bool
        )
        self.resolved = np.zeros((self.chunks_y, self.chunks_x), dtype=bool)
        self.possible = True

    @property
    def remaining(self) -> int:
        """Cells not yet rendered into the target map."""
        return int(self.resolved.size - np.count_nonzero(self.resolved))

    def possible_patterns(self, chunk_x: int, chunk_y: int) -> list[int]:
        return np.flatnonzero(self.wave[chunk_y, chunk_x]).tolist()

    def iteration(self, target: GameMap, rng: RNG) -> bool:
        """Resolve one cell, or detect one contradiction.

        Returns:
            True when this attempt is over (finished or dead), False if more
            iterations are needed.
        """
        if not self.possible:
            return True
        if self.remaining == 0:
            return True

        counts = self.wave.sum(axis=2)
        # Resolved cells can never be picked again.
        counts = np.where(self.resolved, self.num_patterns + 1, counts)
        flat = int(np.argmin(counts))
        chunk_y, chunk_x = divmod(flat, self.chunks_x)
        options = int(counts[chunk_y, chunk_x])

        if options == 0:
            logger.debug(f"Contradiction at chunk ({chunk_x}, {chunk_y})")
            self.possible = False
            return True

        candidates = np.flatnonzero(self.wave[chunk_y, chunk_x])
        if options == 1:
            chosen = int(candidates[0])
        else:
            chosen = int(
                rng.choices(
                    candidates.tolist(), weights=self.weights[candidates].tolist()
                )[0]
            )
            self.wave[chunk_y, chunk_x] = False
            self.wave[chunk_y, chunk_x, chosen] = True

        try:
            self._propagate(chunk_x, chunk_y)
        except WFCContradiction as exc:
            logger.debug(f"Attempt abandoned: {exc}")
            self.possible = False
            return True

        render_pattern_to_map(
            target,
            self.constraints[chosen],
            self.chunk_size,
            chunk_x * self.chunk_size,
            chunk_y * self.chunk_size,
        )
        self.resolved[chunk_y, chunk_x] = True
        return self.remaining == 0

    def _propagate(self, start_x: int, start_y: int) -> None:
        """Narrow neighbours until no cell's possibilities change.

        Raises:
            WFCContradiction: If a neighbour is left with no possibilities.
        """
        stack = [(start_x, start_y)]
        in_stack = {(start_x, start_y)}

        while stack:
            x, y = stack.pop()
            in_stack.discard((x, y))
            current = self.wave[y, x]

            for d, direction in enumerate(DIRECTIONS):
                dx, dy = DIR_OFFSETS[direction]
                nx, ny = x + dx, y + dy
                if not (0 <= nx < self.chunks_x and 0 <= ny < self.chunks_y):
                    continue

                allowed = self.compatibility[d][current].any(axis=0)
                neighbour = self.wave[ny, nx]
                narrowed = neighbour & allowed
                if np.array_equal(narrowed, neighbour):
                    continue
                if not narrowed.any():
                    raise WFCContradiction(
                        f"No valid patterns at chunk ({nx}, {ny}) after propagation"
                    )

                self.wave[ny, nx] = narrowed
                if (nx, ny) not in in_stack:
                    stack.append((nx, ny))
                    in_stack.add((nx, ny))
