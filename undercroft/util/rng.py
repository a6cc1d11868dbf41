"""Deterministic random number generation with isolated streams.

Level generation threads a single random source through every stage of a
builder chain. This module provides where that source comes from: a provider
that derives one independent stream per named domain from a master seed, so
that:

1. Generating a level is fully reproducible from the same master seed
2. Adding a stage to one pipeline doesn't shift another domain's sequence
3. Tests can swap in a plain ``random.Random`` wherever an ``RNG`` is accepted

Usage:
    from undercroft.util import rng
    rng.init(config.RANDOM_SEED)

    level = generate_level(depth, rng.get("map.level"))

Domain naming convention (hierarchical):
    - "map.level", "map.spawns"
    - "cli.preview"
"""

from __future__ import annotations

import zlib
from collections.abc import Sequence
from random import Random
from typing import TYPE_CHECKING, TypeAlias, TypeVar

if TYPE_CHECKING:
    from undercroft.types import RandomSeed

T = TypeVar("T")


class RNGStream:
    """A named stream handed to builder stages in place of a Random.

    A stream reference survives ``reset()``: every call looks the underlying
    ``Random`` up again from the provider.
    """

    def __init__(self, provider: RNGProvider, domain: str) -> None:
        self._provider = provider
        self._domain = domain

    @property
    def domain(self) -> str:
        return self._domain

    def _rng(self) -> Random:
        return self._provider._get_raw(self._domain)

    # Only the Random methods generation stages call are proxied.

    def randint(self, a: int, b: int) -> int:
        """Inclusive on both ends, like dice."""
        return self._rng().randint(a, b)

    def choice(self, seq: Sequence[T]) -> T:
        return self._rng().choice(seq)

    def choices(
        self,
        population: Sequence[T],
        weights: Sequence[float] | None = None,
        *,
        cum_weights: Sequence[float] | None = None,
        k: int = 1,
    ) -> list[T]:
        """Weighted picks with replacement (WFC pattern choice)."""
        return self._rng().choices(
            population, weights=weights, cum_weights=cum_weights, k=k
        )

    def sample(self, population: Sequence[T], k: int) -> list[T]:
        """Distinct picks without replacement (Voronoi seeds)."""
        return self._rng().sample(population, k)

    def getrandbits(self, k: int) -> int:
        """Coin flips for corridor order."""
        return self._rng().getrandbits(k)


# Anything a generation stage accepts as its random source.
RNG: TypeAlias = Random | RNGStream


class RNGProvider:
    """Hands out one independent stream per domain name.

    A domain's Random is seeded from the master seed and the domain name,
    so streams never share state.
    """

    def __init__(self, master_seed: RandomSeed = None) -> None:
        self._master_seed = master_seed
        self._streams: dict[str, Random] = {}
        self._proxies: dict[str, RNGStream] = {}

    @property
    def master_seed(self) -> RandomSeed:
        return self._master_seed

    def get(self, domain: str) -> RNGStream:
        """Get an RNG stream for the named domain.

        Args:
            domain: Hierarchical name like "map.level"

        Returns:
            An RNGStream proxy with the same interface as Random
        """
        if domain not in self._proxies:
            self._proxies[domain] = RNGStream(self, domain)
        return self._proxies[domain]

    def _get_raw(self, domain: str) -> Random:
        if domain not in self._streams:
            if self._master_seed is None:
                self._streams[domain] = Random()
            else:
                # crc32 rather than hash(): hash() is salted per interpreter
                # session via PYTHONHASHSEED.
                derived_seed = zlib.crc32(f"{self._master_seed}:{domain}".encode())
                self._streams[domain] = Random(derived_seed)
        return self._streams[domain]

    def reset(self, master_seed: RandomSeed = None) -> None:
        """Reset all streams with a new master seed.

        Existing RNGStream proxies remain valid and will use the new streams.
        """
        self._master_seed = master_seed
        self._streams.clear()


# =============================================================================
# Module-level API
# =============================================================================

_provider: RNGProvider | None = None


def init(master_seed: RandomSeed = None) -> None:
    """Initialize the global RNG provider with a master seed.

    If a provider already exists it is reset instead, so cached streams keep
    working.
    """
    global _provider
    if _provider is not None:
        _provider.reset(master_seed)
    else:
        _provider = RNGProvider(master_seed)


def get(domain: str) -> RNGStream:
    """Get an RNG stream for the named domain.

    Auto-initializes a non-deterministic provider if ``init()`` was never
    called.
    """
    global _provider
    if _provider is None:
        _provider = RNGProvider(None)
    return _provider.get(domain)

