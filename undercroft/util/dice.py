"""
Dice rolls on an explicit random source.

Generation code talks about randomness in dice terms ("roll 1d100, floor on
45 or less"), so every stage goes through `roll_dice()` with the stream it
was handed rather than the global `random` module.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from undercroft.util.rng import RNG


def roll_dice(rng: RNG, num_dice: int, sides: int) -> int:
    """Roll `num_dice` dice with `sides` faces each and return the total.

    Args:
        rng: The random source to draw from.
        num_dice: How many dice to roll. Zero or fewer rolls nothing.
        sides: Faces per die. Must be at least 1.

    Returns:
        The sum of the rolls, between num_dice and num_dice * sides.

    Raises:
        ValueError: If sides is less than 1.
    """
    if sides < 1:
        raise ValueError(f"A die needs at least one side, got {sides}")

    total = 0
    for _ in range(num_dice):
        total += rng.randint(1, sides)
    return total


def roll_d(rng: RNG, sides: int) -> int:
    """Rolls a single die with the specified number of sides."""
    return roll_dice(rng, 1, sides)
