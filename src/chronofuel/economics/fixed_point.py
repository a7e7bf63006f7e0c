"""
chronofuel/economics/fixed_point.py

Integer-only math for the reward path.

No floating point is used anywhere in reward computation. Boosts are
either small integers (stake boost) or fixed-point values scaled by
PRECISION (burn boost), so every node computing a reward gets the same
answer bit for bit.

Stake boost (discretized log10 of staked tokens):

| Staked tokens      | Boost |
|--------------------|-------|
| < 1                | 1x    |
| 1 - 8              | 1x    |
| 9 - 98             | 2x    |
| 99 - 998           | 3x    |
| ...                | ...   |
| >= 999,999,999     | 10x   |

Burn boost: 1 + 0.7 * sqrt(cumulative burned tokens).
"""

import math

from ..config import (
    SCALE,
    PRECISION,
    BURN_BOOST_NUMERATOR,
    BURN_BOOST_DENOMINATOR,
)
from ..errors import ValidationError


def integer_sqrt(n: int) -> int:
    """
    Floor square root of a non-negative integer.

    Satisfies isqrt(n)**2 <= n < (isqrt(n) + 1)**2.
    """
    if n < 0:
        raise ValidationError(f"Square root of negative value: {n}")
    return math.isqrt(n)


def log10_bracket(value: int) -> int:
    """
    Discretized log10 in the range 0..9.

    Examples:
        9           -> 0
        10          -> 1
        101         -> 2
        10**9       -> 9
        10**12      -> 9 (capped)
    """
    for exp in range(9, 0, -1):
        if value >= 10 ** exp:
            return exp
    return 0


def to_base_units(amount: int) -> int:
    """Whole tokens in a wei amount (floor)."""
    return amount // SCALE


def stake_boost_of(staked_amount: int) -> int:
    """
    Integer stake multiplier, always >= 1.

    Args:
        staked_amount: Stake in wei

    Returns:
        1 when less than one whole token is staked, else
        1 + log10_bracket(tokens + 1)
    """
    base = to_base_units(staked_amount)
    if base == 0:
        return 1
    return 1 + log10_bracket(base + 1)


def burn_boost_of(cumulative_burned: int) -> int:
    """
    Fixed-point burn multiplier scaled by PRECISION.

    The square root is taken on the PRECISION^2-scaled token count so the
    result comes back already scaled by PRECISION.

    Args:
        cumulative_burned: Participant's lifetime burn in wei

    Returns:
        PRECISION + 0.7 * sqrt(tokens) * PRECISION
    """
    base = to_base_units(cumulative_burned)
    if base == 0:
        return PRECISION
    scaled_root = integer_sqrt(base * PRECISION * PRECISION)
    return PRECISION + (BURN_BOOST_NUMERATOR * scaled_root) // BURN_BOOST_DENOMINATOR


def apply_fixed_point(value: int, multiplier: int) -> int:
    """Multiply by a PRECISION-scaled factor, flooring the result."""
    return value * multiplier // PRECISION
