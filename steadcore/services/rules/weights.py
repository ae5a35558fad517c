"""Weighted draw shared by every OneOf construct."""

import math
from collections.abc import Sequence
from random import Random
from typing import TypeVar

T = TypeVar("T")

# Tolerance for weights that should add up to exactly 1.0
WEIGHT_SUM_TOLERANCE = 1e-6


def weighted_choice(branches: Sequence[tuple[float, T]], rng: Random) -> T:
    """Pick one branch by sequential subtraction.

    Draws r in [0, 1) and subtracts each weight in order, committing to the
    first branch that drives r below zero. When rounding leaves no branch
    selected, the last branch is taken.

    Args:
        branches: (weight, value) pairs, weights summing to 1.0.
        rng: Source of randomness.

    Returns:
        The chosen value.
    """
    if not branches:
        raise ValueError("cannot choose from zero branches")
    r = rng.random()
    for weight, value in branches:
        r -= weight
        if r < 0:
            return value
    return branches[-1][1]


def weights_sum_to_one(weights: Sequence[float]) -> bool:
    return math.isclose(math.fsum(weights), 1.0, rel_tol=0.0, abs_tol=WEIGHT_SUM_TOLERANCE)
