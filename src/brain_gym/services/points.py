"""Random point draws."""

import random


def random_points(
    min_points: int, max_points: int, rng: random.Random | None = None
) -> int:
    """Return a uniform random integer in [min_points, max_points]."""
    if min_points > max_points:
        raise ValueError("min_points must not exceed max_points")
    source = rng or random
    return source.randint(min_points, max_points)
