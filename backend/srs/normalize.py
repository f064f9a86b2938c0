"""Min-max normalization helpers used by the scorer."""

import math
from collections.abc import Callable, Sequence
from typing import TypeVar

T = TypeVar("T")

# Divisor used instead of a zero range
RANGE_FLOOR = 1e-10


def normalize(items: Sequence[T], project: Callable[[T], float]) -> Callable[[T], float]:
    """Return a function rescaling ``project`` to [0, 1] over ``items``.

    Min and max are computed once. Degenerate inputs are not errors:

    - empty collection (or only NaN projections): every value is NaN
    - single element: the raw projection is returned unchanged, so the
      result is *not* guaranteed to lie in [0, 1]
    - zero range: the range is floored at ``RANGE_FLOOR``
    """
    values = [x for x in (project(v) for v in items) if not math.isnan(x)]
    if not values:
        return lambda v: math.nan

    low = min(values)
    high = max(values)
    if len(items) == 1:
        return project

    span = max(high - low, RANGE_FLOOR)
    return lambda v: (project(v) - low) / span


def weighted_average(pairs: Sequence[tuple[float, float]]) -> float:
    """Weighted mean of ``(value, weight)`` pairs."""
    total_weight = sum(w for _, w in pairs)
    if total_weight == 0:
        return math.nan
    return sum(v * w for v, w in pairs) / total_weight
