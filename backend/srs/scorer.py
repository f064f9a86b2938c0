"""Priority scoring for the statistics table.

An item's raw score is ``1 - mean(norm_error, 1 - norm_recency)``, with both
terms min-max normalized across the whole table. Degenerate normalization can
leave a score undefined (NaN); items near the top of the mean-error order are
then forced to maximum priority so cold-start items still surface.
"""

import logging
import math
from collections.abc import Mapping

from backend.srs.attempts import ItemId
from backend.srs.normalize import normalize, weighted_average
from backend.srs.stats import DEFAULT_SET_SIZE, ItemStats

logger = logging.getLogger(__name__)

ERROR_WEIGHT = 1.0
RECENCY_WEIGHT = 1.0
OVERRIDE_SCORE = 1.0

ScoredItem = tuple[ItemStats, float]


def _descending(value: float) -> tuple[bool, float]:
    """Sort key putting large values first and NaN last."""
    if math.isnan(value):
        return (True, 0.0)
    return (False, -value)


def threshold_pool_size(sorted_stats: list[ItemStats], set_size: int = DEFAULT_SET_SIZE) -> int:
    """Number of leading (hardest) items guaranteed eligibility.

    Counts the leading items whose mean error is at least 1 and returns the
    next multiple of ``set_size`` strictly above that count. The result is
    always a positive multiple of ``set_size``.
    """
    count = 0
    for stats in sorted_stats:
        mean_error = 0.0 if math.isnan(stats.mean_error) else stats.mean_error
        if mean_error < 1:
            break
        count += 1
    return (count // set_size) * set_size + set_size


def score(
    table: Mapping[ItemId, ItemStats],
    set_size: int = DEFAULT_SET_SIZE,
) -> list[ScoredItem]:
    """Score every item; higher means show sooner.

    Args:
        table: Statistics table from ``build_stats``.
        set_size: Working-set size.

    Returns:
        ``(stats, score)`` pairs sorted by descending score. Ties keep the
        descending mean-error order, which itself keeps roster order.
    """
    by_error = sorted(table.values(), key=lambda s: _descending(s.mean_error))
    pool = threshold_pool_size(by_error, set_size)

    norm_error = normalize(by_error, lambda s: s.mean_error)
    norm_seen = normalize(by_error, lambda s: s.last_seen)

    scored: list[ScoredItem] = []
    for index, stats in enumerate(by_error):
        raw = 1 - weighted_average(
            [
                (norm_error(stats), ERROR_WEIGHT),
                (1 - norm_seen(stats), RECENCY_WEIGHT),
            ]
        )
        if math.isnan(raw) and index <= pool:
            raw = OVERRIDE_SCORE
        scored.append((stats, raw))

    scored.sort(key=lambda pair: _descending(pair[1]))
    logger.debug(
        "Scored %d items (pool=%d): %s",
        len(scored),
        pool,
        ", ".join(
            f"{s.item}={value:.2f} (err {s.mean_error:.2f}, seen {s.last_seen})"
            for s, value in scored[: set_size * 2]
        ),
    )
    return scored
