"""Per-item statistics derived from the attempt log.

Key concepts:
- Forgiveness window (K): only the K most recent attempts of an item count.
- Mean error: sum of the kept error distances divided by K, *not* by the
  number of attempts actually kept, so a short history reads as partly
  mastered.
- Last seen: rounds elapsed since the most recent kept attempt. Items never
  attempted get ``set_size + 1``: overdue, but comparable with seen items.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from backend.srs.attempts import Attempt, AttemptLog, ItemId

logger = logging.getLogger(__name__)

# Tunable constants
DEFAULT_FORGIVENESS_WINDOW = 2
DEFAULT_SET_SIZE = 3
UNSEEN_MEAN_ERROR = 0.1  # New items are mildly uncertain, not perfectly known


@dataclass
class ItemStats:
    """Statistics for one roster item, rebuilt on every recomputation."""

    item: ItemId
    mean_error: float = UNSEEN_MEAN_ERROR
    last_seen: float = DEFAULT_SET_SIZE + 1
    recent_attempts: list[Attempt] = field(default_factory=list)  # Most recent first


def unseen_last_seen(set_size: int) -> int:
    """Sentinel recency for an item with no kept attempts."""
    return set_size + 1


def build_stats(
    log: AttemptLog,
    roster: Iterable[ItemId],
    forgiveness_window: int = DEFAULT_FORGIVENESS_WINDOW,
    set_size: int = DEFAULT_SET_SIZE,
) -> dict[ItemId, ItemStats]:
    """Build the statistics table for every roster item.

    Args:
        log: The full attempt log.
        roster: Every item the scheduler may pick, in tie-break order.
        forgiveness_window: Max number of recent attempts kept per item (K).
        set_size: Working-set size, used for the never-seen sentinel.

    Returns:
        Mapping of item id to ItemStats, in roster order.
    """
    histories: dict[ItemId, list[Attempt]] = {item: [] for item in roster}

    ignored = 0
    for attempt in reversed(log):
        history = histories.get(attempt.item)
        if history is None:
            ignored += 1
            continue
        if len(history) < forgiveness_window:
            history.append(attempt)
    if ignored:
        logger.debug("Ignored %d attempts for items outside the roster", ignored)

    total = len(log)
    table: dict[ItemId, ItemStats] = {}
    for item, recent in histories.items():
        stats = ItemStats(item=item, last_seen=unseen_last_seen(set_size), recent_attempts=recent)
        if recent:
            stats.last_seen = min(total - a.sequence for a in recent)
            stats.mean_error = sum(a.error_distance for a in recent) / forgiveness_window
        table[item] = stats
    return table
