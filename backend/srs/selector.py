"""Working-set selection and the ``next_item`` entry point."""

import logging
from collections.abc import Iterable, Sequence

from backend.srs.attempts import AttemptLog, ItemId
from backend.srs.scorer import ScoredItem, score
from backend.srs.stats import DEFAULT_FORGIVENESS_WINDOW, DEFAULT_SET_SIZE, ItemStats, build_stats

logger = logging.getLogger(__name__)


def working_set(scored: Sequence[ScoredItem], set_size: int = DEFAULT_SET_SIZE) -> list[ItemStats]:
    """Top ``set_size`` items by score, longest-overdue first."""
    top = [stats for stats, _ in scored[:set_size]]
    return sorted(top, key=lambda s: -s.last_seen)


def select(
    scored: Sequence[ScoredItem],
    attempt_index: int,
    set_size: int = DEFAULT_SET_SIZE,
) -> ItemStats | None:
    """Pick the working-set member for this attempt.

    The index rotates through the working set, so every member is shown once
    per ``set_size`` attempts. Returns None when there is nothing to show.
    """
    members = working_set(scored, set_size)
    if not members:
        return None
    return members[attempt_index % len(members)]


def next_item(
    log: AttemptLog,
    roster: Iterable[ItemId],
    forgiveness_window: int = DEFAULT_FORGIVENESS_WINDOW,
    set_size: int = DEFAULT_SET_SIZE,
    attempt_index: int | None = None,
) -> ItemId | None:
    """Run the whole pipeline and return the item to show next.

    Args:
        log: The attempt log.
        roster: Candidate items.
        forgiveness_window: Attempts kept per item (K).
        set_size: Working-set size.
        attempt_index: Position to select for; defaults to ``len(log)``.

    Returns:
        The chosen item id, or None if the roster is empty.
    """
    if attempt_index is None:
        attempt_index = len(log)
    table = build_stats(log, roster, forgiveness_window, set_size)
    chosen = select(score(table, set_size), attempt_index, set_size)
    if chosen is None:
        logger.info("Nothing to show: empty roster")
        return None
    return chosen.item
