"""Drill session: batching around the item scheduler.

The statistics table and scored list are rebuilt only when the batch number
``len(log) // set_size`` changes, so the learner rotates through the same
working set for a whole batch before it is recomputed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from backend.config import settings
from backend.srs.attempts import ItemId
from backend.srs.scorer import ScoredItem, score
from backend.srs.selector import select, working_set
from backend.srs.state import DrillState
from backend.srs.stats import ItemStats, build_stats

logger = logging.getLogger(__name__)


@dataclass
class DrillSummary:
    """Snapshot of a drill for display."""

    attempts: int
    roster_size: int
    seen_items: int
    batch: int
    current_item: ItemId | None
    working_set: list[ItemStats]


@dataclass
class DrillSession:
    """Holds the drill state and memoizes the scored list per batch."""

    state: DrillState
    set_size: int = field(default_factory=lambda: settings.set_size)
    forgiveness_window: int = field(default_factory=lambda: settings.forgiveness_window)
    _memo_key: tuple[int, tuple[ItemId, ...]] | None = None
    _scored: list[ScoredItem] = field(default_factory=list)

    @property
    def batch(self) -> int:
        """Return the index of the current batch of ``set_size`` attempts."""
        return len(self.state.log) // self.set_size

    @property
    def scored(self) -> list[ScoredItem]:
        """Return the scored list for the current batch, rebuilding it if stale."""
        key = (self.batch, self.state.roster)
        if key != self._memo_key:
            table = build_stats(
                self.state.log, self.state.roster, self.forgiveness_window, self.set_size
            )
            self._scored = score(table, self.set_size)
            self._memo_key = key
            logger.info(
                "Recomputed working set for batch %d (%d attempts, %d items)",
                self.batch,
                len(self.state.log),
                len(self.state.roster),
            )
        return self._scored

    @property
    def working_set(self) -> list[ItemStats]:
        return working_set(self.scored, self.set_size)

    @property
    def current(self) -> ItemStats | None:
        return select(self.scored, len(self.state.log), self.set_size)

    @property
    def current_item(self) -> ItemId | None:
        """Return the item to show now, or None if there is nothing to show."""
        current = self.current
        return current.item if current else None

    def record_attempt(self, error_distance: float, item: ItemId | None = None) -> ItemId | None:
        """Append an attempt against the current item and return the next item.

        Args:
            error_distance: Judged distance in [0, 1].
            item: Optional check that the caller answered the item being shown.

        Raises:
            ValueError: If there is no current item, ``item`` is not the
                current item, or the distance is out of range.
        """
        current = self.current_item
        if current is None:
            raise ValueError("Nothing to answer: the roster is empty")
        if item is not None and item != current:
            raise ValueError(f"Item mismatch: showing {current!r}, got {item!r}")

        log = self.state.log.append(current, error_distance)
        self.state = DrillState(log=log, roster=self.state.roster)
        logger.debug("Recorded %s distance=%.2f seq=%d", current, error_distance, len(log) - 1)
        return self.current_item

    def summary(self) -> DrillSummary:
        seen = {a.item for a in self.state.log}
        return DrillSummary(
            attempts=len(self.state.log),
            roster_size=len(self.state.roster),
            seen_items=len(seen & set(self.state.roster)),
            batch=self.batch,
            current_item=self.current_item,
            working_set=self.working_set,
        )
