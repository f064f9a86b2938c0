"""Drill state and its persistence boundary.

The state is stored as one opaque JSON blob under a fixed session key, in the
shape ``{"history": [{"actual", "distance", "seq"}, ...], "words": [...]}``.
A missing or unreadable blob never fails a load: the drill starts over with
an empty log and a freshly shuffled roster.
"""

import json
import logging
import random
from dataclasses import dataclass, field

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.config import settings
from backend.models.saved_state import SavedState
from backend.srs.attempts import Attempt, AttemptLog, ItemId

logger = logging.getLogger(__name__)


def fresh_roster(
    start: int | None = None,
    stop: int | None = None,
    suffix: str | None = None,
    rng: random.Random | None = None,
) -> tuple[ItemId, ...]:
    """Generate a shuffled roster of item ids like ``"6_" .. "926_"``."""
    start = settings.roster_start if start is None else start
    stop = settings.roster_stop if stop is None else stop
    suffix = settings.roster_suffix if suffix is None else suffix
    numbers = list(range(start, stop))
    (rng or random).shuffle(numbers)
    return tuple(f"{n}{suffix}" for n in numbers)


@dataclass(frozen=True)
class DrillState:
    """Everything a drill needs to resume: the attempt log and the roster."""

    log: AttemptLog = field(default_factory=AttemptLog)
    roster: tuple[ItemId, ...] = ()

    @classmethod
    def fresh(cls, rng: random.Random | None = None) -> "DrillState":
        return cls(log=AttemptLog(), roster=fresh_roster(rng=rng))


def state_to_blob(state: DrillState) -> str:
    data = {
        "history": [
            {"actual": a.item, "distance": a.error_distance, "seq": a.sequence}
            for a in state.log
        ],
        "words": list(state.roster),
    }
    return json.dumps(data, ensure_ascii=False)


def state_from_blob(blob: str | None, rng: random.Random | None = None) -> DrillState:
    """Parse a persisted blob, falling back to a fresh state on any problem."""
    if not blob:
        return DrillState.fresh(rng)
    try:
        raw = json.loads(blob)
        if raw is None:
            return DrillState.fresh(rng)
        attempts = tuple(
            Attempt(
                item=str(entry["actual"]),
                error_distance=float(entry["distance"]),
                sequence=int(entry["seq"]),
            )
            for entry in raw.get("history") or []
        )
        words = raw.get("words")
        if not isinstance(words, list):
            raise ValueError("words must be a list")
        return DrillState(log=AttemptLog(attempts), roster=tuple(str(w) for w in words))
    except (ValueError, TypeError, KeyError, AttributeError, OverflowError) as exc:
        # json.JSONDecodeError is a ValueError; int(inf) is an OverflowError
        logger.warning("Discarding unreadable drill state: %s", exc)
        return DrillState.fresh(rng)


async def load_state(db: AsyncSession, key: str | None = None) -> DrillState:
    """Load the drill state stored under ``key`` (the configured session key by default)."""
    key = key or settings.session_key
    row = (await db.execute(select(SavedState).where(SavedState.key == key))).scalar_one_or_none()
    if row is None:
        logger.info("No saved state under %r, starting fresh", key)
        return DrillState.fresh()
    state = state_from_blob(row.blob)
    logger.debug("Loaded %r: %d attempts, %d items", key, len(state.log), len(state.roster))
    return state


async def save_state(db: AsyncSession, state: DrillState, key: str | None = None) -> None:
    key = key or settings.session_key
    blob = state_to_blob(state)
    row = (await db.execute(select(SavedState).where(SavedState.key == key))).scalar_one_or_none()
    if row is None:
        db.add(SavedState(key=key, blob=blob))
    else:
        row.blob = blob
    await db.commit()


async def clear_state(db: AsyncSession, key: str | None = None) -> None:
    key = key or settings.session_key
    await db.execute(delete(SavedState).where(SavedState.key == key))
    await db.commit()
    logger.info("Cleared saved state %r", key)
