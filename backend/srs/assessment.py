"""Error distances for recorded attempts.

Two sources feed the attempt log:
- a human-judged label (bad/ok/good) mapped onto a fixed scale
- a cosine distance between the embeddings of the expected and given text

The scheduler only ever sees the resulting number in [0, 1].
"""

import logging
import math
from collections.abc import Sequence
from enum import Enum

logger = logging.getLogger(__name__)


class AttemptLabel(Enum):
    """Judgement buttons, in scale order."""

    BAD = "bad"
    OK = "ok"
    GOOD = "good"


LABELS: list[AttemptLabel] = list(AttemptLabel)


def label_distance(label: AttemptLabel | str) -> float:
    """Map a label to its distance: position in the scale divided by 2.

    bad -> 0.0, ok -> 0.5, good -> 1.0
    """
    label = AttemptLabel(label)
    return LABELS.index(label) / 2


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between two vectors; 0.0 for empty, mismatched or zero vectors."""
    if not a or not b or len(a) != len(b):
        return 0.0
    dot = sum(x * y for x, y in zip(a, b))
    na = math.sqrt(sum(x * x for x in a))
    nb = math.sqrt(sum(y * y for y in b))
    if na == 0 or nb == 0:
        return 0.0
    return dot / (na * nb)


def cosine_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """``1 - cosine_similarity``, clamped to [0, 1]."""
    if not a or not b or len(a) != len(b):
        logger.warning("Cannot compare vectors of length %d and %d", len(a), len(b))
        return 1.0
    return max(0.0, min(1.0, 1.0 - cosine_similarity(a, b)))
