"""Pydantic schemas for API request/response models."""

from pydantic import BaseModel, Field

from backend.srs.assessment import AttemptLabel

# --- Drill ---


class NextItemResponse(BaseModel):
    """The item to show for the upcoming attempt."""

    item: str
    attempt_index: int
    batch: int
    frame_url: str


class AttemptRequest(BaseModel):
    """Request to record an attempt against the current item.

    Exactly one way of judging must be given: a label, a raw distance, or
    an expected/response text pair compared by embedding.
    """

    item: str | None = None  # Optional check against the item being shown
    label: AttemptLabel | None = None
    distance: float | None = Field(default=None, ge=0.0, le=1.0)
    expected: str | None = None
    response: str | None = None


class AttemptResponse(BaseModel):
    """Response after recording an attempt."""

    item: str
    distance: float
    sequence: int
    next_item: str | None
    batch: int


class WorkingSetEntry(BaseModel):
    item: str
    mean_error: float
    last_seen: float
    recent_attempts: int


class WorkingSetResponse(BaseModel):
    """The working set for the current batch, in presentation order."""

    batch: int
    attempts: int
    roster_size: int
    current_item: str | None
    items: list[WorkingSetEntry]


# --- Media ---


class DistanceResponse(BaseModel):
    expected: str
    actual: str
    distance: float
