"""API routes for the vocabulary drill."""

import json
import logging

import httpx
from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from backend.api.schemas import (
    AttemptRequest,
    AttemptResponse,
    NextItemResponse,
    WorkingSetEntry,
    WorkingSetResponse,
)
from backend.api.word_channel import channel
from backend.config import settings
from backend.database import get_session
from backend.embedding_client import get_embedding_client
from backend.srs.assessment import label_distance
from backend.srs.session import DrillSession
from backend.srs.state import DrillState, clear_state, load_state, save_state, state_from_blob, state_to_blob

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/drill", tags=["drill"])

# One drill per session key, loaded on first use
_active_drills: dict[str, DrillSession] = {}


async def get_drill(db: AsyncSession) -> DrillSession:
    """Return the drill for the configured session key, loading it if needed."""
    key = settings.session_key
    drill = _active_drills.get(key)
    if drill is None:
        drill = DrillSession(state=await load_state(db, key))
        _active_drills[key] = drill
    return drill


def frame_url(item: str) -> str:
    return f"/frame/{item}"


@router.get("/next", response_model=NextItemResponse)
async def drill_next(db: AsyncSession = Depends(get_session)) -> NextItemResponse:
    """Get the item to show for the next attempt."""
    drill = await get_drill(db)
    item = drill.current_item
    if item is None:
        raise HTTPException(status_code=404, detail="Nothing to show: the roster is empty")

    await channel.publish(item)
    return NextItemResponse(
        item=item,
        attempt_index=len(drill.state.log),
        batch=drill.batch,
        frame_url=frame_url(item),
    )


@router.post("/attempt", response_model=AttemptResponse)
async def drill_attempt(
    request: AttemptRequest,
    db: AsyncSession = Depends(get_session),
) -> AttemptResponse:
    """Record an attempt against the current item."""
    judged = [
        request.label is not None,
        request.distance is not None,
        request.expected is not None and request.response is not None,
    ]
    if sum(judged) != 1:
        raise HTTPException(
            status_code=400,
            detail="Give exactly one of label, distance, or expected+response",
        )

    if request.label is not None:
        distance = label_distance(request.label)
    elif request.distance is not None:
        distance = request.distance
    else:
        try:
            distance = await get_embedding_client().distance(request.expected, request.response)
        except httpx.HTTPError as exc:
            logger.error("Embedding lookup failed: %s", exc)
            raise HTTPException(status_code=502, detail="Embedding lookup failed") from exc

    drill = await get_drill(db)
    try:
        next_item = drill.record_attempt(distance, item=request.item)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    await save_state(db, drill.state)
    await channel.publish(next_item)

    recorded = drill.state.log[-1]
    return AttemptResponse(
        item=recorded.item,
        distance=recorded.error_distance,
        sequence=recorded.sequence,
        next_item=next_item,
        batch=drill.batch,
    )


@router.get("/working-set", response_model=WorkingSetResponse)
async def drill_working_set(db: AsyncSession = Depends(get_session)) -> WorkingSetResponse:
    """Show the current working set in presentation order."""
    summary = (await get_drill(db)).summary()
    return WorkingSetResponse(
        batch=summary.batch,
        attempts=summary.attempts,
        roster_size=summary.roster_size,
        current_item=summary.current_item,
        items=[
            WorkingSetEntry(
                item=s.item,
                mean_error=s.mean_error,
                last_seen=s.last_seen,
                recent_attempts=len(s.recent_attempts),
            )
            for s in summary.working_set
        ],
    )


@router.get("/state")
async def drill_export(db: AsyncSession = Depends(get_session)) -> dict:
    """Export the drill state blob."""
    drill = await get_drill(db)
    return json.loads(state_to_blob(drill.state))


@router.put("/state")
async def drill_import(
    blob: dict = Body(...),
    db: AsyncSession = Depends(get_session),
) -> dict:
    """Replace the drill state with an uploaded blob.

    An unreadable blob resets the drill rather than failing.
    """
    state = state_from_blob(json.dumps(blob))
    await save_state(db, state)
    _active_drills[settings.session_key] = DrillSession(state=state)
    return {"status": "imported", "attempts": len(state.log), "items": len(state.roster)}


@router.delete("/state")
async def drill_clear(db: AsyncSession = Depends(get_session)) -> dict:
    """Forget the saved state and start a fresh drill."""
    await clear_state(db)
    state = DrillState.fresh()
    await save_state(db, state)
    _active_drills[settings.session_key] = DrillSession(state=state)
    return {"status": "cleared", "items": len(state.roster)}
