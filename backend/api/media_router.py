"""API routes for item frames and text embeddings."""

import logging

import httpx
from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse

from backend.api.schemas import DistanceResponse
from backend.config import settings
from backend.embedding_client import get_embedding_client

logger = logging.getLogger(__name__)

router = APIRouter(tags=["media"])


@router.get("/frame/{item}")
async def get_frame(item: str) -> FileResponse:
    """Serve the image for an item (``"42_"`` -> ``frames/42.jpg``)."""
    name = item.replace("_", "", 1)
    if not name or "/" in name or "\\" in name or name.startswith("."):
        raise HTTPException(status_code=404, detail="Frame not found")
    path = settings.frames_dir / f"{name}.jpg"
    if not path.is_file():
        raise HTTPException(status_code=404, detail="Frame not found")
    return FileResponse(path, media_type="image/jpeg")


@router.get("/embed/{text}")
async def get_embedding(text: str) -> list[float]:
    """Return the (cached) embedding vector for ``text``."""
    try:
        return await get_embedding_client().embed(text)
    except httpx.HTTPError as exc:
        logger.error("Embedding lookup failed for %r: %s", text, exc)
        raise HTTPException(status_code=502, detail="Embedding lookup failed") from exc


@router.get("/distance", response_model=DistanceResponse)
async def get_distance(expected: str, actual: str) -> DistanceResponse:
    """Compare two texts by embedding cosine distance."""
    try:
        distance = await get_embedding_client().distance(expected, actual)
    except httpx.HTTPError as exc:
        logger.error("Embedding lookup failed: %s", exc)
        raise HTTPException(status_code=502, detail="Embedding lookup failed") from exc
    return DistanceResponse(expected=expected, actual=actual, distance=distance)
