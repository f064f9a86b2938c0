"""FastAPI application entry point and configuration."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from backend.api.drill_router import router as drill_router
from backend.api.media_router import router as media_router
from backend.api.word_channel import router as word_router
from backend.config import settings
from backend.database import async_session, engine, init_db
from backend.embedding_client import get_embedding_client


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Initialize database on startup; flush caches and dispose on shutdown."""
    await init_db()
    yield
    await get_embedding_client().flush()
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    description="Adaptive vocabulary drill with a rotating working set",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(drill_router)
app.include_router(media_router)
app.include_router(word_router)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Check database connectivity and return status."""
    async with async_session() as session:
        await session.execute(text("SELECT 1"))
    return {"status": "ok"}
