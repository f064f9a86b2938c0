"""Point the database, cache, and frames at a throwaway directory."""

import os
import tempfile

_DATA_DIR = tempfile.mkdtemp(prefix="wordloop-test-")
os.environ.setdefault("WORDLOOP_DATA_DIR", _DATA_DIR)
os.environ.setdefault("WORDLOOP_DATABASE_URL", f"sqlite+aiosqlite:///{_DATA_DIR}/test.db")
os.environ.setdefault("WORDLOOP_FRAMES_DIR", os.path.join(_DATA_DIR, "frames"))
os.environ.setdefault("WORDLOOP_EMBEDDING_CACHE_PATH", os.path.join(_DATA_DIR, "cache.json"))

import pytest_asyncio  # noqa: E402

from backend.database import engine  # noqa: E402


@pytest_asyncio.fixture(autouse=True)
async def _dispose_engine():
    """Drop pooled connections so each test's event loop starts clean."""
    yield
    await engine.dispose()
