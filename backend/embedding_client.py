"""Text-embedding client with a local cache and retry logic."""

import asyncio
import json
import logging
import time
from pathlib import Path

import httpx
from tenacity import retry, stop_after_attempt, wait_exponential

from backend.config import settings
from backend.srs.assessment import cosine_distance

logger = logging.getLogger(__name__)


class EmbeddingClient:
    """Wrapper around a remote embeddings API.

    Vectors are cached by input text. The cache is read from disk at start-up
    and written back at most once per save interval, in a worker thread;
    write failures are logged and otherwise ignored.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        url: str | None = None,
        cache_path: Path | None = None,
        save_interval: float | None = None,
        request_delay: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client and load any cached vectors."""
        self.api_key = api_key if api_key is not None else settings.openai_api_key
        self.model = model or settings.embedding_model
        self.url = url or settings.embedding_url
        self.cache_path = Path(cache_path or settings.embedding_cache_path)
        self.save_interval = (
            settings.embedding_cache_save_interval if save_interval is None else save_interval
        )
        self.request_delay = (
            settings.embedding_request_delay if request_delay is None else request_delay
        )
        self._transport = transport
        self._cache: dict[str, list[float]] = self._read_cache()
        self._last_save = 0.0
        self._save_task: asyncio.Task | None = None

    def _read_cache(self) -> dict[str, list[float]]:
        try:
            with open(self.cache_path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable embedding cache %s: %s", self.cache_path, exc)
            return {}
        if not isinstance(data, dict):
            return {}
        logger.debug("Loaded %d cached embeddings", len(data))
        return data

    def _write_cache(self, snapshot: dict[str, list[float]]) -> None:
        try:
            self.cache_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.cache_path, "w", encoding="utf-8") as f:
                json.dump(snapshot, f)
        except OSError as exc:
            logger.warning("Failed to write embedding cache: %s", exc)

    async def _save_later(self, delay: float) -> None:
        if delay > 0:
            await asyncio.sleep(delay)
        self._last_save = time.monotonic()
        await asyncio.to_thread(self._write_cache, dict(self._cache))

    def _schedule_save(self) -> None:
        # A pending save picks up entries added since it was scheduled.
        if self._save_task is not None and not self._save_task.done():
            return
        elapsed = time.monotonic() - self._last_save
        delay = max(0.0, self.save_interval - elapsed)
        self._save_task = asyncio.create_task(self._save_later(delay))

    async def flush(self) -> None:
        """Wait for any pending cache write."""
        if self._save_task is not None:
            await self._save_task

    def cached(self, text: str) -> list[float] | None:
        return self._cache.get(text)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=30),
        reraise=True,
    )
    async def _fetch(self, text: str) -> list[float]:
        async with httpx.AsyncClient(transport=self._transport, timeout=30.0) as client:
            response = await client.post(
                self.url,
                headers={
                    "Accept": "application/json",
                    "Authorization": f"Bearer {self.api_key}",
                },
                json={"input": text, "model": self.model},
            )
            response.raise_for_status()
        return response.json()["data"][0]["embedding"]

    async def embed(self, text: str) -> list[float]:
        """Return the embedding for ``text``, from cache when possible."""
        cached = self._cache.get(text)
        if cached:
            return cached
        vector = await self._fetch(text)
        logger.debug("Fetched embedding for %r (%d dims)", text, len(vector))
        if self.request_delay > 0:
            await asyncio.sleep(self.request_delay)
        self._cache[text] = vector
        self._schedule_save()
        return vector

    async def distance(self, expected: str, actual: str) -> float:
        """Cosine distance between the embeddings of two texts, in [0, 1]."""
        a = await self.embed(expected)
        b = await self.embed(actual)
        return cosine_distance(a, b)


# Lazy singleton: the cache file is only read once something needs embeddings.
_embedding_client: EmbeddingClient | None = None


def get_embedding_client() -> EmbeddingClient:
    """Return the shared EmbeddingClient, creating it on first call."""
    global _embedding_client
    if _embedding_client is None:
        _embedding_client = EmbeddingClient()
    return _embedding_client
