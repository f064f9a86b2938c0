from datetime import UTC, datetime
from pathlib import Path

from pydantic_settings import BaseSettings

DATA_DIR = Path(__file__).resolve().parent.parent / "data"


def utcnow() -> datetime:
    """Return the current UTC time as a naive datetime.

    Keeps datetimes naive so they stay compatible with SQLite
    (which doesn't store tz info).
    """
    return datetime.now(UTC).replace(tzinfo=None)


class Settings(BaseSettings):
    app_name: str = "Wordloop"
    data_dir: Path = DATA_DIR
    database_url: str = f"sqlite+aiosqlite:///{DATA_DIR / 'wordloop.db'}"
    set_size: int = 3
    forgiveness_window: int = 2
    session_key: str = "eol-state-new"
    roster_start: int = 6
    roster_stop: int = 927
    roster_suffix: str = "_"
    frames_dir: Path = DATA_DIR / "frames"
    openai_api_key: str = ""
    embedding_model: str = "text-embedding-ada-002"
    embedding_url: str = "https://api.openai.com/v1/embeddings"
    embedding_cache_path: Path = DATA_DIR / "cache.json"
    embedding_cache_save_interval: float = 1.0  # seconds between cache writes
    embedding_request_delay: float = 0.5
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    debug: bool = False

    model_config = {"env_prefix": "WORDLOOP_", "env_file": ".env"}


settings = Settings()
