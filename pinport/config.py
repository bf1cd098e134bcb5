"""Runtime configuration — env-driven.

Reads from a .env file and PINPORT_* environment variables. The archive
cache location is the only persisted state pinport owns.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class PinportSettings(BaseSettings):
    """Settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export PINPORT_CACHE_DIR=/var/cache/pinport
        export PINPORT_FETCH_TIMEOUT_SECONDS=120
        export PINPORT_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="PINPORT_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"

    # Archive cache
    cache_dir: Path = Path.home() / ".cache" / "pinport"
    stale_staging_seconds: float = 24 * 60 * 60

    # Fetch behaviour
    fetch_timeout_seconds: float = 60.0
    chunk_size: int = 1024 * 1024
    user_agent: str = "pinport/0.1"


# Module-level singleton — import as `from pinport.config import settings`
settings = PinportSettings()
