"""Fetched artifact model (immutable once published to the cache)."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class FetchedArtifact(BaseModel):
    """A verified, extracted archive living in the local cache.

    ``path`` is the extracted archive root. ``content_address`` is the
    digest of the downloaded archive bytes, ``"<algo>:<hex>"``.
    """

    model_config = ConfigDict(frozen=True)

    path: Path
    cache_key: str
    content_address: str
    source_url: str
    revision: str
    size_bytes: int = 0
    fetched_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
