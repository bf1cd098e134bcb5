"""Pinport data models — all Pydantic v2, all frozen (immutable)."""

from pinport.models.artifact import FetchedArtifact
from pinport.models.handle import ImportHandle
from pinport.models.pin import PinRecord

__all__ = [
    "PinRecord",
    "FetchedArtifact",
    "ImportHandle",
]
