"""Pinport: reproducible import of pinned remote archives.

Reads a pin file, fetches and verifies the archive it names into a local
cache, and composes an import handle (artifact path, configuration,
ordered overlays) for an external evaluator.
"""

__version__ = "0.1.0"
__description__ = "Fetch, verify, and compose pinned remote archives"

from pinport.core.archive_fetcher import ArchiveFetcher
from pinport.core.composer import Evaluator, compose
from pinport.core.errors import (
    ExtractionError,
    FetchError,
    IntegrityError,
    ParseError,
    PinportError,
    ValidationError,
)
from pinport.core.importer import import_pinned
from pinport.core.pin_reader import PinReader, load_pin
from pinport.models import FetchedArtifact, ImportHandle, PinRecord

__all__ = [
    "ArchiveFetcher",
    "Evaluator",
    "ExtractionError",
    "FetchError",
    "FetchedArtifact",
    "ImportHandle",
    "IntegrityError",
    "ParseError",
    "PinReader",
    "PinRecord",
    "PinportError",
    "ValidationError",
    "compose",
    "import_pinned",
    "load_pin",
    "__version__",
]
