"""Error kinds raised while loading, fetching, and composing pinned imports.

Every error is terminal for the operation that raised it. Nothing retries
internally; callers may retry a whole ``fetch`` call.
"""

from __future__ import annotations


class PinportError(RuntimeError):
    """Base class for all pinport failures."""


class ParseError(PinportError):
    """Raised when a pin file is missing, unreadable, or not well-formed."""


class ValidationError(PinportError):
    """Raised when a pin file parses but its fields break the pin contract."""


class FetchError(PinportError):
    """Raised on network failure, HTTP error status, or fetch timeout."""


class IntegrityError(PinportError):
    """Raised when a downloaded archive does not match its recorded digest."""


class ExtractionError(PinportError):
    """Raised when an archive is corrupt, unsupported, or unsafe to unpack."""
