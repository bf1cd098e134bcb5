"""Canonical hashing helpers for cache keys and archive integrity checks.

Digests are written as ``<algo>:<hex>`` (the form stored in cache
metadata). Pins may also record SRI strings (``sha256-<base64>``) or a bare
sha256 hex digest; :func:`parse_integrity` normalizes all of them.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import json
import re
from typing import Any, NamedTuple

SUPPORTED_ALGORITHMS: dict[str, int] = {"sha256": 64, "sha512": 128}
DEFAULT_ALGORITHM = "sha256"

_HEX_RE = re.compile(r"^[0-9a-fA-F]+$")


class Digest(NamedTuple):
    """A parsed digest: algorithm name and lowercase hex value."""

    algorithm: str
    hexdigest: str

    def __str__(self) -> str:
        return f"{self.algorithm}:{self.hexdigest}"

    @property
    def cache_token(self) -> str:
        """Filesystem-safe form, ``<algo>-<hex>``."""
        return f"{self.algorithm}-{self.hexdigest}"


def canonical_json_bytes(obj: Any) -> bytes:
    """Produce canonical JSON bytes: sorted keys, compact separators, ASCII."""
    return json.dumps(
        obj, sort_keys=True, separators=(",", ":"), ensure_ascii=True
    ).encode("utf-8")


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def new_hasher(algorithm: str = DEFAULT_ALGORITHM) -> Any:
    """Return a fresh incremental hasher for a supported algorithm."""
    if algorithm not in SUPPORTED_ALGORITHMS:
        raise ValueError(f"Unsupported digest algorithm: {algorithm!r}")
    return hashlib.new(algorithm)


def parse_integrity(value: str) -> Digest:
    """Parse a recorded integrity string into a :class:`Digest`.

    Accepted forms::

        sha256:<hex>        sha512:<hex>
        sha256-<base64>     sha512-<base64>    (SRI)
        <64 hex chars>                          (bare sha256)

    Hex values of the wrong length are accepted as long as they are hex;
    such a pin can never verify and fails at fetch time with an integrity
    error rather than at load time.

    Raises
    ------
    ValueError
        If the string matches none of the accepted forms.
    """
    text = value.strip()
    if not text:
        raise ValueError("integrity hash is empty")

    if ":" in text:
        algorithm, _, hexdigest = text.partition(":")
        algorithm = algorithm.lower()
        if algorithm not in SUPPORTED_ALGORITHMS:
            raise ValueError(f"Unsupported digest algorithm: {algorithm!r}")
        if not hexdigest or not _HEX_RE.match(hexdigest):
            raise ValueError(f"Digest value is not hex: {hexdigest!r}")
        return Digest(algorithm, hexdigest.lower())

    if "-" in text:
        algorithm, _, encoded = text.partition("-")
        algorithm = algorithm.lower()
        if algorithm not in SUPPORTED_ALGORITHMS:
            raise ValueError(f"Unsupported digest algorithm: {algorithm!r}")
        try:
            raw = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError(f"Invalid SRI base64 value: {encoded!r}") from exc
        return Digest(algorithm, raw.hex())

    if _HEX_RE.match(text) and len(text) == SUPPORTED_ALGORITHMS[DEFAULT_ALGORITHM]:
        return Digest(DEFAULT_ALGORITHM, text.lower())

    raise ValueError(f"Unrecognized integrity hash format: {value!r}")


def revision_key(source_url: str, revision: str) -> str:
    """Cache key for a pin without a recorded hash.

    SHA-256 of canonical ``{source_url, revision}`` so two sources that share
    a revision string never collide.
    """
    payload = {"source_url": source_url, "revision": revision}
    return f"rev-{sha256_hex(canonical_json_bytes(payload))[:32]}"
