"""Archive fetcher — downloads, verifies, and caches pinned archives.

Cache layout::

    {cache_dir}/
        {cache_key}/                 — one published, verified entry
            .pinport-entry.json      — FetchedArtifact metadata (root relative)
            source/                  — extracted archive contents
        .staging-XXXXXXXX/           — in-flight fetch, never read by lookups

An entry is built entirely inside a staging directory and renamed into
place with ``os.replace``. A directory at ``{cache_key}`` therefore always
holds a complete, verified entry. If two writers race for the same key the
first rename wins and the loser discards its staging copy. An entry whose
metadata is missing or unreadable is moved aside and replaced on the next
fetch. Staging directories abandoned by a killed process are pruned once
they are older than ``stale_staging_seconds``.
"""

from __future__ import annotations

import json
import logging
import lzma
import os
import shutil
import tarfile
import tempfile
import time
import zipfile
import zlib
from collections.abc import Iterator
from pathlib import Path, PurePosixPath
from typing import Any
from urllib.parse import urlparse
from urllib.request import url2pathname

import requests

from pinport.core.errors import ExtractionError, FetchError, IntegrityError
from pinport.core.hasher import DEFAULT_ALGORITHM, Digest, new_hasher
from pinport.models.artifact import FetchedArtifact
from pinport.models.pin import PinRecord

logger = logging.getLogger(__name__)

METADATA_FILE = ".pinport-entry.json"
STAGING_PREFIX = ".staging-"
SOURCE_DIR = "source"
ENTRY_MODE = 0o755
STALE_STAGING_SECONDS = 24 * 60 * 60


class ArchiveFetcher:
    """Fetches pinned archives into a shared, content-keyed local cache.

    Parameters
    ----------
    cache_dir:
        Root of the on-disk archive cache.
    timeout:
        Upper bound, in seconds, on a single download. Applied both as the
        socket timeout and as a wall-clock deadline for the whole transfer.
    chunk_size:
        Streaming read size in bytes.
    stale_staging_seconds:
        Age after which a leftover staging directory is removed.
    session:
        Optional ``requests.Session`` (or compatible object exposing
        ``get``). A fresh session is created when omitted.
    """

    def __init__(
        self,
        cache_dir: Path | str,
        *,
        timeout: float = 60.0,
        chunk_size: int = 1024 * 1024,
        user_agent: str = "pinport/0.1",
        stale_staging_seconds: float = STALE_STAGING_SECONDS,
        session: Any | None = None,
    ) -> None:
        self._cache_dir = Path(cache_dir).expanduser()
        self._timeout = timeout
        self._chunk_size = chunk_size
        self._stale_staging_seconds = stale_staging_seconds
        self._headers = {"User-Agent": user_agent}
        self._session = session if session is not None else requests.Session()

    @classmethod
    def from_settings(cls, settings: Any | None = None, **overrides: Any) -> ArchiveFetcher:
        """Build a fetcher from :class:`~pinport.config.PinportSettings`."""
        if settings is None:
            from pinport.config import settings as default_settings

            settings = default_settings
        kwargs: dict[str, Any] = {
            "cache_dir": settings.cache_dir,
            "timeout": settings.fetch_timeout_seconds,
            "chunk_size": settings.chunk_size,
            "user_agent": settings.user_agent,
            "stale_staging_seconds": settings.stale_staging_seconds,
        }
        kwargs.update(overrides)
        return cls(**kwargs)

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    # ------------------------------------------------------------------
    # Cache lookup
    # ------------------------------------------------------------------

    def cache_key(self, record: PinRecord) -> str:
        """Cache key: the recorded digest when pinned, else the revision."""
        return record.cache_key

    def entry_path(self, record: PinRecord) -> Path:
        """Directory a published entry for ``record`` lives in."""
        return self._cache_dir / self.cache_key(record)

    def lookup(self, record: PinRecord) -> FetchedArtifact | None:
        """Return the cached artifact for ``record`` without touching the network."""
        return self._read_entry(self.entry_path(record))

    # ------------------------------------------------------------------
    # Fetch
    # ------------------------------------------------------------------

    def fetch(self, record: PinRecord) -> FetchedArtifact:
        """Return a verified, extracted artifact for ``record``.

        Serves from the cache when an entry exists; otherwise downloads,
        verifies, extracts, and atomically publishes a new entry.

        Raises
        ------
        FetchError
            Network failure, HTTP error status, timeout, or cache write failure.
        IntegrityError
            The archive digest differs from ``record.integrity_hash``.
        ExtractionError
            The archive is corrupt, unsupported, or unsafe.
        """
        cached = self.lookup(record)
        if cached is not None:
            logger.debug("Cache hit for %s at %s", record.source_url, cached.path)
            return cached

        try:
            self._cache_dir.mkdir(parents=True, exist_ok=True)
            self.prune_stale_staging()
            staging = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=self._cache_dir))
        except OSError as exc:
            raise FetchError(f"Cannot prepare cache directory {self._cache_dir}: {exc}") from exc

        try:
            expected = record.digest
            algorithm = expected.algorithm if expected is not None else DEFAULT_ALGORITHM

            archive = staging / "archive"
            actual, size = self._download(record.source_url, archive, algorithm)

            if expected is not None and actual.hexdigest != expected.hexdigest:
                raise IntegrityError(
                    f"Integrity check failed for {record.source_url}: "
                    f"expected {expected}, got {actual}"
                )

            root = self._extract(archive, staging / SOURCE_DIR)
            archive.unlink()

            artifact = FetchedArtifact(
                path=root.relative_to(staging),
                cache_key=self.cache_key(record),
                content_address=str(actual),
                source_url=record.source_url,
                revision=record.revision,
                size_bytes=size,
            )
            (staging / METADATA_FILE).write_text(
                artifact.model_dump_json(indent=2), encoding="utf-8"
            )
            # mkdtemp creates 0700; published entries are shared.
            os.chmod(staging, ENTRY_MODE)
            return self._publish(record, staging)
        finally:
            if staging.exists():
                shutil.rmtree(staging, ignore_errors=True)

    # ------------------------------------------------------------------
    # Download
    # ------------------------------------------------------------------

    def _download(self, url: str, dest: Path, algorithm: str) -> tuple[Digest, int]:
        """Stream ``url`` into ``dest``, hashing as it goes."""
        hasher = new_hasher(algorithm)
        size = 0
        logger.info("Fetching %s", url)
        try:
            with dest.open("wb") as fh:
                for chunk in self._iter_source(url):
                    fh.write(chunk)
                    hasher.update(chunk)
                    size += len(chunk)
        except OSError as exc:
            raise FetchError(f"Cannot write download of {url} to cache: {exc}") from exc

        digest = Digest(algorithm, hasher.hexdigest())
        logger.info("Fetched %s (%d bytes, %s)", url, size, digest)
        return digest, size

    def _iter_source(self, url: str) -> Iterator[bytes]:
        parsed = urlparse(url)
        if parsed.scheme in ("", "file"):
            yield from self._iter_local(
                Path(url2pathname(parsed.path)) if parsed.scheme else Path(url)
            )
            return
        if parsed.scheme not in ("http", "https"):
            raise FetchError(f"Unsupported URL scheme {parsed.scheme!r} in {url}")
        yield from self._iter_http(url)

    def _iter_local(self, path: Path) -> Iterator[bytes]:
        try:
            with path.open("rb") as fh:
                while chunk := fh.read(self._chunk_size):
                    yield chunk
        except FileNotFoundError as exc:
            raise FetchError(f"Source archive not found: {path}") from exc
        except OSError as exc:
            raise FetchError(f"Cannot read source archive {path}: {exc}") from exc

    def _iter_http(self, url: str) -> Iterator[bytes]:
        deadline = time.monotonic() + self._timeout
        try:
            with self._session.get(
                url, headers=self._headers, stream=True, timeout=self._timeout
            ) as response:
                response.raise_for_status()
                for chunk in response.iter_content(chunk_size=self._chunk_size):
                    if time.monotonic() > deadline:
                        raise FetchError(
                            f"Timed out after {self._timeout:g}s fetching {url}"
                        )
                    if chunk:
                        yield chunk
        except requests.Timeout as exc:
            raise FetchError(f"Timed out after {self._timeout:g}s fetching {url}") from exc
        except requests.HTTPError as exc:
            raise FetchError(f"HTTP error fetching {url}: {exc}") from exc
        except requests.RequestException as exc:
            raise FetchError(f"Network error fetching {url}: {exc}") from exc

    # ------------------------------------------------------------------
    # Extract
    # ------------------------------------------------------------------

    @staticmethod
    def _extract(archive: Path, dest: Path) -> Path:
        """Unpack ``archive`` into ``dest`` and return the artifact root.

        A single top-level directory becomes the root, as with tarballs
        that wrap their contents in ``<name>-<rev>/``.
        """
        dest.mkdir()
        try:
            if tarfile.is_tarfile(archive):
                with tarfile.open(archive, "r:*") as tar:
                    tar.extractall(dest, filter="data")
            elif zipfile.is_zipfile(archive):
                with zipfile.ZipFile(archive) as zf:
                    for name in zf.namelist():
                        parts = PurePosixPath(name).parts
                        if name.startswith("/") or ".." in parts:
                            raise ExtractionError(
                                f"Refusing unsafe zip member {name!r} in {archive.name}"
                            )
                    zf.extractall(dest)
            else:
                raise ExtractionError("Unsupported or corrupt archive format")
        except (tarfile.TarError, zipfile.BadZipFile, EOFError, zlib.error, lzma.LZMAError) as exc:
            raise ExtractionError(f"Cannot extract archive: {exc}") from exc
        except OSError as exc:
            raise ExtractionError(f"Cannot write extracted archive: {exc}") from exc

        entries = list(dest.iterdir())
        if len(entries) == 1 and entries[0].is_dir():
            return entries[0]
        return dest

    # ------------------------------------------------------------------
    # Publish
    # ------------------------------------------------------------------

    def _publish(self, record: PinRecord, staging: Path) -> FetchedArtifact:
        final = self.entry_path(record)
        try:
            os.replace(staging, final)
        except OSError as exc:
            existing = self._read_entry(final)
            if existing is not None:
                logger.info(
                    "Cache entry %s was published concurrently; using existing entry.",
                    final.name,
                )
                return existing
            self._evict_broken(final)
            try:
                os.replace(staging, final)
            except OSError as retry_exc:
                existing = self._read_entry(final)
                if existing is None:
                    raise FetchError(
                        f"Cannot publish cache entry {final}: {retry_exc}"
                    ) from exc
                return existing

        artifact = self._read_entry(final)
        if artifact is None:
            raise FetchError(f"Published cache entry {final} is unreadable")
        logger.info("Cached %s at %s", record.source_url, artifact.path)
        return artifact

    def _evict_broken(self, entry: Path) -> None:
        """Move an entry without readable metadata aside and delete it.

        The rename keeps concurrent lookups from seeing a half-deleted tree.
        """
        graveyard = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=self._cache_dir))
        try:
            os.replace(entry, graveyard / entry.name)
        except FileNotFoundError:
            # Another writer already evicted it.
            pass
        except OSError as exc:
            shutil.rmtree(graveyard, ignore_errors=True)
            raise FetchError(f"Cannot evict broken cache entry {entry}: {exc}") from exc
        logger.warning("Evicted cache entry %s with unreadable metadata", entry.name)
        shutil.rmtree(graveyard, ignore_errors=True)

    def prune_stale_staging(self) -> list[Path]:
        """Remove staging directories older than ``stale_staging_seconds``.

        Returns the removed paths. Younger staging directories may belong to
        a fetch in progress and are left alone.
        """
        if not self._cache_dir.is_dir():
            return []
        cutoff = time.time() - self._stale_staging_seconds
        removed: list[Path] = []
        for candidate in self._cache_dir.glob(f"{STAGING_PREFIX}*"):
            try:
                if not candidate.is_dir() or candidate.stat().st_mtime >= cutoff:
                    continue
            except FileNotFoundError:
                continue
            shutil.rmtree(candidate, ignore_errors=True)
            logger.info("Pruned stale staging directory %s", candidate.name)
            removed.append(candidate)
        return removed

    @staticmethod
    def _read_entry(entry: Path) -> FetchedArtifact | None:
        meta_path = entry / METADATA_FILE
        if not meta_path.is_file():
            return None
        try:
            raw = json.loads(meta_path.read_text(encoding="utf-8"))
            stored = FetchedArtifact(**raw)
        except (OSError, ValueError, TypeError):
            logger.warning("Ignoring unreadable cache entry metadata at %s", meta_path)
            return None
        return stored.model_copy(update={"path": entry / stored.path})
