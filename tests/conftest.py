"""Shared test fixtures for Pinport."""

from __future__ import annotations

import io
import tarfile
import zipfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import requests

from pinport.core.archive_fetcher import ArchiveFetcher
from pinport.models.pin import PinRecord

SAMPLE_URL = "https://example.test/archive.tar"


# ---------------------------------------------------------------------------
# Fake HTTP layer — stands in for requests.Session
# ---------------------------------------------------------------------------


class FakeResponse:
    """Minimal streaming response compatible with ``requests.Response``."""

    def __init__(self, body: bytes, status_code: int = 200) -> None:
        self._body = body
        self.status_code = status_code

    def __enter__(self) -> FakeResponse:
        return self

    def __exit__(self, *exc: Any) -> None:
        return None

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error")

    def iter_content(self, chunk_size: int = 1):
        for start in range(0, len(self._body), chunk_size):
            yield self._body[start:start + chunk_size]


class FakeSession:
    """Serves canned bodies by URL and records every ``get`` call."""

    def __init__(self) -> None:
        self.routes: dict[str, FakeResponse | Exception] = {}
        self.calls: list[dict[str, Any]] = []

    def serve(self, url: str, body: bytes, status_code: int = 200) -> None:
        self.routes[url] = FakeResponse(body, status_code)

    def fail(self, url: str, exc: Exception) -> None:
        self.routes[url] = exc

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"url": url, **kwargs})
        route = self.routes.get(url)
        if route is None:
            raise requests.ConnectionError(f"No route to {url}")
        if isinstance(route, Exception):
            raise route
        return route


# ---------------------------------------------------------------------------
# Archive builders
# ---------------------------------------------------------------------------


def build_tar(files: dict[str, bytes], mode: str = "w") -> bytes:
    """Build an in-memory tar archive from a name -> content mapping."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode=mode) as tar:
        for name, content in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(content)
            tar.addfile(info, io.BytesIO(content))
    return buf.getvalue()


def build_zip(files: dict[str, bytes]) -> bytes:
    """Build an in-memory zip archive from a name -> content mapping."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, content in files.items():
            zf.writestr(name, content)
    return buf.getvalue()


@pytest.fixture
def make_tar() -> Callable[..., bytes]:
    """Factory fixture: build a tar archive in memory."""
    return build_tar


@pytest.fixture
def make_zip() -> Callable[..., bytes]:
    """Factory fixture: build a zip archive in memory."""
    return build_zip


@pytest.fixture
def sample_tar() -> bytes:
    """A tarball wrapping its contents in a single top-level directory."""
    return build_tar({
        "pkgs-abc123/default.nix": b"{ config, overlays }: { }\n",
        "pkgs-abc123/lib/util.nix": b"{ }\n",
    })


@pytest.fixture
def session() -> FakeSession:
    """Provide a fresh FakeSession with no routes."""
    return FakeSession()


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    """Provide a cache directory path (not yet created)."""
    return tmp_path / "cache"


@pytest.fixture
def fetcher(cache_dir: Path, session: FakeSession) -> ArchiveFetcher:
    """Provide an ArchiveFetcher wired to the fake session."""
    return ArchiveFetcher(cache_dir, timeout=5.0, chunk_size=64, session=session)


@pytest.fixture
def sample_pin() -> PinRecord:
    """The unhashed pin used throughout the fetch scenarios."""
    return PinRecord(sourceURL=SAMPLE_URL, revision="abc123")


@pytest.fixture
def write_pin(tmp_path: Path) -> Callable[..., Path]:
    """Factory fixture: write pin file text to disk and return its path."""

    def _factory(text: str, name: str = "pinned.toml") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _factory
