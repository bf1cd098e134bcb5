"""Composer — pairs a fetched artifact with a configuration and overlays.

Pure data assembly. The result is an :class:`ImportHandle` that an external
evaluator consumes; nothing here evaluates, merges, or applies overlays.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from pinport.models.artifact import FetchedArtifact
from pinport.models.handle import ImportHandle
from pinport.models.pin import PinRecord


@runtime_checkable
class Evaluator(Protocol):
    """The downstream consumer of an :class:`ImportHandle`."""

    def __call__(self, handle: ImportHandle) -> Any:
        """Import ``handle.artifact_path`` with its config and overlays."""
        ...


def compose(
    artifact: FetchedArtifact | Path | str,
    config: Mapping[str, Any] | None = None,
    overlays: Iterable[Any] = (),
    *,
    pin: PinRecord | None = None,
) -> ImportHandle:
    """Describe "import ``artifact`` with ``config``, applying ``overlays`` in order".

    ``config`` is shallow-copied with its own type (an ``OrderedDict`` stays
    an ``OrderedDict``) and ``overlays`` is copied into a tuple. Later changes
    to the caller's objects do not reach the handle, and the handle never
    writes back to them.
    """
    path = artifact.path if isinstance(artifact, FetchedArtifact) else Path(artifact)
    return ImportHandle(
        artifact_path=path,
        config=copy.copy(config) if config is not None else {},
        overlays=tuple(overlays),
        pin=pin,
    )
