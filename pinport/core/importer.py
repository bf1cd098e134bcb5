"""Pinned import pipeline: PinReader -> ArchiveFetcher -> Composer -> evaluator."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from pinport.core.archive_fetcher import ArchiveFetcher
from pinport.core.composer import Evaluator, compose
from pinport.core.pin_reader import PinReader
from pinport.models.handle import ImportHandle

logger = logging.getLogger(__name__)


def import_pinned(
    pin_path: Path | str,
    *,
    config: Mapping[str, Any] | None = None,
    overlays: Iterable[Any] = (),
    fetcher: ArchiveFetcher | None = None,
    evaluator: Evaluator | None = None,
) -> ImportHandle | Any:
    """Load the pin at ``pin_path``, fetch its archive, and compose the import.

    With no ``evaluator`` the :class:`ImportHandle` is returned; otherwise
    the handle is passed to ``evaluator`` and its result returned. An empty
    config and no overlays are used unless given.
    """
    record = PinReader().load(pin_path)
    fetcher = fetcher or ArchiveFetcher.from_settings()
    artifact = fetcher.fetch(record)
    handle = compose(artifact, config, overlays, pin=record)

    if evaluator is None:
        return handle
    logger.debug("Handing %s to evaluator %r", handle.artifact_path, evaluator)
    return evaluator(handle)
