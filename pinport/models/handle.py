"""Import handle: what the external evaluator receives."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, InstanceOf

from pinport.models.pin import PinRecord


class ImportHandle(BaseModel):
    """Import the artifact at ``artifact_path`` with ``config``, applying
    ``overlays`` in order.

    The handle only describes the import; evaluating it is the consumer's
    job.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    artifact_path: Path
    config: InstanceOf[Mapping]
    overlays: tuple[Any, ...] = ()
    pin: PinRecord | None = None
