"""Pin file reader — loads and validates a pin record from disk.

Pin files are TOML by default (``pinned.toml``); a ``.json`` suffix selects
JSON. Field names are ``sourceURL`` (required), ``revision`` (required),
``integrityHash`` and ``name`` (optional).
"""

from __future__ import annotations

import json
import logging
import tomllib
from pathlib import Path
from typing import Any

import pydantic

from pinport.core.errors import ParseError, ValidationError
from pinport.models.pin import PinRecord

logger = logging.getLogger(__name__)


class PinReader:
    """Reads pin files into immutable :class:`PinRecord` values."""

    def load(self, path: Path | str) -> PinRecord:
        """Load and validate the pin at ``path``.

        Raises
        ------
        ParseError
            If the file is missing, unreadable, or not well-formed.
        ValidationError
            If a required field is absent or a field value is invalid.
        """
        pin_path = Path(path)
        data = self._parse(pin_path)

        try:
            record = PinRecord.model_validate(data)
        except pydantic.ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
                for err in exc.errors()
            )
            raise ValidationError(f"Invalid pin file {pin_path}: {problems}") from exc

        logger.debug(
            "Loaded pin %s (revision=%s, integrity=%s)",
            record.source_url,
            record.revision,
            record.integrity_hash or "none",
        )
        return record

    @staticmethod
    def _parse(pin_path: Path) -> dict[str, Any]:
        try:
            text = pin_path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise ParseError(f"Pin file not found: {pin_path}") from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise ParseError(f"Cannot read pin file {pin_path}: {exc}") from exc

        try:
            if pin_path.suffix.lower() == ".json":
                data = json.loads(text)
            else:
                data = tomllib.loads(text)
        except (json.JSONDecodeError, tomllib.TOMLDecodeError) as exc:
            raise ParseError(f"Malformed pin file {pin_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ParseError(
                f"Pin file {pin_path} must hold a table/object, got {type(data).__name__}"
            )
        return data


def load_pin(path: Path | str) -> PinRecord:
    """Convenience wrapper around :meth:`PinReader.load`."""
    return PinReader().load(path)
