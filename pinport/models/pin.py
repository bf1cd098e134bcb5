"""Pin record model: the exact location and version of a remote archive."""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from pinport.core.hasher import Digest, parse_integrity, revision_key


class PinRecord(BaseModel):
    """An immutable pin loaded from a pin file.

    File keys are ``sourceURL``, ``revision``, ``integrityHash`` and an
    optional ``name``. The shorter ``url``/``rev``/``sha256`` keys are
    accepted as well. Whatever the key, the hash is the digest of the
    downloaded archive bytes. A Nix ``fetchTarball`` sha256 hashes the
    unpacked tree instead and cannot be used: its base32 form is rejected
    here and a hex NAR hash would fail the integrity check at fetch time.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    source_url: str = Field(
        validation_alias=AliasChoices("sourceURL", "source_url", "url"),
        min_length=1,
    )
    revision: str = Field(
        validation_alias=AliasChoices("revision", "rev"),
        min_length=1,
    )
    integrity_hash: str | None = Field(
        default=None,
        validation_alias=AliasChoices("integrityHash", "integrity_hash", "sha256"),
    )
    name: str | None = None

    @field_validator("source_url", "revision")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()

    @field_validator("integrity_hash")
    @classmethod
    def _parseable_digest(cls, value: str | None) -> str | None:
        if value is None:
            return None
        parse_integrity(value)
        return value.strip()

    @property
    def digest(self) -> Digest | None:
        """The recorded integrity hash, parsed; ``None`` when not pinned."""
        if self.integrity_hash is None:
            return None
        return parse_integrity(self.integrity_hash)

    @property
    def cache_key(self) -> str:
        """Directory name of this pin's entry in the archive cache."""
        digest = self.digest
        if digest is not None:
            return digest.cache_token
        return revision_key(self.source_url, self.revision)
