"""ERC-721 style metadata document for a credential.

Field names inside ``properties.certificate`` and the attribute entries
follow the published JSON shape (camelCase, ``trait_type``), so the
models serialize by alias.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from certforge.core.hasher import canonical_json_bytes, sha256_hex

METADATA_FORMAT_VERSION = "1.0.0"


class MetadataAttribute(BaseModel):
    """A single trait/value pair."""

    model_config = ConfigDict(frozen=True)

    trait_type: str
    value: str | int | float
    display_type: str | None = None


class PartyInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = ""
    address: str | None = None


class CertificateInfo(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    issue_date: str = Field(default="", alias="issueDate")
    expiration_date: str | None = Field(default=None, alias="expirationDate")
    credential_id: str | None = Field(default=None, alias="credentialId")
    category: str | None = None
    skills: list[str] | None = None


class MetadataProperties(BaseModel):
    model_config = ConfigDict(frozen=True)

    issuer: PartyInfo = PartyInfo()
    recipient: PartyInfo = PartyInfo()
    certificate: CertificateInfo = CertificateInfo()
    version: str = METADATA_FORMAT_VERSION


class CredentialMetadata(BaseModel):
    """The canonical metadata document pinned for each credential.

    Once uploaded it is immutable: any change yields a new content id.
    Unknown keys are ignored so documents written by other tools still
    parse during reconciliation.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    description: str = ""
    image: str
    external_url: str | None = None
    background_color: str | None = None
    animation_url: str | None = None
    attributes: list[MetadataAttribute] = []
    properties: MetadataProperties | None = None

    def to_document(self) -> dict[str, Any]:
        """JSON-ready dict with ``None`` fields omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def canonical_bytes(self) -> bytes:
        return canonical_json_bytes(self.to_document())

    def fingerprint(self) -> str:
        """"sha256:<hex>" of the canonical bytes; equal for identical builds."""
        return f"sha256:{sha256_hex(self.canonical_bytes())}"

    def attribute(self, trait_type: str) -> MetadataAttribute | None:
        """Return the first attribute with the given trait name."""
        for attr in self.attributes:
            if attr.trait_type == trait_type:
                return attr
        return None
