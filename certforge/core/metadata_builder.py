"""Deterministic metadata construction.

``build_metadata`` is a pure function: no I/O, no clock, no randomness.
Identical inputs must produce byte-identical documents, because the
content store deduplicates by hash and a retried issuance relies on
getting the same content identifier back.

Attribute order is fixed: Issuer, Recipient, Issue Date, [Expiration
Date], [Category], [Credential ID], then one ``Skill n`` per skill in
input order.
"""

from __future__ import annotations

from certforge.models.credentials import CredentialInput
from certforge.models.metadata import (
    METADATA_FORMAT_VERSION,
    CertificateInfo,
    CredentialMetadata,
    MetadataAttribute,
    MetadataProperties,
    PartyInfo,
)

DATE_DISPLAY_TYPE = "date"


def content_uri(content_id: str, scheme: str = "ipfs") -> str:
    """Canonical persisted reference for a content id: ``scheme://id``."""
    return f"{scheme}://{content_id}"


def build_attributes(data: CredentialInput) -> list[MetadataAttribute]:
    """Build the trait list in its fixed order."""
    attributes = [
        MetadataAttribute(trait_type="Issuer", value=data.issuer_name),
        MetadataAttribute(trait_type="Recipient", value=data.recipient_name),
        MetadataAttribute(
            trait_type="Issue Date",
            value=data.issue_date.isoformat(),
            display_type=DATE_DISPLAY_TYPE,
        ),
    ]
    if data.expiration_date:
        attributes.append(
            MetadataAttribute(
                trait_type="Expiration Date",
                value=data.expiration_date.isoformat(),
                display_type=DATE_DISPLAY_TYPE,
            )
        )
    if data.category:
        attributes.append(MetadataAttribute(trait_type="Category", value=data.category))
    if data.credential_id:
        attributes.append(
            MetadataAttribute(trait_type="Credential ID", value=data.credential_id)
        )
    for index, skill in enumerate(data.skills, start=1):
        attributes.append(MetadataAttribute(trait_type=f"Skill {index}", value=skill))
    return attributes


def build_metadata(
    data: CredentialInput,
    image_content_id: str,
    *,
    scheme: str = "ipfs",
    external_url_base: str | None = None,
) -> CredentialMetadata:
    """Construct the metadata document for a credential.

    Parameters
    ----------
    data:
        The caller's credential input.
    image_content_id:
        Content id of the already-pinned certificate image.
    scheme:
        Access-protocol scheme used for the ``image`` reference.
    external_url_base:
        When set, ``external_url`` becomes ``{base}/{credential_id or "view"}``.
    """
    external_url = None
    if external_url_base:
        external_url = f"{external_url_base.rstrip('/')}/{data.credential_id or 'view'}"

    properties = MetadataProperties(
        issuer=PartyInfo(name=data.issuer_name, address=data.issuer_address),
        recipient=PartyInfo(name=data.recipient_name, address=data.recipient_address),
        certificate=CertificateInfo(
            issue_date=data.issue_date.isoformat(),
            expiration_date=data.expiration_date.isoformat() if data.expiration_date else None,
            credential_id=data.credential_id,
            category=data.category,
            skills=list(data.skills) if data.skills else None,
        ),
        version=METADATA_FORMAT_VERSION,
    )

    return CredentialMetadata(
        name=data.name,
        description=data.description,
        image=content_uri(image_content_id, scheme),
        external_url=external_url,
        attributes=build_attributes(data),
        properties=properties,
    )
