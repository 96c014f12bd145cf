"""Caller-supplied issuance inputs."""

from __future__ import annotations

import time
from datetime import date

from pydantic import BaseModel, ConfigDict


class CredentialInput(BaseModel):
    """Everything the caller knows about a credential before issuance.

    Required text fields may be empty here; the issuance orchestrator
    rejects empty ones before touching the network.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    issuer_name: str
    issuer_address: str | None = None
    recipient_name: str
    recipient_address: str
    issue_date: date
    expiration_date: date | None = None
    category: str | None = None
    credential_id: str | None = None
    skills: tuple[str, ...] = ()


class ImageSource(BaseModel):
    """A reference to the certificate image on the local filesystem."""

    model_config = ConfigDict(frozen=True)

    location: str
    mime_type: str = "image/png"
    display_name: str | None = None

    def upload_name(self) -> str:
        """File name sent with the multipart upload."""
        return self.display_name or f"certificate_{int(time.time())}.png"
