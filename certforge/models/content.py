"""Content store upload records."""

from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ContentRecord(BaseModel):
    """Result of pinning content to the store.

    Accepts both the pinning API's native response keys
    (``IpfsHash``/``PinSize``/``Timestamp``) and the generic
    ``contentId``/``size``/``timestamp`` shape.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    content_id: str = Field(validation_alias=AliasChoices("IpfsHash", "contentId", "content_id"))
    size: int = Field(default=0, validation_alias=AliasChoices("PinSize", "size"))
    timestamp: datetime | None = Field(
        default=None, validation_alias=AliasChoices("Timestamp", "timestamp")
    )
    is_duplicate: bool = Field(
        default=False, validation_alias=AliasChoices("isDuplicate", "is_duplicate")
    )
