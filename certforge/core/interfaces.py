"""Collaborator protocols the orchestrators depend on.

``ContentStoreClient`` and ``LedgerClient`` satisfy these without
modification; tests supply in-memory implementations.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from certforge.models.content import ContentRecord
from certforge.models.credentials import ImageSource
from certforge.models.ledger import MintReceipt, OnChainCredential, TxReceipt


@runtime_checkable
class ContentStore(Protocol):
    """Content-addressed storage as seen by the pipeline."""

    def upload(
        self,
        image: ImageSource,
        *,
        name: str | None = None,
        keyvalues: dict[str, str] | None = None,
    ) -> ContentRecord: ...

    def upload_document(
        self,
        document: dict[str, Any],
        *,
        name: str | None = None,
        keyvalues: dict[str, str] | None = None,
    ) -> ContentRecord: ...

    def fetch_document(self, reference: str) -> dict[str, Any]: ...

    def to_uri(self, content_id: str) -> str: ...


@runtime_checkable
class LedgerReader(Protocol):
    """View calls used by reconciliation."""

    def total_supply(self) -> int: ...

    def owner_of(self, token_id: int) -> str: ...

    def get_info(self, token_id: int) -> OnChainCredential: ...


@runtime_checkable
class LedgerWriter(Protocol):
    """State-changing calls used by issuance and revocation."""

    def submit_mint(self, recipient: str, metadata_uri: str) -> str: ...

    def confirm_mint(self, tx_hash: str) -> MintReceipt: ...

    def revoke(self, token_id: int) -> TxReceipt: ...
