"""Ledger-resident credential records and transaction receipts."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from certforge.models.metadata import CredentialMetadata


class OnChainCredential(BaseModel):
    """A credential as recorded by the contract.

    ``token_id``, ``issuer`` and ``issued_at`` never change after mint;
    ``owner``, ``is_valid`` and ``revoked`` change only through ledger
    transactions.
    """

    model_config = ConfigDict(frozen=True)

    token_id: int
    owner: str
    issuer: str
    metadata_uri: str
    issued_at: int  # unix seconds
    is_valid: bool
    revoked: bool


class HydratedCredential(OnChainCredential):
    """An on-chain credential with its metadata document, when fetchable."""

    metadata: CredentialMetadata | None = None


class TxReceipt(BaseModel):
    """A confirmed transaction."""

    model_config = ConfigDict(frozen=True)

    tx_hash: str
    block_number: int | None = None
    status: int = 1


class MintReceipt(TxReceipt):
    """A confirmed mint; ``token_id`` is None when no event could be decoded."""

    token_id: int | None = None

    @property
    def is_ambiguous(self) -> bool:
        return self.token_id is None
