"""Terminal results of issuance, revocation, and reconciliation."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from certforge.core.errors import (
    ERROR_TYPES,
    AmbiguousMintResult,
    CertforgeError,
    LedgerConfirmationTimeout,
)
from certforge.models.ledger import HydratedCredential, OnChainCredential
from certforge.models.progress import IssuanceStage


class IssuanceOutcome(str, Enum):
    SUCCESS = "success"
    AMBIGUOUS = "ambiguous"  # confirmed, token id not recoverable
    FAILED = "failed"


class IssuanceResult(BaseModel):
    """What one issuance call produced.

    On failure the content ids and tx hash already obtained are kept, so
    the caller can retry only the step that failed.
    """

    model_config = ConfigDict(frozen=True)

    outcome: IssuanceOutcome
    token_id: int | None = None
    tx_hash: str | None = None
    image_content_id: str | None = None
    image_uri: str | None = None
    metadata_content_id: str | None = None
    metadata_uri: str | None = None
    failed_stage: IssuanceStage | None = None
    error: str | None = None
    error_type: str | None = None

    @property
    def success(self) -> bool:
        return self.outcome == IssuanceOutcome.SUCCESS

    @property
    def content_pinned(self) -> bool:
        """True when the metadata is on storage even if minting failed."""
        return self.metadata_uri is not None

    def raise_for_outcome(self) -> None:
        """Raise the typed error behind a non-successful outcome."""
        if self.outcome == IssuanceOutcome.AMBIGUOUS:
            raise AmbiguousMintResult(
                f"Transaction {self.tx_hash} confirmed but no token id was emitted",
                tx_hash=self.tx_hash or "",
            )
        if self.outcome == IssuanceOutcome.FAILED:
            error_cls = ERROR_TYPES.get(self.error_type or "", CertforgeError)
            raise _rebuild_error(error_cls, self.error or "issuance failed", self.tx_hash)


def _rebuild_error(
    error_cls: type[CertforgeError], message: str, tx_hash: str | None
) -> CertforgeError:
    if issubclass(error_cls, LedgerConfirmationTimeout):
        return error_cls(message, tx_hash=tx_hash or "")
    return error_cls(message)


class RevocationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    token_id: int
    success: bool
    tx_hash: str | None = None
    error: str | None = None
    error_type: str | None = None


class OwnershipStats(BaseModel):
    """Aggregate view over one scanned set. Never maintained incrementally."""

    model_config = ConfigDict(frozen=True)

    total_count: int = 0
    revoked_count: int = 0
    valid_count: int = 0
    on_ledger_count: int = 0
    hydrated_count: int = 0
    verified_percent: float = 0.0

    @classmethod
    def from_credentials(cls, credentials: list[OnChainCredential]) -> OwnershipStats:
        total = len(credentials)
        valid = sum(1 for c in credentials if c.is_valid and not c.revoked)
        hydrated = sum(
            1 for c in credentials
            if isinstance(c, HydratedCredential) and c.metadata is not None
        )
        return cls(
            total_count=total,
            revoked_count=sum(1 for c in credentials if c.revoked),
            valid_count=valid,
            on_ledger_count=sum(1 for c in credentials if c.metadata_uri),
            hydrated_count=hydrated,
            verified_percent=round(valid * 100.0 / total, 2) if total else 0.0,
        )


class OwnershipReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    owner: str
    credentials: list[HydratedCredential]
    stats: OwnershipStats
