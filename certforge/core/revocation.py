"""Revocation orchestrator.

Forwards to the ledger and reports the outcome. Whether the credential
is already revoked is the contract's decision, so no client-side check
is made: a second revoke surfaces the ledger's own rejection.
"""

from __future__ import annotations

import logging

from certforge.core.errors import CertforgeError
from certforge.core.interfaces import LedgerWriter
from certforge.models.results import RevocationResult

logger = logging.getLogger(__name__)


class RevocationOrchestrator:
    """Marks credentials invalid on the ledger.

    Revocation is irreversible; confirming intent with the user is the
    caller's responsibility.
    """

    def __init__(self, ledger: LedgerWriter) -> None:
        self._ledger = ledger

    def revoke(self, token_id: int) -> RevocationResult:
        logger.info("Revoking token %s", token_id)
        try:
            receipt = self._ledger.revoke(token_id)
        except CertforgeError as exc:
            logger.error("Revocation of token %s failed: %s", token_id, exc)
            return RevocationResult(
                token_id=token_id,
                success=False,
                tx_hash=getattr(exc, "tx_hash", None),
                error=str(exc),
                error_type=type(exc).__name__,
            )
        logger.info("Token %s revoked in %s", token_id, receipt.tx_hash)
        return RevocationResult(token_id=token_id, success=True, tx_hash=receipt.tx_hash)
