"""Error taxonomy for the issuance and reconciliation pipeline.

Clients raise these with the underlying transport message preserved
verbatim. Orchestrators catch ``CertforgeError`` and translate it into a
terminal progress snapshot plus a result object; nothing here retries.
"""

from __future__ import annotations


class CertforgeError(RuntimeError):
    """Base class for every pipeline error."""


class CredentialValidationError(CertforgeError):
    """Raised before any network call when required input is missing."""

    def __init__(self, message: str, missing_fields: list[str] | None = None) -> None:
        super().__init__(message)
        self.missing_fields = missing_fields or []


class StorageError(CertforgeError):
    """Raised when a content store upload, unpin, or fetch fails.

    ``status_code`` is ``None`` for transport failures (DNS, timeout,
    refused connection) and for missing credentials.
    """

    def __init__(self, message: str, *, status_code: int | None = None, detail: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class LedgerError(CertforgeError):
    """Base class for ledger failures."""


class LedgerSubmissionError(LedgerError):
    """Raised when a transaction is rejected or reverts."""


class LedgerConfirmationTimeout(LedgerError):
    """Raised when a submitted transaction is not observed in time.

    The transaction may still land; ``tx_hash`` lets the caller resume
    waiting without resubmitting.
    """

    def __init__(self, message: str, *, tx_hash: str) -> None:
        super().__init__(message)
        self.tx_hash = tx_hash


class LedgerReadError(LedgerError):
    """Raised when a view call fails (unknown token, RPC failure)."""


class AmbiguousMintResult(CertforgeError):
    """A mint confirmed but its token identifier could not be recovered."""

    def __init__(self, message: str, *, tx_hash: str) -> None:
        super().__init__(message)
        self.tx_hash = tx_hash


class ConfigurationError(CertforgeError):
    """Raised when a required setting (signing key, contract address) is absent."""


ERROR_TYPES: dict[str, type[CertforgeError]] = {
    cls.__name__: cls
    for cls in (
        CertforgeError,
        CredentialValidationError,
        StorageError,
        LedgerError,
        LedgerSubmissionError,
        LedgerConfirmationTimeout,
        LedgerReadError,
        AmbiguousMintResult,
        ConfigurationError,
    )
}
