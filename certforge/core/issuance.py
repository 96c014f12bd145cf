"""Issuance orchestrator: content store -> metadata -> content store -> ledger.

Stages: idle -> uploading -> minting -> confirming -> complete, with
error reachable from every non-terminal stage. There is no rollback and
no retry here: when minting fails after the uploads succeeded, the pinned
content stays pinned and its references are returned so the caller can
retry only the ledger step (``mint_existing``). A confirmation wait that
times out can be resumed with ``confirm_pending`` without resubmitting.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from web3 import Web3

from certforge.config import CertforgeConfig
from certforge.core.errors import (
    CertforgeError,
    CredentialValidationError,
    LedgerConfirmationTimeout,
)
from certforge.core.interfaces import ContentStore, LedgerWriter
from certforge.core.metadata_builder import build_metadata
from certforge.core.progress_tracker import ProgressCallback, ProgressTracker
from certforge.models.credentials import CredentialInput, ImageSource
from certforge.models.progress import (
    CompleteProgress,
    ConfirmingProgress,
    ErrorProgress,
    IdleProgress,
    IssuanceStage,
    MintingProgress,
    UploadingProgress,
    UploadStep,
)
from certforge.models.results import IssuanceOutcome, IssuanceResult

logger = logging.getLogger(__name__)


def validate_issuance_input(data: CredentialInput, image: ImageSource) -> None:
    """Reject input that must never reach the network.

    Raises ``CredentialValidationError`` listing every missing field.
    """
    missing = [
        field
        for field, value in (
            ("name", data.name),
            ("issuer_name", data.issuer_name),
            ("recipient_name", data.recipient_name),
            ("recipient_address", data.recipient_address),
            ("image.location", image.location),
        )
        if not value or not value.strip()
    ]
    if missing:
        raise CredentialValidationError(
            f"Missing required fields: {', '.join(missing)}", missing_fields=missing
        )
    if not Web3.is_address(data.recipient_address):
        raise CredentialValidationError(
            f"Recipient address is not a valid ledger address: {data.recipient_address}",
            missing_fields=["recipient_address"],
        )


def _slug(name: str) -> str:
    return re.sub(r"\s+", "_", name.strip())


class IssuanceOrchestrator:
    """Sequences one credential issuance and reports its progress.

    Parameters
    ----------
    store:
        Content store used for the image and the metadata document.
    ledger:
        Ledger client whose signer pays for and sends the mint.
    config:
        Supplies the reference scheme and the external URL base.
    """

    def __init__(
        self,
        store: ContentStore,
        ledger: LedgerWriter,
        *,
        config: CertforgeConfig | None = None,
    ) -> None:
        self._store = store
        self._ledger = ledger
        self._config = config or CertforgeConfig()

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def issue(
        self,
        data: CredentialInput,
        image: ImageSource,
        on_progress: ProgressCallback | None = None,
    ) -> IssuanceResult:
        """Upload the image and metadata, mint, and wait for confirmation."""
        tracker = ProgressTracker(on_progress)
        tracker.emit(IdleProgress(message="Starting issuance..."))
        partial: dict[str, Any] = {}
        stage = IssuanceStage.IDLE

        try:
            validate_issuance_input(data, image)

            stage = IssuanceStage.UPLOADING
            tracker.emit(UploadingProgress(
                step=UploadStep.PREPARING,
                percent=10,
                message="Preparing certificate for upload...",
            ))
            tracker.emit(UploadingProgress(
                step=UploadStep.IMAGE,
                percent=30,
                message="Uploading certificate image...",
            ))
            image_record = self._store.upload(
                image,
                name=f"cert_image_{_slug(data.name)}",
                keyvalues={
                    "type": "certificate_image",
                    "recipient": data.recipient_address,
                },
            )
            partial["image_content_id"] = image_record.content_id
            partial["image_uri"] = self._store.to_uri(image_record.content_id)

            tracker.emit(UploadingProgress(
                step=UploadStep.METADATA_BUILD,
                percent=60,
                message="Creating certificate metadata...",
            ))
            metadata = build_metadata(
                data,
                image_record.content_id,
                scheme=self._config.content_uri_scheme,
                external_url_base=self._config.external_url_base or None,
            )

            tracker.emit(UploadingProgress(
                step=UploadStep.METADATA,
                percent=80,
                message="Uploading metadata...",
            ))
            metadata_record = self._store.upload_document(
                metadata.to_document(),
                name=f"cert_metadata_{_slug(data.name)}",
                keyvalues={
                    "type": "certificate_metadata",
                    "recipient": data.recipient_address,
                    "imageHash": image_record.content_id,
                    "fingerprint": metadata.fingerprint(),
                },
            )
            partial["metadata_content_id"] = metadata_record.content_id
            partial["metadata_uri"] = self._store.to_uri(metadata_record.content_id)
        except CertforgeError as exc:
            return self._fail(tracker, stage, exc, partial)

        return self._mint(tracker, data.recipient_address, partial)

    def mint_existing(
        self,
        recipient_address: str,
        metadata_uri: str,
        on_progress: ProgressCallback | None = None,
    ) -> IssuanceResult:
        """Mint against metadata that is already pinned (ledger-only retry)."""
        tracker = ProgressTracker(on_progress)
        tracker.emit(IdleProgress(message="Starting mint..."))
        partial: dict[str, Any] = {"metadata_uri": metadata_uri}
        missing = [
            field
            for field, value in (
                ("recipient_address", recipient_address),
                ("metadata_uri", metadata_uri),
            )
            if not value or not value.strip()
        ]
        if missing:
            exc = CredentialValidationError(
                f"Missing required fields: {', '.join(missing)}", missing_fields=missing
            )
            return self._fail(tracker, IssuanceStage.IDLE, exc, partial)
        return self._mint(tracker, recipient_address, partial)

    def confirm_pending(
        self,
        tx_hash: str,
        *,
        metadata_uri: str | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> IssuanceResult:
        """Resume waiting for a mint submitted earlier."""
        tracker = ProgressTracker(on_progress)
        tracker.emit(IdleProgress(message="Resuming confirmation..."))
        partial: dict[str, Any] = {"metadata_uri": metadata_uri}
        if not tx_hash or not tx_hash.strip():
            exc = CredentialValidationError(
                "Missing required fields: tx_hash", missing_fields=["tx_hash"]
            )
            return self._fail(tracker, IssuanceStage.IDLE, exc, partial)
        partial["tx_hash"] = tx_hash
        return self._confirm(tracker, partial)

    # ------------------------------------------------------------------
    # Ledger steps
    # ------------------------------------------------------------------

    def _mint(
        self, tracker: ProgressTracker, recipient: str, partial: dict[str, Any]
    ) -> IssuanceResult:
        try:
            tracker.emit(MintingProgress(message="Preparing transaction..."))
            partial["tx_hash"] = self._ledger.submit_mint(recipient, partial["metadata_uri"])
        except CertforgeError as exc:
            return self._fail(tracker, IssuanceStage.MINTING, exc, partial)
        return self._confirm(tracker, partial)

    def _confirm(self, tracker: ProgressTracker, partial: dict[str, Any]) -> IssuanceResult:
        tx_hash = partial["tx_hash"]
        tracker.emit(ConfirmingProgress(
            tx_hash=tx_hash,
            message="Transaction submitted. Waiting for confirmation...",
        ))
        try:
            receipt = self._ledger.confirm_mint(tx_hash)
        except CertforgeError as exc:
            return self._fail(tracker, IssuanceStage.CONFIRMING, exc, partial)

        if receipt.is_ambiguous:
            tracker.emit(CompleteProgress(
                tx_hash=tx_hash,
                ambiguous=True,
                message="Transaction confirmed, but the token id could not be recovered.",
            ))
            logger.warning("Ambiguous mint: %s confirmed without a token id", tx_hash)
            return IssuanceResult(outcome=IssuanceOutcome.AMBIGUOUS, **partial)

        tracker.emit(CompleteProgress(
            tx_hash=tx_hash,
            token_id=receipt.token_id,
            message="Certificate minted successfully!",
        ))
        logger.info("Certificate minted: token %s in %s", receipt.token_id, tx_hash)
        return IssuanceResult(
            outcome=IssuanceOutcome.SUCCESS, token_id=receipt.token_id, **partial
        )

    # ------------------------------------------------------------------
    # Failure
    # ------------------------------------------------------------------

    def _fail(
        self,
        tracker: ProgressTracker,
        stage: IssuanceStage,
        exc: CertforgeError,
        partial: dict[str, Any],
    ) -> IssuanceResult:
        error_type = type(exc).__name__
        logger.error("Issuance failed during %s (%s): %s", stage.value, error_type, exc)
        tracker.emit(ErrorProgress(
            failed_stage=stage,
            error_type=error_type,
            tx_hash=partial.get("tx_hash"),
            message=_describe_failure(stage, exc, partial),
        ))
        return IssuanceResult(
            outcome=IssuanceOutcome.FAILED,
            failed_stage=stage,
            error=str(exc),
            error_type=error_type,
            **partial,
        )


def _describe_failure(stage: IssuanceStage, exc: CertforgeError, partial: dict[str, Any]) -> str:
    """Stage-aware, user-facing failure message."""
    if stage == IssuanceStage.IDLE:
        return f"Invalid credential input: {exc}"
    if stage == IssuanceStage.UPLOADING:
        return f"Upload to content storage failed: {exc}"
    if stage == IssuanceStage.MINTING:
        if partial.get("metadata_uri"):
            return (
                f"Your certificate is safe on storage ({partial['metadata_uri']}) "
                f"but minting failed: {exc}. Retry minting."
            )
        return f"Minting failed: {exc}"
    if isinstance(exc, LedgerConfirmationTimeout):
        return (
            f"Transaction {exc.tx_hash} was submitted but is not confirmed yet. "
            "It may still land; resume waiting instead of minting again."
        )
    return f"Transaction {partial.get('tx_hash')} failed: {exc}"
