"""certforge data models: all Pydantic v2, all frozen (immutable)."""

from certforge.models.content import ContentRecord
from certforge.models.credentials import CredentialInput, ImageSource
from certforge.models.ledger import (
    HydratedCredential,
    MintReceipt,
    OnChainCredential,
    TxReceipt,
)
from certforge.models.metadata import (
    METADATA_FORMAT_VERSION,
    CertificateInfo,
    CredentialMetadata,
    MetadataAttribute,
    MetadataProperties,
    PartyInfo,
)
from certforge.models.progress import (
    TERMINAL_STAGES,
    VALID_TRANSITIONS,
    CompleteProgress,
    ConfirmingProgress,
    ErrorProgress,
    IdleProgress,
    IssuanceProgress,
    IssuanceStage,
    MintingProgress,
    UploadingProgress,
    UploadStep,
)
from certforge.models.results import (
    IssuanceOutcome,
    IssuanceResult,
    OwnershipReport,
    OwnershipStats,
    RevocationResult,
)

__all__ = [
    # inputs
    "CredentialInput",
    "ImageSource",
    # storage
    "ContentRecord",
    # metadata
    "METADATA_FORMAT_VERSION",
    "CertificateInfo",
    "CredentialMetadata",
    "MetadataAttribute",
    "MetadataProperties",
    "PartyInfo",
    # ledger
    "OnChainCredential",
    "HydratedCredential",
    "TxReceipt",
    "MintReceipt",
    # progress
    "IssuanceStage",
    "UploadStep",
    "VALID_TRANSITIONS",
    "TERMINAL_STAGES",
    "IssuanceProgress",
    "IdleProgress",
    "UploadingProgress",
    "MintingProgress",
    "ConfirmingProgress",
    "CompleteProgress",
    "ErrorProgress",
    # results
    "IssuanceOutcome",
    "IssuanceResult",
    "RevocationResult",
    "OwnershipStats",
    "OwnershipReport",
]
