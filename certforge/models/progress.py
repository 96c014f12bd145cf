"""Issuance progress: a closed tagged union over the issuance stage.

Each variant only carries the fields meaningful at its stage, and the
``stage`` field is the discriminator.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class IssuanceStage(str, Enum):
    """Strict state model for one issuance call."""

    IDLE = "idle"
    UPLOADING = "uploading"
    MINTING = "minting"
    CONFIRMING = "confirming"
    COMPLETE = "complete"
    ERROR = "error"


class UploadStep(str, Enum):
    """Sub-steps reported while in the UPLOADING stage."""

    PREPARING = "preparing"
    IMAGE = "image"
    METADATA_BUILD = "metadata_build"
    METADATA = "metadata"


# Valid stage transitions, enforced by ProgressTracker.
# Terminal stages (COMPLETE, ERROR) have no outgoing transitions.
# IDLE -> MINTING is the mint-only retry path, IDLE -> CONFIRMING resumes a wait.
VALID_TRANSITIONS: dict[IssuanceStage, set[IssuanceStage]] = {
    IssuanceStage.IDLE: {
        IssuanceStage.UPLOADING,
        IssuanceStage.MINTING,
        IssuanceStage.CONFIRMING,
        IssuanceStage.ERROR,
    },
    IssuanceStage.UPLOADING: {
        IssuanceStage.UPLOADING,
        IssuanceStage.MINTING,
        IssuanceStage.ERROR,
    },
    IssuanceStage.MINTING: {
        IssuanceStage.MINTING,
        IssuanceStage.CONFIRMING,
        IssuanceStage.ERROR,
    },
    IssuanceStage.CONFIRMING: {IssuanceStage.COMPLETE, IssuanceStage.ERROR},
    IssuanceStage.COMPLETE: set(),  # terminal
    IssuanceStage.ERROR: set(),  # terminal
}

TERMINAL_STAGES: frozenset[IssuanceStage] = frozenset(
    {IssuanceStage.COMPLETE, IssuanceStage.ERROR}
)


class _ProgressBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


class IdleProgress(_ProgressBase):
    stage: Literal[IssuanceStage.IDLE] = IssuanceStage.IDLE


class UploadingProgress(_ProgressBase):
    stage: Literal[IssuanceStage.UPLOADING] = IssuanceStage.UPLOADING
    step: UploadStep
    percent: int = Field(ge=0, le=100)


class MintingProgress(_ProgressBase):
    stage: Literal[IssuanceStage.MINTING] = IssuanceStage.MINTING


class ConfirmingProgress(_ProgressBase):
    stage: Literal[IssuanceStage.CONFIRMING] = IssuanceStage.CONFIRMING
    tx_hash: str


class CompleteProgress(_ProgressBase):
    stage: Literal[IssuanceStage.COMPLETE] = IssuanceStage.COMPLETE
    tx_hash: str
    token_id: int | None = None
    ambiguous: bool = False


class ErrorProgress(_ProgressBase):
    stage: Literal[IssuanceStage.ERROR] = IssuanceStage.ERROR
    failed_stage: IssuanceStage
    error_type: str
    tx_hash: str | None = None


IssuanceProgress = Annotated[
    Union[
        IdleProgress,
        UploadingProgress,
        MintingProgress,
        ConfirmingProgress,
        CompleteProgress,
        ErrorProgress,
    ],
    Field(discriminator="stage"),
]
