"""Issuance stage tracker: enforces the progress state machine.

Every snapshot is checked against ``VALID_TRANSITIONS`` before it is
recorded and forwarded to the caller's callback. The callback is the
only observable side effect of an issuance besides its result.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from certforge.models.progress import (
    TERMINAL_STAGES,
    VALID_TRANSITIONS,
    IssuanceProgress,
    IssuanceStage,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[IssuanceProgress], None]


class InvalidTransitionError(RuntimeError):
    """Raised when a requested stage transition is not valid."""


class ProgressTracker:
    """Tracks one issuance call's stage and emits progress snapshots.

    Parameters
    ----------
    callback:
        Optional caller callback receiving each snapshot in order.
    """

    def __init__(self, callback: ProgressCallback | None = None) -> None:
        self._callback = callback
        self._stage: IssuanceStage | None = None
        self._history: list[IssuanceProgress] = []

    @property
    def stage(self) -> IssuanceStage | None:
        """Current stage; None before the first snapshot."""
        return self._stage

    @property
    def history(self) -> list[IssuanceProgress]:
        return list(self._history)

    @property
    def is_terminal(self) -> bool:
        return self._stage in TERMINAL_STAGES

    def emit(self, progress: IssuanceProgress) -> IssuanceProgress:
        """Validate the transition, record it, and notify the callback."""
        target = progress.stage
        if self._stage is None:
            if target != IssuanceStage.IDLE:
                raise InvalidTransitionError(
                    f"First snapshot must be idle, got {target.value}"
                )
        else:
            allowed = VALID_TRANSITIONS.get(self._stage, set())
            if target not in allowed:
                raise InvalidTransitionError(
                    f"Cannot transition from {self._stage.value} to {target.value}. "
                    f"Allowed: {sorted(s.value for s in allowed)}"
                )

        self._stage = target
        self._history.append(progress)
        logger.debug("Issuance progress: %s - %s", target.value, progress.message)

        if self._callback is not None:
            self._callback(progress)
        return progress
