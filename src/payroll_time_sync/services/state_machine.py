"""Sync log state machine with transition validation."""

from __future__ import annotations

from enum import Enum

from payroll_time_sync.exceptions import InvalidTransitionError


class SyncLogStatus(str, Enum):
    """Sync log status values."""

    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    REVERSED = "reversed"


def _value(status: str) -> str:
    return status.value if isinstance(status, Enum) else status


class SyncLogStateMachine:
    """State machine for sync log status transitions.

    Allowed transitions:
    - processing → completed
    - processing → failed
    - completed → reversed
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        SyncLogStatus.PROCESSING: [SyncLogStatus.COMPLETED, SyncLogStatus.FAILED],
        SyncLogStatus.COMPLETED: [SyncLogStatus.REVERSED],
        SyncLogStatus.FAILED: [],  # Terminal state
        SyncLogStatus.REVERSED: [],  # Terminal state
    }

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(from_status, [])
        return to_status in allowed

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not cls.can_transition(from_status, to_status):
            reason = None
            if from_status == SyncLogStatus.REVERSED and to_status == SyncLogStatus.REVERSED:
                reason = "sync has already been reversed"
            raise InvalidTransitionError(_value(from_status), _value(to_status), reason)

    @classmethod
    def can_reverse(cls, status: str) -> bool:
        """Check if a sync in this status can be reversed."""
        return cls.can_transition(status, SyncLogStatus.REVERSED)
