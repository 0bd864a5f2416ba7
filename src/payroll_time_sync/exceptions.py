"""Exceptions raised by the time sync engine."""

from __future__ import annotations

from uuid import UUID


class TimeSyncError(Exception):
    """Base class for time sync errors."""


class InvalidTransitionError(TimeSyncError):
    """Raised when an invalid sync log status transition is attempted."""

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        msg = f"Invalid transition from '{from_status}' to '{to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class SyncLogError(TimeSyncError):
    """Raised when the sync log cannot be created or finalized.

    This aborts the run: without a log header the batch is not auditable.
    """

    def __init__(self, message: str, sync_log_id: UUID | None = None):
        self.sync_log_id = sync_log_id
        super().__init__(message)


class SyncExecutionError(TimeSyncError):
    """Raised when a run aborts after its sync log was created.

    The log is left in status 'failed' and the run's work records are
    rolled back.
    """

    def __init__(self, message: str, sync_log_id: UUID):
        self.sync_log_id = sync_log_id
        super().__init__(message)


class SyncLogNotFoundError(TimeSyncError):
    """Raised when a sync log id does not exist."""

    def __init__(self, sync_log_id: UUID):
        self.sync_log_id = sync_log_id
        super().__init__(f"Sync log {sync_log_id} not found")
