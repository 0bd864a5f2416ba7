"""Sync services: fetching, preview, execution, logging and reversal."""

from payroll_time_sync.services.executor import ReconciliationExecutor
from payroll_time_sync.services.previewer import ReconciliationPreviewer
from payroll_time_sync.services.source_fetchers import (
    OvertimeRequestFetcher,
    SourceFetcher,
    TimeClockFetcher,
    TimesheetFetcher,
    build_fetchers,
)
from payroll_time_sync.services.state_machine import SyncLogStateMachine, SyncLogStatus
from payroll_time_sync.services.sync_log_service import SyncLogStore
from payroll_time_sync.services.time_sync_service import TimeSyncService

__all__ = [
    "ReconciliationExecutor",
    "ReconciliationPreviewer",
    "OvertimeRequestFetcher",
    "SourceFetcher",
    "TimeClockFetcher",
    "TimesheetFetcher",
    "build_fetchers",
    "SyncLogStateMachine",
    "SyncLogStatus",
    "SyncLogStore",
    "TimeSyncService",
]
