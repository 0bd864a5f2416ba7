"""Pure hour calculations: rounding, overtime split and aggregation."""

from payroll_time_sync.calculators.aggregation import SummaryAccumulator, reconcile_record
from payroll_time_sync.calculators.overtime import OvertimeSplit, split_for_source, split_hours
from payroll_time_sync.calculators.rounding import RoundingRule, apply_rounding
from payroll_time_sync.calculators.types import (
    PendingCounts,
    RecordFailure,
    SourceType,
    SyncOptions,
    SyncResult,
    SyncSummary,
    WorkHourRecord,
)

__all__ = [
    "SummaryAccumulator",
    "reconcile_record",
    "OvertimeSplit",
    "split_for_source",
    "split_hours",
    "RoundingRule",
    "apply_rounding",
    "PendingCounts",
    "RecordFailure",
    "SourceType",
    "SyncOptions",
    "SyncResult",
    "SyncSummary",
    "WorkHourRecord",
]
