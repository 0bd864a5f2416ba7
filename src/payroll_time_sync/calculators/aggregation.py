"""Per-employee aggregation of reconciled hours."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from payroll_time_sync.calculators.overtime import OvertimeSplit, split_for_source
from payroll_time_sync.calculators.rounding import apply_rounding
from payroll_time_sync.calculators.types import (
    SourceType,
    SyncOptions,
    SyncSummary,
    WorkHourRecord,
)

UNKNOWN_EMPLOYEE = "Unknown"


def reconcile_record(record: WorkHourRecord, options: SyncOptions) -> OvertimeSplit:
    """Round and split one source record's hours.

    Clock and timesheet hours are rounded then split at the daily threshold.
    Overtime request hours pass through unrounded, all as overtime.
    """
    hours = record.hours
    if record.source_type is not SourceType.OVERTIME_REQUEST:
        hours = apply_rounding(hours, options.rounding_rule)
    return split_for_source(record.source_type, hours, options.overtime_threshold_per_day)


class SummaryAccumulator:
    """Accumulates split hours into one SyncSummary per employee.

    Summaries come back in order of each employee's first appearance, and
    source labels in order of first appearance per employee.
    """

    def __init__(self) -> None:
        self._summaries: dict[UUID, SyncSummary] = {}

    def add(self, record: WorkHourRecord, split: OvertimeSplit) -> SyncSummary:
        summary = self._summaries.get(record.employee_id)
        if summary is None:
            summary = SyncSummary(
                employee_id=record.employee_id,
                employee_name=record.employee_name or UNKNOWN_EMPLOYEE,
            )
            self._summaries[record.employee_id] = summary

        summary.regular_hours += split.regular
        summary.overtime_hours += split.overtime
        summary.total_hours += split.total
        summary.source_count += 1
        label = record.source_type.label
        if label not in summary.sources:
            summary.sources.append(label)
        return summary

    @property
    def employee_count(self) -> int:
        return len(self._summaries)

    @property
    def total_regular_hours(self) -> Decimal:
        return sum((s.regular_hours for s in self._summaries.values()), Decimal("0"))

    @property
    def total_overtime_hours(self) -> Decimal:
        return sum((s.overtime_hours for s in self._summaries.values()), Decimal("0"))

    def summaries(self) -> list[SyncSummary]:
        return list(self._summaries.values())
