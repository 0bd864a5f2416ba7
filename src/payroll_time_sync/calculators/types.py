"""Type definitions for the time sync pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from payroll_time_sync.calculators.rounding import RoundingRule

# Precision of every stored hours column
HOURS_QUANTUM = Decimal("0.0001")


class SourceType(str, Enum):
    """Upstream system that produced a worked-hours record."""

    TIME_CLOCK = "time_clock"
    TIMESHEET = "timesheet"
    OVERTIME_REQUEST = "overtime_request"

    @property
    def label(self) -> str:
        """Human-readable label used in sync summaries."""
        return _SOURCE_LABELS[self]

    @property
    def link_column(self) -> str:
        """Work record column that links back to this source."""
        return _LINK_COLUMNS[self]


_SOURCE_LABELS = {
    SourceType.TIME_CLOCK: "Time Clock",
    SourceType.TIMESHEET: "Timesheet",
    SourceType.OVERTIME_REQUEST: "Overtime Request",
}

_LINK_COLUMNS = {
    SourceType.TIME_CLOCK: "time_clock_entry_id",
    SourceType.TIMESHEET: "timesheet_entry_id",
    SourceType.OVERTIME_REQUEST: "overtime_request_id",
}


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def has_storable_precision(value: Decimal) -> bool:
    """True if value fits the stored hours precision without rounding."""
    return value % HOURS_QUANTUM == 0


@dataclass(frozen=True)
class WorkHourRecord:
    """Approved worked hours from one upstream source record.

    Normalized projection of a time clock entry, timesheet entry or
    overtime request, built at the fetch boundary.
    """

    source_type: SourceType
    source_id: UUID
    employee_id: UUID
    work_date: date
    hours: Decimal
    employee_name: str | None = None
    note: str | None = None

    def __post_init__(self) -> None:
        if self.hours < 0:
            raise ValueError(
                f"{self.source_type.value} {self.source_id} has negative hours: {self.hours}"
            )


@dataclass(frozen=True)
class SyncOptions:
    """
    Options for one preview or execution.

    Attributes:
        include_time_clock: Sync approved time clock punches.
        include_timesheets: Sync approved timesheet entries.
        include_overtime_requests: Sync approved overtime requests.
        overtime_threshold_per_day: Hours above which a single record's
            hours count as overtime.
        overtime_threshold_per_week: Reserved for weekly aggregation. Stored
            in the sync log snapshot but not used by the split.
        rounding_rule: Rounding applied to clock and timesheet hours.
    """

    include_time_clock: bool = True
    include_timesheets: bool = True
    include_overtime_requests: bool = True
    overtime_threshold_per_day: Decimal = Decimal("8")
    overtime_threshold_per_week: Decimal = Decimal("40")
    rounding_rule: RoundingRule = RoundingRule.NEAREST_15

    def __post_init__(self) -> None:
        """Normalize and validate configuration."""
        object.__setattr__(
            self, "overtime_threshold_per_day", _to_decimal(self.overtime_threshold_per_day)
        )
        object.__setattr__(
            self, "overtime_threshold_per_week", _to_decimal(self.overtime_threshold_per_week)
        )
        object.__setattr__(self, "rounding_rule", RoundingRule(self.rounding_rule))

        if self.overtime_threshold_per_day < 0:
            raise ValueError("overtime_threshold_per_day must be non-negative")
        if self.overtime_threshold_per_week < 0:
            raise ValueError("overtime_threshold_per_week must be non-negative")
        for name in ("overtime_threshold_per_day", "overtime_threshold_per_week"):
            if not has_storable_precision(getattr(self, name)):
                raise ValueError(f"{name} must have at most 4 decimal places")

    def enabled_sources(self) -> list[SourceType]:
        """Enabled sources in processing order."""
        sources: list[SourceType] = []
        if self.include_time_clock:
            sources.append(SourceType.TIME_CLOCK)
        if self.include_timesheets:
            sources.append(SourceType.TIMESHEET)
        if self.include_overtime_requests:
            sources.append(SourceType.OVERTIME_REQUEST)
        return sources

    def to_snapshot(self) -> dict[str, Any]:
        """Serialize for the sync log's options snapshot."""
        return {
            "includeTimeClock": self.include_time_clock,
            "includeTimesheets": self.include_timesheets,
            "includeOvertimeRequests": self.include_overtime_requests,
            "overtimeThresholdPerDay": float(self.overtime_threshold_per_day),
            "overtimeThresholdPerWeek": float(self.overtime_threshold_per_week),
            "roundingRule": self.rounding_rule.value,
        }

    @classmethod
    def from_snapshot(cls, data: dict[str, Any]) -> SyncOptions:
        """Rebuild options from a sync log snapshot."""
        defaults = cls()
        return cls(
            include_time_clock=data.get("includeTimeClock", defaults.include_time_clock),
            include_timesheets=data.get("includeTimesheets", defaults.include_timesheets),
            include_overtime_requests=data.get(
                "includeOvertimeRequests", defaults.include_overtime_requests
            ),
            overtime_threshold_per_day=data.get(
                "overtimeThresholdPerDay", defaults.overtime_threshold_per_day
            ),
            overtime_threshold_per_week=data.get(
                "overtimeThresholdPerWeek", defaults.overtime_threshold_per_week
            ),
            rounding_rule=data.get("roundingRule", defaults.rounding_rule),
        )


@dataclass
class SyncSummary:
    """Per-employee aggregate of synced (or to-be-synced) hours."""

    employee_id: UUID
    employee_name: str
    regular_hours: Decimal = Decimal("0")
    overtime_hours: Decimal = Decimal("0")
    total_hours: Decimal = Decimal("0")
    source_count: int = 0
    sources: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class RecordFailure:
    """A source record that could not be written as a work record."""

    source_type: SourceType
    source_id: UUID
    employee_id: UUID
    message: str


@dataclass
class SyncResult:
    """Result of executing a sync."""

    sync_log_id: UUID
    success: bool = True
    employees_processed: int = 0
    records_created: int = 0
    records_updated: int = 0
    total_regular_hours: Decimal = Decimal("0")
    total_overtime_hours: Decimal = Decimal("0")
    summary: list[SyncSummary] = field(default_factory=list)
    failures: list[RecordFailure] = field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        return len(self.failures) > 0


@dataclass(frozen=True)
class PendingCounts:
    """Number of approved, not-yet-synced records per source."""

    time_clock: int = 0
    timesheets: int = 0
    overtime: int = 0

    @property
    def total(self) -> int:
        return self.time_clock + self.timesheets + self.overtime
