"""Fetchers for approved, not-yet-synced worked-hours records.

Each fetcher reads one upstream source for a company and date range, keeps
only approved records, and drops any record already linked from a work
record. The already-synced check is a single query over the full candidate
id list.

A database error while fetching is logged and the source is treated as
empty for that run.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_time_sync.calculators.types import HOURS_QUANTUM, SourceType, WorkHourRecord
from payroll_time_sync.models import (
    Employee,
    OvertimeRequest,
    TimeClockEntry,
    TimesheetEntry,
    WorkRecord,
)

logger = logging.getLogger(__name__)

APPROVED = "approved"
SECONDS_PER_HOUR = Decimal("3600")


class SourceFetcher(ABC):
    """Base fetcher for one upstream source."""

    source_type: SourceType

    def __init__(self, session: AsyncSession):
        self.session = session

    @property
    def link_column(self) -> Any:
        """WorkRecord column pointing back at this source."""
        return getattr(WorkRecord, self.source_type.link_column)

    @abstractmethod
    def candidate_query(
        self, company_id: UUID, period_start: date, period_end: date
    ) -> Select:
        """Query for approved source rows in range, joined to employee name.

        Rows are ``(source_row, employee_full_name)`` tuples.
        """

    @abstractmethod
    def source_id(self, row: Any) -> UUID:
        """Primary key of a source row."""

    @abstractmethod
    def to_record(self, row: Any, employee_name: str | None) -> WorkHourRecord:
        """Normalize a source row into a WorkHourRecord."""

    async def fetch(
        self, company_id: UUID, period_start: date, period_end: date
    ) -> list[WorkHourRecord]:
        """Fetch approved records in range that have not been synced yet."""
        try:
            async with self.session.begin_nested():
                result = await self.session.execute(
                    self.candidate_query(company_id, period_start, period_end)
                )
                candidates = result.all()
                synced_ids = await self.already_synced_ids(
                    [self.source_id(row) for row, _ in candidates]
                )
        except SQLAlchemyError:
            logger.exception(
                "Failed to fetch %s records for company %s (%s to %s)",
                self.source_type.value,
                company_id,
                period_start,
                period_end,
            )
            return []

        records: list[WorkHourRecord] = []
        for row, employee_name in candidates:
            if self.source_id(row) in synced_ids:
                continue
            try:
                records.append(self.to_record(row, employee_name))
            except ValueError as e:
                logger.warning("Skipping %s %s: %s", self.source_type.value, self.source_id(row), e)

        logger.debug(
            "Fetched %d pending %s records (%d already synced) for company %s",
            len(records),
            self.source_type.value,
            len(synced_ids),
            company_id,
        )
        return records

    async def already_synced_ids(self, candidate_ids: list[UUID]) -> set[UUID]:
        """Ids among candidates that already back a work record."""
        if not candidate_ids:
            return set()
        column = self.link_column
        result = await self.session.execute(
            select(column).where(column.in_(candidate_ids))
        )
        return {value for value in result.scalars().all() if value is not None}

    async def count_pending(
        self, company_id: UUID, period_start: date, period_end: date
    ) -> int:
        """Number of approved records in range awaiting sync."""
        return len(await self.fetch(company_id, period_start, period_end))


class TimeClockFetcher(SourceFetcher):
    """Approved, closed time clock punches."""

    source_type = SourceType.TIME_CLOCK

    def candidate_query(
        self, company_id: UUID, period_start: date, period_end: date
    ) -> Select:
        # Range is on clock_in, inclusive of the whole end date
        range_start = datetime.combine(period_start, time.min, tzinfo=timezone.utc)
        range_end = datetime.combine(period_end + timedelta(days=1), time.min, tzinfo=timezone.utc)
        return (
            select(TimeClockEntry, Employee.full_name)
            .outerjoin(Employee, TimeClockEntry.employee_id == Employee.employee_id)
            .where(
                TimeClockEntry.company_id == company_id,
                TimeClockEntry.clock_in >= range_start,
                TimeClockEntry.clock_in < range_end,
                TimeClockEntry.status == APPROVED,
                TimeClockEntry.clock_out.is_not(None),
            )
            .order_by(TimeClockEntry.clock_in, TimeClockEntry.time_clock_entry_id)
        )

    def source_id(self, row: TimeClockEntry) -> UUID:
        return row.time_clock_entry_id

    def to_record(self, row: TimeClockEntry, employee_name: str | None) -> WorkHourRecord:
        return WorkHourRecord(
            source_type=self.source_type,
            source_id=row.time_clock_entry_id,
            employee_id=row.employee_id,
            employee_name=employee_name,
            work_date=row.clock_in.date(),
            hours=clock_hours(row),
            note=f"Imported from time clock entry {row.time_clock_entry_id}",
        )


class TimesheetFetcher(SourceFetcher):
    """Approved timesheet entries."""

    source_type = SourceType.TIMESHEET

    def candidate_query(
        self, company_id: UUID, period_start: date, period_end: date
    ) -> Select:
        return (
            select(TimesheetEntry, Employee.full_name)
            .outerjoin(Employee, TimesheetEntry.employee_id == Employee.employee_id)
            .where(
                TimesheetEntry.company_id == company_id,
                TimesheetEntry.entry_date >= period_start,
                TimesheetEntry.entry_date <= period_end,
                TimesheetEntry.status == APPROVED,
            )
            .order_by(TimesheetEntry.entry_date, TimesheetEntry.timesheet_entry_id)
        )

    def source_id(self, row: TimesheetEntry) -> UUID:
        return row.timesheet_entry_id

    def to_record(self, row: TimesheetEntry, employee_name: str | None) -> WorkHourRecord:
        return WorkHourRecord(
            source_type=self.source_type,
            source_id=row.timesheet_entry_id,
            employee_id=row.employee_id,
            employee_name=employee_name,
            work_date=row.entry_date,
            hours=row.hours_worked,
            note=row.description or f"Imported from timesheet entry {row.timesheet_entry_id}",
        )


class OvertimeRequestFetcher(SourceFetcher):
    """Approved overtime requests."""

    source_type = SourceType.OVERTIME_REQUEST

    def candidate_query(
        self, company_id: UUID, period_start: date, period_end: date
    ) -> Select:
        return (
            select(OvertimeRequest, Employee.full_name)
            .outerjoin(Employee, OvertimeRequest.employee_id == Employee.employee_id)
            .where(
                OvertimeRequest.company_id == company_id,
                OvertimeRequest.overtime_date >= period_start,
                OvertimeRequest.overtime_date <= period_end,
                OvertimeRequest.status == APPROVED,
            )
            .order_by(OvertimeRequest.overtime_date, OvertimeRequest.overtime_request_id)
        )

    def source_id(self, row: OvertimeRequest) -> UUID:
        return row.overtime_request_id

    def to_record(self, row: OvertimeRequest, employee_name: str | None) -> WorkHourRecord:
        hours = row.hours_approved if row.hours_approved is not None else row.hours_requested
        return WorkHourRecord(
            source_type=self.source_type,
            source_id=row.overtime_request_id,
            employee_id=row.employee_id,
            employee_name=employee_name,
            work_date=row.overtime_date,
            hours=hours,
            note=f"Imported from approved overtime request - {row.overtime_type or 'standard'}",
        )


def clock_hours(entry: TimeClockEntry) -> Decimal:
    """Worked hours for a closed punch.

    Uses the stored total when present, otherwise the clock_in/clock_out
    difference to four decimal places.
    """
    if entry.total_hours:
        return entry.total_hours
    if entry.clock_out is None:
        raise ValueError("time clock entry has no clock_out")
    seconds = Decimal(str((entry.clock_out - entry.clock_in).total_seconds()))
    return (seconds / SECONDS_PER_HOUR).quantize(HOURS_QUANTUM)


FETCHERS: dict[SourceType, type[SourceFetcher]] = {
    SourceType.TIME_CLOCK: TimeClockFetcher,
    SourceType.TIMESHEET: TimesheetFetcher,
    SourceType.OVERTIME_REQUEST: OvertimeRequestFetcher,
}


def build_fetchers(session: AsyncSession) -> dict[SourceType, SourceFetcher]:
    """One fetcher per source type, sharing a session."""
    return {source_type: cls(session) for source_type, cls in FETCHERS.items()}
