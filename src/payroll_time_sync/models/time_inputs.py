"""Upstream time inputs: clock punches, timesheets and overtime requests.

These rows are owned by their approval workflows. The sync engine only
reads them.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Date, DateTime, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from payroll_time_sync.models.base import Base, TimestampMixin

APPROVAL_STATUSES = "('pending', 'approved', 'rejected', 'cancelled')"


class TimeClockEntry(Base, TimestampMixin):
    """Clock-in / clock-out punch pair."""

    __tablename__ = "time_clock_entry"

    time_clock_entry_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    company_id: Mapped[UUID] = mapped_column(
        ForeignKey("company.company_id", ondelete="CASCADE"),
        nullable=False,
    )
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
    )
    clock_in: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    clock_out: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="pending")
    total_hours: Mapped[Decimal | None] = mapped_column(Numeric(12, 4), nullable=True)

    __table_args__ = (
        CheckConstraint(f"status IN {APPROVAL_STATUSES}", name="time_clock_entry_status_check"),
        Index("ix_time_clock_entry_company_clock_in", "company_id", "clock_in"),
    )


class TimesheetEntry(Base, TimestampMixin):
    """Hours reported on a timesheet for one work date."""

    __tablename__ = "timesheet_entry"

    timesheet_entry_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    company_id: Mapped[UUID] = mapped_column(
        ForeignKey("company.company_id", ondelete="CASCADE"),
        nullable=False,
    )
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
    )
    entry_date: Mapped[date] = mapped_column(Date, nullable=False)
    hours_worked: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False)
    project_id: Mapped[UUID | None] = mapped_column(nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="pending")

    __table_args__ = (
        CheckConstraint(f"status IN {APPROVAL_STATUSES}", name="timesheet_entry_status_check"),
        CheckConstraint("hours_worked >= 0", name="timesheet_entry_hours_check"),
        Index("ix_timesheet_entry_company_date", "company_id", "entry_date"),
    )


class OvertimeRequest(Base, TimestampMixin):
    """Overtime request adjudicated by a manager."""

    __tablename__ = "overtime_request"

    overtime_request_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    company_id: Mapped[UUID] = mapped_column(
        ForeignKey("company.company_id", ondelete="CASCADE"),
        nullable=False,
    )
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
    )
    overtime_date: Mapped[date] = mapped_column(Date, nullable=False)
    hours_requested: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False)
    hours_approved: Mapped[Decimal | None] = mapped_column(Numeric(12, 4), nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="pending")
    overtime_type: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        CheckConstraint(f"status IN {APPROVAL_STATUSES}", name="overtime_request_status_check"),
        Index("ix_overtime_request_company_date", "company_id", "overtime_date"),
    )
