"""Pay period, work record and sync log models."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payroll_time_sync.models.base import Base, JSONType, TimestampMixin

if TYPE_CHECKING:
    from payroll_time_sync.models.company import Employee


class PayPeriod(Base, TimestampMixin):
    """Contiguous date range processed by one payroll cycle."""

    __tablename__ = "pay_period"

    pay_period_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    company_id: Mapped[UUID] = mapped_column(
        ForeignKey("company.company_id", ondelete="CASCADE"),
        nullable=False,
    )
    period_number: Mapped[str | None] = mapped_column(String, nullable=True)
    period_start: Mapped[date] = mapped_column(Date, nullable=False)
    period_end: Mapped[date] = mapped_column(Date, nullable=False)
    pay_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="open")

    __table_args__ = (
        CheckConstraint("period_end >= period_start", name="pay_period_range_check"),
        CheckConstraint(
            "status IN ('open', 'processing', 'closed')",
            name="pay_period_status_check",
        ),
    )


class WorkRecord(Base, TimestampMixin):
    """Canonical payroll hours for one employee on one work date.

    Synced rows link back to exactly one upstream source record. Each link
    column is unique, so a source record can be claimed only once.
    """

    __tablename__ = "employee_work_record"

    work_record_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    company_id: Mapped[UUID] = mapped_column(
        ForeignKey("company.company_id", ondelete="CASCADE"),
        nullable=False,
    )
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
    )
    employee_position_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("employee_position.employee_position_id", ondelete="SET NULL"),
        nullable=True,
    )
    work_date: Mapped[date] = mapped_column(Date, nullable=False)
    regular_hours: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False, default=Decimal("0"))
    overtime_hours: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False, default=Decimal("0"))

    # Source links (at most one set)
    time_clock_entry_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("time_clock_entry.time_clock_entry_id"),
        nullable=True,
    )
    timesheet_entry_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("timesheet_entry.timesheet_entry_id"),
        nullable=True,
    )
    overtime_request_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("overtime_request.overtime_request_id"),
        nullable=True,
    )
    source_type: Mapped[str] = mapped_column(String, nullable=False, default="manual")
    day_type: Mapped[str] = mapped_column(String, nullable=False, default="regular")
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Sync run that created this row (null for manual entries)
    sync_log_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("payroll_time_sync_log.sync_log_id"),
        nullable=True,
    )

    __table_args__ = (
        UniqueConstraint("time_clock_entry_id", name="work_record_time_clock_entry_unique"),
        UniqueConstraint("timesheet_entry_id", name="work_record_timesheet_entry_unique"),
        UniqueConstraint("overtime_request_id", name="work_record_overtime_request_unique"),
        CheckConstraint(
            "source_type IN ('time_clock', 'timesheet', 'overtime_request', 'manual')",
            name="work_record_source_type_check",
        ),
        CheckConstraint(
            "regular_hours >= 0 AND overtime_hours >= 0",
            name="work_record_hours_check",
        ),
        CheckConstraint(
            "(CASE WHEN time_clock_entry_id IS NULL THEN 0 ELSE 1 END"
            " + CASE WHEN timesheet_entry_id IS NULL THEN 0 ELSE 1 END"
            " + CASE WHEN overtime_request_id IS NULL THEN 0 ELSE 1 END) <= 1",
            name="work_record_single_source_check",
        ),
        Index("ix_work_record_sync_log", "sync_log_id"),
    )


class SyncLog(Base, TimestampMixin):
    """Audit header for one time-to-payroll sync execution."""

    __tablename__ = "payroll_time_sync_log"

    sync_log_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    company_id: Mapped[UUID] = mapped_column(
        ForeignKey("company.company_id", ondelete="CASCADE"),
        nullable=False,
    )
    pay_period_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("pay_period.pay_period_id"),
        nullable=True,
    )
    sync_type: Mapped[str] = mapped_column(String, nullable=False, default="full")
    status: Mapped[str] = mapped_column(String, nullable=False, default="processing")
    sync_options: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)

    employees_processed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    records_created: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    records_updated: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_regular_hours: Mapped[Decimal] = mapped_column(
        Numeric(12, 4), nullable=False, default=Decimal("0")
    )
    total_overtime_hours: Mapped[Decimal] = mapped_column(
        Numeric(12, 4), nullable=False, default=Decimal("0")
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    reversed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_by: Mapped[UUID | None] = mapped_column(nullable=True)
    reversed_by: Mapped[UUID | None] = mapped_column(nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('processing', 'completed', 'failed', 'reversed')",
            name="sync_log_status_check",
        ),
        CheckConstraint("sync_type IN ('full', 'incremental')", name="sync_log_type_check"),
        Index("ix_sync_log_company_created", "company_id", "created_at"),
    )

    # Relationships
    pay_period: Mapped[PayPeriod | None] = relationship()
    creator: Mapped[Employee | None] = relationship(
        primaryjoin="foreign(SyncLog.created_by) == Employee.employee_id",
        viewonly=True,
    )

    @property
    def created_by_name(self) -> str | None:
        """Full name of the employee who ran the sync, when known."""
        return self.creator.full_name if self.creator is not None else None

    def to_history_dict(self) -> dict[str, Any]:
        """Log columns plus the pay period and creator name."""
        data = self.to_dict()
        period = self.pay_period
        data["pay_period"] = (
            {
                "period_number": period.period_number,
                "period_start": period.period_start,
                "period_end": period.period_end,
            }
            if period is not None
            else None
        )
        data["created_by_name"] = self.created_by_name
        return data
