"""Pydantic schemas for API request/response models."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from payroll_time_sync.calculators.rounding import RoundingRule
from payroll_time_sync.calculators.types import SyncOptions


# ============================================================================
# Request schemas
# ============================================================================


class SyncOptionsRequest(BaseModel):
    """Options for a preview or execution. Omitted fields use defaults."""

    include_time_clock: bool = True
    include_timesheets: bool = True
    include_overtime_requests: bool = True
    overtime_threshold_per_day: Decimal = Field(default=Decimal("8"), ge=0, decimal_places=4)
    overtime_threshold_per_week: Decimal = Field(default=Decimal("40"), ge=0, decimal_places=4)
    rounding_rule: RoundingRule = RoundingRule.NEAREST_15

    def to_options(self) -> SyncOptions:
        return SyncOptions(
            include_time_clock=self.include_time_clock,
            include_timesheets=self.include_timesheets,
            include_overtime_requests=self.include_overtime_requests,
            overtime_threshold_per_day=self.overtime_threshold_per_day,
            overtime_threshold_per_week=self.overtime_threshold_per_week,
            rounding_rule=self.rounding_rule,
        )


class SyncRequest(BaseModel):
    """Schema for previewing or executing a sync."""

    pay_period_id: UUID | None = None
    period_start: date
    period_end: date
    options: SyncOptionsRequest | None = None

    @model_validator(mode="after")
    def check_period(self) -> "SyncRequest":
        if self.period_end < self.period_start:
            raise ValueError("period_end must not be before period_start")
        return self


# ============================================================================
# Response schemas
# ============================================================================


class SyncSummaryResponse(BaseModel):
    """Per-employee hours for a preview or execution."""

    model_config = ConfigDict(from_attributes=True)

    employee_id: UUID
    employee_name: str
    regular_hours: Decimal
    overtime_hours: Decimal
    total_hours: Decimal
    source_count: int
    sources: list[str]


class PreviewResponse(BaseModel):
    """Schema for sync preview response."""

    company_id: UUID
    period_start: date
    period_end: date
    employees: list[SyncSummaryResponse]
    total_regular_hours: Decimal
    total_overtime_hours: Decimal


class RecordFailureResponse(BaseModel):
    """A source record that was not written."""

    model_config = ConfigDict(from_attributes=True)

    source_type: str
    source_id: UUID
    employee_id: UUID
    message: str


class SyncResultResponse(BaseModel):
    """Schema for sync execution response."""

    model_config = ConfigDict(from_attributes=True)

    sync_log_id: UUID
    success: bool
    employees_processed: int
    records_created: int
    records_updated: int
    total_regular_hours: Decimal
    total_overtime_hours: Decimal
    summary: list[SyncSummaryResponse]
    failures: list[RecordFailureResponse]


class SyncLogPayPeriodResponse(BaseModel):
    """Pay period a sync log belongs to."""

    model_config = ConfigDict(from_attributes=True)

    period_number: str | None = None
    period_start: date
    period_end: date


class SyncLogResponse(BaseModel):
    """Schema for sync log (history) response."""

    model_config = ConfigDict(from_attributes=True)

    sync_log_id: UUID
    company_id: UUID
    pay_period_id: UUID | None = None
    sync_type: str
    status: str
    sync_options: dict[str, Any]
    employees_processed: int
    records_created: int
    records_updated: int
    total_regular_hours: Decimal
    total_overtime_hours: Decimal
    error_message: str | None = None
    started_at: datetime
    completed_at: datetime | None = None
    reversed_at: datetime | None = None
    created_by: UUID | None = None
    created_by_name: str | None = None
    reversed_by: UUID | None = None
    created_at: datetime
    pay_period: SyncLogPayPeriodResponse | None = None


class SyncLogListResponse(BaseModel):
    """Schema for listing sync logs."""

    items: list[SyncLogResponse]
    total: int


class ReverseResponse(BaseModel):
    """Schema for reversal response."""

    sync_log_id: UUID
    status: str
    reversed_at: datetime | None = None
    reversed_by: UUID | None = None


class PendingCountsResponse(BaseModel):
    """Approved records waiting to be synced, per source."""

    model_config = ConfigDict(from_attributes=True)

    time_clock: int
    timesheets: int
    overtime: int
    total: int


class PayPeriodResponse(BaseModel):
    """Schema for pay period response."""

    model_config = ConfigDict(from_attributes=True)

    pay_period_id: UUID
    company_id: UUID
    period_number: str | None = None
    period_start: date
    period_end: date
    pay_date: date | None = None
    status: str


class PayPeriodListResponse(BaseModel):
    """Schema for listing pay periods."""

    items: list[PayPeriodResponse]
    total: int


# ============================================================================
# Error schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Schema for error response."""

    detail: str
    code: str | None = None
    context: dict[str, Any] | None = None
