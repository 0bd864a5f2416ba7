"""ORM models."""

from payroll_time_sync.models.base import Base, TimestampMixin
from payroll_time_sync.models.company import Company, Employee, EmployeePosition
from payroll_time_sync.models.payroll import PayPeriod, SyncLog, WorkRecord
from payroll_time_sync.models.time_inputs import OvertimeRequest, TimeClockEntry, TimesheetEntry

__all__ = [
    "Base",
    "TimestampMixin",
    "Company",
    "Employee",
    "EmployeePosition",
    "PayPeriod",
    "SyncLog",
    "WorkRecord",
    "OvertimeRequest",
    "TimeClockEntry",
    "TimesheetEntry",
]
