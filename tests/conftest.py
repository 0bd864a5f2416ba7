"""Pytest fixtures for time sync tests."""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import AsyncGenerator
from uuid import UUID, uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from payroll_time_sync.database import create_sqlite_engine
from payroll_time_sync.models import (
    Base,
    Company,
    Employee,
    EmployeePosition,
    OvertimeRequest,
    PayPeriod,
    SyncLog,
    TimeClockEntry,
    TimesheetEntry,
    WorkRecord,
)

# In-memory SQLite shared across the test's connections
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

PERIOD_START = date(2024, 1, 8)
PERIOD_END = date(2024, 1, 21)


@pytest.fixture
async def engine():
    """Create a fresh test database per test."""
    engine = create_sqlite_engine(TEST_DATABASE_URL, poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def session(engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with session_factory() as session:
        yield session
        await session.rollback()


# ============================================================================
# Seed data
# ============================================================================


@pytest.fixture
async def test_company(session: AsyncSession) -> Company:
    """Create a test company."""
    company = Company(company_id=uuid4(), name="Test Company", status="active")
    session.add(company)
    await session.flush()
    return company


@pytest.fixture
async def test_employees(
    session: AsyncSession, test_company: Company
) -> dict[str, Employee]:
    """Create two employees."""
    alice = Employee(
        employee_id=uuid4(),
        company_id=test_company.company_id,
        full_name="Alice Able",
    )
    bob = Employee(
        employee_id=uuid4(),
        company_id=test_company.company_id,
        full_name="Bob Baker",
    )
    session.add_all([alice, bob])
    await session.flush()
    return {"alice": alice, "bob": bob}


@pytest.fixture
async def test_position(
    session: AsyncSession, test_employees: dict[str, Employee]
) -> EmployeePosition:
    """Primary active position for Alice. Bob has none."""
    inactive = EmployeePosition(
        employee_position_id=uuid4(),
        employee_id=test_employees["alice"].employee_id,
        position_id=uuid4(),
        is_primary=True,
        is_active=False,
    )
    primary = EmployeePosition(
        employee_position_id=uuid4(),
        employee_id=test_employees["alice"].employee_id,
        position_id=uuid4(),
        is_primary=True,
        is_active=True,
    )
    session.add_all([inactive, primary])
    await session.flush()
    return primary


@pytest.fixture
async def test_pay_period(session: AsyncSession, test_company: Company) -> PayPeriod:
    """Open bi-weekly pay period covering the test dates."""
    period = PayPeriod(
        pay_period_id=uuid4(),
        company_id=test_company.company_id,
        period_number="2024-02",
        period_start=PERIOD_START,
        period_end=PERIOD_END,
        pay_date=date(2024, 1, 26),
        status="open",
    )
    session.add(period)
    await session.flush()
    return period


# ============================================================================
# Source record factories
# ============================================================================


def clock_entry(
    company_id: UUID,
    employee_id: UUID,
    clock_in: datetime,
    clock_out: datetime | None,
    status: str = "approved",
    total_hours: Decimal | None = None,
) -> TimeClockEntry:
    return TimeClockEntry(
        time_clock_entry_id=uuid4(),
        company_id=company_id,
        employee_id=employee_id,
        clock_in=clock_in,
        clock_out=clock_out,
        status=status,
        total_hours=total_hours,
    )


def timesheet_entry(
    company_id: UUID,
    employee_id: UUID,
    entry_date: date,
    hours: Decimal,
    status: str = "approved",
    description: str | None = None,
) -> TimesheetEntry:
    return TimesheetEntry(
        timesheet_entry_id=uuid4(),
        company_id=company_id,
        employee_id=employee_id,
        entry_date=entry_date,
        hours_worked=hours,
        status=status,
        description=description,
    )


def overtime_request(
    company_id: UUID,
    employee_id: UUID,
    overtime_date: date,
    hours_requested: Decimal,
    hours_approved: Decimal | None = None,
    status: str = "approved",
    overtime_type: str | None = None,
) -> OvertimeRequest:
    return OvertimeRequest(
        overtime_request_id=uuid4(),
        company_id=company_id,
        employee_id=employee_id,
        overtime_date=overtime_date,
        hours_requested=hours_requested,
        hours_approved=hours_approved,
        status=status,
        overtime_type=overtime_type,
    )


def utc(year: int, month: int, day: int, hour: int, minute: int = 0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


@pytest.fixture
async def approved_time_data(
    session: AsyncSession,
    test_company: Company,
    test_employees: dict[str, Employee],
) -> dict[str, object]:
    """One approved record per source, plus records that must be ignored.

    Alice: clock 09:00-19:30 (10.5h) and overtime request of 3h.
    Bob: timesheet 7.75h.
    """
    company_id = test_company.company_id
    alice = test_employees["alice"].employee_id
    bob = test_employees["bob"].employee_id

    clock = clock_entry(company_id, alice, utc(2024, 1, 10, 9), utc(2024, 1, 10, 19, 30))
    sheet = timesheet_entry(company_id, bob, date(2024, 1, 11), Decimal("7.75"))
    overtime = overtime_request(
        company_id, alice, date(2024, 1, 12), Decimal("4"), Decimal("3.0")
    )

    ignored = [
        # Not approved
        clock_entry(company_id, alice, utc(2024, 1, 9, 9), utc(2024, 1, 9, 17), status="pending"),
        timesheet_entry(company_id, bob, date(2024, 1, 12), Decimal("8"), status="rejected"),
        overtime_request(company_id, alice, date(2024, 1, 13), Decimal("2"), status="pending"),
        # Still clocked in
        clock_entry(company_id, alice, utc(2024, 1, 11, 9), None),
        # Outside the period
        timesheet_entry(company_id, bob, date(2024, 1, 22), Decimal("8")),
        clock_entry(company_id, alice, utc(2024, 1, 7, 9), utc(2024, 1, 7, 17)),
    ]

    session.add_all([clock, sheet, overtime, *ignored])
    await session.flush()
    return {"clock": clock, "timesheet": sheet, "overtime": overtime}


# ============================================================================
# Helpers
# ============================================================================


async def count_rows(session: AsyncSession, model: type[Base]) -> int:
    return await session.scalar(select(func.count()).select_from(model)) or 0


async def work_records(session: AsyncSession) -> list[WorkRecord]:
    result = await session.execute(
        select(WorkRecord).execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def sync_logs(session: AsyncSession) -> list[SyncLog]:
    result = await session.execute(
        select(SyncLog).execution_options(populate_existing=True)
    )
    return list(result.scalars().all())
