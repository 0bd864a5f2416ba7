"""Tests for the TimeSyncService entry points."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from payroll_time_sync.calculators.rounding import RoundingRule
from payroll_time_sync.calculators.types import SyncOptions
from payroll_time_sync.config import get_settings
from payroll_time_sync.models import PayPeriod
from payroll_time_sync.services import executor as executor_module
from payroll_time_sync.services.time_sync_service import TimeSyncService

from conftest import PERIOD_END, PERIOD_START, sync_logs, work_records

pytestmark = pytest.mark.asyncio


@pytest.fixture
def actor_id():
    return uuid4()


@pytest.fixture
def service(session, actor_id):
    return TimeSyncService(session, actor_id=actor_id)


class TestPreviewAndExecute:
    async def test_default_options_from_settings(
        self, service, test_company, test_employees, approved_time_data, monkeypatch
    ):
        monkeypatch.setenv("DEFAULT_ROUNDING_RULE", "up_30")
        get_settings.cache_clear()
        try:
            summaries = await service.preview_sync(
                test_company.company_id, None, PERIOD_START, PERIOD_END
            )
        finally:
            get_settings.cache_clear()

        bob = next(s for s in summaries if s.employee_id == test_employees["bob"].employee_id)
        assert bob.regular_hours == Decimal("8")

    async def test_execute_records_actor(
        self, service, session, actor_id, test_company, test_pay_period, approved_time_data
    ):
        result = await service.execute_sync(
            test_company.company_id,
            test_pay_period.pay_period_id,
            PERIOD_START,
            PERIOD_END,
            SyncOptions(rounding_rule=RoundingRule.NONE),
        )

        assert result is not None
        assert result.records_created == 3
        [log] = await sync_logs(session)
        assert log.created_by == actor_id

    async def test_hard_failure_returns_none(
        self, service, session, test_company, approved_time_data, monkeypatch, caplog
    ):
        def explode(record, options):
            raise RuntimeError("boom")

        monkeypatch.setattr(executor_module, "reconcile_record", explode)

        result = await service.execute_sync(
            test_company.company_id, None, PERIOD_START, PERIOD_END, SyncOptions()
        )

        assert result is None
        assert "Time sync failed" in caplog.text
        [log] = await sync_logs(session)
        assert log.status == "failed"
        assert await work_records(session) == []


class TestReverseSync:
    async def test_reverse_then_reject(
        self, service, session, actor_id, test_company, test_employees, approved_time_data
    ):
        result = await service.execute_sync(
            test_company.company_id, None, PERIOD_START, PERIOD_END, SyncOptions()
        )

        assert await service.reverse_sync(result.sync_log_id) is True
        assert await work_records(session) == []

        log = await service.get_sync_log(result.sync_log_id)
        assert log.status == "reversed"
        assert log.reversed_by == actor_id

        # Idempotent: second reversal is rejected and changes nothing
        assert await service.reverse_sync(result.sync_log_id) is False
        log = await service.get_sync_log(result.sync_log_id)
        assert log.status == "reversed"

    async def test_unknown_log(self, service):
        assert await service.reverse_sync(uuid4()) is False


class TestHistory:
    async def test_fetch_sync_history(self, service, test_company, approved_time_data):
        for _ in range(3):
            await service.execute_sync(
                test_company.company_id, None, PERIOD_START, PERIOD_END, SyncOptions()
            )

        history = await service.fetch_sync_history(test_company.company_id, limit=2)
        assert len(history) == 2
        assert all(log.status == "completed" for log in history)

    async def test_history_row_includes_period_and_creator(
        self, session, test_company, test_employees, test_pay_period, approved_time_data
    ):
        bob = test_employees["bob"]
        service = TimeSyncService(session, actor_id=bob.employee_id)
        await service.execute_sync(
            test_company.company_id,
            test_pay_period.pay_period_id,
            PERIOD_START,
            PERIOD_END,
            SyncOptions(),
        )

        [log] = await service.fetch_sync_history(test_company.company_id)
        row = log.to_history_dict()

        assert row["created_by"] == bob.employee_id
        assert row["created_by_name"] == "Bob Baker"
        assert row["pay_period"] == {
            "period_number": test_pay_period.period_number,
            "period_start": test_pay_period.period_start,
            "period_end": test_pay_period.period_end,
        }


class TestPendingCounts:
    async def test_counts_per_source(self, service, test_company, approved_time_data):
        counts = await service.pending_counts(test_company.company_id, PERIOD_START, PERIOD_END)

        assert counts.time_clock == 1
        assert counts.timesheets == 1
        assert counts.overtime == 1
        assert counts.total == 3

    async def test_counts_drop_after_sync(self, service, test_company, approved_time_data):
        await service.execute_sync(
            test_company.company_id, None, PERIOD_START, PERIOD_END, SyncOptions()
        )

        counts = await service.pending_counts(test_company.company_id, PERIOD_START, PERIOD_END)
        assert counts.total == 0


class TestPayPeriods:
    async def test_open_periods_newest_first(self, service, session, test_company):
        periods = [
            PayPeriod(
                company_id=test_company.company_id,
                period_start=date(2024, month, 1),
                period_end=date(2024, month, 14),
                status=status,
            )
            for month, status in ((1, "closed"), (2, "processing"), (3, "open"))
        ]
        session.add_all(periods)
        await session.flush()

        result = await service.list_open_pay_periods(test_company.company_id)

        assert [p.period_start for p in result] == [date(2024, 3, 1), date(2024, 2, 1)]

    async def test_limit(self, service, session, test_company):
        session.add_all(
            PayPeriod(
                company_id=test_company.company_id,
                period_start=date(2024, month, 1),
                period_end=date(2024, month, 14),
            )
            for month in range(1, 6)
        )
        await session.flush()

        result = await service.list_open_pay_periods(test_company.company_id, limit=2)
        assert len(result) == 2
