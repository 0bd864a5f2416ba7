"""Time sync service: the entry point used by the API and CLI."""

from __future__ import annotations

import logging
from datetime import date
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_time_sync.calculators.types import (
    PendingCounts,
    SourceType,
    SyncOptions,
    SyncResult,
    SyncSummary,
)
from payroll_time_sync.config import get_settings
from payroll_time_sync.exceptions import SyncExecutionError, SyncLogError, TimeSyncError
from payroll_time_sync.models import PayPeriod, SyncLog
from payroll_time_sync.services.executor import ReconciliationExecutor
from payroll_time_sync.services.previewer import ReconciliationPreviewer
from payroll_time_sync.services.source_fetchers import build_fetchers
from payroll_time_sync.services.sync_log_service import SyncLogStore

logger = logging.getLogger(__name__)

OPEN_PAY_PERIOD_STATUSES = ("open", "processing")


class TimeSyncService:
    """Moves approved time data into payroll work records.

    The service never commits; the caller owns the transaction.
    """

    def __init__(self, session: AsyncSession, actor_id: UUID | None = None):
        self.session = session
        self.actor_id = actor_id
        self.sync_logs = SyncLogStore(session)

    def _resolve_options(self, options: SyncOptions | None) -> SyncOptions:
        if options is None:
            return get_settings().default_sync_options()
        return options

    async def preview_sync(
        self,
        company_id: UUID,
        pay_period_id: UUID | None,
        period_start: date,
        period_end: date,
        options: SyncOptions | None = None,
    ) -> list[SyncSummary]:
        """Per-employee totals a sync would write right now. Writes nothing."""
        previewer = ReconciliationPreviewer(self.session)
        return await previewer.preview(
            company_id, period_start, period_end, self._resolve_options(options)
        )

    async def execute_sync(
        self,
        company_id: UUID,
        pay_period_id: UUID | None,
        period_start: date,
        period_end: date,
        options: SyncOptions | None = None,
    ) -> SyncResult | None:
        """Write work records for all pending time data in the period.

        Returns None if the run could not be carried out (sync log could not
        be written, or the run aborted). Per-record failures do not count:
        they are reported in ``SyncResult.failures``.
        """
        executor = ReconciliationExecutor(self.session, self.sync_logs)
        try:
            return await executor.execute(
                company_id,
                pay_period_id,
                period_start,
                period_end,
                self._resolve_options(options),
                actor_id=self.actor_id,
            )
        except SyncExecutionError:
            # The log stays behind as 'failed'
            logger.exception("Time sync failed for company %s", company_id)
            return None
        except SyncLogError:
            logger.exception("Time sync log error for company %s", company_id)
            await self.session.rollback()
            return None

    async def fetch_sync_history(self, company_id: UUID, limit: int = 10) -> list[SyncLog]:
        """Most recent sync logs for a company, newest first."""
        return await self.sync_logs.list_history(company_id, limit)

    async def get_sync_log(self, sync_log_id: UUID) -> SyncLog | None:
        return await self.sync_logs.get(sync_log_id)

    async def reverse_sync(self, sync_log_id: UUID) -> bool:
        """Undo a completed sync.

        Returns False, with nothing changed, if the log does not exist or
        cannot be reversed (already reversed, failed, still processing).
        """
        try:
            async with self.session.begin_nested():
                await self.sync_logs.reverse(sync_log_id, self.actor_id)
        except TimeSyncError as e:
            logger.warning("Reversal of sync %s rejected: %s", sync_log_id, e)
            return False
        return True

    async def pending_counts(
        self, company_id: UUID, period_start: date, period_end: date
    ) -> PendingCounts:
        """Approved, not-yet-synced record counts per source."""
        fetchers = build_fetchers(self.session)
        counts = {
            source_type: await fetcher.count_pending(company_id, period_start, period_end)
            for source_type, fetcher in fetchers.items()
        }
        return PendingCounts(
            time_clock=counts[SourceType.TIME_CLOCK],
            timesheets=counts[SourceType.TIMESHEET],
            overtime=counts[SourceType.OVERTIME_REQUEST],
        )

    async def list_open_pay_periods(self, company_id: UUID, limit: int = 20) -> list[PayPeriod]:
        """Pay periods that can still receive synced hours, newest first."""
        result = await self.session.execute(
            select(PayPeriod)
            .where(
                PayPeriod.company_id == company_id,
                PayPeriod.status.in_(OPEN_PAY_PERIOD_STATUSES),
            )
            .order_by(PayPeriod.period_start.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
