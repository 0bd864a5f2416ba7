"""Dry-run aggregation of pending time data."""

from __future__ import annotations

import logging
from datetime import date
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from payroll_time_sync.calculators.aggregation import SummaryAccumulator, reconcile_record
from payroll_time_sync.calculators.types import SyncOptions, SyncSummary
from payroll_time_sync.services.source_fetchers import build_fetchers

logger = logging.getLogger(__name__)


class ReconciliationPreviewer:
    """Computes what a sync would write, without writing anything.

    Reads the same dedup state an execution would see, so running a preview
    right before an execution reports the same employees and hours.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.fetchers = build_fetchers(session)

    async def preview(
        self,
        company_id: UUID,
        period_start: date,
        period_end: date,
        options: SyncOptions,
    ) -> list[SyncSummary]:
        """Per-employee summary of pending hours for the enabled sources."""
        accumulator = SummaryAccumulator()

        for source_type in options.enabled_sources():
            records = await self.fetchers[source_type].fetch(company_id, period_start, period_end)
            for record in records:
                accumulator.add(record, reconcile_record(record, options))

        logger.info(
            "Previewed sync for company %s (%s to %s): %d employees",
            company_id,
            period_start,
            period_end,
            accumulator.employee_count,
        )
        return accumulator.summaries()
