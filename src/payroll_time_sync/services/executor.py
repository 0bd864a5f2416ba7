"""Sync execution: writes one work record per pending source record."""

from __future__ import annotations

import logging
from datetime import date
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_time_sync.calculators.aggregation import SummaryAccumulator, reconcile_record
from payroll_time_sync.calculators.overtime import OvertimeSplit
from payroll_time_sync.calculators.types import (
    RecordFailure,
    SyncOptions,
    SyncResult,
    WorkHourRecord,
)
from payroll_time_sync.exceptions import SyncExecutionError
from payroll_time_sync.models import EmployeePosition, WorkRecord
from payroll_time_sync.services.source_fetchers import build_fetchers
from payroll_time_sync.services.sync_log_service import SyncLogStore

logger = logging.getLogger(__name__)


class ReconciliationExecutor:
    """Persists pending time data as payroll work records.

    Pipeline (per run):
    1) Create the sync log header ('processing')
    2) For each enabled source, fetch pending records (same dedup as preview)
    3) Per record: resolve primary position, insert one work record in its
       own savepoint; failures are collected, not raised
    4) Finalize the log ('completed') with counts and totals

    Work records are linked to the sync log that created them. The unique
    link columns on the work record table reject a second claim on the same
    source record, even from a concurrent run.
    """

    def __init__(self, session: AsyncSession, sync_logs: SyncLogStore | None = None):
        self.session = session
        self.sync_logs = sync_logs or SyncLogStore(session)
        self.fetchers = build_fetchers(session)
        self._positions: dict[UUID, UUID | None] = {}

    async def execute(
        self,
        company_id: UUID,
        pay_period_id: UUID | None,
        period_start: date,
        period_end: date,
        options: SyncOptions,
        actor_id: UUID | None = None,
    ) -> SyncResult:
        """Run a sync for a company and period.

        Raises:
            SyncLogError: If the log header cannot be created or finalized.
            SyncExecutionError: If the run aborts after the header exists.
                The log is marked 'failed' and this run's work records are
                rolled back.
        """
        sync_log = await self.sync_logs.create(company_id, pay_period_id, options, actor_id)
        result = SyncResult(sync_log_id=sync_log.sync_log_id)
        accumulator = SummaryAccumulator()
        self._positions.clear()

        try:
            async with self.session.begin_nested():
                for source_type in options.enabled_sources():
                    records = await self.fetchers[source_type].fetch(
                        company_id, period_start, period_end
                    )
                    for record in records:
                        split = reconcile_record(record, options)
                        failure = await self.write_work_record(
                            company_id, sync_log.sync_log_id, record, split
                        )
                        if failure is not None:
                            result.failures.append(failure)
                            continue
                        accumulator.add(record, split)
        except Exception as e:
            logger.exception("Sync %s aborted", sync_log.sync_log_id)
            await self.sync_logs.mark_failed(sync_log, str(e))
            raise SyncExecutionError(
                f"Sync {sync_log.sync_log_id} aborted: {e}", sync_log.sync_log_id
            ) from e

        result.employees_processed = accumulator.employee_count
        result.records_created = sum(s.source_count for s in accumulator.summaries())
        result.total_regular_hours = accumulator.total_regular_hours
        result.total_overtime_hours = accumulator.total_overtime_hours
        result.summary = accumulator.summaries()

        await self.sync_logs.complete(sync_log, result)

        logger.info(
            "Synced %d time records for %d employees (sync %s, %d failed)",
            result.records_created,
            result.employees_processed,
            sync_log.sync_log_id,
            len(result.failures),
        )
        return result

    async def write_work_record(
        self,
        company_id: UUID,
        sync_log_id: UUID,
        record: WorkHourRecord,
        split: OvertimeSplit,
    ) -> RecordFailure | None:
        """Insert the work record for one source record.

        Returns None on success, or a RecordFailure describing why the row
        was not written. The insert runs in a savepoint so a failure leaves
        the rest of the batch intact.
        """
        position_id = await self.resolve_position(record.employee_id)

        work_record = WorkRecord(
            company_id=company_id,
            employee_id=record.employee_id,
            employee_position_id=position_id,
            work_date=record.work_date,
            regular_hours=split.regular,
            overtime_hours=split.overtime,
            source_type=record.source_type.value,
            day_type="regular",
            notes=record.note,
            sync_log_id=sync_log_id,
        )
        setattr(work_record, record.source_type.link_column, record.source_id)

        try:
            async with self.session.begin_nested():
                self.session.add(work_record)
                await self.session.flush()
        except SQLAlchemyError as e:
            logger.warning(
                "Failed to write work record for %s %s: %s",
                record.source_type.value,
                record.source_id,
                e,
            )
            return RecordFailure(
                source_type=record.source_type,
                source_id=record.source_id,
                employee_id=record.employee_id,
                message=str(e),
            )
        return None

    async def resolve_position(self, employee_id: UUID) -> UUID | None:
        """Employee's primary active position, or None.

        Best effort: a missing position or a failed lookup never blocks the
        work record.
        """
        if employee_id in self._positions:
            return self._positions[employee_id]

        position_id: UUID | None = None
        try:
            async with self.session.begin_nested():
                result = await self.session.execute(
                    select(EmployeePosition.employee_position_id)
                    .where(
                        EmployeePosition.employee_id == employee_id,
                        EmployeePosition.is_primary.is_(True),
                        EmployeePosition.is_active.is_(True),
                    )
                    .order_by(EmployeePosition.created_at.desc())
                    .limit(1)
                )
                position_id = result.scalar_one_or_none()
        except SQLAlchemyError:
            logger.exception("Position lookup failed for employee %s", employee_id)

        self._positions[employee_id] = position_id
        return position_id
