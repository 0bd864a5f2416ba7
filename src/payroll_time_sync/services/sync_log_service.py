"""Sync log persistence and reversal."""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from payroll_time_sync.calculators.types import SyncOptions, SyncResult
from payroll_time_sync.exceptions import (
    InvalidTransitionError,
    SyncLogError,
    SyncLogNotFoundError,
)
from payroll_time_sync.models import SyncLog, WorkRecord
from payroll_time_sync.models.base import utcnow
from payroll_time_sync.services.state_machine import SyncLogStateMachine, SyncLogStatus

logger = logging.getLogger(__name__)


class SyncLogStore:
    """Audit records of sync executions.

    Logs are created in 'processing', finalized once, and afterwards only
    ever move from 'completed' to 'reversed'.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        company_id: UUID,
        pay_period_id: UUID | None,
        options: SyncOptions,
        actor_id: UUID | None = None,
    ) -> SyncLog:
        """Insert a 'processing' log header with the options snapshot.

        Raises:
            SyncLogError: If the header cannot be written.
        """
        sync_log = SyncLog(
            company_id=company_id,
            pay_period_id=pay_period_id,
            sync_type="full",
            status=SyncLogStatus.PROCESSING.value,
            sync_options=options.to_snapshot(),
            started_at=utcnow(),
            created_by=actor_id,
        )
        try:
            self.session.add(sync_log)
            await self.session.flush()
        except SQLAlchemyError as e:
            raise SyncLogError(f"Could not create sync log for company {company_id}: {e}") from e
        return sync_log

    async def complete(self, sync_log: SyncLog, result: SyncResult) -> SyncLog:
        """Finalize a log with the run's counts and totals.

        Raises:
            SyncLogError: If the log is no longer 'processing' or the update fails.
        """
        return await self._finalize(
            sync_log,
            SyncLogStatus.COMPLETED,
            completed_at=utcnow(),
            employees_processed=result.employees_processed,
            records_created=result.records_created,
            records_updated=result.records_updated,
            total_regular_hours=result.total_regular_hours,
            total_overtime_hours=result.total_overtime_hours,
        )

    async def mark_failed(self, sync_log: SyncLog, message: str) -> SyncLog:
        """Finalize a log as 'failed'."""
        return await self._finalize(
            sync_log,
            SyncLogStatus.FAILED,
            completed_at=utcnow(),
            error_message=message,
        )

    async def _finalize(self, sync_log: SyncLog, to_status: SyncLogStatus, **values) -> SyncLog:
        try:
            SyncLogStateMachine.validate_transition(sync_log.status, to_status)
            # Conditional update guards against a concurrent finalizer
            result = await self.session.execute(
                update(SyncLog)
                .where(
                    SyncLog.sync_log_id == sync_log.sync_log_id,
                    SyncLog.status == SyncLogStatus.PROCESSING.value,
                )
                .values(status=to_status.value, **values)
                .execution_options(synchronize_session=False)
            )
        except (InvalidTransitionError, SQLAlchemyError) as e:
            raise SyncLogError(
                f"Could not finalize sync log {sync_log.sync_log_id}: {e}",
                sync_log.sync_log_id,
            ) from e

        if result.rowcount == 0:
            raise SyncLogError(
                f"Sync log {sync_log.sync_log_id} was finalized concurrently",
                sync_log.sync_log_id,
            )
        await self.session.refresh(sync_log)
        return sync_log

    async def get(self, sync_log_id: UUID) -> SyncLog | None:
        result = await self.session.execute(
            select(SyncLog)
            .where(SyncLog.sync_log_id == sync_log_id)
            .options(selectinload(SyncLog.pay_period), selectinload(SyncLog.creator))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_history(self, company_id: UUID, limit: int = 10) -> list[SyncLog]:
        """Most recent logs for a company, newest first."""
        result = await self.session.execute(
            select(SyncLog)
            .where(SyncLog.company_id == company_id)
            .options(selectinload(SyncLog.pay_period), selectinload(SyncLog.creator))
            .execution_options(populate_existing=True)
            .order_by(SyncLog.created_at.desc(), SyncLog.started_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def reverse(self, sync_log_id: UUID, actor_id: UUID | None = None) -> int:
        """Delete the work records a sync created and mark it 'reversed'.

        Only work records linked to this log (and to a source record) are
        deleted. Returns the number of deleted work records.

        Raises:
            SyncLogNotFoundError: If the log does not exist.
            InvalidTransitionError: If the log is not 'completed' (including
                when it was already reversed). Nothing is deleted.
        """
        sync_log = await self.get(sync_log_id)
        if sync_log is None:
            raise SyncLogNotFoundError(sync_log_id)

        SyncLogStateMachine.validate_transition(sync_log.status, SyncLogStatus.REVERSED)

        deleted = await self.session.execute(
            delete(WorkRecord)
            .where(
                WorkRecord.sync_log_id == sync_log_id,
                or_(
                    WorkRecord.time_clock_entry_id.is_not(None),
                    WorkRecord.timesheet_entry_id.is_not(None),
                    WorkRecord.overtime_request_id.is_not(None),
                ),
            )
            .execution_options(synchronize_session=False)
        )

        result = await self.session.execute(
            update(SyncLog)
            .where(
                SyncLog.sync_log_id == sync_log_id,
                SyncLog.status == SyncLogStatus.COMPLETED.value,
            )
            .values(
                status=SyncLogStatus.REVERSED.value,
                reversed_at=utcnow(),
                reversed_by=actor_id,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            # Another caller reversed it between our read and write
            raise InvalidTransitionError(
                SyncLogStatus.REVERSED.value,
                SyncLogStatus.REVERSED.value,
                "sync has already been reversed",
            )

        await self.session.refresh(sync_log)

        deleted_count = deleted.rowcount or 0
        logger.info(
            "Reversed sync %s: deleted %d work records", sync_log_id, deleted_count
        )
        return deleted_count
