"""Time sync API endpoints."""

from datetime import date
from decimal import Decimal
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, HTTPException, Path, Query, status

from payroll_time_sync.api.dependencies import DbSession, TimeSync
from payroll_time_sync.api.schemas import (
    ErrorResponse,
    PayPeriodListResponse,
    PayPeriodResponse,
    PendingCountsResponse,
    PreviewResponse,
    RecordFailureResponse,
    ReverseResponse,
    SyncLogListResponse,
    SyncLogResponse,
    SyncRequest,
    SyncResultResponse,
    SyncSummaryResponse,
)
from payroll_time_sync.calculators.types import SyncOptions
from payroll_time_sync.services.state_machine import SyncLogStateMachine, SyncLogStatus

router = APIRouter(tags=["time-sync"])


def _options(payload: SyncRequest) -> SyncOptions | None:
    return payload.options.to_options() if payload.options else None


# ============================================================================
# Sync inputs
# ============================================================================


@router.get(
    "/companies/{company_id}/pay-periods",
    response_model=PayPeriodListResponse,
)
async def list_pay_periods(
    service: TimeSync,
    company_id: Annotated[UUID, Path()],
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
) -> PayPeriodListResponse:
    """List pay periods that can still receive synced hours."""
    periods = await service.list_open_pay_periods(company_id, limit)
    return PayPeriodListResponse(
        items=[PayPeriodResponse.model_validate(p) for p in periods],
        total=len(periods),
    )


@router.get(
    "/companies/{company_id}/time-sync/pending",
    response_model=PendingCountsResponse,
    responses={400: {"model": ErrorResponse}},
)
async def get_pending_counts(
    service: TimeSync,
    company_id: Annotated[UUID, Path()],
    period_start: Annotated[date, Query()],
    period_end: Annotated[date, Query()],
) -> PendingCountsResponse:
    """Count approved records in the period that have not been synced."""
    if period_end < period_start:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="period_end must not be before period_start",
        )
    counts = await service.pending_counts(company_id, period_start, period_end)
    return PendingCountsResponse.model_validate(counts)


# ============================================================================
# Preview / Execute
# ============================================================================


@router.post(
    "/companies/{company_id}/time-sync/preview",
    response_model=PreviewResponse,
    responses={400: {"model": ErrorResponse}},
)
async def preview_sync(
    service: TimeSync,
    company_id: Annotated[UUID, Path()],
    payload: SyncRequest,
) -> PreviewResponse:
    """Per-employee hours a sync would write. Writes nothing."""
    summaries = await service.preview_sync(
        company_id,
        payload.pay_period_id,
        payload.period_start,
        payload.period_end,
        _options(payload),
    )
    return PreviewResponse(
        company_id=company_id,
        period_start=payload.period_start,
        period_end=payload.period_end,
        employees=[SyncSummaryResponse.model_validate(s) for s in summaries],
        total_regular_hours=sum((s.regular_hours for s in summaries), Decimal("0")),
        total_overtime_hours=sum((s.overtime_hours for s in summaries), Decimal("0")),
    )


@router.post(
    "/companies/{company_id}/time-sync/execute",
    response_model=SyncResultResponse,
    status_code=status.HTTP_201_CREATED,
    responses={500: {"model": ErrorResponse}},
)
async def execute_sync(
    db: DbSession,
    service: TimeSync,
    company_id: Annotated[UUID, Path()],
    payload: SyncRequest,
) -> SyncResultResponse:
    """Write work records for all pending approved time data in the period."""
    result = await service.execute_sync(
        company_id,
        payload.pay_period_id,
        payload.period_start,
        payload.period_end,
        _options(payload),
    )
    # A failed run still leaves its 'failed' log behind
    await db.commit()

    if result is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to sync time data",
        )

    return SyncResultResponse(
        sync_log_id=result.sync_log_id,
        success=result.success,
        employees_processed=result.employees_processed,
        records_created=result.records_created,
        records_updated=result.records_updated,
        total_regular_hours=result.total_regular_hours,
        total_overtime_hours=result.total_overtime_hours,
        summary=[SyncSummaryResponse.model_validate(s) for s in result.summary],
        failures=[
            RecordFailureResponse(
                source_type=f.source_type.value,
                source_id=f.source_id,
                employee_id=f.employee_id,
                message=f.message,
            )
            for f in result.failures
        ],
    )


# ============================================================================
# History / Reversal
# ============================================================================


@router.get(
    "/companies/{company_id}/time-sync/history",
    response_model=SyncLogListResponse,
)
async def get_sync_history(
    service: TimeSync,
    company_id: Annotated[UUID, Path()],
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> SyncLogListResponse:
    """Most recent sync runs for a company, newest first."""
    logs = await service.fetch_sync_history(company_id, limit)
    return SyncLogListResponse(
        items=[SyncLogResponse.model_validate(log) for log in logs],
        total=len(logs),
    )


@router.post(
    "/time-sync/logs/{sync_log_id}/reverse",
    response_model=ReverseResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def reverse_sync(
    db: DbSession,
    service: TimeSync,
    sync_log_id: Annotated[UUID, Path()],
) -> ReverseResponse:
    """Delete the work records a completed sync created and mark it reversed."""
    sync_log = await service.get_sync_log(sync_log_id)
    if sync_log is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Sync log not found",
        )

    from_status = sync_log.status
    reversible = SyncLogStateMachine.can_reverse(from_status)
    if not reversible or not await service.reverse_sync(sync_log_id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Sync log cannot be reversed from status '{from_status}'",
        )

    await db.commit()
    sync_log = await service.get_sync_log(sync_log_id)
    return ReverseResponse(
        sync_log_id=sync_log_id,
        status=SyncLogStatus.REVERSED.value,
        reversed_at=sync_log.reversed_at if sync_log else None,
        reversed_by=sync_log.reversed_by if sync_log else None,
    )
