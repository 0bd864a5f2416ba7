"""Time sync command line interface.

Provides operational tools for:
- Previewing and executing a sync for a pay period
- Listing sync history
- Reversing a completed sync
- Counting pending approved records

Usage:
    payroll-time-sync preview --company-id X --start 2024-01-01 --end 2024-01-15
    payroll-time-sync execute --company-id X --start 2024-01-01 --end 2024-01-15
    payroll-time-sync history --company-id X --limit 5
    payroll-time-sync reverse --sync-log-id Y
    payroll-time-sync pending --company-id X --start 2024-01-01 --end 2024-01-15
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Awaitable, Callable
from uuid import UUID

from payroll_time_sync.calculators.rounding import RoundingRule
from payroll_time_sync.calculators.types import SyncOptions, has_storable_precision
from payroll_time_sync.config import configure_logging, get_settings
from payroll_time_sync.database import create_schema, dispose_db, get_session
from payroll_time_sync.services.time_sync_service import TimeSyncService

logger = logging.getLogger(__name__)


def parse_date(s: str) -> date:
    """Parse ISO date string."""
    return date.fromisoformat(s)


def parse_uuid(s: str) -> UUID:
    """Parse UUID string."""
    return UUID(s)


def parse_hours(s: str) -> Decimal:
    """Parse a non-negative hours value with at most 4 decimal places."""
    try:
        value = Decimal(s)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"invalid hours value: {s!r}") from None
    if not value.is_finite() or value < 0 or not has_storable_precision(value):
        raise argparse.ArgumentTypeError(
            f"hours must be non-negative with at most 4 decimal places: {s!r}"
        )
    return value


def _json_default(value: Any) -> Any:
    if isinstance(value, (Decimal, UUID)):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def emit(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=_json_default))


class TimeSyncCli:
    """Time sync command line interface."""

    def __init__(self) -> None:
        self.parser = self._build_parser()

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="payroll-time-sync",
            description="Time-to-payroll reconciliation tools",
        )
        parser.add_argument(
            "--actor-id",
            type=parse_uuid,
            help="User ID recorded on sync logs and reversals",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        for name, help_text in (
            ("preview", "Show per-employee hours a sync would write"),
            ("execute", "Write work records for pending approved time data"),
        ):
            sub = subparsers.add_parser(name, help=help_text)
            self._add_period_arguments(sub)
            sub.add_argument(
                "--pay-period-id",
                type=parse_uuid,
                help="Pay period the sync belongs to",
            )
            sub.add_argument(
                "--rounding-rule",
                choices=[rule.value for rule in RoundingRule],
                help="Rounding applied to clock and timesheet hours",
            )
            sub.add_argument(
                "--daily-threshold",
                type=parse_hours,
                help="Hours per record above which hours count as overtime",
            )
            sub.add_argument("--skip-time-clock", action="store_true")
            sub.add_argument("--skip-timesheets", action="store_true")
            sub.add_argument("--skip-overtime-requests", action="store_true")

        history = subparsers.add_parser("history", help="List recent sync runs")
        history.add_argument("--company-id", type=parse_uuid, required=True)
        history.add_argument("--limit", type=int, default=10)

        reverse = subparsers.add_parser("reverse", help="Reverse a completed sync")
        reverse.add_argument("--sync-log-id", type=parse_uuid, required=True)

        pending = subparsers.add_parser(
            "pending", help="Count approved records awaiting sync"
        )
        self._add_period_arguments(pending)

        subparsers.add_parser("init-db", help="Create database tables")

        return parser

    @staticmethod
    def _add_period_arguments(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("--company-id", type=parse_uuid, required=True)
        sub.add_argument(
            "--start", type=parse_date, required=True, help="Period start (YYYY-MM-DD)"
        )
        sub.add_argument(
            "--end", type=parse_date, required=True, help="Period end (YYYY-MM-DD)"
        )

    @staticmethod
    def build_options(args: argparse.Namespace) -> SyncOptions:
        """Settings defaults, overridden by command line flags."""
        defaults = get_settings().default_sync_options()
        return SyncOptions(
            include_time_clock=not args.skip_time_clock,
            include_timesheets=not args.skip_timesheets,
            include_overtime_requests=not args.skip_overtime_requests,
            overtime_threshold_per_day=(
                args.daily_threshold
                if args.daily_threshold is not None
                else defaults.overtime_threshold_per_day
            ),
            overtime_threshold_per_week=defaults.overtime_threshold_per_week,
            rounding_rule=args.rounding_rule or defaults.rounding_rule,
        )

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)

        if not parsed.command:
            self.parser.print_help()
            return 1

        # Dispatch to command handler
        handlers: dict[str, Callable[[argparse.Namespace], Awaitable[int]]] = {
            "preview": self._cmd_preview,
            "execute": self._cmd_execute,
            "history": self._cmd_history,
            "reverse": self._cmd_reverse,
            "pending": self._cmd_pending,
            "init-db": self._cmd_init_db,
        }

        handler = handlers.get(parsed.command)
        if handler is None:
            print(f"Unknown command: {parsed.command}", file=sys.stderr)
            return 1

        configure_logging()
        return asyncio.run(self._run_handler(handler, parsed))

    async def _run_handler(
        self,
        handler: Callable[[argparse.Namespace], Awaitable[int]],
        args: argparse.Namespace,
    ) -> int:
        try:
            return await handler(args)
        finally:
            await dispose_db()

    async def _cmd_preview(self, args: argparse.Namespace) -> int:
        """Preview a sync."""
        async with get_session() as session:
            service = TimeSyncService(session, actor_id=args.actor_id)
            summaries = await service.preview_sync(
                args.company_id, args.pay_period_id, args.start, args.end,
                self.build_options(args),
            )
        emit([asdict(s) for s in summaries])
        return 0

    async def _cmd_execute(self, args: argparse.Namespace) -> int:
        """Execute a sync."""
        async with get_session() as session:
            service = TimeSyncService(session, actor_id=args.actor_id)
            result = await service.execute_sync(
                args.company_id, args.pay_period_id, args.start, args.end,
                self.build_options(args),
            )
        if result is None:
            print("ERROR: Failed to sync time data", file=sys.stderr)
            return 1
        payload = asdict(result)
        payload["has_failures"] = result.has_failures
        emit(payload)
        return 1 if result.has_failures else 0

    async def _cmd_history(self, args: argparse.Namespace) -> int:
        """List sync history."""
        async with get_session() as session:
            service = TimeSyncService(session)
            logs = await service.fetch_sync_history(args.company_id, args.limit)
            rows = [log.to_history_dict() for log in logs]
        emit(rows)
        return 0

    async def _cmd_reverse(self, args: argparse.Namespace) -> int:
        """Reverse a sync."""
        async with get_session() as session:
            service = TimeSyncService(session, actor_id=args.actor_id)
            reversed_ok = await service.reverse_sync(args.sync_log_id)
        emit({"sync_log_id": args.sync_log_id, "reversed": reversed_ok})
        return 0 if reversed_ok else 1

    async def _cmd_pending(self, args: argparse.Namespace) -> int:
        """Count pending records."""
        async with get_session() as session:
            service = TimeSyncService(session)
            counts = await service.pending_counts(args.company_id, args.start, args.end)
        payload = asdict(counts)
        payload["total"] = counts.total
        emit(payload)
        return 0

    async def _cmd_init_db(self, args: argparse.Namespace) -> int:
        """Create tables."""
        await create_schema()
        logger.info("Database schema created")
        return 0


def main() -> int:
    """CLI entry point."""
    cli = TimeSyncCli()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
