"""Daily overtime split."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from payroll_time_sync.calculators.types import SourceType

ZERO = Decimal("0")


@dataclass(frozen=True)
class OvertimeSplit:
    """Regular/overtime components of one source record's hours."""

    regular: Decimal
    overtime: Decimal

    @property
    def total(self) -> Decimal:
        return self.regular + self.overtime


def split_hours(hours: Decimal, threshold: Decimal) -> OvertimeSplit:
    """Split hours at a per-day threshold.

    regular = min(hours, threshold), overtime = max(0, hours - threshold).
    Both parts are Decimal so they always sum back to ``hours``.
    """
    if hours < 0:
        raise ValueError(f"Hours must be non-negative, got {hours}")
    if threshold < 0:
        raise ValueError(f"Overtime threshold must be non-negative, got {threshold}")

    regular = min(hours, threshold)
    overtime = max(ZERO, hours - threshold)
    return OvertimeSplit(regular=regular, overtime=overtime)


def split_for_source(
    source_type: SourceType, hours: Decimal, threshold: Decimal
) -> OvertimeSplit:
    """Split hours for a record of the given source type.

    Overtime requests were already adjudicated as overtime upstream, so all
    of their hours are overtime regardless of the threshold.
    """
    if source_type is SourceType.OVERTIME_REQUEST:
        if hours < 0:
            raise ValueError(f"Hours must be non-negative, got {hours}")
        return OvertimeSplit(regular=ZERO, overtime=hours)
    return split_hours(hours, threshold)
