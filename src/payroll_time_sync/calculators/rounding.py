"""Hour rounding rules applied before the overtime split."""

from __future__ import annotations

from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal
from enum import Enum

MINUTES_PER_HOUR = Decimal("60")


class RoundingRule(str, Enum):
    """Supported rounding rules (increment in minutes)."""

    NONE = "none"
    NEAREST_15 = "nearest_15"
    NEAREST_30 = "nearest_30"
    UP_15 = "up_15"
    UP_30 = "up_30"

    @property
    def increment_minutes(self) -> Decimal | None:
        """Rounding increment, or None for the identity rule."""
        if self is RoundingRule.NONE:
            return None
        return Decimal(self.value.rsplit("_", 1)[1])

    @property
    def rounding_mode(self) -> str | None:
        """Decimal rounding mode used for this rule."""
        if self is RoundingRule.NONE:
            return None
        if self.value.startswith("up_"):
            return ROUND_CEILING
        return ROUND_HALF_UP


def apply_rounding(hours: Decimal, rule: RoundingRule | str) -> Decimal:
    """Round hours to the rule's minute increment.

    ``nearest_*`` rounds to the closest increment (halves go up), ``up_*``
    always rounds up. ``none`` returns the input unchanged.

    Raises:
        ValueError: If hours is negative.
    """
    if hours < 0:
        raise ValueError(f"Hours must be non-negative, got {hours}")

    rule = RoundingRule(rule)
    increment = rule.increment_minutes
    if increment is None:
        return hours

    minutes = hours * MINUTES_PER_HOUR
    steps = (minutes / increment).quantize(Decimal("1"), rounding=rule.rounding_mode)
    return steps * increment / MINUTES_PER_HOUR
