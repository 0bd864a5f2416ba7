"""Tests for hour rounding rules."""

from decimal import Decimal

import pytest

from payroll_time_sync.calculators.rounding import RoundingRule, apply_rounding


class TestApplyRounding:
    """Test rounding to minute increments."""

    def test_none_is_identity(self):
        """'none' returns hours unchanged."""
        assert apply_rounding(Decimal("7.1234"), RoundingRule.NONE) == Decimal("7.1234")

    @pytest.mark.parametrize(
        "hours,expected",
        [
            (Decimal("8.1"), Decimal("8.0")),  # 486 min -> 480
            (Decimal("8.125"), Decimal("8.25")),  # 487.5 min is a half step, rounds up
            (Decimal("8.2"), Decimal("8.25")),  # 492 min -> 495
            (Decimal("10.5"), Decimal("10.5")),
        ],
    )
    def test_nearest_15(self, hours, expected):
        """Nearest quarter hour, halves round up."""
        assert apply_rounding(hours, RoundingRule.NEAREST_15) == expected

    def test_nearest_30(self):
        """Nearest half hour."""
        assert apply_rounding(Decimal("7.74"), RoundingRule.NEAREST_30) == Decimal("7.5")
        assert apply_rounding(Decimal("7.75"), RoundingRule.NEAREST_30) == Decimal("8")

    def test_up_15_always_rounds_up(self):
        """Any partial quarter hour rounds up."""
        assert apply_rounding(Decimal("8.01"), RoundingRule.UP_15) == Decimal("8.25")
        assert apply_rounding(Decimal("8.25"), RoundingRule.UP_15) == Decimal("8.25")

    def test_up_30_always_rounds_up(self):
        """7.75 hours rounds up to 8 with up_30."""
        assert apply_rounding(Decimal("7.75"), RoundingRule.UP_30) == Decimal("8")

    def test_accepts_rule_value_string(self):
        """Rules can be passed by their stored value."""
        assert apply_rounding(Decimal("7.75"), "up_30") == Decimal("8")

    @pytest.mark.parametrize("rule", list(RoundingRule))
    def test_rounding_is_idempotent(self, rule):
        """Rounding an already rounded value changes nothing."""
        for hours in (Decimal("0"), Decimal("3.3333"), Decimal("7.75"), Decimal("10.6")):
            once = apply_rounding(hours, rule)
            assert apply_rounding(once, rule) == once

    def test_zero_hours(self):
        """Zero stays zero under every rule."""
        for rule in RoundingRule:
            assert apply_rounding(Decimal("0"), rule) == Decimal("0")

    def test_negative_hours_rejected(self):
        """Negative hours are invalid input."""
        with pytest.raises(ValueError):
            apply_rounding(Decimal("-1"), RoundingRule.NEAREST_15)

    def test_unknown_rule_rejected(self):
        """Unknown rule names raise ValueError."""
        with pytest.raises(ValueError):
            apply_rounding(Decimal("1"), "nearest_5")


class TestRoundingRule:
    """Test rule metadata."""

    def test_increments(self):
        assert RoundingRule.NONE.increment_minutes is None
        assert RoundingRule.NEAREST_15.increment_minutes == 15
        assert RoundingRule.UP_30.increment_minutes == 30
