"""
Unit Tests - Periods, Windows and Money
"""
from datetime import date, datetime

import pytest

from marketplace_analytics.domain.money import divide_cents, format_currency, to_cents
from marketplace_analytics.engine.periods import (
    RevenuePeriod,
    month_buckets,
    parse_period,
    period_buckets,
    period_window,
    preceding_days,
    previous_window,
    trailing_days,
)
from marketplace_analytics.errors import InvalidFilterError

from conftest import NOW


class TestParsePeriod:
    """Tests for period validation"""

    @pytest.mark.parametrize("value", ["7d", "30d", "90d", "1y"])
    def test_supported(self, value):
        assert parse_period(value).value == value

    @pytest.mark.parametrize("value", ["2w", "", None, "30D"])
    def test_unsupported_raises(self, value):
        """Test unsupported periods are rejected, never defaulted"""
        with pytest.raises(InvalidFilterError) as exc_info:
            parse_period(value)

        assert exc_info.value.status_code == 400
        assert "7d" in exc_info.value.details["allowed"]


class TestWindows:

    def test_day_period_bucket_counts(self):
        assert len(period_buckets(RevenuePeriod.LAST_7_DAYS, NOW)) == 7
        assert len(period_buckets(RevenuePeriod.LAST_30_DAYS, NOW)) == 30
        assert len(period_buckets(RevenuePeriod.LAST_90_DAYS, NOW)) == 90

    def test_year_uses_twelve_months(self):
        buckets = period_buckets(RevenuePeriod.LAST_YEAR, NOW)

        assert len(buckets) == 12
        assert buckets[0].key == "2025-11"
        assert buckets[-1].key == "2026-10"

    def test_window_ends_after_today(self):
        window = period_window(RevenuePeriod.LAST_7_DAYS, NOW)

        assert window.start == datetime(2026, 10, 13)
        assert window.end == datetime(2026, 10, 20)
        assert window.contains(NOW)
        assert not window.contains(datetime(2026, 10, 20))

    def test_previous_window_is_adjacent_and_equal_length(self):
        """Test the comparison window ends where the current one starts"""
        current = period_window(RevenuePeriod.LAST_30_DAYS, NOW)
        previous = previous_window(RevenuePeriod.LAST_30_DAYS, NOW)

        assert previous.end == current.start
        assert previous.end - previous.start == current.end - current.start

    def test_previous_year_window(self):
        previous = previous_window(RevenuePeriod.LAST_YEAR, NOW)

        assert previous.start == datetime(2024, 11, 1)
        assert previous.end == datetime(2025, 11, 1)

    def test_month_buckets_cross_year(self):
        buckets = month_buckets(date(2026, 2, 10), 3)

        assert [b.key for b in buckets] == ["2025-12", "2026-01", "2026-02"]
        assert buckets[0].label == "Dec 2025"
        assert buckets[-1].end == datetime(2026, 3, 1)

    def test_trailing_and_preceding_days(self):
        current = trailing_days(7, NOW)
        previous = preceding_days(current, 7)

        assert previous == type(current)(start=datetime(2026, 10, 6), end=datetime(2026, 10, 13))


class TestMoney:
    """Tests for integer cent helpers"""

    @pytest.mark.parametrize(
        "amount, cents",
        [("80.00", 8000), ("0.005", 1), ("19.994", 1999), (12, 1200), (None, 0), ("1234.565", 123457)],
    )
    def test_to_cents(self, amount, cents):
        assert to_cents(amount) == cents

    def test_divide_cents_rounds_half_up(self):
        assert divide_cents(8001, 2) == 4001
        assert divide_cents(100, 3) == 33
        assert divide_cents(100, 0) == 0

    def test_format_currency(self):
        assert format_currency(123456) == "$1,234.56"
        assert format_currency(0) == "$0.00"
        assert format_currency(-250, "€") == "-€2.50"
