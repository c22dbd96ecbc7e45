"""Tests for stats period bounds and chart shaping."""

from datetime import UTC, datetime

import pytest

from alsader.core.modules.document.models import MonthlyCount, StatsPeriod
from alsader.core.modules.document.stats import build_monthly_chart, period_start

AT = datetime(2025, 3, 31, 15, 30, tzinfo=UTC)


class TestPeriodStart:
    def test_all_has_no_bound(self):
        assert period_start(StatsPeriod.ALL, AT) is None

    @pytest.mark.parametrize(
        ("period", "expected"),
        [
            (StatsPeriod.TODAY, datetime(2025, 3, 31, tzinfo=UTC)),
            (StatsPeriod.WEEK, datetime(2025, 3, 24, tzinfo=UTC)),
            (StatsPeriod.MONTH, datetime(2025, 2, 28, tzinfo=UTC)),
            (StatsPeriod.YEAR, datetime(2024, 3, 31, tzinfo=UTC)),
        ],
    )
    def test_bounds_start_at_midnight(self, period, expected):
        assert period_start(period, AT) == expected

    def test_month_crosses_year_boundary(self):
        at = datetime(2025, 1, 15, 9, 0, tzinfo=UTC)
        assert period_start(StatsPeriod.MONTH, at) == datetime(2024, 12, 15, tzinfo=UTC)


class TestBuildMonthlyChart:
    def test_empty(self):
        assert build_monthly_chart([]) == []

    def test_rows_folded_per_month_and_sorted(self):
        rows = [
            {"_id": {"month": "2025-05", "document_type": "outbound"}, "count": 2},
            {"_id": {"month": "2025-04", "document_type": "inbound"}, "count": 3},
            {"_id": {"month": "2025-05", "document_type": "inbound"}, "count": 1},
        ]
        assert build_monthly_chart(rows) == [
            MonthlyCount(month="2025-04", inbound=3, outbound=0),
            MonthlyCount(month="2025-05", inbound=1, outbound=2),
        ]
