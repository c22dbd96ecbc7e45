"""Period filters and chart shaping for document statistics."""

import calendar
from collections.abc import Iterable
from datetime import datetime, timedelta
from typing import Any

from alsader.core.modules.document.models import MonthlyCount, StatsPeriod
from alsader.core.modules.reference.models import DocumentType
from alsader.utils import start_of_day


def _months_back(moment: datetime, months: int) -> datetime:
    year, month = divmod(moment.year * 12 + moment.month - 1 - months, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def period_start(period: StatsPeriod, at: datetime) -> datetime | None:
    """Lower bound on created_at for a stats period, None for all time.

    Bounds start at midnight: "week" means the last seven calendar days plus today.
    """
    midnight = start_of_day(at)
    match period:
        case StatsPeriod.ALL:
            return None
        case StatsPeriod.TODAY:
            return midnight
        case StatsPeriod.WEEK:
            return midnight - timedelta(days=7)
        case StatsPeriod.MONTH:
            return _months_back(midnight, 1)
        case StatsPeriod.YEAR:
            return _months_back(midnight, 12)


def build_monthly_chart(rows: Iterable[dict[str, Any]]) -> list[MonthlyCount]:
    """Fold aggregation rows into one entry per month, oldest first.

    Each row looks like {"_id": {"month": "2025-05", "document_type": "inbound"}, "count": 3}.
    """
    months: dict[str, MonthlyCount] = {}
    for row in rows:
        month = row["_id"]["month"]
        entry = months.setdefault(month, MonthlyCount(month=month))
        if row["_id"]["document_type"] == DocumentType.INBOUND:
            entry.inbound += int(row["count"])
        else:
            entry.outbound += int(row["count"])
    return [months[month] for month in sorted(months)]
