from datetime import UTC, datetime


def now() -> datetime:
    return datetime.now(UTC)


def start_of_day(moment: datetime) -> datetime:
    """Midnight of the same day, timezone kept."""
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)
