from __future__ import annotations

from datetime import date, datetime, time, timedelta

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_date_param(value: str | None, field_name: str) -> date | None:
    if value is None or not value.strip():
        return None
    try:
        return parse_iso_date(value.strip())
    except ValueError:
        raise ValidationError(
            issues=[{"path": [field_name], "message": "Expected a date in YYYY-MM-DD format", "code": "invalid_date"}]
        )


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Half-open [start, end) range covering one calendar day."""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


def now_local() -> datetime:
    """Current local time (naive), truncated to milliseconds like DATETIME(3).

    Note: Wrapped so tests can patch/mocked easier.
    """
    now = datetime.now()
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def to_naive_local(value: datetime) -> datetime:
    """Drop tzinfo after converting to local time; DATETIME columns are naive."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def minutes_between(start: datetime, end: datetime) -> int:
    if end <= start:
        return 0
    return int((end - start).total_seconds() // 60)
