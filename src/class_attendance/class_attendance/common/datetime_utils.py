from __future__ import annotations

from datetime import date, datetime, timezone


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def to_utc_day(value: date | datetime | str) -> date:
    """Truncate a date-like value to its UTC calendar day.

    Aware datetimes are converted to UTC first; naive datetimes are taken as
    UTC already. Strings may be plain dates or full ISO timestamps
    (a trailing ``Z`` is accepted).
    """

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if len(text) == 10:
            return parse_iso_date(text)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return to_utc_day(datetime.fromisoformat(text))
    raise TypeError(f"Unsupported date value: {value!r}")


def now_utc() -> datetime:
    """Current UTC time as a naive datetime (the way it is stored).

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def month_key(day: date) -> tuple[int, int]:
    return day.year, day.month
