from datetime import datetime, timezone

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 Hub timestamp into an aware UTC datetime.

    Returns None for missing or unparseable values. Naive timestamps are
    taken as UTC.
    """
    if not value or not isinstance(value, str):
        return None
    ts = value.strip()
    if ts.endswith("Z"):
        ts = ts[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(ts)
    except ValueError:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def utc_year(value: str | None) -> int | None:
    dt = parse_timestamp(value)
    return dt.year if dt else None


def timestamp_ms(value: str | None) -> int:
    dt = parse_timestamp(value)
    return int(dt.timestamp() * 1000) if dt else 0
