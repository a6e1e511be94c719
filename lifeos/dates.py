"""Date helpers. Everything persisted is naive UTC; calendar days are resolved in a configured zone."""
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DAY_FORMAT = "%Y-%m-%d"


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_zone(name):
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {name}") from e


def local_today(now=None, tz="UTC"):
    """Calendar date of ``now`` as seen in ``tz``.

    Naive datetimes are taken to be UTC, matching how they are stored.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    zone = tz if not isinstance(tz, str) else get_zone(tz)
    return now.astimezone(zone).date()


def to_naive_utc(value):
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def parse_datetime(value):
    """Parse an ISO 8601 timestamp (``Z`` suffix allowed) into naive UTC."""
    return to_naive_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))


def parse_day(value):
    return datetime.strptime(value, DAY_FORMAT).date()


def format_day(value):
    return value.strftime(DAY_FORMAT) if value else None


def isoformat(value):
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat() + "Z" if value.tzinfo is None else value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def journal_title(day):
    return f"Journal for {day.month}/{day.day}/{day.year}"
