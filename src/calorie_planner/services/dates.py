"""Date-key helpers pinned to a single reference timezone."""

from datetime import UTC, date, datetime, timedelta
from zoneinfo import ZoneInfo

DEFAULT_TIMEZONE = "America/Argentina/Buenos_Aires"
DATE_KEY_FORMAT = "%Y-%m-%d"


def date_key(moment: datetime, timezone_name: str = DEFAULT_TIMEZONE) -> str:
    """Return the YYYY-MM-DD key of an instant in the reference timezone.

    Naive datetimes are treated as UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(ZoneInfo(timezone_name)).strftime(DATE_KEY_FORMAT)


def parse_date_key(value: str) -> date:
    """Parse a YYYY-MM-DD key into a date."""
    return datetime.strptime(value, DATE_KEY_FORMAT).date()  # noqa: DTZ007


def today(timezone_name: str = DEFAULT_TIMEZONE, now: datetime | None = None) -> date:
    """Return the current calendar date in the reference timezone."""
    moment = now or datetime.now(tz=UTC)
    return parse_date_key(date_key(moment, timezone_name))


def week_start(anchor: date) -> date:
    """Return the Monday of the ISO week containing the anchor."""
    return anchor - timedelta(days=anchor.weekday())


def week_dates(anchor: date) -> list[str]:
    """Return the Monday..Sunday date keys of the anchor's week."""
    start = week_start(anchor)
    return [
        (start + timedelta(days=offset)).strftime(DATE_KEY_FORMAT)
        for offset in range(7)
    ]
