"""Date parsing and date-range semantics.

Plain ``YYYY-MM-DD`` dates are taken as local midnight, timestamps ending in
``Z`` as UTC instants. Ranges are inclusive of their whole end day: a range
ending on the 10th contains everything before midnight of the 11th.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

DateLike = Union[str, date, datetime]


def local_midnight(day: date) -> datetime:
    """Midnight of ``day`` in the local timezone, as an aware datetime."""
    return datetime(day.year, day.month, day.day).astimezone()


def convert_date(value: Optional[DateLike]) -> datetime:
    """
    Convert an API date string (or date object) to an aware datetime.

    Missing values map to the epoch so that they sort before everything else.
    """
    if not value:
        return EPOCH
    if isinstance(value, datetime):
        return value if value.tzinfo else value.astimezone()
    if isinstance(value, date):
        return local_midnight(value)
    if value.endswith("Z"):
        return datetime.fromisoformat(value[:-1] + "+00:00")
    # Naive values are interpreted in local time
    return datetime.fromisoformat(value).astimezone()


def _months_back(day: date, months: int) -> date:
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    return day.replace(year=year, month=month, day=min(day.day, _days_in_month(year, month)))


def _days_in_month(year: int, month: int) -> int:
    following = date(year + month // 12, month % 12 + 1, 1)
    return (following - timedelta(days=1)).day


@dataclass(frozen=True)
class DateRange:
    """An inclusive range of whole days, bounded by aware datetimes."""

    start: datetime
    end: datetime

    @classmethod
    def from_dates(cls, start: DateLike, end: DateLike) -> "DateRange":
        return cls(start=convert_date(start), end=convert_date(end))

    @property
    def end_exclusive(self) -> datetime:
        """Local midnight of the day after ``end``."""
        return local_midnight(self.end.astimezone().date() + timedelta(days=1))

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end_exclusive

    @property
    def days(self) -> int:
        """Number of calendar days covered, counting both the start and end day."""
        return (self.end_exclusive.date() - self.start.astimezone().date()).days

    def describe(self) -> str:
        days = self.days
        return "1 day" if days == 1 else f"{days} days"

    def iso_bounds(self) -> tuple[str, str]:
        """Start and end as local ISO dates."""
        return (
            self.start.astimezone().date().isoformat(),
            self.end.astimezone().date().isoformat(),
        )


def parse_date_range(
    start: Optional[str] = None,
    end: Optional[str] = None,
    now: Optional[datetime] = None,
) -> DateRange:
    """
    Build a range from optional ISO date strings.

    Defaults to one month ago (local midnight) through now. A range whose
    start lies after its end falls back to the defaults.
    """
    now = convert_date(now) if now else datetime.now().astimezone()
    one_month_ago = local_midnight(_months_back(now.astimezone().date(), 1))

    start_out = convert_date(start) if start else one_month_ago
    end_out = convert_date(end) if end else now

    if start_out > end_out:
        return DateRange(start=one_month_ago, end=now)
    return DateRange(start=start_out, end=end_out)


def relative_start(keyword: str, end: DateLike) -> datetime:
    """
    Translate a shorthand period keyword into a range start relative to ``end``.

    Unknown keywords give midnight of the end day.
    """
    day = convert_date(end).astimezone().date()
    if keyword == "lastmonth":
        day = _months_back(day, 1)
    elif keyword == "lastday":
        day -= timedelta(days=1)
    elif keyword == "lastweek":
        day -= timedelta(days=7)
    elif keyword == "thismonth":
        day = day.replace(day=1)
    elif keyword == "thisweek":
        day -= timedelta(days=day.weekday())
    elif keyword == "thisweekmondaystart":
        day -= timedelta(days=day.weekday() - 1)
    return local_midnight(day)
