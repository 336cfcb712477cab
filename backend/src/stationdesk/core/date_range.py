"""Date range handling for station-scoped queries.

Request bounds are interpreted in the station's timezone and normalized to
naive UTC, which is how every timestamp column is stored.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional

from stationdesk.core.errors import InvalidDateRange


@dataclass(frozen=True)
class DateRange:
    """An inclusive ``[start, end]`` window with timezone-aware bounds."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise ValueError("DateRange bounds must be timezone-aware")
        if self.start > self.end:
            raise InvalidDateRange(
                f"Start date {self.start.isoformat()} is after end date {self.end.isoformat()}."
            )

    @property
    def start_utc(self) -> datetime:
        return _to_naive_utc(self.start)

    @property
    def end_utc(self) -> datetime:
        return _to_naive_utc(self.end)

    def contains(self, value: datetime) -> bool:
        """Check a stored (naive UTC) or aware timestamp against the window."""
        if value.tzinfo is not None:
            value = _to_naive_utc(value)
        return self.start_utc <= value <= self.end_utc


def _to_naive_utc(value: datetime) -> datetime:
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _parse_bound(value: str, tz: tzinfo, is_end: bool) -> datetime:
    """Parse one bound. Date-only values cover the whole day."""
    try:
        if len(value) == 10:
            day = date.fromisoformat(value)
            return datetime.combine(
                day, time(23, 59, 59) if is_end else time(0, 0, 0), tzinfo=tz
            )

        if value.endswith(("Z", "z")):
            value = value[:-1] + "+00:00"
        parsed = datetime.fromisoformat(value)
    except ValueError:
        label = "end" if is_end else "start"
        raise InvalidDateRange(
            f"Invalid {label} date '{value}'; use YYYY-MM-DD or an ISO 8601 datetime."
        )

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    else:
        parsed = parsed.astimezone(tz)

    # Minute precision, inclusive on both ends
    return parsed.replace(second=59 if is_end else 0, microsecond=0)


def parse_date_range(
    start: Optional[str],
    end: Optional[str],
    tz: tzinfo,
    default_days: int = 14,
    now: Optional[datetime] = None,
) -> DateRange:
    """Build a DateRange from untrusted request strings.

    Args:
        start: Start bound, absent for the default window ending at ``end``.
        end: End bound, absent for the end of the current day.
        tz: Station timezone the bounds are expressed in.
        default_days: Length of the default window, its last day included.
        now: Override of the current time (tests).

    Raises:
        InvalidDateRange: A bound is unparseable or start is after end.
    """
    current = (now or datetime.now(timezone.utc)).astimezone(tz)
    today = current.date()

    start_str = _clean(start)
    end_str = _clean(end)

    if end_str is not None:
        end_dt = _parse_bound(end_str, tz, is_end=True)
    else:
        end_dt = datetime.combine(today, time(23, 59, 59), tzinfo=tz)

    if start_str is not None:
        start_dt = _parse_bound(start_str, tz, is_end=False)
    else:
        # The default window ends at the requested end, not at today.
        first_day = end_dt.date() - timedelta(days=max(default_days, 1) - 1)
        start_dt = datetime.combine(first_day, time(0, 0, 0), tzinfo=tz)

    return DateRange(start=start_dt, end=end_dt)
