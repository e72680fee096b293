"""Operational-day calculations for the mill's 06:00-to-06:00 shift window."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from functools import lru_cache
from zoneinfo import ZoneInfo

DAY_START_HOUR = 6
NIGHT_SHIFT_START_HOUR = 18
MINUTES_PER_DAY = 24 * 60

_SHIFT_LABELS = {
    "ar": {"night": "نوبة ليلية", "day": "نوبة نهارية"},
    "en": {"night": "Night shift", "day": "Day shift"},
}


@dataclass(frozen=True, slots=True)
class OperationalDay:
    """The operational day an instant falls into, seen from that instant."""

    day_start: datetime
    day_end: datetime
    is_night_shift: bool
    minutes_since_start: int
    progress_percent: float

    @property
    def current_day(self) -> date:
        return self.day_start.date()

    def offset_minutes(self, instant: datetime) -> int:
        """Whole minutes between ``day_start`` and ``instant`` (may be negative)."""
        return _elapsed_minutes(self.day_start, _localize(instant, self.day_start.tzinfo))


@lru_cache
def resolve_zone(name: str) -> tzinfo:
    """Return the IANA zone for ``name``; ``UTC`` maps to the fixed UTC offset."""
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def _localize(instant: datetime, zone: tzinfo | None) -> datetime:
    # Naive instants are wall-clock readings in the mill's zone.
    target = zone or instant.tzinfo or timezone.utc
    if instant.tzinfo is None:
        return instant.replace(tzinfo=target)
    return instant.astimezone(target)


def _elapsed_minutes(start: datetime, end: datetime) -> int:
    # Subtract in UTC; same-tzinfo aware subtraction ignores DST offsets.
    delta = end.astimezone(timezone.utc) - start.astimezone(timezone.utc)
    return math.floor(delta.total_seconds() / 60)


def _day_start_for(local_day: date, zone: tzinfo) -> datetime:
    return datetime.combine(local_day, time(DAY_START_HOUR), tzinfo=zone)


def compute_operational_day(now: datetime, zone: tzinfo | None = None) -> OperationalDay:
    """Classify ``now`` into the operational day that contains it.

    The day starts at 06:00 local time in ``zone`` and ends at 06:00 local
    time on the following calendar day. Hours 18:00 through 05:59 count as the
    night shift.
    """
    local_now = _localize(now, zone)
    hour = local_now.hour
    is_night_shift = hour >= NIGHT_SHIFT_START_HOUR or hour < DAY_START_HOUR

    start_day = local_now.date()
    if hour < DAY_START_HOUR:
        start_day -= timedelta(days=1)

    day_start = _day_start_for(start_day, local_now.tzinfo)
    day_end = _day_start_for(start_day + timedelta(days=1), local_now.tzinfo)

    minutes_since_start = _elapsed_minutes(day_start, local_now)
    progress = min(100.0, max(0.0, minutes_since_start / MINUTES_PER_DAY * 100))

    return OperationalDay(
        day_start=day_start,
        day_end=day_end,
        is_night_shift=is_night_shift,
        minutes_since_start=minutes_since_start,
        progress_percent=progress,
    )


def _format_date(value: date) -> str:
    return value.strftime("%m/%d/%Y")


def _format_clock(hour: int, minute: int) -> str:
    suffix = "AM" if hour < 12 else "PM"
    display = hour % 12 or 12
    return f"{display:02d}:{minute:02d} {suffix}"


def format_within_operational_day(
    instant: datetime, now: datetime, zone: tzinfo | None = None
) -> str:
    """Render ``instant`` relative to the operational day containing ``now``.

    Instants before the current day render as the previous calendar date and
    instants after it as the next one, whatever their real date. Instants
    inside the day render as a 12-hour clock rebased so minute 0 is 06:00.
    """
    day = compute_operational_day(now, zone)
    offset = day.offset_minutes(instant)

    if offset < 0:
        return _format_date(day.current_day - timedelta(days=1))
    if offset >= MINUTES_PER_DAY:
        return _format_date(day.current_day + timedelta(days=1))

    hours, minutes = divmod(offset, 60)
    display_hour = (hours + DAY_START_HOUR) % 24
    return _format_clock(display_hour, minutes)


def format_operational_date(
    instant: datetime, now: datetime, zone: tzinfo | None = None
) -> str:
    """Date counterpart of :func:`format_within_operational_day`."""
    day = compute_operational_day(now, zone)
    offset = day.offset_minutes(instant)

    if offset < 0:
        return _format_date(day.current_day - timedelta(days=1))
    if offset >= MINUTES_PER_DAY:
        return _format_date(day.current_day + timedelta(days=1))
    return _format_date(day.current_day)


def is_within_operational_day(
    instant: datetime, now: datetime, zone: tzinfo | None = None
) -> bool:
    day = compute_operational_day(now, zone)
    offset = day.offset_minutes(instant)
    return 0 <= offset < MINUTES_PER_DAY


def shift_label(day: OperationalDay, language: str = "ar") -> str:
    labels = _SHIFT_LABELS.get(language, _SHIFT_LABELS["ar"])
    return labels["night"] if day.is_night_shift else labels["day"]
