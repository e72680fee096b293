from __future__ import annotations

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from services.day_system import (
    MINUTES_PER_DAY,
    compute_operational_day,
    format_operational_date,
    format_within_operational_day,
    is_within_operational_day,
    resolve_zone,
    shift_label,
)

TUNIS = ZoneInfo("Africa/Tunis")


def test_just_before_six_belongs_to_previous_day() -> None:
    day = compute_operational_day(datetime(2024, 11, 10, 5, 59, 59, tzinfo=TUNIS))

    assert day.is_night_shift is True
    assert day.day_start == datetime(2024, 11, 9, 6, 0, tzinfo=TUNIS)
    assert day.current_day.isoformat() == "2024-11-09"


def test_six_oclock_starts_a_new_day() -> None:
    day = compute_operational_day(datetime(2024, 11, 10, 6, 0, tzinfo=TUNIS))

    assert day.is_night_shift is False
    assert day.day_start == datetime(2024, 11, 10, 6, 0, tzinfo=TUNIS)
    assert day.minutes_since_start == 0
    assert day.progress_percent == 0.0


def test_evening_is_halfway_and_night_shift() -> None:
    day = compute_operational_day(datetime(2024, 11, 10, 18, 0, tzinfo=TUNIS))

    assert day.is_night_shift is True
    assert day.minutes_since_start == 720
    assert day.progress_percent == 50.0


def test_last_minute_of_the_day() -> None:
    day = compute_operational_day(datetime(2024, 11, 11, 5, 59, tzinfo=TUNIS))

    assert day.day_start == datetime(2024, 11, 10, 6, 0, tzinfo=TUNIS)
    assert day.minutes_since_start == 1439
    assert day.progress_percent == pytest.approx(99.93, abs=0.01)


@pytest.mark.parametrize("hour", range(24))
def test_boundaries_hold_for_every_hour(hour: int) -> None:
    now = datetime(2024, 3, 5, hour, 17, 42, tzinfo=TUNIS)
    day = compute_operational_day(now)

    assert (day.day_start.hour, day.day_start.minute, day.day_start.second) == (6, 0, 0)
    assert day.day_start <= now < day.day_end
    assert day.day_end - day.day_start == timedelta(hours=24)
    assert day.is_night_shift == (hour >= 18 or hour < 6)
    assert 0 <= day.minutes_since_start < MINUTES_PER_DAY
    assert 0.0 <= day.progress_percent <= 100.0


def test_minutes_increase_then_reset_at_next_start() -> None:
    start = datetime(2024, 5, 1, 6, 0, tzinfo=timezone.utc)
    samples = [compute_operational_day(start + timedelta(minutes=step)).minutes_since_start for step in (1, 60, 1439)]

    assert samples == sorted(samples)
    assert len(set(samples)) == len(samples)
    assert compute_operational_day(start + timedelta(days=1)).minutes_since_start == 0


def test_zone_argument_converts_aware_instants() -> None:
    # 04:30 UTC is 05:30 in Tunis: still the previous operational day there.
    now = datetime(2024, 1, 15, 4, 30, tzinfo=timezone.utc)

    day = compute_operational_day(now, TUNIS)

    assert day.day_start == datetime(2024, 1, 14, 6, 0, tzinfo=TUNIS)
    assert day.is_night_shift is True


def test_naive_instants_are_read_in_the_given_zone() -> None:
    day = compute_operational_day(datetime(2024, 1, 15, 7, 0), TUNIS)

    assert day.day_start == datetime(2024, 1, 15, 6, 0, tzinfo=TUNIS)
    assert day.minutes_since_start == 60


def test_dst_day_counts_elapsed_minutes() -> None:
    paris = ZoneInfo("Europe/Paris")
    # Clocks jump from 02:00 to 03:00 on 2024-03-31, so that operational day lasts 23h.
    day = compute_operational_day(datetime(2024, 3, 31, 5, 0, tzinfo=paris))

    assert day.day_start == datetime(2024, 3, 30, 6, 0, tzinfo=paris)
    assert day.minutes_since_start == 22 * 60
    assert day.day_end.hour == 6
    assert day.day_end.astimezone(timezone.utc) - day.day_start.astimezone(timezone.utc) == timedelta(hours=23)


def test_format_within_current_day_rebases_clock() -> None:
    now = datetime(2024, 11, 10, 12, 0, tzinfo=timezone.utc)

    assert format_within_operational_day(datetime(2024, 11, 10, 6, 0, tzinfo=timezone.utc), now) == "06:00 AM"
    assert format_within_operational_day(datetime(2024, 11, 10, 19, 45, tzinfo=timezone.utc), now) == "07:45 PM"
    assert format_within_operational_day(datetime(2024, 11, 11, 0, 30, tzinfo=timezone.utc), now) == "12:30 AM"


def test_format_outside_current_day_renders_adjacent_dates() -> None:
    now = datetime(2024, 11, 10, 12, 0, tzinfo=timezone.utc)

    before = datetime(2024, 11, 10, 5, 0, tzinfo=timezone.utc)
    after = datetime(2024, 11, 11, 6, 0, tzinfo=timezone.utc)

    assert format_within_operational_day(before, now) == "11/09/2024"
    assert format_within_operational_day(after, now) == "11/11/2024"


def test_old_instants_still_render_as_previous_day() -> None:
    now = datetime(2024, 11, 10, 12, 0, tzinfo=timezone.utc)
    three_days_ago = datetime(2024, 11, 7, 9, 0, tzinfo=timezone.utc)

    assert format_within_operational_day(three_days_ago, now) == "11/09/2024"
    assert format_operational_date(three_days_ago, now) == "11/09/2024"


def test_is_within_operational_day() -> None:
    now = datetime(2024, 11, 10, 23, 0, tzinfo=timezone.utc)

    assert is_within_operational_day(datetime(2024, 11, 11, 5, 59, tzinfo=timezone.utc), now)
    assert not is_within_operational_day(datetime(2024, 11, 11, 6, 0, tzinfo=timezone.utc), now)


def test_shift_label_languages() -> None:
    night = compute_operational_day(datetime(2024, 11, 10, 22, 0, tzinfo=timezone.utc))
    day = compute_operational_day(datetime(2024, 11, 10, 10, 0, tzinfo=timezone.utc))

    assert shift_label(night, "en") == "Night shift"
    assert shift_label(day, "en") == "Day shift"
    assert shift_label(day) == "نوبة نهارية"


def test_resolve_zone() -> None:
    assert resolve_zone("utc") is timezone.utc
    assert resolve_zone("Africa/Tunis") == TUNIS
