from datetime import date, datetime, timedelta, timezone

from rules import rotor


def test_week_start_and_end_bracket_the_day():
    assert rotor.week_start(date(2024, 1, 3)) == date(2023, 12, 31)
    assert rotor.week_start(date(2024, 1, 7)) == date(2024, 1, 7)
    assert rotor.week_end(date(2024, 1, 3)) == date(2024, 1, 6)
    assert rotor.week_end(date(2024, 1, 6)) == date(2024, 1, 6)


def test_as_day_truncates_to_utc_day():
    assert rotor.as_day("2024-01-05") == date(2024, 1, 5)
    assert rotor.as_day("2024-01-05T23:30:00-05:00") == date(2024, 1, 6)
    assert rotor.as_day("2024-01-05T10:00:00Z") == date(2024, 1, 5)
    eastern = timezone(timedelta(hours=-5))
    assert rotor.as_day(datetime(2024, 1, 5, 22, 0, tzinfo=eastern)) == date(2024, 1, 6)
    assert rotor.as_day(datetime(2024, 1, 5, 22, 0)) == date(2024, 1, 5)


def test_day_offset_counts_from_sunday_epoch():
    assert rotor.day_offset(date(2024, 1, 1), date(2024, 1, 1)) == 1
    assert rotor.day_offset(date(2024, 1, 1), date(2024, 1, 8)) == 8


def test_rotation_index():
    assert rotor.rotation_index(6, 7, 2) == 0
    assert rotor.rotation_index(13, 7, 2) == 1
    assert rotor.rotation_index(14, 7, 2) == 0
    assert rotor.rotation_index(20, 0, 3) == 0
    assert rotor.rotation_index(20, 7, 1) == 0


def test_cycle_days_is_inclusive():
    days = list(rotor.cycle_days(date(2024, 1, 8), date(2024, 1, 12)))
    assert days == [date(2024, 1, 8) + timedelta(days=i) for i in range(5)]
