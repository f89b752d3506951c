from datetime import datetime, timedelta, timezone

import pytest

from alarm.schedule import next_alarm_date, format_weekdays

MON, TUE, WED, THU, FRI, SAT, SUN = range(1, 8)

# 2030-01-02 is a Wednesday
WEDNESDAY = datetime(2030, 1, 2)


def test_wednesday_after_alarm_time_goes_to_monday():
    now = WEDNESDAY.replace(hour=8)
    assert next_alarm_date(now, 7, 0, {MON, WED}) == datetime(2030, 1, 7, 7, 0)


def test_same_day_before_alarm_time():
    monday = datetime(2030, 1, 7, 6, 0)
    assert next_alarm_date(monday, 7, 0, {MON}) == datetime(2030, 1, 7, 7, 0)


def test_exact_alarm_time_fires_now():
    now = WEDNESDAY.replace(hour=7)
    assert next_alarm_date(now, 7, 0, {WED}) == now


def test_one_second_late_waits_a_week():
    now = WEDNESDAY.replace(hour=7, second=1)
    assert next_alarm_date(now, 7, 0, {WED}) == datetime(2030, 1, 9, 7, 0)


def test_result_has_no_seconds():
    now = WEDNESDAY.replace(hour=5, minute=12, second=44, microsecond=123)
    result = next_alarm_date(now, 6, 30, {WED})
    assert result == datetime(2030, 1, 2, 6, 30)


def test_timezone_is_preserved():
    tz = timezone(timedelta(hours=2))
    now = WEDNESDAY.replace(hour=8, tzinfo=tz)
    result = next_alarm_date(now, 9, 15, {WED})
    assert result == datetime(2030, 1, 2, 9, 15, tzinfo=tz)


def test_earliest_match_within_a_week():
    """Brute-force check of every weekday set and a spread of times."""
    starts = [WEDNESDAY + timedelta(hours=h, minutes=m) for h in (0, 6, 7, 23) for m in (0, 30, 59)]
    for mask in range(1, 128):
        days = {d for d in range(1, 8) if mask & (1 << (d - 1))}
        for now in starts:
            for hour, minute in ((0, 0), (7, 0), (7, 30), (23, 59)):
                result = next_alarm_date(now, hour, minute, days)
                assert result >= now
                assert result.isoweekday() in days
                assert (result.hour, result.minute) == (hour, minute)
                assert result - now < timedelta(days=7)

                # Nothing earlier qualifies
                earlier = result - timedelta(days=1)
                while earlier >= now:
                    assert earlier.isoweekday() not in days
                    earlier -= timedelta(days=1)


@pytest.mark.parametrize("days", [set(), {0}, {8}, {1, 9}])
def test_invalid_weekdays(days):
    with pytest.raises(ValueError):
        next_alarm_date(WEDNESDAY, 7, 0, days)


@pytest.mark.parametrize("hour,minute", [(24, 0), (-1, 0), (7, 60)])
def test_invalid_time(hour, minute):
    with pytest.raises(ValueError):
        next_alarm_date(WEDNESDAY, hour, minute, {MON})


def test_format_weekdays():
    assert format_weekdays([WED, MON, WED]) == "Mon, Wed"
    assert format_weekdays([]) == ""
