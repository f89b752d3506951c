"""Next alarm date calculation for weekday-repeating alarms."""

from datetime import datetime, timedelta
from typing import Iterable

# ISO weekday numbering: 1=Monday .. 7=Sunday
WEEKDAY_NAMES = {
    1: "Mon",
    2: "Tue",
    3: "Wed",
    4: "Thu",
    5: "Fri",
    6: "Sat",
    7: "Sun",
}

# Two full weeks; one week is always enough for a non-empty day set
SCAN_DAYS = 14


def format_weekdays(days: Iterable[int]) -> str:
    """Format weekday numbers as "Mon, Wed"."""
    return ", ".join(WEEKDAY_NAMES[d] for d in sorted(set(days)) if d in WEEKDAY_NAMES)


def next_alarm_date(now: datetime, hour: int, minute: int, weekdays: Iterable[int]) -> datetime:
    """
    Get the next time the alarm should fire.

    Args:
        now: Current time (naive or aware; the result matches)
        hour: Alarm hour 0-23
        minute: Alarm minute 0-59
        weekdays: Enabled ISO weekdays (1=Monday .. 7=Sunday)

    Returns:
        Earliest datetime >= now on an enabled weekday at hour:minute.
        If now is exactly the alarm time, now is returned.
    """
    days = set(weekdays)
    if not days:
        raise ValueError("At least one weekday must be enabled")
    invalid = sorted(d for d in days if d not in WEEKDAY_NAMES)
    if invalid:
        raise ValueError(f"Weekdays must be 1-7, got {invalid}")
    if not 0 <= hour <= 23:
        raise ValueError(f"Hour must be 0-23, got {hour}")
    if not 0 <= minute <= 59:
        raise ValueError(f"Minute must be 0-59, got {minute}")

    today_at_time = now.replace(hour=hour, minute=minute, second=0, microsecond=0)

    for offset in range(SCAN_DAYS):
        candidate = today_at_time + timedelta(days=offset)
        if candidate.isoweekday() in days and candidate >= now:
            return candidate

    # Unreachable with a non-empty day set, kept as a fallback
    today = now.isoweekday()
    days_until = min((d - today) % 7 for d in days)
    if days_until == 0:
        days_until = 7
    return today_at_time + timedelta(days=days_until)
