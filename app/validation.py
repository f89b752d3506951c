"""Input validation for alarm setup and onboarding answers."""

import re
from dataclasses import dataclass
from typing import Optional

from alarm.challenges import ChallengeType
from alarm.tones import is_known_tone


@dataclass
class ValidationResult:
    """Result of a validation check."""
    is_valid: bool
    has_warning: bool
    error_message: Optional[str] = None
    warning_message: Optional[str] = None


def _error(message: str) -> ValidationResult:
    return ValidationResult(is_valid=False, has_warning=False, error_message=message)


def _ok() -> ValidationResult:
    return ValidationResult(is_valid=True, has_warning=False)


def validate_wake_time(wake_time_str: str) -> ValidationResult:
    """
    Validate time format (HH:MM or HH:MM:SS).
    """
    # Accept HH:MM or HH:MM:SS
    pattern = r'^([01]?[0-9]|2[0-3]):([0-5][0-9])(:[0-5][0-9])?$'
    if not wake_time_str or not re.match(pattern, wake_time_str.strip()):
        return _error("Invalid time format. Use HH:MM or HH:MM:SS")

    return _ok()


def parse_time(time_str: str) -> tuple[int, int]:
    """Parse a validated HH:MM[:SS] string into (hour, minute)."""
    parts = time_str.strip().split(":")
    return int(parts[0]), int(parts[1])


def validate_name(name: str) -> ValidationResult:
    if not name or not name.strip():
        return _error("Please tell me your name")
    if len(name.strip()) > 80:
        return _error("Name must be at most 80 characters")
    return _ok()


def validate_age(age_str: str) -> ValidationResult:
    """
    Validate age.
    Hard limits: 1-120
    Warning: under 13
    """
    try:
        age = int(str(age_str).strip())
    except (TypeError, ValueError):
        return _error("Age must be a whole number")

    if age < 1 or age > 120:
        return _error("Age must be between 1 and 120")
    if age < 13:
        return ValidationResult(
            is_valid=True,
            has_warning=True,
            warning_message="Morning routines work best with a parent's help under 13"
        )
    return _ok()


def validate_alarm_request(data: dict) -> ValidationResult:
    """
    Validate an alarm setup request.

    A time must be picked, at least one weekday selected and at least
    one challenge chosen.
    """
    if not isinstance(data, dict):
        return _error("Missing alarm settings")

    time_str = data.get("time")
    if not time_str:
        return _error("Pick a time before setting the alarm.")
    result = validate_wake_time(str(time_str))
    if not result.is_valid:
        return result

    days = data.get("days")
    if not isinstance(days, list) or not days:
        return _error("Select at least one day for the alarm to repeat.")
    for d in days:
        if isinstance(d, bool) or not isinstance(d, int) or not 1 <= d <= 7:
            return _error("Days must be numbers from 1 (Monday) to 7 (Sunday).")

    challenges = data.get("challenges")
    if not isinstance(challenges, list) or not challenges:
        return _error("Choose at least one wake-up challenge.")
    for c in challenges:
        if not isinstance(c, str) or ChallengeType.parse(c) is None:
            return _error(f"Unknown challenge: {c}")

    tone_id = data.get("toneId")
    if tone_id is not None and (not isinstance(tone_id, str) or not is_known_tone(tone_id)):
        return _error(f"Unknown tone: {tone_id}")

    tasks = data.get("morningTasks", [])
    if not isinstance(tasks, list) or not all(isinstance(t, str) for t in tasks):
        return _error("Morning tasks must be a list of step ids.")

    return _ok()
