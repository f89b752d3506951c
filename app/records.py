"""Domain records persisted as JSON in the preference store."""

import json
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional

from alarm.tones import DEFAULT_TONE_ID
from app.steps import StepKind

DEFAULT_ALARM_HOUR = 7
DEFAULT_ALARM_MINUTE = 0
DEFAULT_AGE = 18


def parse_json(payload: Optional[str], default: Any = None) -> Any:
    """Decode a JSON string, returning default for empty or malformed data."""
    if not payload:
        return default
    try:
        return json.loads(payload)
    except (TypeError, ValueError) as e:
        print(f"[Storage] Malformed JSON payload: {e}")
        return default


def _as_int(value, default: int) -> int:
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_str(value, default: str = "") -> str:
    return value if isinstance(value, str) else default


def _as_str_list(value) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def _as_datetime(value) -> datetime:
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            pass
    return datetime.now()


@dataclass
class ScheduledAlarm:
    """The single active alarm. Overwritten on each re-schedule."""
    hour: int
    minute: int
    days: list[int]
    tone_id: str = DEFAULT_TONE_ID
    challenges: list[str] = field(default_factory=list)
    morning_tasks: list[str] = field(default_factory=list)
    vibrate: bool = True

    def to_dict(self):
        return {
            "hour": self.hour,
            "minute": self.minute,
            "days": list(self.days),
            "toneId": self.tone_id,
            "challenges": list(self.challenges),
            "morningTasks": list(self.morning_tasks),
            "vibrate": self.vibrate,
        }

    @classmethod
    def from_dict(cls, data, today: date = None) -> "ScheduledAlarm":
        """
        Build an alarm from its JSON form.

        Missing or invalid fields fall back to defaults; an empty or
        invalid weekday list defaults to today's weekday.
        """
        if not isinstance(data, dict):
            data = {}
        today = today or date.today()

        hour = _as_int(data.get("hour"), DEFAULT_ALARM_HOUR)
        if not 0 <= hour <= 23:
            hour = DEFAULT_ALARM_HOUR
        minute = _as_int(data.get("minute"), DEFAULT_ALARM_MINUTE)
        if not 0 <= minute <= 59:
            minute = DEFAULT_ALARM_MINUTE

        days = []
        raw_days = data.get("days")
        for d in raw_days if isinstance(raw_days, list) else []:
            d = _as_int(d, 0)
            if 1 <= d <= 7 and d not in days:
                days.append(d)
        if not days:
            days = [today.isoweekday()]

        vibrate = data.get("vibrate", True)

        return cls(
            hour=hour,
            minute=minute,
            days=days,
            tone_id=_as_str(data.get("toneId"), DEFAULT_TONE_ID) or DEFAULT_TONE_ID,
            challenges=_as_str_list(data.get("challenges")),
            morning_tasks=_as_str_list(data.get("morningTasks")),
            vibrate=vibrate if isinstance(vibrate, bool) else True,
        )

    @property
    def time_str(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


@dataclass
class UserProfile:
    """Profile created by onboarding. Edits overwrite it wholesale."""
    name: str
    age: int
    occupation: str
    wake_hour: int
    wake_minute: int
    morning_summary: str
    routine_task_ids: list[str]
    created_at: datetime

    def to_dict(self):
        return {
            "name": self.name,
            "age": self.age,
            "occupation": self.occupation,
            "wakeHour": self.wake_hour,
            "wakeMinute": self.wake_minute,
            "morningSummary": self.morning_summary,
            "routineTaskIds": list(self.routine_task_ids),
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data) -> "UserProfile":
        if not isinstance(data, dict):
            data = {}

        wake_hour = _as_int(data.get("wakeHour"), DEFAULT_ALARM_HOUR)
        wake_minute = _as_int(data.get("wakeMinute"), DEFAULT_ALARM_MINUTE)
        if not (0 <= wake_hour <= 23 and 0 <= wake_minute <= 59):
            wake_hour, wake_minute = DEFAULT_ALARM_HOUR, DEFAULT_ALARM_MINUTE

        return cls(
            name=_as_str(data.get("name")),
            age=_as_int(data.get("age"), DEFAULT_AGE),
            occupation=_as_str(data.get("occupation")),
            wake_hour=wake_hour,
            wake_minute=wake_minute,
            morning_summary=_as_str(data.get("morningSummary")),
            routine_task_ids=_as_str_list(data.get("routineTaskIds")),
            created_at=_as_datetime(data.get("createdAt")),
        )


@dataclass
class RoutineStepResult:
    """What the user recorded for one completed routine step."""
    id: str
    kind: StepKind
    note: str
    image_base64: Optional[str] = None

    def to_dict(self):
        return {
            "id": self.id,
            "type": self.kind.value,
            "note": self.note,
            "imageBase64": self.image_base64,
        }

    @classmethod
    def from_dict(cls, data) -> "RoutineStepResult":
        if not isinstance(data, dict):
            data = {}
        image = data.get("imageBase64")
        return cls(
            id=_as_str(data.get("id")),
            kind=StepKind.parse(data.get("type")),
            note=_as_str(data.get("note")),
            image_base64=image if isinstance(image, str) else None,
        )


@dataclass
class RoutineEntry:
    """A completed routine run shown in the feed."""
    timestamp: datetime
    results: list[RoutineStepResult]

    def to_dict(self):
        return {
            "timestamp": self.timestamp.isoformat(),
            "results": [r.to_dict() for r in self.results],
        }

    @classmethod
    def from_dict(cls, data) -> "RoutineEntry":
        if not isinstance(data, dict):
            data = {}
        raw_results = data.get("results")
        results = [
            RoutineStepResult.from_dict(item)
            for item in (raw_results if isinstance(raw_results, list) else [])
            if isinstance(item, dict)
        ]
        return cls(timestamp=_as_datetime(data.get("timestamp")), results=results)
