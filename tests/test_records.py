import json
from datetime import date, datetime

from app.records import (
    RoutineEntry, RoutineStepResult, ScheduledAlarm, UserProfile, parse_json,
)
from app.steps import StepKind

WEDNESDAY = date(2030, 1, 2)


def _roundtrip(record):
    return type(record).from_dict(json.loads(json.dumps(record.to_dict())))


def test_alarm_roundtrip():
    alarm = ScheduledAlarm(
        hour=6, minute=45, days=[1, 3, 5], tone_id="pulse",
        challenges=["tap", "copy"], morning_tasks=["stretch", "hydration"],
        vibrate=False,
    )
    assert _roundtrip(alarm) == alarm
    assert alarm.to_dict()["toneId"] == "pulse"
    assert alarm.to_dict()["morningTasks"] == ["stretch", "hydration"]


def test_alarm_defaults():
    alarm = ScheduledAlarm.from_dict({}, today=WEDNESDAY)
    assert alarm == ScheduledAlarm(hour=7, minute=0, days=[3])


def test_alarm_malformed_fields():
    alarm = ScheduledAlarm.from_dict({
        "hour": "seven",
        "minute": 99,
        "days": [0, 9, "x", 2, 2],
        "toneId": 5,
        "challenges": "tap",
        "vibrate": "yes",
    }, today=WEDNESDAY)
    assert alarm.hour == 7
    assert alarm.minute == 0
    assert alarm.days == [2]
    assert alarm.tone_id == "classic"
    assert alarm.challenges == []
    assert alarm.vibrate is True


def test_alarm_missing_days_defaults_to_today():
    alarm = ScheduledAlarm.from_dict({"hour": 6, "days": []}, today=WEDNESDAY)
    assert alarm.days == [3]


def test_profile_roundtrip():
    profile = UserProfile(
        name="Sam", age=31, occupation="Nurse", wake_hour=5, wake_minute=30,
        morning_summary="Rushed but hopeful", routine_task_ids=["wake_breathe"],
        created_at=datetime(2030, 1, 1, 9, 15, 0, 250),
    )
    assert _roundtrip(profile) == profile
    assert profile.to_dict()["createdAt"] == "2030-01-01T09:15:00.000250"


def test_profile_malformed_age_defaults_to_18():
    profile = UserProfile.from_dict({"name": "Ari", "age": "old", "createdAt": "nope"})
    assert profile.age == 18
    assert profile.name == "Ari"
    assert (profile.wake_hour, profile.wake_minute) == (7, 0)
    assert isinstance(profile.created_at, datetime)


def test_entry_roundtrip():
    entry = RoutineEntry(
        timestamp=datetime(2030, 1, 2, 7, 20),
        results=[
            RoutineStepResult(id="stretch", kind=StepKind.TASK, note="Felt good"),
            RoutineStepResult(id="sunshine_photo", kind=StepKind.PHOTO, note="Sunny",
                              image_base64="aGVsbG8="),
        ],
    )
    assert _roundtrip(entry) == entry
    assert entry.to_dict()["results"][1]["type"] == "photo"
    assert entry.to_dict()["results"][1]["imageBase64"] == "aGVsbG8="


def test_step_result_unknown_type_is_task():
    result = RoutineStepResult.from_dict({"id": "x", "type": "dance"})
    assert result.kind is StepKind.TASK
    assert result.note == ""
    assert result.image_base64 is None


def test_entry_skips_malformed_results():
    entry = RoutineEntry.from_dict({"timestamp": "2030-01-02T07:00:00", "results": [1, {"id": "a"}]})
    assert [r.id for r in entry.results] == ["a"]
    assert RoutineEntry.from_dict("garbage").results == []


def test_parse_json():
    assert parse_json(None, default=[]) == []
    assert parse_json("", default={}) == {}
    assert parse_json("{broken", default=[]) == []
    assert parse_json('{"a": 1}') == {"a": 1}
