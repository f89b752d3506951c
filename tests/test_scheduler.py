from datetime import datetime

from alarm.scheduler import ALARM_JOB_ID
from app.records import ScheduledAlarm

MON, WED = 1, 3


def _alarm(**overrides):
    fields = dict(hour=7, minute=0, days=[MON, WED], tone_id="sunrise",
                  challenges=["tap"], morning_tasks=["stretch"])
    fields.update(overrides)
    return ScheduledAlarm(**fields)


def _clear_gate(service):
    for challenge_type in service.gate.types:
        challenge = service.gate.challenge(challenge_type)
        if challenge_type.value == "tap":
            while not challenge.is_complete:
                challenge.tap()
        elif challenge_type.value == "math":
            while not challenge.is_complete:
                challenge.submit(challenge.expected)
        else:
            challenge.update(challenge.target)


def test_schedule_computes_next_weekday(service):
    fire_at = service.schedule(_alarm())
    # Wednesday 08:00 -> Monday 07:00
    assert fire_at == datetime(2030, 1, 7, 7, 0)
    assert service.next_alarm_time == fire_at
    assert service.scheduler.get_job(ALARM_JOB_ID) is not None


def test_reschedule_replaces_pending_job(service):
    service.schedule(_alarm())
    fire_at = service.schedule(_alarm(hour=9, days=[WED]))

    assert fire_at == datetime(2030, 1, 2, 9, 0)
    jobs = service.scheduler.get_jobs()
    assert [job.id for job in jobs] == [ALARM_JOB_ID]


def test_cancel_removes_job(service):
    service.schedule(_alarm())
    assert service.cancel() is True
    assert service.scheduler.get_job(ALARM_JOB_ID) is None
    assert not service.is_scheduled
    assert service.cancel() is False


def test_trigger_rings_with_tone_and_vibration(service, player, vibrator):
    service.schedule(_alarm())
    service.trigger()

    assert service.is_ringing
    assert [t.id for t in player.played] == ["sunrise"]
    assert vibrator.active


def test_trigger_without_vibration(service, vibrator):
    service.schedule(_alarm(vibrate=False))
    service.trigger()
    assert vibrator.starts == 0


def test_trigger_without_alarm_is_ignored(service, player):
    service.trigger()
    assert not service.is_ringing
    assert player.played == []


def test_dismiss_refused_until_challenges_complete(service, player, vibrator):
    service.schedule(_alarm(challenges=["tap", "math", "copy"]))
    service.trigger()

    assert service.dismiss() is False
    assert service.is_ringing

    _clear_gate(service)
    assert service.dismiss() is True
    assert not service.is_ringing
    assert player.stopped >= 1
    assert not vibrator.active


def test_dismiss_reschedules_next_occurrence(service, clock):
    service.schedule(_alarm(days=[MON]))
    clock.now = datetime(2030, 1, 7, 7, 0, 20)
    service.trigger()
    _clear_gate(service)
    service.dismiss()

    assert service.next_alarm_time == datetime(2030, 1, 14, 7, 0)
    assert service.scheduler.get_job(ALARM_JOB_ID) is not None


def test_dismiss_when_not_ringing(service):
    assert service.dismiss() is False


def test_status(service):
    service.schedule(_alarm())
    status = service.status()
    assert status["scheduled"] is True
    assert status["nextAlarm"] == "2030-01-07T07:00:00"
    assert status["ringing"] is False
    assert status["gate"] is None

    service.trigger()
    status = service.status()
    assert status["ringing"] is True
    assert status["gate"]["complete"] is False
    assert status["gate"]["challenges"][0]["type"] == "tap"


def test_retrigger_while_ringing_keeps_progress(service, player):
    service.schedule(_alarm())
    service.trigger()
    tap = service.gate.challenge(service.gate.types[0])
    for _ in range(5):
        tap.tap()

    service.trigger()
    assert service.gate.challenge(service.gate.types[0]).count == 5
    assert len(player.played) == 1
