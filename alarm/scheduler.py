"""One-shot alarm scheduling using APScheduler."""

import threading
from datetime import datetime
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.date import DateTrigger

from app.records import ScheduledAlarm
from . import player as default_player
from .challenges import DismissGate, parse_challenge_types
from .schedule import next_alarm_date, format_weekdays
from .tones import get_tone

# Job IDs
ALARM_JOB_ID = "morning_alarm"


class AlarmService:
    """
    Owns the single pending alarm and the ringing state.

    Only one alarm callback is pending at a time; scheduling again
    replaces it. While ringing, the alarm can only be dismissed once
    every requested challenge is complete.
    """

    def __init__(self, scheduler: BackgroundScheduler = None, player=None,
                 vibrator=None, clock: Callable[[], datetime] = None):
        """
        Args:
            scheduler: APScheduler instance (created and started lazily if None)
            player: Object with play_tone(tone) and stop_playback()
            vibrator: Object with start() and stop(), or None
            clock: Returns the current time
        """
        self._scheduler = scheduler
        self._player = player or default_player
        self._vibrator = vibrator
        self._clock = clock or datetime.now
        self._lock = threading.RLock()

        self.alarm: Optional[ScheduledAlarm] = None
        self.next_alarm_time: Optional[datetime] = None
        self.gate: Optional[DismissGate] = None

    @property
    def scheduler(self) -> BackgroundScheduler:
        """Get or create the scheduler instance."""
        if self._scheduler is None:
            self._scheduler = BackgroundScheduler()
        if not self._scheduler.running:
            self._scheduler.start()
            print("[Alarm] Scheduler started")
        return self._scheduler

    @property
    def is_scheduled(self) -> bool:
        return self.next_alarm_time is not None

    @property
    def is_ringing(self) -> bool:
        return self.gate is not None

    def schedule(self, alarm: ScheduledAlarm) -> datetime:
        """
        Schedule the alarm for its next matching weekday.

        Any pending alarm is replaced. Returns the fire time.
        """
        with self._lock:
            fire_at = next_alarm_date(self._clock(), alarm.hour, alarm.minute, alarm.days)

            self._remove_job()
            self.scheduler.add_job(
                self.trigger,
                trigger=DateTrigger(run_date=fire_at),
                id=ALARM_JOB_ID,
                replace_existing=True,
                misfire_grace_time=None,
            )

            self.alarm = alarm
            self.next_alarm_time = fire_at
            print(f"[Alarm] Scheduled for {alarm.time_str} on {format_weekdays(alarm.days)} "
                  f"(next: {fire_at.strftime('%a %Y-%m-%d %H:%M')})")
            return fire_at

    def cancel(self) -> bool:
        """Cancel the pending alarm and silence it if ringing."""
        with self._lock:
            had_alarm = self.is_scheduled or self.is_ringing
            self._remove_job()
            self._silence()
            self.alarm = None
            self.next_alarm_time = None
            self.gate = None
            if had_alarm:
                print("[Alarm] Alarm cancelled")
            return had_alarm

    def trigger(self):
        """Called when the alarm fires."""
        with self._lock:
            if self.alarm is None:
                print("[Alarm] Trigger without an alarm, ignoring")
                return

            if self.gate is not None:
                print("[Alarm] Already ringing, keeping challenge progress")
                return

            print(f"[Alarm] Alarm triggered at {self._clock().strftime('%H:%M')}")
            self.next_alarm_time = None
            self.gate = DismissGate(parse_challenge_types(self.alarm.challenges))

            self._player.play_tone(get_tone(self.alarm.tone_id))
            if self.alarm.vibrate and self._vibrator is not None:
                self._vibrator.start()

    def dismiss(self) -> bool:
        """
        Dismiss the ringing alarm.

        Returns False while challenges remain. On success the alarm is
        rescheduled for its next weekday.
        """
        with self._lock:
            if not self.is_ringing:
                return False
            if not self.gate.is_complete:
                print("[Alarm] Dismiss refused, challenges incomplete")
                return False

            self._silence()
            self.gate = None
            alarm = self.alarm
            print("[Alarm] Alarm dismissed")

            self.schedule(alarm)

            return True

    def shutdown(self):
        """Stop the scheduler and any playing tone."""
        with self._lock:
            self._silence()
            if self._scheduler is not None and self._scheduler.running:
                self._scheduler.shutdown(wait=False)
                print("[Alarm] Scheduler stopped")
            self._scheduler = None

    def _remove_job(self):
        if self._scheduler is None:
            return
        if self._scheduler.get_job(ALARM_JOB_ID) is not None:
            self._scheduler.remove_job(ALARM_JOB_ID)

    def _silence(self):
        self._player.stop_playback()
        if self._vibrator is not None:
            self._vibrator.stop()

    def status(self) -> dict:
        with self._lock:
            return {
                "scheduled": self.is_scheduled,
                "nextAlarm": self.next_alarm_time.isoformat() if self.next_alarm_time else None,
                "ringing": self.is_ringing,
                "alarm": self.alarm.to_dict() if self.alarm else None,
                "gate": self.gate.to_dict() if self.gate else None,
            }
