"""Shared fixtures."""

import os
import tempfile
from datetime import datetime

# Keep tone files and the default database out of the project tree
os.environ.setdefault("MORNING_ROUTINE_DATA_DIR", tempfile.mkdtemp(prefix="morning-routine-"))

import pytest
from apscheduler.schedulers.background import BackgroundScheduler

from alarm.scheduler import AlarmService
from app import create_app

# Far enough ahead that scheduled jobs never fire during a test run
WEDNESDAY_8AM = datetime(2030, 1, 2, 8, 0)


class FakePlayer:
    def __init__(self):
        self.played = []
        self.stopped = 0

    def play_tone(self, tone, loop=True):
        self.played.append(tone)
        return True

    def stop_playback(self):
        self.stopped += 1
        return True


class FakeVibrator:
    def __init__(self):
        self.active = False
        self.starts = 0

    def start(self):
        self.active = True
        self.starts += 1
        return True

    def stop(self):
        was_active = self.active
        self.active = False
        return was_active


class Clock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return Clock(WEDNESDAY_8AM)


@pytest.fixture
def player():
    return FakePlayer()


@pytest.fixture
def vibrator():
    return FakeVibrator()


@pytest.fixture
def service(clock, player, vibrator):
    service = AlarmService(
        scheduler=BackgroundScheduler(),
        player=player,
        vibrator=vibrator,
        clock=clock,
    )
    yield service
    service.shutdown()


@pytest.fixture
def app(service):
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "ALARM_SERVICE": service,
    })
    yield app


@pytest.fixture
def client(app):
    return app.test_client()
