"""Key/value persistence for alarm, feed and profile records."""

import json
from datetime import date
from typing import Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError

from app import db
from app.models import Preference
from app.records import ScheduledAlarm, UserProfile, RoutineEntry, parse_json

ALARM_KEY = "scheduled_alarm"
FEED_KEY = "routine_feed_entries"
PROFILE_KEY = "user_profile"


class KeyValueStore(Protocol):
    """String store with get/set. Failures read as missing data."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> bool:
        ...


class PreferenceStore:
    """Store backed by the preferences table. Needs an app context."""

    def get(self, key: str) -> Optional[str]:
        try:
            pref = db.session.get(Preference, key)
            return pref.value if pref else None
        except SQLAlchemyError as e:
            print(f"[Storage] Error reading '{key}': {e}")
            return None

    def set(self, key: str, value: str) -> bool:
        try:
            pref = db.session.get(Preference, key)
            if pref:
                pref.value = value
            else:
                db.session.add(Preference(key=key, value=value))
            db.session.commit()
            return True
        except SQLAlchemyError as e:
            db.session.rollback()
            print(f"[Storage] Error writing '{key}': {e}")
            return False


class MemoryStore:
    """In-process store, used by the test suite."""

    def __init__(self, data: dict = None):
        self._data = dict(data or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> bool:
        self._data[key] = value
        return True


class AlarmStorage:
    """Persists the single scheduled alarm."""

    def __init__(self, store: KeyValueStore):
        self._store = store

    def load(self, today: date = None) -> Optional[ScheduledAlarm]:
        data = parse_json(self._store.get(ALARM_KEY))
        if not isinstance(data, dict):
            return None
        return ScheduledAlarm.from_dict(data, today=today)

    def save(self, alarm: ScheduledAlarm) -> bool:
        return self._store.set(ALARM_KEY, json.dumps(alarm.to_dict()))

    def clear(self) -> bool:
        return self._store.set(ALARM_KEY, "")


class FeedStorage:
    """Persists completed routines, newest first."""

    def __init__(self, store: KeyValueStore):
        self._store = store

    def load_entries(self) -> list[RoutineEntry]:
        data = parse_json(self._store.get(FEED_KEY), default=[])
        if not isinstance(data, list):
            print("[Storage] Feed payload is not a list, starting empty")
            return []
        return [RoutineEntry.from_dict(item) for item in data if isinstance(item, dict)]

    def save_entries(self, entries: list[RoutineEntry]) -> bool:
        return self._store.set(FEED_KEY, json.dumps([e.to_dict() for e in entries]))


class ProfileStorage:
    """Persists the onboarding profile."""

    def __init__(self, store: KeyValueStore):
        self._store = store

    def load(self) -> Optional[UserProfile]:
        data = parse_json(self._store.get(PROFILE_KEY))
        if not isinstance(data, dict):
            return None
        return UserProfile.from_dict(data)

    def save(self, profile: UserProfile) -> bool:
        return self._store.set(PROFILE_KEY, json.dumps(profile.to_dict()))
