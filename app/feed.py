"""Feed of completed morning routines."""

from app.records import RoutineEntry
from app.storage import FeedStorage


class FeedController:
    """Keeps the feed in memory and writes through to storage."""

    def __init__(self, storage: FeedStorage):
        self._storage = storage
        self._entries: list[RoutineEntry] = []

    @property
    def entries(self) -> list[RoutineEntry]:
        """Entries, newest first."""
        return list(self._entries)

    def load(self) -> list[RoutineEntry]:
        self._entries = self._storage.load_entries()
        return self.entries

    def add_entry(self, entry: RoutineEntry) -> bool:
        """Prepend an entry and persist the feed."""
        self._entries = [entry] + self._entries
        saved = self._storage.save_entries(self._entries)
        if not saved:
            print("[Feed] Entry kept in memory but could not be saved")
        return saved

    def to_dict(self):
        return {
            "count": len(self._entries),
            "entries": [e.to_dict() for e in self._entries],
        }
