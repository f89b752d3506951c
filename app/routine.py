"""Guided morning routine runs."""

import base64
from datetime import datetime
from typing import Callable, Optional

from app.records import RoutineEntry, RoutineStepResult
from app.steps import RoutineStep, StepKind, steps_for

# 1x1 PNG used when no camera is available
SIMULATED_PHOTO = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8/5+hHgAHggJ/PchI7wAAAABJRU5ErkJggg=="
)


class RoutineError(Exception):
    """Raised for an action that does not fit the current run state."""


class RoutineRun:
    """
    One pass through the routine steps.

    idle -> running -> completed. Results are collected per completed
    step and become a RoutineEntry once every step is done. Abandoning
    a run discards its results.
    """

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"

    def __init__(self, steps: list[RoutineStep] = None, clock: Callable[[], datetime] = None):
        self.steps = list(steps) if steps else steps_for([])
        self._clock = clock or datetime.now
        self.state = self.IDLE
        self.current_index = 0
        self.results: list[RoutineStepResult] = []
        self.pending_photo: Optional[bytes] = None
        self.pending_entry: Optional[RoutineEntry] = None

    @classmethod
    def for_tasks(cls, task_ids, clock: Callable[[], datetime] = None) -> "RoutineRun":
        return cls(steps_for(task_ids), clock=clock)

    @property
    def is_running(self) -> bool:
        return self.state == self.RUNNING

    @property
    def is_completed(self) -> bool:
        return self.state == self.COMPLETED

    @property
    def current_step(self) -> Optional[RoutineStep]:
        if not self.is_running:
            return None
        return self.steps[self.current_index]

    def start(self):
        """Reset and begin from the first step."""
        self.state = self.RUNNING
        self.current_index = 0
        self.results = []
        self.pending_photo = None
        self.pending_entry = None
        print(f"[Routine] Started with {len(self.steps)} steps")

    def abandon(self):
        """Drop the run without producing an entry."""
        if self.is_running:
            print(f"[Routine] Abandoned at step {self.current_index + 1}")
        self.state = self.IDLE
        self.current_index = 0
        self.results = []
        self.pending_photo = None
        self.pending_entry = None

    def attach_photo(self, photo: bytes):
        """Attach a captured photo to the current photo step."""
        step = self._require_step()
        if step.kind is not StepKind.PHOTO:
            raise RoutineError(f"Step '{step.id}' does not take a photo")
        if not photo:
            raise RoutineError("Photo is empty")
        self.pending_photo = photo

    def simulate_photo(self):
        """Use the built-in placeholder photo when no camera is available."""
        self.attach_photo(SIMULATED_PHOTO)

    def complete_step(self, note: str = None) -> Optional[RoutineEntry]:
        """
        Record the current step and advance.

        Args:
            note: What the user wrote; defaults to the step description

        Returns:
            The finished RoutineEntry after the last step, otherwise None
        """
        step = self._require_step()

        photo_b64 = None
        if step.kind is StepKind.PHOTO:
            if self.pending_photo is None:
                raise RoutineError("Capture or simulate a photo before continuing")
            photo_b64 = base64.b64encode(self.pending_photo).decode("ascii")

        note = (note or "").strip() or step.description
        self.results.append(RoutineStepResult(
            id=step.id,
            kind=step.kind,
            note=note,
            image_base64=photo_b64,
        ))
        self.pending_photo = None

        if self.current_index + 1 >= len(self.steps):
            self.pending_entry = RoutineEntry(timestamp=self._clock(), results=list(self.results))
            self.state = self.COMPLETED
            print(f"[Routine] Completed {len(self.results)} steps")
            return self.pending_entry

        self.current_index += 1
        return None

    def take_entry(self) -> RoutineEntry:
        """Hand over the finished entry for posting to the feed."""
        if self.pending_entry is None:
            raise RoutineError("No completed routine to post")
        entry = self.pending_entry
        self.pending_entry = None
        return entry

    def _require_step(self) -> RoutineStep:
        step = self.current_step
        if step is None:
            raise RoutineError("Routine is not running")
        return step

    def to_dict(self):
        step = self.current_step
        return {
            "state": self.state,
            "stepIndex": self.current_index,
            "stepCount": len(self.steps),
            "currentStep": step.to_dict() if step else None,
            "hasPhoto": self.pending_photo is not None,
            "results": [r.to_dict() for r in self.results],
            "pendingEntry": self.pending_entry.to_dict() if self.pending_entry else None,
        }
