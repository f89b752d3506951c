"""Catalog of guided morning routine steps."""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional


class StepKind(Enum):
    """What the user does on a routine step."""
    TASK = "task"
    INFO = "info"
    PHOTO = "photo"

    @property
    def label(self) -> str:
        if self is StepKind.TASK:
            return "Guided Task"
        if self is StepKind.INFO:
            return "Wellness Insight"
        return "Photo Moment"

    @classmethod
    def parse(cls, value: Optional[str]) -> "StepKind":
        """Parse a stored kind; unknown values are treated as tasks."""
        try:
            return cls(value)
        except ValueError:
            return cls.TASK


@dataclass(frozen=True)
class RoutineStep:
    """A single routine step template."""
    id: str
    title: str
    description: str
    kind: StepKind

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "type": self.kind.value,
            "label": self.kind.label,
        }


ROUTINE_STEPS = [
    RoutineStep(
        id="wake_breathe",
        title="Wake & Breathe",
        description="Sit up tall, inhale for four counts, exhale for six. "
                    "Repeat five times to oxygenate your morning.",
        kind=StepKind.TASK,
    ),
    RoutineStep(
        id="stretch",
        title="Full Body Stretch",
        description="Reach your arms overhead, interlace your fingers, "
                    "and stretch side-to-side for one minute.",
        kind=StepKind.TASK,
    ),
    RoutineStep(
        id="affirmations",
        title="Mirror Affirmations",
        description="Look into the mirror and say \"I am energised, I am grateful, "
                    "I am unstoppable\" five times.",
        kind=StepKind.TASK,
    ),
    RoutineStep(
        id="hydration",
        title="Hydration Boost",
        description="Sip a glass of water with a squeeze of lemon. "
                    "Hydration first boosts metabolism and digestion.",
        kind=StepKind.INFO,
    ),
    RoutineStep(
        id="sunshine_photo",
        title="Sunshine Snapshot",
        description="Capture your morning glow near a window or simulate a photo "
                    "to celebrate your progress.",
        kind=StepKind.PHOTO,
    ),
    RoutineStep(
        id="mindfulness",
        title="Mindful Minute",
        description="Close your eyes and follow your breath. Imagine the most "
                    "confident version of yourself today.",
        kind=StepKind.TASK,
    ),
    RoutineStep(
        id="breakfast_tip",
        title="Breakfast Inspiration",
        description="Choose a protein-rich breakfast: think Greek yogurt with berries "
                    "or scrambled eggs with greens.",
        kind=StepKind.INFO,
    ),
]

_STEPS_BY_ID = {step.id: step for step in ROUTINE_STEPS}


def get_step(step_id: str) -> Optional[RoutineStep]:
    return _STEPS_BY_ID.get(step_id)


def steps_for(task_ids: Iterable[str]) -> list[RoutineStep]:
    """
    Steps for a run, in the order the user picked them.

    Unknown ids are skipped. An empty selection runs the whole catalog.
    """
    steps = []
    for task_id in task_ids or []:
        step = _STEPS_BY_ID.get(task_id)
        if step is not None and step not in steps:
            steps.append(step)
    return steps or list(ROUTINE_STEPS)
