"""Wake-up challenges that must be completed before the alarm can be dismissed."""

import random
from enum import Enum
from typing import Iterable, Optional, Union

DEFAULT_TAP_GOAL = 10
DEFAULT_REQUIRED_CORRECT = 3
DEFAULT_SENTENCE = "I am awake, I am grateful, and I am ready to own this morning."


class ChallengeType(Enum):
    """Challenges available when setting up the alarm."""
    TAP = "tap"
    MATH = "math"
    COPY = "copy"

    @property
    def label(self) -> str:
        if self is ChallengeType.TAP:
            return "Tap Sprint"
        if self is ChallengeType.MATH:
            return "Quick Maths"
        return "Copy the Sentence"

    @property
    def description(self) -> str:
        if self is ChallengeType.TAP:
            return f"Tap the button {DEFAULT_TAP_GOAL} times."
        if self is ChallengeType.MATH:
            return f"Solve {DEFAULT_REQUIRED_CORRECT} additions in a row."
        return "Type the sentence exactly as shown."

    @classmethod
    def parse(cls, value: str) -> Optional["ChallengeType"]:
        """Parse a challenge id; returns None for unknown ids."""
        value = (value or "").strip().lower()
        if value == "arithmetic":
            return cls.MATH
        try:
            return cls(value)
        except ValueError:
            return None

    def to_dict(self):
        return {
            "id": self.value,
            "label": self.label,
            "description": self.description,
        }


def parse_challenge_types(values: Iterable[str]) -> list[ChallengeType]:
    """Parse challenge ids, dropping unknown ones and duplicates."""
    types = []
    for value in values or []:
        challenge_type = ChallengeType.parse(value) if isinstance(value, str) else None
        if challenge_type is not None and challenge_type not in types:
            types.append(challenge_type)
    return types


class TapChallenge:
    """Complete by tapping `goal` times."""

    type = ChallengeType.TAP

    def __init__(self, goal: int = DEFAULT_TAP_GOAL):
        self.goal = goal
        self.count = 0

    @property
    def is_complete(self) -> bool:
        return self.count >= self.goal

    @property
    def remaining(self) -> int:
        return max(0, self.goal - self.count)

    def tap(self) -> bool:
        """Register a tap. Returns True once the challenge is complete."""
        if not self.is_complete:
            self.count += 1
        return self.is_complete

    def to_dict(self):
        return {
            "type": self.type.value,
            "complete": self.is_complete,
            "count": self.count,
            "goal": self.goal,
            "remaining": self.remaining,
        }


class ArithmeticChallenge:
    """
    Answer `required` additions correctly.

    Each question adds two integers in [1, 10]. A wrong answer keeps the
    same question; there is no penalty and no retry limit.
    """

    type = ChallengeType.MATH

    def __init__(self, required: int = DEFAULT_REQUIRED_CORRECT, rng: random.Random = None):
        self.required = required
        self.correct = 0
        self._rng = rng or random.Random()
        self.a = 0
        self.b = 0
        self._new_question()

    def _new_question(self):
        self.a = self._rng.randint(1, 10)
        self.b = self._rng.randint(1, 10)

    @property
    def expected(self) -> int:
        return self.a + self.b

    @property
    def prompt(self) -> str:
        return f"{self.a} + {self.b} = ?"

    @property
    def is_complete(self) -> bool:
        return self.correct >= self.required

    def submit(self, answer: Union[int, str]) -> bool:
        """
        Check an answer to the pending question.

        Returns True if the answer was correct.
        """
        if self.is_complete:
            return False

        try:
            value = int(str(answer).strip())
        except (TypeError, ValueError):
            return False

        if value != self.expected:
            return False

        self.correct += 1
        if not self.is_complete:
            self._new_question()
        return True

    def to_dict(self):
        return {
            "type": self.type.value,
            "complete": self.is_complete,
            "question": None if self.is_complete else self.prompt,
            "correct": self.correct,
            "required": self.required,
        }


class CopySentenceChallenge:
    """Type the target sentence exactly (case and punctuation count)."""

    type = ChallengeType.COPY

    def __init__(self, target: str = DEFAULT_SENTENCE):
        self.target = target
        self.text = ""
        self._complete = False

    @property
    def is_complete(self) -> bool:
        return self._complete

    @property
    def read_only(self) -> bool:
        return self._complete

    def update(self, text: str) -> bool:
        """Handle an input change. Returns True once the text matches."""
        if self._complete:
            return True
        self.text = text or ""
        if self.text.strip() == self.target:
            self._complete = True
        return self._complete

    def to_dict(self):
        return {
            "type": self.type.value,
            "complete": self.is_complete,
            "target": self.target,
            "text": self.text,
            "readOnly": self.read_only,
        }


Challenge = Union[TapChallenge, ArithmeticChallenge, CopySentenceChallenge]


def create_challenge(challenge_type: ChallengeType, rng: random.Random = None) -> Challenge:
    """Create a fresh challenge of the given type."""
    if challenge_type is ChallengeType.TAP:
        return TapChallenge()
    if challenge_type is ChallengeType.MATH:
        return ArithmeticChallenge(rng=rng)
    if challenge_type is ChallengeType.COPY:
        return CopySentenceChallenge()
    raise ValueError(f"Unknown challenge type: {challenge_type}")


class DismissGate:
    """All requested challenges must be complete before dismissing."""

    def __init__(self, types: Iterable[ChallengeType], rng: random.Random = None):
        self._challenges = {t: create_challenge(t, rng=rng) for t in types}

    @property
    def types(self) -> list[ChallengeType]:
        return list(self._challenges)

    @property
    def is_complete(self) -> bool:
        return all(c.is_complete for c in self._challenges.values())

    def challenge(self, challenge_type: ChallengeType) -> Optional[Challenge]:
        return self._challenges.get(challenge_type)

    def to_dict(self):
        return {
            "complete": self.is_complete,
            "challenges": [c.to_dict() for c in self._challenges.values()],
        }
