"""Conversational onboarding that builds the user's profile."""

from datetime import datetime
from typing import Callable, Optional

from app.records import UserProfile
from app.steps import ROUTINE_STEPS, get_step
from app.validation import (
    ValidationResult, validate_name, validate_age, validate_wake_time, parse_time
)

# Question order: (field, prompt)
QUESTIONS = [
    ("name", "Hi! I'm your morning coach. What should I call you?"),
    ("age", "Nice to meet you, {name}! How old are you?"),
    ("occupation", "What do you do during the day?"),
    ("wake_time", "What time do you usually wake up? (HH:MM)"),
    ("morning_summary", "Describe your mornings in a sentence or two."),
    ("routine_tasks", "Which steps should your routine include? "
                      "Reply with step ids separated by commas, or leave blank for all: {steps}"),
]


class OnboardingFlow:
    """
    Asks one question at a time and validates each answer.

    An invalid answer re-asks the same question. Once every question is
    answered, build_profile() returns the UserProfile.
    """

    def __init__(self, clock: Callable[[], datetime] = None):
        self._clock = clock or datetime.now
        self._answers: dict = {}
        self._index = 0
        self._created_at: Optional[datetime] = None
        self._editing = False
        self.transcript: list[dict] = []
        self._say(self.prompt)

    @classmethod
    def from_profile(cls, profile: UserProfile, clock: Callable[[], datetime] = None) -> "OnboardingFlow":
        """Start an edit of an existing profile; blank answers keep old values."""
        flow = cls(clock=clock)
        flow._editing = True
        flow._created_at = profile.created_at
        flow._answers = {
            "name": profile.name,
            "age": profile.age,
            "occupation": profile.occupation,
            "wake_time": (profile.wake_hour, profile.wake_minute),
            "morning_summary": profile.morning_summary,
            "routine_tasks": list(profile.routine_task_ids),
        }
        return flow

    @property
    def is_complete(self) -> bool:
        return self._index >= len(QUESTIONS)

    @property
    def current_field(self) -> Optional[str]:
        if self.is_complete:
            return None
        return QUESTIONS[self._index][0]

    @property
    def prompt(self) -> Optional[str]:
        if self.is_complete:
            return None
        template = QUESTIONS[self._index][1]
        return template.format(
            name=self._answers.get("name", "friend"),
            steps=", ".join(step.id for step in ROUTINE_STEPS),
        )

    def _say(self, text: str):
        self.transcript.append({"from": "coach", "text": text})

    def answer(self, text: str) -> ValidationResult:
        """Answer the current question and move on if the answer is valid."""
        if self.is_complete:
            return ValidationResult(
                is_valid=False, has_warning=False,
                error_message="Onboarding is already complete"
            )

        text = (text or "").strip()
        self.transcript.append({"from": "user", "text": text})

        field = self.current_field
        if self._editing and not text and field in self._answers:
            # Blank answer while editing keeps the stored value
            result, value = ValidationResult(is_valid=True, has_warning=False), self._answers[field]
        else:
            result, value = self._check(field, text)
        if not result.is_valid:
            self._say(f"{result.error_message}. {self.prompt}")
            return result

        self._answers[field] = value
        self._index += 1
        if result.has_warning:
            self._say(result.warning_message)
        if self.is_complete:
            self._say(f"All set, {self._answers['name']}! Your profile is ready.")
        else:
            self._say(self.prompt)
        return result

    def _check(self, field: str, text: str):
        if field == "name":
            return validate_name(text), text
        if field == "age":
            result = validate_age(text)
            return result, int(text) if result.is_valid else None
        if field == "occupation" or field == "morning_summary":
            if not text:
                return ValidationResult(
                    is_valid=False, has_warning=False,
                    error_message="Please write a short answer"
                ), None
            return ValidationResult(is_valid=True, has_warning=False), text
        if field == "wake_time":
            result = validate_wake_time(text)
            return result, parse_time(text) if result.is_valid else None
        if field == "routine_tasks":
            ids = [part.strip() for part in text.split(",") if part.strip()]
            unknown = [i for i in ids if get_step(i) is None]
            if unknown:
                return ValidationResult(
                    is_valid=False, has_warning=False,
                    error_message=f"Unknown step: {', '.join(unknown)}"
                ), None
            return ValidationResult(is_valid=True, has_warning=False), ids
        raise ValueError(f"Unknown onboarding field: {field}")

    def build_profile(self) -> UserProfile:
        if not self.is_complete:
            raise ValueError(f"Onboarding incomplete, waiting for {self.current_field}")

        wake_hour, wake_minute = self._answers["wake_time"]
        return UserProfile(
            name=self._answers["name"],
            age=self._answers["age"],
            occupation=self._answers["occupation"],
            wake_hour=wake_hour,
            wake_minute=wake_minute,
            morning_summary=self._answers["morning_summary"],
            routine_task_ids=self._answers["routine_tasks"],
            created_at=self._created_at or self._clock(),
        )

    def to_dict(self):
        return {
            "complete": self.is_complete,
            "field": self.current_field,
            "prompt": self.prompt,
            "transcript": list(self.transcript),
        }
