"""
Curriculum Models: Subjects, topics, subtopics and practice problems.

The catalog is static. The only mutable state is a subtopic's mastery
status, which is changed exclusively through teachme.progress.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from teachme.errors import CurriculumError


class MasteryStatus(str, Enum):
    """Progress of a subtopic, in tier order."""
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    MASTERED = "mastered"     # Fundamental subtopics only

    @property
    def tier(self) -> int:
        return list(MasteryStatus).index(self)


@dataclass(frozen=True)
class Choice:
    """One answer option of a multiple choice problem."""
    id: str
    text: str


@dataclass(frozen=True)
class PracticeProblem:
    """
    Multiple choice problem attached to a subtopic.

    Several choices may be correct; grading requires the exact set.
    """

    question: str
    choices: tuple[Choice, ...]
    correct_answers: frozenset[str]
    explanation: str | None = None

    def __post_init__(self) -> None:
        ids = [choice.id for choice in self.choices]
        if len(set(ids)) != len(ids):
            raise CurriculumError(f"Duplicate choice ids in problem: {self.question!r}")
        if not self.correct_answers:
            raise CurriculumError(f"Problem has no correct answers: {self.question!r}")
        unknown = self.correct_answers - set(ids)
        if unknown:
            raise CurriculumError(
                f"Correct answers {sorted(unknown)} are not choices of: {self.question!r}"
            )

    @property
    def choice_ids(self) -> list[str]:
        return [choice.id for choice in self.choices]

    def correct_choices(self) -> list[Choice]:
        """Correct choices in display order."""
        return [choice for choice in self.choices if choice.id in self.correct_answers]

    def format_choices(self) -> str:
        """Render choices one per line as 'A. text'."""
        return "\n".join(f"{choice.id}. {choice.text}" for choice in self.choices)

    @classmethod
    def from_dict(cls, data: dict) -> PracticeProblem:
        try:
            choices = tuple(Choice(id=str(c["id"]), text=c["text"]) for c in data["choices"])
            return cls(
                question=data["question"],
                choices=choices,
                correct_answers=frozenset(str(a) for a in data["correctAnswers"]),
                explanation=data.get("explanation"),
            )
        except (KeyError, TypeError) as e:
            raise CurriculumError(f"Invalid practice problem: {e}") from e


@dataclass
class Subtopic:
    """
    Smallest gradable learning unit, paired with one practice problem.

    `completed` is derived from the status: a subtopic counts as completed
    once it is completed or mastered.
    """

    id: str
    name: str
    description: str
    practice_problem: PracticeProblem
    status: MasteryStatus = MasteryStatus.NOT_STARTED
    is_fundamental: bool = False
    # Reserved, never incremented by the session
    attempts: int = 0

    @property
    def completed(self) -> bool:
        return self.status in (MasteryStatus.COMPLETED, MasteryStatus.MASTERED)

    @classmethod
    def from_dict(cls, data: dict) -> Subtopic:
        try:
            status = MasteryStatus(data.get("status", MasteryStatus.NOT_STARTED.value))
        except ValueError as e:
            raise CurriculumError(f"Unknown status for subtopic {data.get('id')!r}: {e}") from e
        is_fundamental = bool(data.get("isFundamental", False))
        if status == MasteryStatus.MASTERED and not is_fundamental:
            raise CurriculumError(f"Subtopic {data.get('id')!r} cannot be mastered")
        try:
            attempts = int(data.get("attempts", 0))
        except (TypeError, ValueError) as e:
            raise CurriculumError(f"Invalid attempts for subtopic {data.get('id')!r}: {e}") from e
        if attempts < 0:
            raise CurriculumError(f"Subtopic {data.get('id')!r} has negative attempts: {attempts}")

        try:
            return cls(
                id=data["id"],
                name=data["name"],
                description=data.get("description", ""),
                practice_problem=PracticeProblem.from_dict(data["practiceProblem"]),
                status=status,
                is_fundamental=is_fundamental,
                attempts=attempts,
            )
        except KeyError as e:
            raise CurriculumError(f"Subtopic is missing field {e}") from e


@dataclass
class Topic:
    """Ordered group of subtopics. Completion is always recomputed."""

    id: str
    name: str
    description: str
    subtopics: list[Subtopic] = field(default_factory=list)

    @property
    def completed(self) -> bool:
        return all(subtopic.completed for subtopic in self.subtopics)

    @classmethod
    def from_dict(cls, data: dict) -> Topic:
        try:
            return cls(
                id=data["id"],
                name=data["name"],
                description=data.get("description", ""),
                subtopics=[Subtopic.from_dict(s) for s in data.get("subtopics", [])],
            )
        except KeyError as e:
            raise CurriculumError(f"Topic is missing field {e}") from e


@dataclass
class Subject:
    id: str
    name: str
    icon: str = ""
    topics: list[Topic] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> Subject:
        try:
            return cls(
                id=data["id"],
                name=data["name"],
                icon=data.get("icon", ""),
                topics=[Topic.from_dict(t) for t in data.get("topics", [])],
            )
        except KeyError as e:
            raise CurriculumError(f"Subject is missing field {e}") from e
