"""
Progress Aggregator: Subtopic status transitions and derived completion.

Every status change goes through this module so the mastery tier can only
be reached by a fundamental subtopic whose latest quiz was correct.
Topic completion is never stored; it is recomputed from subtopics.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from teachme.curriculum.models import MasteryStatus, Subject, Subtopic, Topic

# =============================================================================
# Status Transitions
# =============================================================================


def mark_ready(subtopic: Subtopic) -> bool:
    """
    Student signalled readiness for the quiz.

    Advances to in_progress unless the subtopic is already at or beyond it.
    Returns True if the status changed.
    """
    if subtopic.status.tier >= MasteryStatus.IN_PROGRESS.tier:
        return False
    _set_status(subtopic, MasteryStatus.IN_PROGRESS)
    return True


def record_grading(subtopic: Subtopic, correct: bool) -> MasteryStatus:
    """Apply a quiz result and return the new status."""
    if correct:
        status = MasteryStatus.MASTERED if subtopic.is_fundamental else MasteryStatus.COMPLETED
    else:
        status = MasteryStatus.IN_PROGRESS
    _set_status(subtopic, status)
    return status


def reset(subtopic: Subtopic) -> None:
    """Start over: back to not_started."""
    _set_status(subtopic, MasteryStatus.NOT_STARTED)


def _set_status(subtopic: Subtopic, status: MasteryStatus) -> None:
    if subtopic.status != status:
        logger.info(f"Subtopic {subtopic.id}: {subtopic.status.value} -> {status.value}")
    subtopic.status = status


# =============================================================================
# Derived Completion
# =============================================================================


def topic_completed(topic: Topic) -> bool:
    """A topic is complete when every subtopic is completed or mastered."""
    return all(subtopic.completed for subtopic in topic.subtopics)


def completed_topic_count(subject: Subject) -> int:
    return sum(1 for topic in subject.topics if topic_completed(topic))


@dataclass(frozen=True)
class ProgressSummary:
    """Completed topics of one subject."""
    subject_id: str
    completed_topics: int
    total_topics: int

    @property
    def label(self) -> str:
        return f"{self.completed_topics} of {self.total_topics} stars collected!"


def summarize(subject: Subject) -> ProgressSummary:
    return ProgressSummary(
        subject_id=subject.id,
        completed_topics=completed_topic_count(subject),
        total_topics=len(subject.topics),
    )
