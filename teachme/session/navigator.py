"""
Session Navigator: Subject -> topic -> subtopic selection.

Owns the single active TeachingSession. Leaving the subtopic level closes
it, so replies that arrive afterwards never touch the new selection.
"""

from __future__ import annotations

from loguru import logger

from teachme import progress
from teachme.curriculum.catalog import CurriculumStore
from teachme.curriculum.models import Subject, Subtopic, Topic
from teachme.errors import InvalidTransition
from teachme.progress import ProgressSummary
from teachme.session.state_machine import (
    ChangeListener,
    CompletionCallback,
    TeachingSession,
)
from teachme.tutor.gateway import LanguageModelGateway

APP_TITLE = "TeachMe!"


class SessionNavigator:
    """Dispatches navigation intents and hands out teaching sessions."""

    def __init__(
        self,
        store: CurriculumStore,
        gateway: LanguageModelGateway,
        on_complete: CompletionCallback | None = None,
        on_change: ChangeListener | None = None,
    ):
        self.store = store
        self.gateway = gateway
        self.on_complete = on_complete
        self.on_change = on_change

        self.subject: Subject | None = None
        self.topic: Topic | None = None
        self.subtopic: Subtopic | None = None
        self.session: TeachingSession | None = None

    @property
    def title(self) -> str:
        """Breadcrumb of the current selection."""
        parts = [APP_TITLE]
        for selected in (self.subject, self.topic, self.subtopic):
            if selected is None:
                break
            parts.append(selected.name)
        return " - ".join(parts)

    @property
    def active_session(self) -> TeachingSession:
        if self.session is None:
            raise InvalidTransition("No subtopic selected")
        return self.session

    def select_subject(self, subject_id: str) -> Subject:
        self._close_session()
        self.subject = self.store.get_subject(subject_id)
        self.topic = None
        self.subtopic = None
        return self.subject

    def select_topic(self, topic_id: str) -> Topic:
        if self.subject is None:
            raise InvalidTransition("Select a subject before a topic")
        self._close_session()
        self.topic = self.store.get_topic(self.subject.id, topic_id)
        self.subtopic = None
        return self.topic

    def select_subtopic(self, subtopic_id: str) -> TeachingSession:
        """Start a fresh teaching session for the subtopic."""
        if self.subject is None or self.topic is None:
            raise InvalidTransition("Select a topic before a subtopic")
        self._close_session()
        self.subtopic = self.store.get_subtopic(self.subject.id, self.topic.id, subtopic_id)
        self.session = TeachingSession(
            self.subtopic,
            self.gateway,
            on_complete=self._handle_complete,
            on_change=self.on_change,
        )
        logger.info(f"Teaching {self.subtopic.id} (session {self.session.session_id})")
        return self.session

    def back(self) -> None:
        """Step one level up the selection."""
        if self.subtopic is not None:
            self._close_session()
            self.subtopic = None
        elif self.topic is not None:
            self.topic = None
        elif self.subject is not None:
            self.subject = None

    def progress(self) -> list[ProgressSummary]:
        return [progress.summarize(subject) for subject in self.store.subjects]

    def _handle_complete(self, subtopic_id: str, success: bool) -> None:
        if self.topic is not None:
            logger.info(
                f"Topic {self.topic.id} completed={progress.topic_completed(self.topic)} "
                f"after {subtopic_id} ({'passed' if success else 'failed'})"
            )
        if self.on_complete:
            self.on_complete(subtopic_id, success)

    def _close_session(self) -> None:
        if self.session is not None:
            self.session.close()
            self.session = None
