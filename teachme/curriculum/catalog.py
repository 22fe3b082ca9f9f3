"""
Curriculum Store: Static catalog of subjects, topics and subtopics.

Loaded once from JSON (the bundled catalog by default) and read-only
afterwards, apart from subtopic statuses owned by the progress layer.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path

from loguru import logger

from teachme.curriculum.models import Subject, Subtopic, Topic
from teachme.errors import CurriculumError

# =============================================================================
# Curriculum Store
# =============================================================================


class CurriculumStore:
    """
    Catalog of subjects -> topics -> subtopics -> practice problems.

    Every call to load() builds fresh Subtopic instances, so two stores
    never share status.
    """

    DEFAULT_PATH = Path(__file__).resolve().parent.parent / "data" / "subjects.json"

    def __init__(self, path: Path | None = None):
        self.path = path or self.DEFAULT_PATH
        self._subjects: list[Subject] = []

    @classmethod
    def from_settings(cls) -> CurriculumStore:
        """Build and load the store configured by settings."""
        from config import get_settings

        configured = get_settings().curriculum_path
        store = cls(Path(configured) if configured else None)
        store.load()
        return store

    @classmethod
    def from_dicts(cls, subjects: list[dict]) -> CurriculumStore:
        """Build a store directly from already-parsed subject dicts."""
        store = cls()
        store._subjects = cls._parse_subjects(subjects)
        return store

    @property
    def subjects(self) -> list[Subject]:
        return list(self._subjects)

    def load(self) -> int:
        """
        Load the catalog from the JSON file.

        Returns:
            Number of subtopics loaded
        """
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise CurriculumError(f"Cannot read curriculum {self.path}: {e}") from e
        except json.JSONDecodeError as e:
            raise CurriculumError(f"Curriculum {self.path} is not valid JSON: {e}") from e

        raw_subjects = data.get("subjects") if isinstance(data, dict) else data
        if not isinstance(raw_subjects, list):
            raise CurriculumError(f"Curriculum {self.path} has no subject list")

        self._subjects = self._parse_subjects(raw_subjects)
        count = sum(1 for _ in self.iter_subtopics())
        logger.info(
            f"Curriculum loaded: {len(self._subjects)} subjects, {count} subtopics from {self.path}"
        )
        return count

    @staticmethod
    def _parse_subjects(raw_subjects: list[dict]) -> list[Subject]:
        subjects = [Subject.from_dict(s) for s in raw_subjects]
        seen: set[str] = set()
        for subject in subjects:
            for topic in subject.topics:
                for subtopic in topic.subtopics:
                    if subtopic.id in seen:
                        raise CurriculumError(f"Duplicate subtopic id: {subtopic.id!r}")
                    seen.add(subtopic.id)
        return subjects

    # =========================================================================
    # Lookups
    # =========================================================================

    def get_subject(self, subject_id: str) -> Subject:
        for subject in self._subjects:
            if subject.id == subject_id:
                return subject
        raise CurriculumError(f"Unknown subject: {subject_id!r}")

    def get_topic(self, subject_id: str, topic_id: str) -> Topic:
        subject = self.get_subject(subject_id)
        for topic in subject.topics:
            if topic.id == topic_id:
                return topic
        raise CurriculumError(f"Unknown topic {topic_id!r} in subject {subject_id!r}")

    def get_subtopic(self, subject_id: str, topic_id: str, subtopic_id: str) -> Subtopic:
        topic = self.get_topic(subject_id, topic_id)
        for subtopic in topic.subtopics:
            if subtopic.id == subtopic_id:
                return subtopic
        raise CurriculumError(f"Unknown subtopic {subtopic_id!r} in topic {topic_id!r}")

    def find_subtopic(self, subtopic_id: str) -> tuple[Subject, Topic, Subtopic]:
        """Locate a subtopic anywhere in the catalog."""
        for subject in self._subjects:
            for topic in subject.topics:
                for subtopic in topic.subtopics:
                    if subtopic.id == subtopic_id:
                        return subject, topic, subtopic
        raise CurriculumError(f"Unknown subtopic: {subtopic_id!r}")

    def iter_subtopics(self) -> Iterator[Subtopic]:
        for subject in self._subjects:
            for topic in subject.topics:
                yield from topic.subtopics
