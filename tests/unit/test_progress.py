"""
Unit tests for the progress aggregator.
"""

import pytest

from teachme import progress
from teachme.curriculum.models import MasteryStatus


class TestMarkReady:
    def test_not_started_advances(self, variables_subtopic):
        assert progress.mark_ready(variables_subtopic)
        assert variables_subtopic.status == MasteryStatus.IN_PROGRESS

    @pytest.mark.parametrize("status", [
        MasteryStatus.IN_PROGRESS,
        MasteryStatus.COMPLETED,
        MasteryStatus.MASTERED,
    ])
    def test_never_downgrades(self, variables_subtopic, status):
        variables_subtopic.status = status

        assert not progress.mark_ready(variables_subtopic)
        assert variables_subtopic.status == status


class TestRecordGrading:
    def test_correct_fundamental_is_mastered(self, variables_subtopic):
        assert progress.record_grading(variables_subtopic, True) == MasteryStatus.MASTERED
        assert variables_subtopic.completed

    def test_correct_regular_is_completed(self, equations_subtopic):
        assert progress.record_grading(equations_subtopic, True) == MasteryStatus.COMPLETED
        assert equations_subtopic.completed

    @pytest.mark.parametrize("fixture", ["variables_subtopic", "equations_subtopic"])
    def test_incorrect_is_in_progress(self, request, fixture):
        subtopic = request.getfixturevalue(fixture)
        subtopic.status = MasteryStatus.COMPLETED

        assert progress.record_grading(subtopic, False) == MasteryStatus.IN_PROGRESS
        assert not subtopic.completed

    def test_regular_subtopic_never_mastered(self, equations_subtopic):
        for correct in (True, False, True):
            progress.record_grading(equations_subtopic, correct)
            assert equations_subtopic.status != MasteryStatus.MASTERED


class TestDerivedCompletion:
    def test_topic_requires_every_subtopic(self, store):
        topic = store.get_topic("cs", "programming-basics")
        variables, loops = topic.subtopics

        progress.record_grading(variables, True)
        assert not progress.topic_completed(topic)

        progress.record_grading(loops, True)
        assert progress.topic_completed(topic)
        assert topic.completed

        progress.reset(loops)
        assert not progress.topic_completed(topic)

    def test_completed_and_mastered_both_count(self, store):
        topic = store.get_topic("cs", "programming-basics")
        topic.subtopics[0].status = MasteryStatus.COMPLETED
        topic.subtopics[1].status = MasteryStatus.MASTERED

        assert progress.topic_completed(topic)

    def test_summary(self, store):
        subject = store.get_subject("math")

        assert progress.summarize(subject).label == "0 of 1 stars collected!"

        progress.record_grading(subject.topics[0].subtopics[0], True)
        summary = progress.summarize(subject)

        assert summary.completed_topics == 1
        assert summary.total_topics == 1
        assert summary.label == "1 of 1 stars collected!"
