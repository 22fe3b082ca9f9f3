"""
Unit tests for subject -> topic -> subtopic navigation.
"""

import asyncio

import pytest

from teachme.curriculum.models import MasteryStatus
from teachme.errors import CurriculumError, InvalidTransition
from teachme.session.navigator import APP_TITLE, SessionNavigator


@pytest.fixture
def navigator(store, gateway):
    return SessionNavigator(store, gateway)


def select_variables(navigator):
    navigator.select_subject("cs")
    navigator.select_topic("programming-basics")
    return navigator.select_subtopic("variables")


class TestSelection:
    def test_title_follows_breadcrumb(self, navigator):
        assert navigator.title == APP_TITLE

        navigator.select_subject("cs")
        assert navigator.title == "TeachMe! - Computer Science"

        select_variables(navigator)
        assert navigator.title.endswith(" - Programming Basics - Variables and Data Types")

    def test_select_subtopic_starts_fresh_session(self, navigator):
        session = select_variables(navigator)

        assert navigator.active_session is session
        assert session.subtopic is navigator.subtopic
        assert len(session.messages) == 1

    def test_order_enforced(self, navigator):
        with pytest.raises(InvalidTransition):
            navigator.select_topic("programming-basics")

        navigator.select_subject("cs")
        with pytest.raises(InvalidTransition):
            navigator.select_subtopic("variables")

    def test_unknown_ids(self, navigator):
        with pytest.raises(CurriculumError):
            navigator.select_subject("history")

        navigator.select_subject("cs")
        with pytest.raises(CurriculumError):
            navigator.select_topic("algebra")

    def test_no_active_session(self, navigator):
        with pytest.raises(InvalidTransition):
            navigator.active_session


class TestBack:
    def test_walks_up_one_level_at_a_time(self, navigator):
        session = select_variables(navigator)

        navigator.back()
        assert navigator.subtopic is None
        assert navigator.session is None
        assert session.closed
        assert navigator.topic is not None

        navigator.back()
        assert navigator.topic is None
        assert navigator.subject is not None

        navigator.back()
        assert navigator.subject is None

        navigator.back()
        assert navigator.title == APP_TITLE

    def test_reselecting_replaces_session(self, navigator):
        first = select_variables(navigator)
        second = navigator.select_subtopic("loops")

        assert first.closed
        assert not second.closed
        assert navigator.active_session is second

    @pytest.mark.asyncio
    async def test_reply_after_leaving_is_discarded(self, store, held_gateway):
        navigator = SessionNavigator(store, held_gateway)
        session = select_variables(navigator)
        held_gateway.replies = ["I understand, I'm ready for the quiz!"]

        task = asyncio.create_task(session.send_message("A variable is a labelled box."))
        await held_gateway.started.wait()

        navigator.back()
        held_gateway.release.set()

        assert await task is None
        assert navigator.topic.subtopics[0].status == MasteryStatus.NOT_STARTED


class TestProgress:
    def test_progress_per_subject(self, navigator, store):
        for subtopic in store.get_topic("cs", "programming-basics").subtopics:
            subtopic.status = MasteryStatus.MASTERED

        summaries = navigator.progress()

        assert [s.subject_id for s in summaries] == ["cs", "math"]
        assert summaries[0].label == "1 of 1 stars collected!"
        assert summaries[1].label == "0 of 1 stars collected!"

    def test_completion_callback_forwarded(self, store, gateway):
        completions = []
        navigator = SessionNavigator(store, gateway, on_complete=lambda *args: completions.append(args))
        gateway.quiz_payload = {"selectedAnswers": ["A", "D"]}

        session = select_variables(navigator)
        asyncio.run(session.request_quiz())

        assert completions == [("variables", True)]
