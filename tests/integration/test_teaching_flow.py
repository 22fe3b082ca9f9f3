"""
Integration tests for the full teaching flow.

Navigator, session, grading and progress together, with a scripted
student in place of Gemini.
"""

import pytest

from teachme.curriculum.models import MasteryStatus
from teachme.session.navigator import SessionNavigator
from teachme.session.state_machine import QuizResult, SessionPhase
from teachme.tutor.gateway import StudentReply
from teachme.tutor.prompts import READY_MARKER, split_ready_marker


@pytest.fixture
def completions():
    return []


@pytest.fixture
def navigator(store, gateway, completions):
    return SessionNavigator(
        store, gateway, on_complete=lambda subtopic_id, ok: completions.append((subtopic_id, ok))
    )


def ready_reply(text):
    clean, ready = split_ready_marker(f"{text}\n{READY_MARKER}")
    return StudentReply(text=clean, ready_for_quiz=ready)


class TestTeachingFlow:
    @pytest.mark.asyncio
    async def test_fail_then_reteach_then_master(self, navigator, gateway, completions):
        navigator.select_subject("cs")
        topic = navigator.select_topic("programming-basics")
        session = navigator.select_subtopic("variables")

        gateway.replies = [ready_reply("Names can't start with digits. Got it!")]
        await session.send_message("Variable names can't start with a digit.")
        assert session.subtopic.status == MasteryStatus.IN_PROGRESS

        gateway.quiz_payload = '{"selectedAnswers": ["A"], "explanation": "Only A", "thinkingProcess": "- A ok"}'
        outcome = await session.request_quiz()

        assert outcome.result == QuizResult.INCORRECT
        assert outcome.misconception_analysis == "You mixed up the rules."
        assert session.subtopic.status == MasteryStatus.IN_PROGRESS
        assert completions == [("variables", False)]

        session.return_to_teaching()
        await session.send_message("Underscores are allowed anywhere, hyphens never.")

        gateway.quiz_payload = {"selectedAnswers": ["D", "A"], "explanation": "A and D", "thinkingProcess": ""}
        outcome = await session.request_quiz()

        assert outcome.result == QuizResult.CORRECT
        assert session.phase == SessionPhase.GRADED
        assert session.subtopic.status == MasteryStatus.MASTERED
        assert completions[-1] == ("variables", True)
        assert not topic.completed

        # Quiz transcript includes every teaching turn
        _, _, messages = gateway.calls_to("grade_quiz")[-1]
        assert len(messages) == 5

    @pytest.mark.asyncio
    async def test_completing_every_subtopic_earns_a_star(self, navigator, gateway):
        navigator.select_subject("cs")
        navigator.select_topic("programming-basics")
        gateway.quiz_payload = {"selectedAnswers": ["A", "D"]}
        await navigator.select_subtopic("variables").request_quiz()

        navigator.back()
        gateway.quiz_payload = {"selectedAnswers": ["A", "C"]}
        await navigator.select_subtopic("loops").request_quiz()

        cs, math = navigator.progress()
        assert cs.label == "1 of 1 stars collected!"
        assert math.label == "0 of 1 stars collected!"

    @pytest.mark.asyncio
    async def test_non_fundamental_subtopic_completes(self, navigator, gateway):
        navigator.select_subject("math")
        navigator.select_topic("algebra")
        session = navigator.select_subtopic("equations")
        gateway.quiz_payload = {"selectedAnswers": ["A", "C"]}

        outcome = await session.request_quiz()

        assert outcome.correct
        assert session.subtopic.status == MasteryStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_start_over_after_grading(self, navigator, gateway):
        navigator.select_subject("math")
        navigator.select_topic("algebra")
        session = navigator.select_subtopic("equations")
        gateway.quiz_payload = {"selectedAnswers": ["A", "C"]}
        await session.request_quiz()

        session.start_over()

        assert session.phase == SessionPhase.TEACHING
        assert session.quiz_result == QuizResult.NONE
        assert session.subtopic.status == MasteryStatus.NOT_STARTED
        assert len(session.messages) == 1
