"""
Teaching Session: State machine for teaching one subtopic to the student.

Phases:
- TEACHING: the human explains, the student replies
- QUIZZING: the student answers the practice problem from the frozen transcript
- GRADED: the answer was compared to the key; status and callbacks applied

Model calls are the only suspension points. While one is outstanding every
other model-triggering intent is rejected with SessionBusy. Replies that
arrive after the session was closed or started over are discarded.
"""

from __future__ import annotations

import asyncio
import inspect
import uuid
from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from loguru import logger

from teachme import progress
from teachme.curriculum.models import MasteryStatus, Subtopic
from teachme.errors import (
    EmptyUserInput,
    GatewayError,
    GatewayUnavailable,
    InvalidTransition,
    SessionBusy,
)
from teachme.session.readiness import is_ready_for_quiz
from teachme.transcript import Message, Sender, Transcript
from teachme.tutor.gateway import LanguageModelGateway, StudentReply
from teachme.tutor.grading import is_correct, parse_grading_payload

NO_ANALYSIS = "No analysis available."


class SessionPhase(str, Enum):
    TEACHING = "teaching"
    QUIZZING = "quizzing"
    GRADED = "graded"


class QuizResult(str, Enum):
    NONE = "none"
    CORRECT = "correct"
    INCORRECT = "incorrect"


@dataclass(frozen=True)
class QuizOutcome:
    """Result of one quiz attempt."""
    result: QuizResult
    selected_answers: tuple[str, ...] = ()
    explanation: str = ""
    thinking_process: str = ""
    misconception_analysis: str | None = None  # Incorrect answers only
    failure: str | None = None                 # Set when the grading call itself failed

    @property
    def correct(self) -> bool:
        return self.result == QuizResult.CORRECT


@dataclass(frozen=True)
class SessionSnapshot:
    """Everything the presentation layer needs to render a session."""
    session_id: str
    subtopic_id: str
    phase: SessionPhase
    status: MasteryStatus
    messages: tuple[Message, ...]
    quiz_result: QuizResult
    outcome: QuizOutcome | None
    call_outstanding: bool


CompletionCallback = Callable[[str, bool], None]
ChangeListener = Callable[[SessionSnapshot], None]


class TeachingSession:
    """
    Owns one subtopic's teaching lifecycle.

    The transcript is seeded with the problem statement; all status changes
    go through teachme.progress.
    """

    def __init__(
        self,
        subtopic: Subtopic,
        gateway: LanguageModelGateway,
        on_complete: CompletionCallback | None = None,
        on_change: ChangeListener | None = None,
        readiness_markers: list[str] | None = None,
        fallback_reply: str | None = None,
        timeout_seconds: float | None = None,
    ):
        from config import get_settings

        settings = get_settings()

        self.session_id = uuid.uuid4().hex
        self.subtopic = subtopic
        self.gateway = gateway
        self.on_complete = on_complete
        self.on_change = on_change
        self.readiness_markers = readiness_markers or settings.readiness_markers
        self.fallback_reply = fallback_reply or settings.fallback_reply
        self.timeout_seconds = timeout_seconds if timeout_seconds is not None else settings.gateway_timeout_seconds

        self.transcript = Transcript(subtopic.practice_problem)
        self.phase = SessionPhase.TEACHING
        self.outcome: QuizOutcome | None = None

        self._call_outstanding = False
        self._closed = False
        # Set when the latest reply moved the subtopic to in_progress
        self.ready_advanced = False
        # Bumped by start_over() so in-flight replies become stale
        self._epoch = 0

    # =========================================================================
    # State
    # =========================================================================

    @property
    def call_outstanding(self) -> bool:
        return self._call_outstanding

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def quiz_result(self) -> QuizResult:
        return self.outcome.result if self.outcome else QuizResult.NONE

    @property
    def messages(self) -> tuple[Message, ...]:
        return self.transcript.messages

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            session_id=self.session_id,
            subtopic_id=self.subtopic.id,
            phase=self.phase,
            status=self.subtopic.status,
            messages=self.transcript.messages,
            quiz_result=self.quiz_result,
            outcome=self.outcome,
            call_outstanding=self._call_outstanding,
        )

    def close(self) -> None:
        """Deactivate the session; late model replies will be dropped."""
        self._closed = True
        logger.debug(f"Session {self.session_id} for {self.subtopic.id} closed")

    # =========================================================================
    # Intents
    # =========================================================================

    async def send_message(self, text: str) -> Message | None:
        """
        Teach the student: commit the explanation, then get its reply.

        Returns the student's message (the fallback reply on failure), or
        None if the session went stale while waiting.
        """
        if not text or not text.strip():
            raise EmptyUserInput("Explanation is empty")
        self._require(SessionPhase.TEACHING, "send a message")
        self.ready_advanced = False

        # The explanation is committed before the call so a failure cannot drop it
        self.transcript.append(text, Sender.USER)
        epoch = self._begin_call()

        reply: StudentReply | None = None
        try:
            raw = await self._call(self.gateway.continue_dialogue, self.transcript.messages)
            reply = self._coerce_reply(raw)
        except GatewayUnavailable as e:
            logger.debug(f"Student unavailable: {e}")
        except GatewayError as e:
            logger.error(f"Error getting student reply: {e}")
        finally:
            self._end_call()

        if self._is_stale(epoch):
            logger.debug(f"Discarding student reply for inactive session {self.session_id}")
            if not self._closed:
                self._notify()
            return None

        if reply is None:
            message = self.transcript.append(self.fallback_reply, Sender.AI)
        else:
            if is_ready_for_quiz(reply, self.readiness_markers):
                self.ready_advanced = progress.mark_ready(self.subtopic)
            message = self.transcript.append(reply.text, Sender.AI)

        self._notify()
        return message

    async def request_quiz(self) -> QuizOutcome | None:
        """
        Quiz the student on the practice problem and grade the answer.

        Always leaves QUIZZING: a failed grading call is graded incorrect.
        Returns None if the session went stale while waiting.
        """
        self._require(SessionPhase.TEACHING, "start the quiz")

        problem = self.subtopic.practice_problem
        messages = self.transcript.messages
        self.phase = SessionPhase.QUIZZING
        epoch = self._begin_call()

        try:
            try:
                raw = await self._call(self.gateway.grade_quiz, problem, messages)
            except GatewayError as e:
                if not isinstance(e, GatewayUnavailable):
                    logger.error(f"Error getting quiz answer: {e}")
                if self._is_stale(epoch):
                    return None
                outcome = QuizOutcome(result=QuizResult.INCORRECT, failure=str(e))
                self._enter_graded(outcome)
                return outcome

            if self._is_stale(epoch):
                logger.debug(f"Discarding quiz answer for inactive session {self.session_id}")
                return None

            answer = parse_grading_payload(raw)
            correct = is_correct(problem, answer.selected_answers)
            outcome = QuizOutcome(
                result=QuizResult.CORRECT if correct else QuizResult.INCORRECT,
                selected_answers=tuple(answer.selected_answers),
                explanation=answer.explanation,
                thinking_process=answer.thinking_process,
            )
            self._enter_graded(outcome)
            if correct:
                return outcome

            analysis = await self._analyze(answer.selected_answers, messages)
            if self._is_stale(epoch):
                return outcome
            self.outcome = replace(outcome, misconception_analysis=analysis)
            return self.outcome
        finally:
            self._end_call()
            if not self._closed:
                self._notify()

    def return_to_teaching(self) -> None:
        """Go back to teaching after a quiz; the transcript is kept."""
        self._require(SessionPhase.GRADED, "return to teaching")
        self.phase = SessionPhase.TEACHING
        self.outcome = None
        self._notify()

    def start_over(self) -> None:
        """
        Reset transcript, status and quiz result. Allowed in any phase.

        A call still in flight keeps the session busy until it returns;
        its reply is then discarded.
        """
        self._epoch += 1
        self.ready_advanced = False
        self.transcript.reset()
        progress.reset(self.subtopic)
        self.phase = SessionPhase.TEACHING
        self.outcome = None
        self._notify()

    # =========================================================================
    # Internals
    # =========================================================================

    def _require(self, phase: SessionPhase, action: str) -> None:
        if self._closed:
            raise InvalidTransition(f"Cannot {action}: session is closed")
        if self._call_outstanding:
            raise SessionBusy(f"Cannot {action}: waiting for the student")
        if self.phase != phase:
            raise InvalidTransition(f"Cannot {action} while {self.phase.value}")

    def _begin_call(self) -> int:
        self._call_outstanding = True
        self._notify()
        return self._epoch

    def _end_call(self) -> None:
        self._call_outstanding = False

    def _is_stale(self, epoch: int) -> bool:
        return self._closed or epoch != self._epoch

    async def _call(self, fn: Callable[..., Any], *args: Any) -> Any:
        """Run one gateway operation, mapping every failure to GatewayError."""
        name = getattr(fn, "__name__", "gateway call")
        try:
            if inspect.iscoroutinefunction(fn):
                pending = fn(*args)
            else:
                pending = asyncio.to_thread(fn, *args)
            return await asyncio.wait_for(pending, timeout=self.timeout_seconds)
        except GatewayError:
            raise
        except (asyncio.TimeoutError, TimeoutError) as e:
            raise GatewayError(f"{name} timed out after {self.timeout_seconds}s") from e
        except Exception as e:
            raise GatewayError(f"{name} failed: {e}") from e

    @staticmethod
    def _coerce_reply(raw: Any) -> StudentReply:
        if isinstance(raw, str):
            raw = StudentReply(text=raw)
        if not isinstance(raw, StudentReply) or not raw.text.strip():
            raise GatewayError(f"Unexpected student reply: {raw!r}")
        return raw

    async def _analyze(self, selected_answers: list[str], messages: tuple[Message, ...]) -> str:
        try:
            analysis = await self._call(
                self.gateway.analyze_misconception,
                self.subtopic.practice_problem,
                list(selected_answers),
                messages,
            )
        except GatewayError as e:
            logger.warning(f"Misconception analysis failed: {e}")
            return NO_ANALYSIS
        if not isinstance(analysis, str) or not analysis.strip():
            return NO_ANALYSIS
        return analysis.strip()

    def _enter_graded(self, outcome: QuizOutcome) -> None:
        self.phase = SessionPhase.GRADED
        self.outcome = outcome
        status = progress.record_grading(self.subtopic, outcome.correct)
        logger.info(
            f"Quiz for {self.subtopic.id}: {outcome.result.value} "
            f"(selected={list(outcome.selected_answers)}, status={status.value})"
        )
        if self.on_complete:
            self.on_complete(self.subtopic.id, outcome.correct)
        self._notify()

    def _notify(self) -> None:
        if self.on_change:
            self.on_change(self.snapshot())
