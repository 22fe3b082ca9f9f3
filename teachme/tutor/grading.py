"""
Quiz grading: parse the student's answer and compare it to the answer key.

The model's answer is untrusted. Anything that does not have the expected
shape becomes an empty selection, which can never be graded correct.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from teachme.curriculum.models import PracticeProblem
from teachme.errors import MalformedGradingPayload

NO_EXPLANATION = "No explanation provided"
NO_THINKING_PROCESS = "No thinking process provided"
UNPARSEABLE_EXPLANATION = "I need more teaching to answer this question."
UNPARSEABLE_THINKING_PROCESS = "I could not form a proper answer based on the current teachings."

_CODE_FENCE = re.compile(r"```(?:json)?\n?|\n?```")


class QuizAnswer(BaseModel):
    """The student's answer to the practice problem."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    selected_answers: list[str] = Field(default_factory=list, alias="selectedAnswers")
    explanation: str = NO_EXPLANATION
    thinking_process: str = Field(default=NO_THINKING_PROCESS, alias="thinkingProcess")

    @field_validator("selected_answers", mode="before")
    @classmethod
    def _ids_or_nothing(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
            logger.warning(f"Invalid selectedAnswers format: {value!r}")
            return []
        return [v.strip() for v in value]

    @field_validator("explanation", mode="before")
    @classmethod
    def _default_explanation(cls, value: Any) -> str:
        return value if isinstance(value, str) and value.strip() else NO_EXPLANATION

    @field_validator("thinking_process", mode="before")
    @classmethod
    def _default_thinking(cls, value: Any) -> str:
        return value if isinstance(value, str) and value.strip() else NO_THINKING_PROCESS


UNPARSEABLE_ANSWER = QuizAnswer(
    selected_answers=[],
    explanation=UNPARSEABLE_EXPLANATION,
    thinking_process=UNPARSEABLE_THINKING_PROCESS,
)


def _load_strict(raw: Any) -> QuizAnswer:
    """Parse a raw model reply, raising MalformedGradingPayload on any shape error."""
    if isinstance(raw, str):
        text = _CODE_FENCE.sub("", raw).strip()
        if not text.startswith("{"):
            match = re.search(r"\{.*\}", text, re.DOTALL)
            if not match:
                raise MalformedGradingPayload("Reply contains no JSON object")
            text = match.group()
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedGradingPayload(f"Reply is not valid JSON: {e}") from e

    if not isinstance(raw, Mapping):
        raise MalformedGradingPayload(f"Expected a JSON object, got {type(raw).__name__}")

    try:
        return QuizAnswer.model_validate(dict(raw))
    except ValidationError as e:
        raise MalformedGradingPayload(str(e)) from e


def parse_grading_payload(raw: Any) -> QuizAnswer:
    """
    Turn an untrusted quiz reply into a QuizAnswer.

    Never raises: malformed replies yield an empty selection.
    """
    try:
        return _load_strict(raw)
    except MalformedGradingPayload as e:
        logger.warning(f"Malformed grading payload: {e}")
        logger.debug(f"Raw grading payload: {raw!r}")
        return UNPARSEABLE_ANSWER


def is_correct(problem: PracticeProblem, selected_answers: list[str]) -> bool:
    """Exact match: same number of answers and every one in the answer key."""
    return (
        len(selected_answers) == len(problem.correct_answers)
        and set(selected_answers) == problem.correct_answers
    )
