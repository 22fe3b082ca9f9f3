"""
Language-Model Gateway: The simulated student.

Stateless request/response operations used by the teaching session:
- continue_dialogue: the student's next reply while being taught
- grade_quiz: the student's (untrusted) answer to the practice problem
- analyze_misconception: teacher-style feedback on a wrong answer

Calls are blocking; the session runs them in a worker thread.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal, Protocol

from loguru import logger

from teachme.curriculum.models import PracticeProblem
from teachme.errors import GatewayError, GatewayUnavailable
from teachme.transcript import Message
from teachme.tutor.prompts import (
    build_dialogue_prompt,
    build_misconception_prompt,
    build_quiz_prompt,
    split_ready_marker,
)

if TYPE_CHECKING:
    from config import Settings


@dataclass(frozen=True)
class StudentReply:
    """
    One student utterance.

    ready_for_quiz is the model's explicit readiness signal, or None when
    the reply carried no signal either way.
    """
    text: str
    ready_for_quiz: bool | None = None


class LanguageModelGateway(Protocol):
    """Contract the teaching session depends on."""

    def continue_dialogue(self, messages: tuple[Message, ...]) -> StudentReply:
        """Return the student's next reply to the transcript."""
        ...

    def grade_quiz(self, problem: PracticeProblem, messages: tuple[Message, ...]) -> Any:
        """Return the raw quiz answer (JSON text or mapping); parsed by the caller."""
        ...

    def analyze_misconception(
        self,
        problem: PracticeProblem,
        selected_answers: list[str],
        messages: tuple[Message, ...],
    ) -> str:
        """Return feedback explaining what the student got wrong."""
        ...


# =============================================================================
# Gemini Gateway
# =============================================================================


class GeminiGateway:
    """
    Gateway backed by the Gemini API.

    A missing API key is reported once here; every call then raises
    GatewayUnavailable without touching the network.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model_name: str | None = None,
        settings: Settings | None = None,
    ):
        """
        Initialize the gateway.

        Args:
            api_key: Gemini API key (uses settings / GEMINI_API_KEY env var if not provided)
            model_name: Model to use for generation (uses settings.ai_model if not provided)
            settings: Settings instance (uses get_settings() if not provided)
        """
        if settings is None:
            from config import get_settings

            settings = get_settings()

        self.settings = settings
        self.api_key = api_key or settings.gemini_api_key or os.getenv("GEMINI_API_KEY")
        self.model_name = model_name or settings.ai_model
        self._client = None

        if not self.api_key:
            logger.warning("No Gemini API key - the student will not be able to reply (set GEMINI_API_KEY)")

    @property
    def is_available(self) -> bool:
        """Check if the gateway has credentials."""
        return bool(self.api_key)

    def continue_dialogue(self, messages: tuple[Message, ...]) -> StudentReply:
        text = self._generate(build_dialogue_prompt(messages), "dialogue")
        clean, ready = split_ready_marker(text)
        return StudentReply(text=clean, ready_for_quiz=ready)

    def grade_quiz(self, problem: PracticeProblem, messages: tuple[Message, ...]) -> str:
        return self._generate(build_quiz_prompt(problem, messages), "grading")

    def analyze_misconception(
        self,
        problem: PracticeProblem,
        selected_answers: list[str],
        messages: tuple[Message, ...],
    ) -> str:
        return self._generate(
            build_misconception_prompt(problem, selected_answers, messages), "analysis"
        ).strip()

    def _get_client(self):
        if not self.is_available:
            raise GatewayUnavailable("Gemini API key is not configured")

        if self._client is None:
            try:
                # Lazy import to avoid the SDK cost when no key is set
                import google.generativeai as genai
            except ImportError as e:
                raise GatewayUnavailable(
                    "google-generativeai not installed. Run: pip install google-generativeai"
                ) from e

            genai.configure(api_key=self.api_key)
            self._client = genai.GenerativeModel(model_name=self.model_name)

        return self._client

    def _generate(self, prompt: str, kind: Literal["dialogue", "grading", "analysis"]) -> str:
        client = self._get_client()
        try:
            response = client.generate_content(
                prompt,
                generation_config=self.settings.get_generation_config(kind),
            )
            text = response.text
        except Exception as e:
            raise GatewayError(f"Gemini {kind} request failed: {e}") from e

        logger.debug(f"Gemini {kind} response: {text}")
        return text
