"""
Tutor: The simulated student backed by a language model.

Components:
- gateway: LanguageModelGateway contract and the Gemini implementation
- grading: untrusted quiz answer parsing and exact-set grading
- prompts: prompt templates for dialogue, quiz and misconception analysis
"""

from .gateway import GeminiGateway, LanguageModelGateway, StudentReply
from .grading import QuizAnswer, is_correct, parse_grading_payload

__all__ = [
    "GeminiGateway",
    "LanguageModelGateway",
    "QuizAnswer",
    "StudentReply",
    "is_correct",
    "parse_grading_payload",
]
