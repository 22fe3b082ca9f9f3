"""
Session: Teaching/quiz state machine and navigation.

Components:
- state_machine: TeachingSession (Teaching -> Quizzing -> Graded)
- navigator: SessionNavigator (selection, back, session identity)
- readiness: quiz readiness detection
"""

from .navigator import SessionNavigator
from .state_machine import (
    QuizOutcome,
    QuizResult,
    SessionPhase,
    SessionSnapshot,
    TeachingSession,
)

__all__ = [
    "QuizOutcome",
    "QuizResult",
    "SessionNavigator",
    "SessionPhase",
    "SessionSnapshot",
    "TeachingSession",
]
