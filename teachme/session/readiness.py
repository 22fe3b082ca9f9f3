"""
Readiness detection: has the student shown it understands enough to be quizzed?

Prefers the explicit signal from the model; falls back to requiring every
marker phrase in the reply text.
"""

from __future__ import annotations

from collections.abc import Sequence

from teachme.tutor.gateway import StudentReply

DEFAULT_MARKERS = ("understand", "ready for", "quiz")


def mentions_readiness(text: str, markers: Sequence[str] = DEFAULT_MARKERS) -> bool:
    """Case-insensitive check that all markers occur in the text."""
    lowered = text.lower()
    return bool(markers) and all(marker.lower() in lowered for marker in markers)


def is_ready_for_quiz(reply: StudentReply, markers: Sequence[str] = DEFAULT_MARKERS) -> bool:
    if reply.ready_for_quiz is not None:
        return reply.ready_for_quiz
    return mentions_readiness(reply.text, markers)
