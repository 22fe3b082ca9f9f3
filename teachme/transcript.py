"""
Transcript: Append-only message history of one teaching session.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from teachme.curriculum.models import PracticeProblem


class Sender(str, Enum):
    USER = "user"   # The human teacher
    AI = "ai"       # The simulated student


@dataclass(frozen=True)
class Message:
    """A single transcript entry."""
    content: str
    sender: Sender
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: datetime = field(default_factory=datetime.now)


SEED_TEMPLATE = """I need help understanding this problem:

{question}

Here are the possible answers:
{choices}

Can you help me understand how to solve this?"""


def seed_message(problem: PracticeProblem) -> Message:
    """The student's opening message, built from the problem (never model-generated)."""
    return Message(
        content=SEED_TEMPLATE.format(question=problem.question, choices=problem.format_choices()),
        sender=Sender.AI,
    )


class Transcript:
    """
    Ordered message history.

    Messages are only ever appended; reset() replaces the history with a
    single freshly seeded message.
    """

    def __init__(self, problem: PracticeProblem):
        self.problem = problem
        self._messages: list[Message] = [seed_message(problem)]

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self):
        return iter(self._messages)

    @property
    def messages(self) -> tuple[Message, ...]:
        """Immutable snapshot of the history."""
        return tuple(self._messages)

    @property
    def seed(self) -> Message:
        return self._messages[0]

    def append(self, content: str, sender: Sender) -> Message:
        message = Message(content=content, sender=sender)
        self._messages.append(message)
        return message

    def reset(self) -> None:
        self._messages = [seed_message(self.problem)]


def render_transcript(
    messages: tuple[Message, ...] | list[Message],
    user_label: str = "User",
    ai_label: str = "Assistant",
) -> str:
    """Format messages as 'Label: content' lines for model prompts."""
    return "\n".join(
        f"{user_label if msg.sender == Sender.USER else ai_label}: {msg.content}"
        for msg in messages
    )
