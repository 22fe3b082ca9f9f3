"""
Curriculum: static catalog of what can be taught.

Components:
- models: Subject, Topic, Subtopic, PracticeProblem, Choice, MasteryStatus
- catalog: CurriculumStore (JSON loading and lookups)
"""

from .catalog import CurriculumStore
from .models import Choice, MasteryStatus, PracticeProblem, Subject, Subtopic, Topic

__all__ = [
    "Choice",
    "CurriculumStore",
    "MasteryStatus",
    "PracticeProblem",
    "Subject",
    "Subtopic",
    "Topic",
]
