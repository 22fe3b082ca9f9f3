"""
TeachMe: Learn by teaching a simulated student.

The human explains a concept, the language-model student asks questions,
then takes a quiz graded against the answer key.
"""

__version__ = "1.0.0"
