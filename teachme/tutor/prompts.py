"""
Prompt templates for the simulated student.

Three operations: continue the teaching dialogue, answer the quiz from
what was taught, and analyze misconceptions behind a wrong answer.
"""

from __future__ import annotations

from teachme.curriculum.models import PracticeProblem
from teachme.transcript import Message, render_transcript

# Line the student appends when it is ready to be quizzed
READY_MARKER = "READY_FOR_QUIZ"

# =============================================================================
# Prompts
# =============================================================================

STUDENT_DIALOGUE_PROMPT = """
You are a student who is learning. You're trying to understand the following problem:
{problem}

Role and Behavior:
- You are LEARNING from the user who is teaching you
- You have the understanding level of a 15-year-old student
- You should actively engage with the user's explanations
- You should demonstrate your current understanding by:
  * Rephrasing concepts in your own words
  * Pointing out specific parts that confuse you
- You don't have any prior knowledge of the subject
- You can only reason about the problem based on the information that the user taught you

Guidelines:
1. If you don't understand something, be specific about what confuses you
2. Ask focused follow-up questions about unclear concepts
3. When you understand something, explain it back in your own words
4. Connect new information to what you've already learned
5. Don't pretend to understand - be honest about your confusion
6. ONLY respond as the student, wait for actual user responses
7. If you cannot understand user's explanations, ask them to rephrase
8. If user's explanations are unclear, ask them to give examples
9. When you fully understand the concept, explicitly say:
   "I understand this now! I think I'm ready for the quiz. Here's what I learned: [summary]"
   and end your message with a final line containing only {ready_marker}

Previous conversation:
{history}

Remember:
- You are learning this for the first time. Show genuine curiosity and ask questions when needed.
- DO NOT include hypothetical user responses or conversations in your output.
- ONLY respond as the student, one message at a time.
- Only write {ready_marker} when you are genuinely ready for the quiz.
"""

QUIZ_ANSWER_PROMPT = """You are a student learning new concepts. Based on your learning conversation with your teacher, answer the following multiple choice question.

Question: {question}

Choices:
{choices}

Your learning conversation:
{history}

Instructions:
1. Think through the problem step by step.
2. Consider ONLY what you learned from your teacher in the conversations above.
3. Analyze each answer choice carefully one-by-one and explain your thoughts in bullet points.
4. Select the answers you think are correct.
5. Explain your reasoning clearly.
6. Ensure your selected answers match your reasoning.
7. If the user did not teach you anything, leave the answer blank.

Respond with ONLY a JSON object in this exact format:
{{
  "selectedAnswers": [],
  "explanation": "A clear explanation of why these specific answers are correct, or why you cannot answer yet",
  "thinkingProcess": "Your step-by-step thought process for selecting these specific answers or why you need more teaching"
}}
List the letter IDs you think are correct in selectedAnswers, or leave it as an empty array if unsure."""

MISCONCEPTION_PROMPT = """
As an experienced teacher, analyze the student's answer and provide constructive feedback.

Problem: {question}

Choices:
{choices}

Correct Answers: {correct}
Student's Answers: {selected}

Previous learning conversation:
{history}

Provide a detailed analysis that identifies misconceptions in a short and concise paragraph.
"""


def build_dialogue_prompt(messages: tuple[Message, ...]) -> str:
    """Student-role prompt; the first message carries the problem statement."""
    return STUDENT_DIALOGUE_PROMPT.format(
        problem=messages[0].content if messages else "",
        history=render_transcript(messages),
        ready_marker=READY_MARKER,
    )


def build_quiz_prompt(problem: PracticeProblem, messages: tuple[Message, ...]) -> str:
    return QUIZ_ANSWER_PROMPT.format(
        question=problem.question,
        choices=problem.format_choices(),
        history=render_transcript(messages, user_label="Teacher", ai_label="Student"),
    )


def build_misconception_prompt(
    problem: PracticeProblem,
    selected_answers: list[str],
    messages: tuple[Message, ...],
) -> str:
    return MISCONCEPTION_PROMPT.format(
        question=problem.question,
        choices=problem.format_choices(),
        correct=", ".join(c.id for c in problem.correct_choices()),
        selected=", ".join(selected_answers) or "(none)",
        history=render_transcript(messages, user_label="Teacher", ai_label="Student"),
    )


def split_ready_marker(text: str) -> tuple[str, bool | None]:
    """
    Strip the readiness marker line from a student reply.

    Returns (clean_text, True) when the marker is present, otherwise
    (text, None) so callers can fall back to phrase detection.
    """
    lines = text.rstrip().splitlines()
    kept = [line for line in lines if line.strip().strip("*`") != READY_MARKER]
    if len(kept) == len(lines):
        return text.strip(), None
    return "\n".join(kept).strip(), True
