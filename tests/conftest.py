"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import asyncio
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config import get_settings  # noqa: E402
from teachme.curriculum.catalog import CurriculumStore  # noqa: E402
from teachme.tutor.gateway import StudentReply  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (full teaching flow)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Never pick up a real API key or cached settings from the environment."""
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("GATEWAY_TIMEOUT_SECONDS", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


# ============================================================================
# Fake Gateway
# ============================================================================


class FakeGateway:
    """
    Scripted stand-in for the Gemini student.

    Set *_error to make an operation raise; every call is recorded.
    """

    def __init__(self, replies=None, quiz_payload=None, analysis="You mixed up the rules."):
        self.replies = list(replies or [])
        self.quiz_payload = quiz_payload
        self.analysis = analysis
        self.dialogue_error = None
        self.grading_error = None
        self.analysis_error = None
        self.calls = []

    def continue_dialogue(self, messages):
        self.calls.append(("continue_dialogue", messages))
        if self.dialogue_error:
            raise self.dialogue_error
        if self.replies:
            return self.replies.pop(0)
        return StudentReply(text="Hmm, can you give me an example?")

    def grade_quiz(self, problem, messages):
        self.calls.append(("grade_quiz", problem, messages))
        if self.grading_error:
            raise self.grading_error
        return self.quiz_payload

    def analyze_misconception(self, problem, selected_answers, messages):
        self.calls.append(("analyze_misconception", problem, selected_answers, messages))
        if self.analysis_error:
            raise self.analysis_error
        return self.analysis

    def calls_to(self, name):
        return [call for call in self.calls if call[0] == name]


class HeldGateway(FakeGateway):
    """Async gateway whose calls wait until the test releases them."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def continue_dialogue(self, messages):
        self.started.set()
        await self.release.wait()
        return FakeGateway.continue_dialogue(self, messages)

    async def grade_quiz(self, problem, messages):
        self.started.set()
        await self.release.wait()
        return FakeGateway.grade_quiz(self, problem, messages)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def store():
    """Freshly loaded bundled curriculum."""
    store = CurriculumStore()
    store.load()
    return store


@pytest.fixture
def variables_subtopic(store):
    """Fundamental subtopic with choices A-D and correct answers {A, D}."""
    return store.get_subtopic("cs", "programming-basics", "variables")


@pytest.fixture
def equations_subtopic(store):
    """Non-fundamental subtopic with correct answers {A, C}."""
    return store.get_subtopic("math", "algebra", "equations")


@pytest.fixture
def held_gateway():
    return HeldGateway()
