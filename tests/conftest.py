# =============================================================================
# CONFTEST - Shared fixtures
# =============================================================================
# Fake clock, sample quiz definitions, providers and the FastAPI test client
# =============================================================================

import json
from datetime import datetime, timedelta, timezone

import pytest

from topic_quiz.models import Category, Difficulty, Question, QuizDefinition


class FakeClock:
    """Manually driven clock for deterministic elapsed-time checks."""

    def __init__(self, start=None):
        self.now = start or datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def tick(self, seconds):
        self.now = self.now + timedelta(seconds=seconds)


def make_quiz(quiz_id="sample", question_count=5, category="science", correct_indices=None, **overrides):
    """Build a quiz whose question i has options A-D; correct option defaults to i % 4."""
    correct_indices = correct_indices or [i % 4 for i in range(question_count)]
    questions = tuple(
        Question(
            id=str(i + 1),
            prompt=f"Question {i + 1}?",
            options=("A", "B", "C", "D"),
            correct_index=correct_indices[i],
            explanation=f"Explanation {i + 1}.",
        )
        for i in range(question_count)
    )
    fields = dict(
        id=quiz_id,
        title=f"Quiz {quiz_id}",
        description="A sample quiz",
        category=category,
        difficulty=Difficulty.MEDIUM,
        questions=questions,
        estimated_minutes=None,
    )
    fields.update(overrides)
    return QuizDefinition(**fields)


def wrong_option(question):
    return (question.correct_index + 1) % len(question.options)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def quiz():
    return make_quiz()


@pytest.fixture
def categories():
    return [
        Category(id="science", name="Science", description="Explore science", icon="🔬"),
        Category(id="math", name="Math", description="Numbers", icon="🧮"),
        Category(id="art", name="Art", description="No quizzes yet", icon="🎨"),
    ]


@pytest.fixture
def provider(categories):
    from topic_quiz.services.content_provider import CatalogContentProvider

    quizzes = [
        make_quiz("sample", category="science"),
        make_quiz("physics", question_count=3, category="science", difficulty=Difficulty.EASY, estimated_minutes=10),
        make_quiz("algebra", question_count=2, category="math", difficulty=Difficulty.HARD),
    ]
    return CatalogContentProvider(categories=categories, quizzes=quizzes)


@pytest.fixture
def catalog_file(tmp_path):
    """Write a catalog JSON document and return its path."""

    def _write(data):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def client(provider, clock):
    """FastAPI test client wired to the sample provider and a fake clock."""
    from fastapi.testclient import TestClient

    from topic_quiz.api.main import app, get_provider, get_registry
    from topic_quiz.services.session_registry import SessionRegistry

    registry = SessionRegistry(provider, clock=clock, max_sessions=10)
    app.dependency_overrides[get_provider] = lambda: provider
    app.dependency_overrides[get_registry] = lambda: registry
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
