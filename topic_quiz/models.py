"""Domain models for quiz catalogs and quiz definitions."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from topic_quiz.errors import MalformedQuizError


class Difficulty(str, Enum):
    """Difficulty level of a quiz."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


@dataclass(frozen=True)
class Question:
    """A multiple-choice question with exactly one correct option."""

    id: str
    prompt: str
    options: Tuple[str, ...]
    correct_index: int
    explanation: str = ""

    @property
    def option_count(self) -> int:
        return len(self.options)

    def is_correct(self, option_index: Optional[int]) -> bool:
        return option_index is not None and option_index == self.correct_index


@dataclass(frozen=True)
class QuizDefinition:
    """Immutable quiz: metadata plus an ordered, non-empty question list."""

    id: str
    title: str
    description: str
    category: str
    difficulty: Difficulty
    questions: Tuple[Question, ...]
    estimated_minutes: Optional[int] = None

    @property
    def question_count(self) -> int:
        return len(self.questions)

    @property
    def estimated_time(self) -> int:
        """Estimated duration in minutes; one minute per question when not set."""
        if self.estimated_minutes:
            return self.estimated_minutes
        return max(1, self.question_count)


@dataclass(frozen=True)
class QuizSummary:
    """Listing view of a quiz."""

    id: str
    title: str
    description: str
    category: str
    difficulty: Difficulty
    question_count: int
    estimated_time: int

    @classmethod
    def from_definition(cls, quiz: QuizDefinition) -> "QuizSummary":
        return cls(
            id=quiz.id,
            title=quiz.title,
            description=quiz.description,
            category=quiz.category,
            difficulty=quiz.difficulty,
            question_count=quiz.question_count,
            estimated_time=quiz.estimated_time,
        )


@dataclass(frozen=True)
class Category:
    """Catalog category as stored in the data source."""

    id: str
    name: str
    description: str = ""
    icon: str = ""


@dataclass(frozen=True)
class CategorySummary:
    """Category with the number of quizzes it contains."""

    id: str
    name: str
    description: str
    icon: str
    quiz_count: int


# PUBLIC_INTERFACE
def validate_quiz_definition(quiz: QuizDefinition) -> QuizDefinition:
    """
    Check the structural invariants of a quiz definition.

    Args:
        quiz: The definition to check.

    Returns:
        QuizDefinition: The same definition, unchanged.

    Raises:
        MalformedQuizError: if the quiz has no questions, a question has fewer
            than two options, an empty option, a duplicated id, or a correct
            index outside its option range.
    """
    if not quiz.id:
        raise MalformedQuizError("Quiz identifier must not be empty.")
    if not isinstance(quiz.difficulty, Difficulty):
        raise MalformedQuizError(f"Quiz '{quiz.id}' has an unknown difficulty: {quiz.difficulty!r}")
    if not quiz.questions:
        raise MalformedQuizError(f"Quiz '{quiz.id}' must contain at least one question.")
    if quiz.estimated_minutes is not None and quiz.estimated_minutes <= 0:
        raise MalformedQuizError(f"Quiz '{quiz.id}' must have a positive estimated time.")

    seen_ids = set()
    for position, question in enumerate(quiz.questions):
        if question.id in seen_ids:
            raise MalformedQuizError(f"Quiz '{quiz.id}' repeats question id '{question.id}'.")
        seen_ids.add(question.id)
        if len(question.options) < 2:
            raise MalformedQuizError(
                f"Question {position + 1} of quiz '{quiz.id}' must have at least two options."
            )
        if any(not option.strip() for option in question.options):
            raise MalformedQuizError(f"Question {position + 1} of quiz '{quiz.id}' has an empty option.")
        if not 0 <= question.correct_index < len(question.options):
            raise MalformedQuizError(
                f"Question {position + 1} of quiz '{quiz.id}' has correct index "
                f"{question.correct_index} outside 0..{len(question.options) - 1}."
            )
    return quiz
