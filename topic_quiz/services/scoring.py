"""Derived session metrics: progress, elapsed time, accuracy and score tiers."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from topic_quiz.errors import InvalidTransitionError
from topic_quiz.models import QuizDefinition
from topic_quiz.services.session_state import SessionState


class ScoreTier(str, Enum):
    EXCELLENT = "excellent"
    GREAT = "great"
    GOOD_EFFORT = "good_effort"
    KEEP_LEARNING = "keep_learning"


# Descending (minimum percentage, tier, message); lower bounds are inclusive.
SCORE_TIERS: List[Tuple[int, ScoreTier, str]] = [
    (90, ScoreTier.EXCELLENT, "Excellent! You're a master of this topic!"),
    (70, ScoreTier.GREAT, "Great job! You have a solid understanding."),
    (50, ScoreTier.GOOD_EFFORT, "Good effort! Keep practicing to improve."),
    (0, ScoreTier.KEEP_LEARNING, "Keep learning! Practice makes perfect."),
]


@dataclass(frozen=True)
class AnswerFeedback:
    """What the user sees once an answer is revealed."""

    question_id: str
    selected_option: int
    correct_index: int
    is_correct: bool
    explanation: str


@dataclass(frozen=True)
class QuestionReview:
    question_id: str
    selected_option: Optional[int]
    correct_index: int
    is_correct: bool


@dataclass(frozen=True)
class QuizResult:
    """Summary of a completed attempt."""

    quiz_id: str
    correct_count: int
    question_count: int
    accuracy: float
    accuracy_percent: int
    elapsed_seconds: float
    elapsed_display: str
    tier: ScoreTier
    message: str
    review: Tuple[QuestionReview, ...]


# PUBLIC_INTERFACE
def progress(state: SessionState) -> float:
    """Fraction of the quiz reached, counting the current question; in (0, 1]."""
    if state.completed:
        raise InvalidTransitionError("Progress is only defined while the quiz is in progress.")
    return (state.current_index + 1) / state.question_count


# PUBLIC_INTERFACE
def elapsed_seconds(state: SessionState, now: datetime) -> float:
    """
    Seconds spent on the attempt.

    Measured up to ``now`` while the attempt is active and frozen at
    ``ended_at`` once it is completed. Never negative.
    """
    end = state.ended_at if state.ended_at is not None else now
    return max(0.0, (end - state.started_at).total_seconds())


def format_elapsed(seconds: float) -> str:
    """Render a duration as ``m:ss`` with seconds rounded half up."""
    total = int(seconds + 0.5)
    minutes, secs = divmod(total, 60)
    return f"{minutes}:{secs:02d}"


# PUBLIC_INTERFACE
def accuracy(state: SessionState) -> float:
    """Correct answers over total questions; only defined once completed."""
    if not state.completed:
        raise InvalidTransitionError("Accuracy is only defined once the quiz is completed.")
    return state.correct_count / state.question_count


# PUBLIC_INTERFACE
def score_tier(correct_count: int, question_count: int) -> Tuple[ScoreTier, str]:
    """
    Map a score onto its qualitative tier.

    Tiers are checked from the highest threshold down, so a score exactly on a
    boundary lands in the higher tier. Comparison is done on integers to keep
    boundaries such as 7/10 == 70% exact.

    Args:
        correct_count: Number of correct answers.
        question_count: Number of questions, at least 1.

    Returns:
        Tuple of (tier, message).
    """
    if question_count <= 0:
        raise ValueError("question_count must be positive")
    for threshold, tier, message in SCORE_TIERS:
        if correct_count * 100 >= threshold * question_count:
            return tier, message
    return SCORE_TIERS[-1][1], SCORE_TIERS[-1][2]


def answer_feedback(state: SessionState, quiz: QuizDefinition) -> Optional[AnswerFeedback]:
    """Feedback for the current question, or None while it is not revealed."""
    if not state.answer_revealed:
        return None
    question = quiz.questions[state.current_index]
    selected = state.recorded_answers[state.current_index]
    return AnswerFeedback(
        question_id=question.id,
        selected_option=selected,
        correct_index=question.correct_index,
        is_correct=question.is_correct(selected),
        explanation=question.explanation,
    )


# PUBLIC_INTERFACE
def build_result(state: SessionState, quiz: QuizDefinition) -> QuizResult:
    """
    Build the completion summary for a finished attempt.

    Raises:
        InvalidTransitionError: if the attempt is not completed yet.
    """
    ratio = accuracy(state)
    tier, message = score_tier(state.correct_count, state.question_count)
    seconds = elapsed_seconds(state, state.ended_at)
    review = tuple(
        QuestionReview(
            question_id=question.id,
            selected_option=selected,
            correct_index=question.correct_index,
            is_correct=question.is_correct(selected),
        )
        for question, selected in zip(quiz.questions, state.recorded_answers)
    )
    return QuizResult(
        quiz_id=state.quiz_id,
        correct_count=state.correct_count,
        question_count=state.question_count,
        accuracy=ratio,
        accuracy_percent=int(ratio * 100 + 0.5),
        elapsed_seconds=seconds,
        elapsed_display=format_elapsed(seconds),
        tier=tier,
        message=message,
        review=review,
    )
