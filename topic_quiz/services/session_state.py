"""
Quiz attempt state and its transition functions.

Every transition takes the current SessionState and the quiz it belongs to and
returns a new SessionState. A transition whose precondition does not hold
raises InvalidTransitionError and leaves the caller's state untouched.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import NoReturn, Optional, Tuple

from topic_quiz.errors import InvalidTransitionError
from topic_quiz.models import Question, QuizDefinition, validate_quiz_definition

logger = logging.getLogger(__name__)


class SessionPhase(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass(frozen=True)
class SessionState:
    """Snapshot of one attempt at a quiz."""

    quiz_id: str
    question_count: int
    current_index: int
    selected_option: Optional[int]
    answer_revealed: bool
    recorded_answers: Tuple[Optional[int], ...]
    correct_count: int
    completed: bool
    started_at: datetime
    ended_at: Optional[datetime] = None

    @property
    def phase(self) -> SessionPhase:
        return SessionPhase.COMPLETED if self.completed else SessionPhase.IN_PROGRESS

    @property
    def is_last_question(self) -> bool:
        return self.current_index + 1 >= self.question_count


# PUBLIC_INTERFACE
def start_session(quiz: QuizDefinition, now: datetime) -> SessionState:
    """
    Create the initial state for an attempt at ``quiz``.

    Args:
        quiz: The quiz to attempt; must have at least one question.
        now: Start timestamp.

    Returns:
        SessionState: Positioned on the first question with nothing answered.

    Raises:
        MalformedQuizError: if the definition is not playable.
    """
    validate_quiz_definition(quiz)
    return SessionState(
        quiz_id=quiz.id,
        question_count=quiz.question_count,
        current_index=0,
        selected_option=None,
        answer_revealed=False,
        recorded_answers=(None,) * quiz.question_count,
        correct_count=0,
        completed=False,
        started_at=now,
        ended_at=None,
    )


def current_question(state: SessionState, quiz: QuizDefinition) -> Question:
    _check_same_quiz(state, quiz)
    return quiz.questions[state.current_index]


# PUBLIC_INTERFACE
def select_option(state: SessionState, quiz: QuizDefinition, option_index: int) -> SessionState:
    """Choose an option for the current question; only allowed before the answer is revealed."""
    _require_in_progress(state, "select an option")
    if state.answer_revealed:
        _reject("Answer already submitted for this question; selection is locked.")
    question = current_question(state, quiz)
    if isinstance(option_index, bool) or not isinstance(option_index, int):
        _reject(f"Option index must be an integer, got {option_index!r}.")
    if not 0 <= option_index < question.option_count:
        _reject(f"Option index {option_index} is outside 0..{question.option_count - 1}.")
    return replace(state, selected_option=option_index)


# PUBLIC_INTERFACE
def submit_answer(state: SessionState, quiz: QuizDefinition) -> SessionState:
    """
    Lock in the selected option for the current question.

    The answer is recorded, the score is incremented when it matches the
    correct option, and the answer is revealed. Submission happens exactly
    once per question.
    """
    _require_in_progress(state, "submit an answer")
    if state.answer_revealed:
        _reject("Answer already submitted for this question.")
    if state.selected_option is None:
        _reject("No option selected.")

    question = current_question(state, quiz)
    answers = list(state.recorded_answers)
    answers[state.current_index] = state.selected_option
    correct_count = state.correct_count + (1 if question.is_correct(state.selected_option) else 0)
    return replace(
        state,
        recorded_answers=tuple(answers),
        correct_count=correct_count,
        answer_revealed=True,
    )


# PUBLIC_INTERFACE
def advance(state: SessionState, quiz: QuizDefinition, now: datetime) -> SessionState:
    """
    Move past a revealed question.

    From any question but the last this moves to the next question and clears
    the selection. From the last question it completes the attempt and stamps
    ``ended_at``.
    """
    _require_in_progress(state, "advance")
    _check_same_quiz(state, quiz)
    if not state.answer_revealed:
        _reject("The current question must be submitted before advancing.")

    if state.is_last_question:
        return replace(state, completed=True, ended_at=now)
    return replace(
        state,
        current_index=state.current_index + 1,
        selected_option=None,
        answer_revealed=False,
    )


# PUBLIC_INTERFACE
def restart(quiz: QuizDefinition, now: datetime) -> SessionState:
    """Begin a fresh attempt at the same quiz; nothing carries over."""
    return start_session(quiz, now)


def _require_in_progress(state: SessionState, action: str) -> None:
    if state.completed:
        _reject(f"Cannot {action}: the quiz is already completed.")


def _check_same_quiz(state: SessionState, quiz: QuizDefinition) -> None:
    if quiz.id != state.quiz_id or quiz.question_count != state.question_count:
        raise InvalidTransitionError(
            f"Session belongs to quiz '{state.quiz_id}', not '{quiz.id}'."
        )


def _reject(reason: str) -> NoReturn:
    logger.debug("Rejected transition: %s", reason)
    raise InvalidTransitionError(reason)
