"""Engine that owns one attempt at a quiz and applies user events to it."""

import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Tuple

from topic_quiz.errors import InvalidTransitionError, QuizNotFoundError
from topic_quiz.models import Question, QuizDefinition
from topic_quiz.services import scoring, session_state
from topic_quiz.services.content_provider import ContentProvider
from topic_quiz.services.scoring import AnswerFeedback, QuizResult, ScoreTier
from topic_quiz.services.session_state import SessionState

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class MonotonicClock:
    """
    UTC timestamps that never move backwards.

    The wall clock is read once; later readings add the monotonic time passed
    since then, so stepping the system clock cannot shrink an elapsed time.
    """

    def __init__(self, start: Optional[datetime] = None) -> None:
        self._start = start or datetime.now(timezone.utc)
        self._origin = time.monotonic()

    def __call__(self) -> datetime:
        return self._start + timedelta(seconds=time.monotonic() - self._origin)


class QuizSession:
    """
    One user's attempt at a quiz definition.

    The session reads the clock only when starting, completing and answering
    elapsed-time queries; sampling the elapsed time never changes the state.
    """

    def __init__(self, quiz: QuizDefinition, clock: Optional[Clock] = None) -> None:
        self._quiz = quiz
        self._clock: Clock = clock or MonotonicClock()
        self._state: SessionState = session_state.start_session(quiz, self._clock())

    # PUBLIC_INTERFACE
    @classmethod
    def load(cls, provider: ContentProvider, quiz_id: str, clock: Optional[Clock] = None) -> "QuizSession":
        """
        Fetch a quiz from the provider and start an attempt at it.

        Raises:
            QuizNotFoundError: if the provider has no such quiz; no session is built.
            MalformedQuizError: if the definition cannot be played.
        """
        quiz = provider.get_quiz(quiz_id)
        if quiz is None:
            raise QuizNotFoundError(quiz_id)
        return cls(quiz, clock=clock)

    @property
    def quiz(self) -> QuizDefinition:
        return self._quiz

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def current_question(self) -> Question:
        return session_state.current_question(self._state, self._quiz)

    @property
    def completed(self) -> bool:
        return self._state.completed

    def select_option(self, option_index: int) -> SessionState:
        self._state = session_state.select_option(self._state, self._quiz, option_index)
        return self._state

    def submit_answer(self) -> SessionState:
        self._state = session_state.submit_answer(self._state, self._quiz)
        return self._state

    def advance(self) -> SessionState:
        self._state = session_state.advance(self._state, self._quiz, self._clock())
        if self._state.completed:
            logger.info(
                "Quiz '%s' completed: %d/%d correct",
                self._quiz.id,
                self._state.correct_count,
                self._state.question_count,
            )
        return self._state

    def restart(self) -> SessionState:
        self._state = session_state.restart(self._quiz, self._clock())
        logger.debug("Quiz '%s' restarted", self._quiz.id)
        return self._state

    def progress(self) -> float:
        return scoring.progress(self._state)

    def elapsed_seconds(self) -> float:
        return scoring.elapsed_seconds(self._state, self._clock())

    def accuracy(self) -> float:
        return scoring.accuracy(self._state)

    def score_message(self) -> str:
        return self.score_tier()[1]

    def score_tier(self) -> Tuple[ScoreTier, str]:
        """(tier, message) for a completed attempt."""
        if not self._state.completed:
            raise InvalidTransitionError("The score tier is only defined once the quiz is completed.")
        return scoring.score_tier(self._state.correct_count, self._state.question_count)

    def feedback(self) -> Optional[AnswerFeedback]:
        return scoring.answer_feedback(self._state, self._quiz)

    def result(self) -> QuizResult:
        return scoring.build_result(self._state, self._quiz)
