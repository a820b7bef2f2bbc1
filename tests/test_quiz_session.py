# =============================================================================
# TESTS - QuizSession engine and SessionRegistry
# =============================================================================

import threading
from datetime import datetime, timezone

import pytest

from conftest import make_quiz, wrong_option
from topic_quiz.errors import InvalidTransitionError, QuizNotFoundError, SessionNotFoundError
from topic_quiz.services import quiz_session
from topic_quiz.services.quiz_session import MonotonicClock, QuizSession
from topic_quiz.services.scoring import ScoreTier
from topic_quiz.services.session_registry import SessionRegistry


class TestQuizSessionLoad:
    """Loading a quiz through the content provider."""

    def test_load_known_quiz(self, provider, clock):
        session = QuizSession.load(provider, "physics", clock=clock)

        assert session.quiz.id == "physics"
        assert session.state.question_count == 3
        assert session.state.started_at == clock()

    def test_load_unknown_quiz(self, provider, clock):
        """An unknown quiz id is surfaced as not found and builds no session."""
        with pytest.raises(QuizNotFoundError) as exc_info:
            QuizSession.load(provider, "does-not-exist", clock=clock)

        assert exc_info.value.quiz_id == "does-not-exist"


class TestQuizSessionFlow:
    """End-to-end attempts through the engine wrapper."""

    def test_full_attempt(self, quiz, clock):
        session = QuizSession(quiz, clock=clock)
        choices = [True, True, True, False, False]

        for correct in choices:
            question = session.current_question
            session.select_option(question.correct_index if correct else wrong_option(question))
            session.submit_answer()
            clock.tick(10)
            session.advance()

        assert session.completed
        assert session.state.correct_count == 3
        assert session.accuracy() == pytest.approx(0.6)
        assert session.score_tier()[0] == ScoreTier.GOOD_EFFORT
        assert session.score_message() == "Good effort! Keep practicing to improve."
        assert session.elapsed_seconds() == 50
        assert session.result().correct_count == 3

    def test_rejected_event_keeps_state(self, quiz, clock):
        session = QuizSession(quiz, clock=clock)
        before = session.state

        with pytest.raises(InvalidTransitionError):
            session.submit_answer()

        assert session.state is before

    def test_answer_lock_holds(self, quiz, clock):
        session = QuizSession(quiz, clock=clock)
        session.select_option(1)
        session.submit_answer()

        with pytest.raises(InvalidTransitionError):
            session.select_option(2)

        assert session.state.selected_option == 1
        assert session.feedback().selected_option == 1

    def test_progress_and_elapsed_do_not_mutate(self, quiz, clock):
        session = QuizSession(quiz, clock=clock)
        before = session.state

        clock.tick(90)
        assert session.progress() == pytest.approx(0.2)
        assert session.elapsed_seconds() == 90

        assert session.state is before

    def test_score_queries_need_completion(self, quiz, clock):
        session = QuizSession(quiz, clock=clock)

        with pytest.raises(InvalidTransitionError):
            session.accuracy()
        with pytest.raises(InvalidTransitionError):
            session.score_message()

    def test_restart_resets_everything(self, clock):
        session = QuizSession(make_quiz(question_count=2), clock=clock)
        for question in session.quiz.questions:
            session.select_option(question.correct_index)
            session.submit_answer()
            session.advance()
        assert session.completed

        clock.tick(100)
        state = session.restart()

        assert state.current_index == 0
        assert state.correct_count == 0
        assert state.completed is False
        assert state.recorded_answers == (None, None)
        assert state.started_at == clock()
        assert session.elapsed_seconds() == 0

    def test_sessions_are_independent(self, quiz, clock):
        """Two attempts at the same quiz never share state."""
        first = QuizSession(quiz, clock=clock)
        second = QuizSession(quiz, clock=clock)

        first.select_option(0)
        first.submit_answer()

        assert second.state.selected_option is None
        assert second.state.answer_revealed is False


class TestMonotonicClock:
    """Default clock used when a session is built without one."""

    START = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    @pytest.fixture
    def ticks(self, monkeypatch):
        now = [1000.0]
        monkeypatch.setattr(quiz_session.time, "monotonic", lambda: now[0])
        return now

    def test_readings_follow_monotonic_time(self, ticks):
        clock = MonotonicClock(self.START)

        assert clock() == self.START
        ticks[0] += 42.5
        assert (clock() - self.START).total_seconds() == pytest.approx(42.5)

    def test_wall_clock_step_back_does_not_shrink_elapsed(self, ticks, monkeypatch):
        """Elapsed time keeps growing even if the system clock is set back."""
        wall = [self.START]

        class SteppableDatetime(datetime):
            @classmethod
            def now(cls, tz=None):
                return wall[0]

        monkeypatch.setattr(quiz_session, "datetime", SteppableDatetime)
        session = QuizSession(make_quiz())

        ticks[0] += 30
        first = session.elapsed_seconds()
        wall[0] = self.START.replace(hour=11)
        ticks[0] += 5
        second = session.elapsed_seconds()

        assert first == pytest.approx(30)
        assert second == pytest.approx(35)
        assert session.state.started_at == self.START


class TestSessionRegistry:
    """Registry of live sessions."""

    def test_create_and_get(self, provider, clock):
        registry = SessionRegistry(provider, clock=clock)

        session_id, session = registry.create("sample")

        assert registry.get(session_id) is session
        assert session_id in registry
        assert len(registry) == 1

    def test_create_unknown_quiz_registers_nothing(self, provider, clock):
        registry = SessionRegistry(provider, clock=clock)

        with pytest.raises(QuizNotFoundError):
            registry.create("missing")

        assert len(registry) == 0

    def test_each_create_is_a_new_session(self, provider, clock):
        registry = SessionRegistry(provider, clock=clock)

        first_id, first = registry.create("sample")
        second_id, second = registry.create("sample")

        assert first_id != second_id
        assert first is not second

    def test_discard(self, provider, clock):
        registry = SessionRegistry(provider, clock=clock)
        session_id, _ = registry.create("sample")

        registry.discard(session_id)

        with pytest.raises(SessionNotFoundError):
            registry.get(session_id)
        with pytest.raises(SessionNotFoundError):
            registry.discard(session_id)

    def test_oldest_session_evicted(self, provider, clock):
        registry = SessionRegistry(provider, clock=clock, max_sessions=2)

        oldest_id, _ = registry.create("sample")
        registry.create("physics")
        registry.create("algebra")

        assert len(registry) == 2
        assert oldest_id not in registry

    def test_concurrent_creates_and_reads(self, provider, clock):
        """Sessions created from several threads are all registered and readable."""
        registry = SessionRegistry(provider, clock=clock)
        created = []

        def worker():
            for _ in range(25):
                session_id, session = registry.create("sample")
                assert registry.get(session_id) is session
                assert session_id in registry
                created.append(session_id)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(registry) == 100
        assert len(set(created)) == 100

    def test_invalid_limit(self, provider):
        with pytest.raises(ValueError):
            SessionRegistry(provider, max_sessions=0)
