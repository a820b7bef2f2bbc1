"""In-memory registry of live quiz sessions, keyed by session id."""

import logging
import threading
from collections import OrderedDict
from typing import Optional, Tuple
from uuid import uuid4

from topic_quiz.errors import SessionNotFoundError
from topic_quiz.services.content_provider import ContentProvider
from topic_quiz.services.quiz_session import Clock, QuizSession

logger = logging.getLogger(__name__)

DEFAULT_MAX_SESSIONS = 1000


class SessionRegistry:
    """
    Holds one independent QuizSession per client attempt.

    Sessions are never persisted. When more than ``max_sessions`` are live the
    least recently created one is dropped.
    """

    def __init__(
        self,
        provider: ContentProvider,
        clock: Optional[Clock] = None,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
    ) -> None:
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self._provider = provider
        self._clock = clock
        self._max_sessions = max_sessions
        self._sessions: "OrderedDict[str, QuizSession]" = OrderedDict()
        self._lock = threading.Lock()

    # PUBLIC_INTERFACE
    def create(self, quiz_id: str) -> Tuple[str, QuizSession]:
        """
        Start a new session for ``quiz_id``.

        Returns:
            Tuple of (session_id, session).

        Raises:
            QuizNotFoundError: if the quiz is unavailable; nothing is registered.
        """
        session = QuizSession.load(self._provider, quiz_id, clock=self._clock)
        session_id = uuid4().hex
        with self._lock:
            self._sessions[session_id] = session
            while len(self._sessions) > self._max_sessions:
                evicted_id, _ = self._sessions.popitem(last=False)
                logger.info("Evicted session %s (limit %d)", evicted_id, self._max_sessions)
        logger.info("Started session %s for quiz '%s'", session_id, quiz_id)
        return session_id, session

    # PUBLIC_INTERFACE
    def get(self, session_id: str) -> QuizSession:
        """Return the live session, raising SessionNotFoundError if unknown."""
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    # PUBLIC_INTERFACE
    def discard(self, session_id: str) -> None:
        """Drop a session; raises SessionNotFoundError if it is not registered."""
        with self._lock:
            if self._sessions.pop(session_id, None) is None:
                raise SessionNotFoundError(session_id)
        logger.debug("Discarded session %s", session_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions
