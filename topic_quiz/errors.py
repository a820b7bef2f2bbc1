"""
Exception types raised by the catalog, the session engine and the registry.

The API layer maps these onto HTTP status codes; nothing below the API
raises HTTPException directly.
"""


class QuizError(Exception):
    """Base class for all quiz service errors."""


class QuizNotFoundError(QuizError, LookupError):
    """The requested quiz identifier has no definition."""

    def __init__(self, quiz_id: str) -> None:
        super().__init__(f"Quiz not found: {quiz_id}")
        self.quiz_id = quiz_id


class SessionNotFoundError(QuizError, LookupError):
    """The requested session identifier is not registered."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class InvalidTransitionError(QuizError):
    """An operation was invoked in a state that does not allow it."""


class MalformedQuizError(QuizError, ValueError):
    """A quiz definition violates its structural invariants."""


class CatalogLoadError(QuizError):
    """The catalog data file could not be read or has the wrong shape."""
