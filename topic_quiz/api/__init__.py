"""
API package initialization.

Exports shared schema models for external use.
"""

# Re-export commonly used schema models
from .schemas import CategoryOut, QuizOut, QuizQuestion, QuizSummaryOut, SessionOut  # noqa: F401
