"""Read-only catalog of categories and quiz definitions."""

import logging
from typing import Dict, Iterable, List, Optional, Protocol

from topic_quiz.models import (
    Category,
    CategorySummary,
    QuizDefinition,
    QuizSummary,
    validate_quiz_definition,
)

logger = logging.getLogger(__name__)


class ContentProvider(Protocol):
    """What the session engine and the API need from a quiz catalog."""

    def list_categories(self) -> List[CategorySummary]:
        ...

    def get_category(self, category_id: str) -> Optional[CategorySummary]:
        ...

    def list_quizzes(self, category: str) -> List[QuizSummary]:
        ...

    def get_quiz(self, quiz_id: str) -> Optional[QuizDefinition]:
        ...


class CatalogContentProvider:
    """
    Content provider over an injected, immutable set of categories and quizzes.

    Category quiz counts are computed from the quizzes at construction time.
    Every quiz definition is validated up front, so a provider never hands out
    an unplayable quiz.
    """

    # PUBLIC_INTERFACE
    def __init__(self, categories: Iterable[Category], quizzes: Iterable[QuizDefinition]) -> None:
        """
        Build the catalog.

        Args:
            categories: Category metadata, in display order.
            quizzes: Quiz definitions, in display order. Ids must be unique.

        Raises:
            MalformedQuizError: if a definition is malformed.
            ValueError: if a quiz or category id is repeated.
        """
        self._quizzes: Dict[str, QuizDefinition] = {}
        for quiz in quizzes:
            validate_quiz_definition(quiz)
            if quiz.id in self._quizzes:
                raise ValueError(f"Duplicate quiz id: {quiz.id}")
            self._quizzes[quiz.id] = quiz

        counts: Dict[str, int] = {}
        for quiz in self._quizzes.values():
            counts[quiz.category] = counts.get(quiz.category, 0) + 1

        self._categories: Dict[str, CategorySummary] = {}
        for category in categories:
            if category.id in self._categories:
                raise ValueError(f"Duplicate category id: {category.id}")
            self._categories[category.id] = CategorySummary(
                id=category.id,
                name=category.name,
                description=category.description,
                icon=category.icon,
                quiz_count=counts.get(category.id, 0),
            )

        orphaned = sorted(set(counts) - set(self._categories))
        if orphaned:
            logger.warning("Quizzes reference unknown categories: %s", ", ".join(orphaned))

    # PUBLIC_INTERFACE
    def list_categories(self) -> List[CategorySummary]:
        """Return all categories with their quiz counts."""
        return list(self._categories.values())

    # PUBLIC_INTERFACE
    def get_category(self, category_id: str) -> Optional[CategorySummary]:
        """Return the category with the given id, or None if unknown."""
        return self._categories.get(category_id)

    # PUBLIC_INTERFACE
    def list_quizzes(self, category: str) -> List[QuizSummary]:
        """
        Return summaries of the quizzes whose category matches exactly.

        An unknown category or a category without quizzes yields an empty list.
        """
        return [
            QuizSummary.from_definition(quiz)
            for quiz in self._quizzes.values()
            if quiz.category == category
        ]

    # PUBLIC_INTERFACE
    def get_quiz(self, quiz_id: str) -> Optional[QuizDefinition]:
        """Return the quiz definition, or None if the id is unknown."""
        return self._quizzes.get(quiz_id)

    @property
    def quiz_count(self) -> int:
        return len(self._quizzes)
