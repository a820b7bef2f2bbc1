import json
import logging
import os
from typing import Any, Dict, List, Optional

from topic_quiz.errors import CatalogLoadError, MalformedQuizError
from topic_quiz.models import Category, Difficulty, Question, QuizDefinition, validate_quiz_definition
from topic_quiz.services.content_provider import CatalogContentProvider

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = os.path.join(os.path.dirname(os.path.dirname(__file__)), "data", "catalog.json")


class CatalogJsonStore:
    """
    Read-only JSON file store for the quiz catalog.

    Data model:
    {
        "categories": [ {"id", "name", "description", "icon"}, ... ],
        "quizzes": [
            {
                "id", "title", "description", "category", "difficulty",
                "estimated_time",
                "questions": [
                    {"id", "question", "options", "correct_answer", "explanation"}, ...
                ]
            }, ...
        ]
    }
    """

    # PUBLIC_INTERFACE
    def __init__(self, path: Optional[str] = None) -> None:
        """
        Initialize the JSON store.

        Determines the catalog path from the provided argument, the
        QUIZ_DATA_FILE environment variable, or falls back to the catalog
        shipped with the package.
        """
        env_path = os.getenv("QUIZ_DATA_FILE")
        self.path = os.path.abspath(path or env_path or DEFAULT_DATA_FILE)

    # PUBLIC_INTERFACE
    def load_all(self) -> Dict[str, Any]:
        """
        Load and return the entire data structure from the JSON file.

        Returns:
            dict: The data in the form {"categories": [...], "quizzes": [...]}.

        Raises:
            CatalogLoadError: if the file is missing, is not valid JSON, or
                does not have the expected top-level shape.
        """
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as exc:
            raise CatalogLoadError(f"Catalog file not found: {self.path}") from exc
        except json.JSONDecodeError as exc:
            raise CatalogLoadError(f"Catalog file is not valid JSON: {self.path}: {exc}") from exc

        if not isinstance(data, dict):
            raise CatalogLoadError("Catalog must be a JSON object")
        for key in ("categories", "quizzes"):
            if not isinstance(data.get(key, []), list):
                raise CatalogLoadError(f"Catalog '{key}' must be a list")

        return {
            "categories": [c for c in data.get("categories", []) if isinstance(c, dict)],
            "quizzes": [q for q in data.get("quizzes", []) if isinstance(q, dict)],
        }

    # PUBLIC_INTERFACE
    def build_provider(self) -> CatalogContentProvider:
        """
        Parse the catalog file into a content provider.

        Quizzes that fail validation are logged and left out of the catalog,
        so they can neither be listed nor started.

        Returns:
            CatalogContentProvider: The read-only catalog.
        """
        data = self.load_all()
        categories: List[Category] = []
        seen_categories = set()
        for raw in data["categories"]:
            category = parse_category(raw)
            if category.id in seen_categories:
                logger.error("Skipping duplicate category id %r", category.id)
                continue
            seen_categories.add(category.id)
            categories.append(category)

        quizzes: List[QuizDefinition] = []
        seen_ids = set()
        for raw in data["quizzes"]:
            try:
                quiz = parse_quiz(raw)
            except MalformedQuizError as exc:
                logger.error("Skipping malformed quiz %r: %s", raw.get("id"), exc)
                continue
            if quiz.id in seen_ids:
                logger.error("Skipping duplicate quiz id %r", quiz.id)
                continue
            seen_ids.add(quiz.id)
            quizzes.append(quiz)

        logger.info(
            "Loaded catalog from %s: %d categories, %d quizzes",
            self.path,
            len(categories),
            len(quizzes),
        )
        return CatalogContentProvider(categories=categories, quizzes=quizzes)


def parse_category(raw: Dict[str, Any]) -> Category:
    try:
        return Category(
            id=str(raw["id"]),
            name=str(raw.get("name") or raw["id"]),
            description=str(raw.get("description", "")),
            icon=str(raw.get("icon", "")),
        )
    except KeyError as exc:
        raise CatalogLoadError(f"Category entry is missing {exc}") from exc


# PUBLIC_INTERFACE
def parse_quiz(raw: Dict[str, Any]) -> QuizDefinition:
    """
    Convert a raw quiz dict into a validated QuizDefinition.

    Args:
        raw: Quiz entry from the catalog file.

    Returns:
        QuizDefinition: The parsed definition.

    Raises:
        MalformedQuizError: if required fields are missing or invalid.
    """
    try:
        difficulty = Difficulty(raw.get("difficulty"))
    except ValueError as exc:
        raise MalformedQuizError(f"Unknown difficulty {raw.get('difficulty')!r}") from exc

    raw_questions = raw.get("questions") or []
    if not isinstance(raw_questions, list):
        raise MalformedQuizError("'questions' must be a list")

    estimated = raw.get("estimated_time")
    if estimated is not None and (isinstance(estimated, bool) or not isinstance(estimated, int)):
        raise MalformedQuizError("'estimated_time' must be an integer number of minutes")

    try:
        quiz = QuizDefinition(
            id=str(raw["id"]),
            title=str(raw.get("title", "")),
            description=str(raw.get("description", "")),
            category=str(raw["category"]),
            difficulty=difficulty,
            questions=tuple(_parse_question(q, position) for position, q in enumerate(raw_questions, start=1)),
            estimated_minutes=estimated,
        )
    except KeyError as exc:
        raise MalformedQuizError(f"Quiz entry is missing {exc}") from exc
    return validate_quiz_definition(quiz)


def _parse_question(raw: Any, position: int) -> Question:
    if not isinstance(raw, dict):
        raise MalformedQuizError(f"Question {position} must be an object")
    options = raw.get("options")
    if not isinstance(options, list) or not all(isinstance(o, str) for o in options):
        raise MalformedQuizError(f"Question {position} options must be a list of strings")
    correct = raw.get("correct_answer")
    if isinstance(correct, bool) or not isinstance(correct, int):
        raise MalformedQuizError(f"Question {position} 'correct_answer' must be an integer")
    prompt = str(raw.get("question", "")).strip()
    if not prompt:
        raise MalformedQuizError(f"Question {position} text must not be empty")
    return Question(
        id=str(raw.get("id", position)),
        prompt=prompt,
        options=tuple(options),
        correct_index=correct,
        explanation=str(raw.get("explanation", "")),
    )
