import os
from functools import lru_cache
from typing import Callable, List

from fastapi import Depends, FastAPI, HTTPException, Response, status
from fastapi.middleware.cors import CORSMiddleware

from topic_quiz.api.schemas import (
    CategoryOut,
    FeedbackOut,
    QuestionReviewOut,
    QuizOut,
    QuizQuestion,
    QuizSummaryOut,
    ResultOut,
    SelectOptionIn,
    SessionOut,
    SessionQuestionOut,
    StartSessionIn,
)
from topic_quiz.config import get_settings
from topic_quiz.errors import (
    InvalidTransitionError,
    MalformedQuizError,
    QuizNotFoundError,
    SessionNotFoundError,
)
from topic_quiz.services.content_provider import ContentProvider
from topic_quiz.services.quiz_session import QuizSession
from topic_quiz.services.scoring import format_elapsed
from topic_quiz.services.session_registry import SessionRegistry
from topic_quiz.storage.json_store import CatalogJsonStore
from topic_quiz.utils.logging_config import configure_logging

settings = get_settings()
logger = configure_logging(settings.log_level)

openapi_tags = [
    {"name": "System", "description": "System and service endpoints"},
    {"name": "Catalog", "description": "Category and quiz retrieval endpoints"},
    {"name": "Sessions", "description": "Quiz-taking session endpoints"},
]

app = FastAPI(
    title="Topic Quiz Service",
    description="Serves topical quizzes and runs quiz-taking sessions one question at a time.",
    version="0.1.0",
    openapi_tags=openapi_tags,
)

# CORS configuration to allow frontend integration (adjust origins in env if needed)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# PUBLIC_INTERFACE
def get_provider() -> ContentProvider:
    """Return a cached singleton content provider built from the catalog file."""
    return _get_provider_singleton()


@lru_cache(maxsize=1)
def _get_provider_singleton() -> ContentProvider:
    """
    Internal cached constructor for the provider. Uses QUIZ_DATA_FILE if set,
    otherwise the catalog shipped with the package.
    """
    return CatalogJsonStore(path=settings.data_file).build_provider()


# PUBLIC_INTERFACE
def get_registry() -> SessionRegistry:
    """Return the process-wide session registry."""
    return _get_registry_singleton()


@lru_cache(maxsize=1)
def _get_registry_singleton() -> SessionRegistry:
    return SessionRegistry(get_provider(), max_sessions=settings.max_sessions)


@app.get("/", summary="Health Check", tags=["System"])
def health_check(provider: ContentProvider = Depends(get_provider)):
    """
    Health check endpoint.

    Returns:
        JSON payload with a simple 'Healthy' message and the number of categories.
    """
    return {"message": "Healthy", "categories": len(provider.list_categories())}


@app.get(
    "/categories",
    response_model=List[CategoryOut],
    summary="List categories",
    description="Returns every category with the number of quizzes it contains.",
    tags=["Catalog"],
)
def list_categories(provider: ContentProvider = Depends(get_provider)) -> List[CategoryOut]:
    return [
        CategoryOut(
            id=c.id,
            name=c.name,
            description=c.description,
            icon=c.icon,
            quiz_count=c.quiz_count,
        )
        for c in provider.list_categories()
    ]


@app.get(
    "/quizzes/{category}",
    response_model=List[QuizSummaryOut],
    summary="List quizzes in a category",
    description="Returns quiz metadata for one category. A known category without quizzes returns an empty list.",
    tags=["Catalog"],
)
def list_quizzes(category: str, provider: ContentProvider = Depends(get_provider)) -> List[QuizSummaryOut]:
    """
    List the quizzes of a category.

    Args:
        category: The category identifier (e.g., 'science').

    Returns:
        List[QuizSummaryOut]: Quiz summaries in catalog order.

    Raises:
        HTTPException 404 if the category is unknown.
    """
    if provider.get_category(category) is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return [
        QuizSummaryOut(
            id=q.id,
            title=q.title,
            description=q.description,
            category=q.category,
            difficulty=q.difficulty,
            question_count=q.question_count,
            estimated_time=q.estimated_time,
        )
        for q in provider.list_quizzes(category)
    ]


@app.get(
    "/quiz/{quiz_id}",
    response_model=QuizOut,
    summary="Get quiz by id",
    description="Returns the full quiz payload for the specified quiz identifier.",
    tags=["Catalog"],
)
def get_quiz(quiz_id: str, provider: ContentProvider = Depends(get_provider)) -> QuizOut:
    """
    Retrieve a single quiz by identifier.

    Raises:
        HTTPException 404 if the quiz is not found.
    """
    quiz = provider.get_quiz(quiz_id)
    if quiz is None:
        raise HTTPException(status_code=404, detail="Quiz not found")
    return QuizOut(
        id=quiz.id,
        title=quiz.title,
        description=quiz.description,
        category=quiz.category,
        difficulty=quiz.difficulty,
        estimated_time=quiz.estimated_time,
        questions=[
            QuizQuestion(
                id=q.id,
                question=q.prompt,
                options=list(q.options),
                correct_index=q.correct_index,
                explanation=q.explanation,
            )
            for q in quiz.questions
        ],
    )


@app.post(
    "/sessions",
    response_model=SessionOut,
    status_code=status.HTTP_201_CREATED,
    summary="Start a quiz session",
    description="Loads the quiz once and starts a fresh, independent attempt at it.",
    tags=["Sessions"],
)
def start_session(body: StartSessionIn, registry: SessionRegistry = Depends(get_registry)) -> SessionOut:
    """
    Start an attempt at a quiz.

    Raises:
        HTTPException 404 if the quiz is unavailable, 422 if it cannot be played.
    """
    try:
        session_id, session = registry.create(body.quiz_id)
    except QuizNotFoundError:
        raise HTTPException(status_code=404, detail="Quiz not found")
    except MalformedQuizError as exc:
        raise HTTPException(status_code=422, detail=f"Quiz unavailable: {exc}")
    return _session_out(session_id, session)


@app.get("/sessions/{session_id}", response_model=SessionOut, summary="Get session state", tags=["Sessions"])
def get_session(session_id: str, registry: SessionRegistry = Depends(get_registry)) -> SessionOut:
    return _session_out(session_id, _lookup(registry, session_id))


@app.post("/sessions/{session_id}/select", response_model=SessionOut, summary="Select an option", tags=["Sessions"])
def select_option(
    session_id: str, body: SelectOptionIn, registry: SessionRegistry = Depends(get_registry)
) -> SessionOut:
    session = _lookup(registry, session_id)
    _apply(lambda: session.select_option(body.option_index))
    return _session_out(session_id, session)


@app.post("/sessions/{session_id}/submit", response_model=SessionOut, summary="Submit the answer", tags=["Sessions"])
def submit_answer(session_id: str, registry: SessionRegistry = Depends(get_registry)) -> SessionOut:
    session = _lookup(registry, session_id)
    _apply(session.submit_answer)
    return _session_out(session_id, session)


@app.post(
    "/sessions/{session_id}/advance",
    response_model=SessionOut,
    summary="Go to the next question or finish",
    tags=["Sessions"],
)
def advance(session_id: str, registry: SessionRegistry = Depends(get_registry)) -> SessionOut:
    session = _lookup(registry, session_id)
    _apply(session.advance)
    return _session_out(session_id, session)


@app.post("/sessions/{session_id}/restart", response_model=SessionOut, summary="Retake the quiz", tags=["Sessions"])
def restart(session_id: str, registry: SessionRegistry = Depends(get_registry)) -> SessionOut:
    session = _lookup(registry, session_id)
    session.restart()
    return _session_out(session_id, session)


@app.delete(
    "/sessions/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Leave a session",
    tags=["Sessions"],
)
def discard_session(session_id: str, registry: SessionRegistry = Depends(get_registry)) -> Response:
    try:
        registry.discard(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def _lookup(registry: SessionRegistry, session_id: str) -> QuizSession:
    try:
        return registry.get(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")


def _apply(action: Callable[[], object]) -> None:
    try:
        action()
    except InvalidTransitionError as exc:
        raise HTTPException(status_code=409, detail=str(exc))


def _session_out(session_id: str, session: QuizSession) -> SessionOut:
    """Render the presentation state of a session; the answer stays hidden until revealed."""
    state = session.state
    quiz = session.quiz
    elapsed = session.elapsed_seconds()

    question = None
    progress = None
    feedback = None
    result = None
    if state.completed:
        r = session.result()
        result = ResultOut(
            correct_count=r.correct_count,
            question_count=r.question_count,
            accuracy=r.accuracy,
            accuracy_percent=r.accuracy_percent,
            elapsed_seconds=r.elapsed_seconds,
            elapsed_display=r.elapsed_display,
            tier=r.tier,
            message=r.message,
            review=[
                QuestionReviewOut(
                    question_id=item.question_id,
                    selected_option=item.selected_option,
                    correct_index=item.correct_index,
                    is_correct=item.is_correct,
                )
                for item in r.review
            ],
        )
    else:
        current = session.current_question
        question = SessionQuestionOut(
            id=current.id,
            number=state.current_index + 1,
            question=current.prompt,
            options=list(current.options),
        )
        progress = session.progress()
        fb = session.feedback()
        if fb is not None:
            feedback = FeedbackOut(
                selected_option=fb.selected_option,
                correct_index=fb.correct_index,
                is_correct=fb.is_correct,
                explanation=fb.explanation,
            )

    return SessionOut(
        session_id=session_id,
        quiz_id=quiz.id,
        quiz_title=quiz.title,
        category=quiz.category,
        status=state.phase,
        question_count=state.question_count,
        current_index=state.current_index,
        question=question,
        selected_option=state.selected_option,
        answer_revealed=state.answer_revealed,
        recorded_answers=list(state.recorded_answers),
        correct_count=state.correct_count,
        progress=progress,
        elapsed_seconds=elapsed,
        elapsed_display=format_elapsed(elapsed),
        feedback=feedback,
        result=result,
    )


# PUBLIC_INTERFACE
def run() -> None:
    """Serve the API with uvicorn; host and port come from HOST and PORT."""
    import uvicorn

    uvicorn.run(app, host=os.getenv("HOST", "127.0.0.1"), port=int(os.getenv("PORT", "8000")))
