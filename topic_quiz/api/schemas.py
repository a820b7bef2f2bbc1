from typing import List, Optional

from pydantic import BaseModel, Field

from topic_quiz.models import Difficulty
from topic_quiz.services.scoring import ScoreTier
from topic_quiz.services.session_state import SessionPhase


# PUBLIC_INTERFACE
class CategoryOut(BaseModel):
    """Category listing entry."""
    id: str = Field(..., description="Category identifier used in quiz listings.")
    name: str = Field(..., description="Display name of the category.")
    description: str = Field(..., description="Short description of the category.")
    icon: str = Field(..., description="Icon glyph for the category.")
    quiz_count: int = Field(..., ge=0, description="Number of quizzes in the category.")


# PUBLIC_INTERFACE
class QuizSummaryOut(BaseModel):
    """Metadata view of a quiz for listing endpoints."""
    id: str = Field(..., description="Unique identifier for the quiz.")
    title: str = Field(..., description="Title of the quiz.")
    description: str = Field(..., description="Short description of the quiz.")
    category: str = Field(..., description="Category the quiz belongs to.")
    difficulty: Difficulty = Field(..., description="One of easy, medium or hard.")
    question_count: int = Field(..., ge=1, description="Number of questions contained in the quiz.")
    estimated_time: int = Field(..., gt=0, description="Estimated duration in minutes.")


# PUBLIC_INTERFACE
class QuizQuestion(BaseModel):
    """A single multiple-choice question, including its answer."""
    id: str = Field(..., description="Stable identifier for the question within the quiz.")
    question: str = Field(..., description="Question prompt text.")
    options: List[str] = Field(..., description="Answer options, in display order.")
    correct_index: int = Field(..., description="Index of the correct option within the options list (0-based).")
    explanation: str = Field(..., description="Explanation shown once the answer is revealed.")


# PUBLIC_INTERFACE
class QuizOut(BaseModel):
    """Full quiz payload."""
    id: str = Field(..., description="Unique identifier for the quiz.")
    title: str = Field(..., description="Title of the quiz.")
    description: str = Field(..., description="Short description of the quiz.")
    category: str = Field(..., description="Category the quiz belongs to.")
    difficulty: Difficulty = Field(..., description="One of easy, medium or hard.")
    estimated_time: int = Field(..., gt=0, description="Estimated duration in minutes.")
    questions: List[QuizQuestion] = Field(..., description="Ordered list of questions.")


# PUBLIC_INTERFACE
class StartSessionIn(BaseModel):
    """Request body for starting a quiz session."""
    quiz_id: str = Field(..., description="Identifier of the quiz to attempt.")


# PUBLIC_INTERFACE
class SelectOptionIn(BaseModel):
    """Request body for choosing an option on the current question."""
    option_index: int = Field(..., description="0-based index of the chosen option.")


# PUBLIC_INTERFACE
class SessionQuestionOut(BaseModel):
    """The current question as presented to the user; the answer is withheld."""
    id: str = Field(..., description="Question identifier.")
    number: int = Field(..., ge=1, description="1-based position of the question in the quiz.")
    question: str = Field(..., description="Question prompt text.")
    options: List[str] = Field(..., description="Answer options, in display order.")


class FeedbackOut(BaseModel):
    """Outcome of the submitted answer for the current question."""
    selected_option: int = Field(..., description="The option that was submitted.")
    correct_index: int = Field(..., description="The correct option.")
    is_correct: bool = Field(..., description="Whether the submitted option is correct.")
    explanation: str = Field(..., description="Explanation of the correct answer.")


class QuestionReviewOut(BaseModel):
    question_id: str
    selected_option: Optional[int]
    correct_index: int
    is_correct: bool


# PUBLIC_INTERFACE
class ResultOut(BaseModel):
    """Summary of a completed attempt."""
    correct_count: int = Field(..., ge=0, description="Number of correct answers.")
    question_count: int = Field(..., ge=1, description="Number of questions.")
    accuracy: float = Field(..., ge=0, le=1, description="Correct answers over total questions.")
    accuracy_percent: int = Field(..., ge=0, le=100, description="Accuracy as a rounded percentage.")
    elapsed_seconds: float = Field(..., ge=0, description="Time taken, in seconds.")
    elapsed_display: str = Field(..., description="Time taken formatted as m:ss.")
    tier: ScoreTier = Field(..., description="Qualitative score tier.")
    message: str = Field(..., description="Message matching the score tier.")
    review: List[QuestionReviewOut] = Field(..., description="Per-question answers.")


# PUBLIC_INTERFACE
class SessionOut(BaseModel):
    """Presentation state of a quiz session."""
    session_id: str = Field(..., description="Identifier of the session.")
    quiz_id: str = Field(..., description="Quiz being attempted.")
    quiz_title: str = Field(..., description="Title of the quiz being attempted.")
    category: str = Field(..., description="Category of the quiz, for navigation back.")
    status: SessionPhase = Field(..., description="in_progress or completed.")
    question_count: int = Field(..., ge=1, description="Number of questions in the quiz.")
    current_index: int = Field(..., ge=0, description="0-based index of the current question.")
    question: Optional[SessionQuestionOut] = Field(default=None, description="Current question while in progress.")
    selected_option: Optional[int] = Field(default=None, description="Currently selected option, if any.")
    answer_revealed: bool = Field(..., description="Whether the current answer is locked and revealed.")
    recorded_answers: List[Optional[int]] = Field(..., description="Submitted option per question, null if unanswered.")
    correct_count: int = Field(..., ge=0, description="Correct answers so far.")
    progress: Optional[float] = Field(default=None, description="Progress fraction while in progress.")
    elapsed_seconds: float = Field(..., ge=0, description="Seconds since the attempt started, frozen at completion.")
    elapsed_display: str = Field(..., description="Elapsed time formatted as m:ss.")
    feedback: Optional[FeedbackOut] = Field(default=None, description="Answer feedback once revealed.")
    result: Optional[ResultOut] = Field(default=None, description="Summary once completed.")
