import time
import uuid
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

import structlog

from ..api.v1.schemas import GenerationRequest, Question, QuizResult
from ..models.enums import QuestionType
from ..models.exam_styles import get_style_label
from .progress_emitter import ProgressEmitter, ProgressStage

logger = structlog.get_logger(__name__)


# Checked in order against the lower-cased raw type; first hit wins
TYPE_KEYWORDS: Tuple[Tuple[Tuple[str, ...], QuestionType], ...] = (
    (("mcq", "choice", "multiple"), QuestionType.MCQ),
    (("true", "false"), QuestionType.TRUE_FALSE),
    (("short",), QuestionType.SHORT_ANSWER),
    (("long", "essay"), QuestionType.ESSAY),
    (("fill",), QuestionType.FILL_IN_THE_BLANK),
)

DEFAULT_QUESTION_TYPE = QuestionType.MCQ

FORMATTING_FLOOR = 70
FORMATTING_SPAN = 15


def normalize_question_type(raw_type: Optional[str]) -> QuestionType:
    if not raw_type:
        return DEFAULT_QUESTION_TYPE
    normalized = str(raw_type).lower()
    for keywords, question_type in TYPE_KEYWORDS:
        if any(keyword in normalized for keyword in keywords):
            return question_type
    return DEFAULT_QUESTION_TYPE


def infer_question_type(raw: Dict[str, Any]) -> QuestionType:
    """Use the model's ``type`` when given, otherwise guess from the question's shape."""
    if raw.get("type"):
        return normalize_question_type(raw["type"])

    options = raw.get("options") or []
    if len(options) == 4:
        return QuestionType.MCQ
    if len(options) == 2:
        return QuestionType.TRUE_FALSE

    text = raw.get("text") or ""
    if len(text) > 100:
        return QuestionType.ESSAY
    if len(text) > 30:
        return QuestionType.SHORT_ANSWER
    return DEFAULT_QUESTION_TYPE


def normalize_marks(raw_marks: Any) -> int:
    try:
        marks = int(round(float(raw_marks)))
    except (TypeError, ValueError, OverflowError):
        return 1
    return marks if marks > 0 else 1


def _as_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    return str(value)


class QuizAssembler:
    def __init__(
        self,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
        clock: Callable[[], int] = lambda: int(time.time() * 1000),
    ):
        self.id_factory = id_factory
        self.clock = clock

    def build_question(self, raw: Dict[str, Any]) -> Question:
        options: Sequence[Any] = raw.get("options") or []
        return Question(
            id=self.id_factory(),
            type=infer_question_type(raw),
            text=_as_text(raw.get("text")) or "",
            options=[_as_text(option) for option in options],
            correct_answer=_as_text(raw.get("correctAnswer")),
            explanation=_as_text(raw.get("explanation")),
            marks=normalize_marks(raw.get("marks")),
        )

    async def assemble(
        self,
        data: Dict[str, Any],
        request: GenerationRequest,
        emitter: Optional[ProgressEmitter] = None,
    ) -> QuizResult:
        raw_questions = [q for q in data.get("questions") or [] if isinstance(q, dict)]
        total = len(raw_questions)

        if emitter is not None:
            await emitter.emit(ProgressStage.FORMATTING, FORMATTING_FLOOR)

        questions = []
        for index, raw in enumerate(raw_questions):
            questions.append(self.build_question(raw))
            if emitter is not None:
                percentage = FORMATTING_FLOOR + int((index + 1) / total * FORMATTING_SPAN)
                await emitter.emit(ProgressStage.FORMATTING, percentage, index + 1)

        if total != request.question_count:
            logger.warning("question_count_mismatch", requested=request.question_count, generated=total)

        return QuizResult(
            title=data.get("title") or f"{request.topic} Quiz",
            topic=request.topic,
            difficulty=request.difficulty,
            questions=questions,
            created_at=self.clock(),
            total_questions=len(questions),
            total_marks=request.total_marks,
            exam_style=get_style_label(request.exam_style_id),
        )
