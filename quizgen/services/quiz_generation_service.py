from typing import Optional

import structlog

from ..api.v1.schemas import GenerationRequest, QuizResult
from ..exceptions import AIServiceError, QuizGenerationError
from ..models.user import UserContext
from ..strategies.transport_selector import TransportSelector
from .progress_emitter import ProgressEmitter, ProgressStage
from .prompt_assembler import PromptAssembler
from .quiz_assembler import QuizAssembler
from .tier_router import TierRouter, get_tier_router

logger = structlog.get_logger(__name__)


class QuizGenerationService:
    """
    Runs one quiz generation end to end.

    Sequential and all-or-nothing: it returns a complete QuizResult or raises
    QuizGenerationError. Progress goes to the supplied emitter. User quota is
    never touched here.
    """

    def __init__(
        self,
        tier_router: Optional[TierRouter] = None,
        prompt_assembler: Optional[PromptAssembler] = None,
        transport_selector: Optional[TransportSelector] = None,
        quiz_assembler: Optional[QuizAssembler] = None,
    ):
        self.tier_router = tier_router or get_tier_router()
        self.prompt_assembler = prompt_assembler or PromptAssembler()
        self.transport_selector = transport_selector or TransportSelector()
        self.quiz_assembler = quiz_assembler or QuizAssembler()

    async def close(self):
        await self.transport_selector.close()

    async def generate(
        self,
        request: GenerationRequest,
        user: Optional[UserContext],
        emitter: Optional[ProgressEmitter] = None,
    ) -> QuizResult:
        emitter = emitter or ProgressEmitter()
        await emitter.emit(ProgressStage.INITIALIZING, 5)

        route = self.tier_router.resolve_for_user(user)
        log = logger.bind(
            user_id=getattr(user, "user_id", None),
            model=route.model,
            topic=request.topic,
            question_count=request.question_count,
        )
        log.info("quiz_generation_started")

        try:
            if request.youtube_url:
                await emitter.emit(ProgressStage.FETCHING_TRANSCRIPT, 10)
            payload = await self.prompt_assembler.assemble(request)

            await emitter.emit(ProgressStage.PROCESSING_INPUT, 15)
            if not route.api_key:
                raise AIServiceError(f"Gemini API key not configured for model {route.model}")

            data = await self.transport_selector.generate(route, payload, emitter)
            quiz = await self.quiz_assembler.assemble(data, request, emitter)

            await emitter.emit(ProgressStage.FINALIZING, 95)
        except Exception as e:
            log.error("quiz_generation_failed", error_type=type(e).__name__, error=str(e))
            raise QuizGenerationError(
                f"Failed to generate quiz: {e}",
                details={"cause": type(e).__name__},
            ) from e

        log.info("quiz_generation_completed", total_questions=quiz.total_questions)
        return quiz
