"""
Quiz generation endpoints.

Generation progress is delivered as Server-Sent Events:
- type: "progress" - stage, percentage and questions formatted so far
- type: "complete" - the finished quiz (terminal)
- type: "error" - failure message (terminal)
"""

import asyncio
from typing import Set

import structlog
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from ..schemas import DemoRequest, GenerationRequest, ReviewRequest, ReviewResponse
from ...dependencies import get_current_user, get_quiz_generation_service, get_review_service
from ....config import get_settings
from ....core.sse_channel import SSEChannel
from ....exceptions import AIServiceError, QuizGenerationError
from ....models.enums import Difficulty, SubscriptionTier
from ....models.user import UserContext
from ....services.progress_emitter import ProgressEmitter
from ....services.quiz_generation_service import QuizGenerationService
from ....services.review_service import ReviewService

logger = structlog.get_logger(__name__)

router = APIRouter()

# Generations keep running after a client disconnects; hold references until they finish
_running_generations: Set[asyncio.Task] = set()


def _stream_generation(
    request: GenerationRequest,
    user: UserContext,
    service: QuizGenerationService,
) -> StreamingResponse:
    channel = SSEChannel()
    emitter = ProgressEmitter()
    emitter.subscribe(channel.on_progress)

    async def run():
        try:
            quiz = await service.generate(request, user, emitter)
        except QuizGenerationError as e:
            channel.fail(e.message)
            return
        except Exception as e:
            logger.error("quiz_generation_unexpected_error", user_id=user.user_id, error=str(e), exc_info=True)
            channel.fail(str(e) or "Internal server error")
            return

        channel.complete(quiz)
        user.consume_generation()

    async def event_stream():
        task = asyncio.create_task(run())
        _running_generations.add(task)
        task.add_done_callback(_running_generations.discard)
        try:
            async for frame in channel.frames():
                yield frame
        finally:
            if not task.done():
                logger.info("sse_client_disconnected", user_id=user.user_id)

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
            "Access-Control-Allow-Origin": get_settings().frontend_url,
        },
    )


@router.post("/generate")
async def generate_quiz(
    request: GenerationRequest,
    user: UserContext = Depends(get_current_user),
    service: QuizGenerationService = Depends(get_quiz_generation_service),
):
    """
    Generate a quiz and stream progress as Server-Sent Events.

    **Request Body:**
        - topic, difficulty, questionCount, types, totalMarks, examStyleId
        - fileData: optional attachment or list of attachments {mimeType, data}
        - youtubeUrl: optional video whose transcript the quiz is built from
    """
    if not user.can_generate():
        logger.info("generation_limit_reached", user_id=user.user_id)
        raise HTTPException(
            status_code=403,
            detail="Monthly generation limit reached. Please upgrade your tier.",
        )

    logger.info(
        "Quiz generation request",
        user_id=user.user_id,
        tier=user.tier.value if user.tier else None,
        question_count=request.question_count,
        exam_style=request.exam_style_id,
    )
    return _stream_generation(request, user, service)


@router.post("/demo")
async def generate_demo_quiz(
    body: DemoRequest,
    service: QuizGenerationService = Depends(get_quiz_generation_service),
):
    """Unauthenticated demo: fixed small free-tier quiz about the given topic."""
    topic = body.topic.strip()
    if not topic:
        raise HTTPException(status_code=400, detail="Topic is required")

    demo_user = UserContext(
        user_id="demo",
        tier=SubscriptionTier.FREE,
        generations_remaining=1,
        name="Demo User",
    )
    demo_request = GenerationRequest(
        topic=topic,
        difficulty=Difficulty.EASY.value,
        question_count=5,
        types=["MCQ"],
        total_marks=5,
        exam_style_id="standard",
    )
    return _stream_generation(demo_request, demo_user, service)


@router.post("/review", response_model=ReviewResponse)
async def generate_review(
    body: ReviewRequest,
    user: UserContext = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
) -> ReviewResponse:
    try:
        review = await service.generate_review(user, body.quizzes)
    except AIServiceError as e:
        raise HTTPException(status_code=500, detail=e.message)
    return ReviewResponse(review=review)
