import json
from datetime import datetime, timezone
from typing import List, Optional

import structlog

from ..api.v1.schemas import QuizSummary
from ..config import get_settings
from ..exceptions import AIServiceError
from ..models.user import UserContext
from .gemini_client import GeminiClient
from .retry_executor import RetryExecutor
from .stream_ingester import candidate_text
from .tier_router import TierRouter, get_tier_router

logger = structlog.get_logger(__name__)

NO_COMPLETED_QUIZZES_MESSAGE = "Complete some quizzes to get an AI-powered performance review!"
REVIEW_FAILED_MESSAGE = "Failed to generate performance review. Please try again."

REVIEW_PROMPT = """You are an elite educational coach. Analyze this quiz history for {name}:

{summary}

Output: A sharp, direct, high-impact review.
- Identify 1 key strength prefixing with **Key Strength:**.
- Identify 1 critical weakness prefixing with **Critical Weakness:**.
- Give 1 actionable next step prefixing with **Next Step:**.
- Do NOT start with {name}.
- Do NOT start the review with 'Review:'.
- For the words that need bolding use **WORD**, not *WORD*.
- Do NOT mention difficulty levels or quiz structure in the topic name, just the core topic itself.
- Only output the three items above (Key Strength, Critical Weakness, Next Step)."""


def _format_date(created_at: Optional[int]) -> str:
    if created_at is None:
        return "unknown date"
    return datetime.fromtimestamp(created_at / 1000, tz=timezone.utc).strftime("%m/%d/%Y")


class ReviewService:
    """Coaching summary of a user's completed quizzes."""

    def __init__(
        self,
        client: Optional[GeminiClient] = None,
        tier_router: Optional[TierRouter] = None,
        retry_executor: Optional[RetryExecutor] = None,
    ):
        settings = get_settings()
        self.client = client or GeminiClient()
        self.tier_router = tier_router or get_tier_router()
        self.retry_executor = retry_executor or RetryExecutor(
            max_attempts=settings.retry_max_attempts,
            base_delay_ms=settings.retry_base_delay_ms,
            jitter_ms=settings.retry_jitter_ms,
        )

    async def close(self):
        await self.client.close()

    def build_prompt(self, user: UserContext, completed: List[QuizSummary]) -> str:
        summary = "\n".join(
            f"- Topic: {quiz.topic}, Score: {quiz.score:g}%, Date: {_format_date(quiz.created_at)}"
            for quiz in completed
        )
        return REVIEW_PROMPT.format(name=user.name or "this student", summary=summary)

    async def generate_review(self, user: UserContext, quizzes: List[QuizSummary]) -> str:
        completed = [quiz for quiz in quizzes if quiz.score is not None]
        if not completed:
            return NO_COMPLETED_QUIZZES_MESSAGE

        route = self.tier_router.resolve_for_user(user)
        payload = {"contents": [{"role": "user", "parts": [{"text": self.build_prompt(user, completed)}]}]}

        try:
            body = await self.retry_executor.execute(lambda: self.client.generate(route, payload))
            review = candidate_text(json.loads(body)) if body else ""
        except Exception as e:
            logger.error("review_generation_failed", user_id=user.user_id, error=str(e))
            raise AIServiceError(REVIEW_FAILED_MESSAGE) from e

        if not review:
            logger.error("review_generation_empty", user_id=user.user_id)
            raise AIServiceError(REVIEW_FAILED_MESSAGE)
        return review
