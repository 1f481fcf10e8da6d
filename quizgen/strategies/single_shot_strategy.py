from typing import Any, Dict, Optional

import structlog

from ..services.gemini_client import GeminiClient
from ..services.progress_emitter import ProgressEmitter, ProgressStage
from ..services.response_recoverer import ResponseRecoverer
from ..services.retry_executor import RetryExecutor
from ..services.tier_router import ModelRoute
from .base_strategy import TransportStrategy

logger = structlog.get_logger(__name__)


class SingleShotStrategy(TransportStrategy):
    """
    One ``generateContent`` call wrapped in the RetryExecutor.

    Used directly for lite models and as the safety net when streaming fails.
    """

    def __init__(
        self,
        client: GeminiClient,
        retry_executor: RetryExecutor,
        recoverer: Optional[ResponseRecoverer] = None,
    ):
        super().__init__(client, recoverer)
        self.retry_executor = retry_executor

    def get_strategy_name(self) -> str:
        return "single_shot"

    async def generate(
        self,
        route: ModelRoute,
        payload: Dict[str, Any],
        emitter: ProgressEmitter,
        stage: ProgressStage = ProgressStage.GENERATING,
        percentage: int = 25,
    ) -> Dict[str, Any]:
        await emitter.emit(stage, percentage)

        body = await self.retry_executor.execute(lambda: self.client.generate(route, payload))

        await emitter.emit(ProgressStage.PARSING, 70)
        data = self.recoverer.select_candidate(body)
        logger.info("single_shot_generation_completed", model=route.model, question_count=len(data["questions"]))
        return data
