from typing import Any, Dict, Optional

import structlog

from ..services.gemini_client import GeminiClient
from ..services.progress_emitter import ProgressEmitter, ProgressStage
from ..services.response_recoverer import ResponseRecoverer
from ..services.stream_ingester import StreamIngester
from ..services.tier_router import ModelRoute
from .base_strategy import TransportStrategy

logger = structlog.get_logger(__name__)


class StreamingStrategy(TransportStrategy):
    """A single, unretried ``streamGenerateContent`` attempt."""

    def __init__(
        self,
        client: GeminiClient,
        ingester: StreamIngester,
        recoverer: Optional[ResponseRecoverer] = None,
    ):
        super().__init__(client, recoverer)
        self.ingester = ingester

    def get_strategy_name(self) -> str:
        return "streaming"

    async def generate(
        self,
        route: ModelRoute,
        payload: Dict[str, Any],
        emitter: ProgressEmitter,
    ) -> Dict[str, Any]:
        await emitter.emit(ProgressStage.STREAMING, 25)

        text = await self.ingester.ingest(self.client.stream_generate(route, payload), emitter)

        await emitter.emit(ProgressStage.PARSING, 70)
        data = self.recoverer.recover(text)
        logger.info("streaming_generation_completed", model=route.model, question_count=len(data["questions"]))
        return data
