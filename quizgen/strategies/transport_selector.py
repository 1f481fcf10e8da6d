"""
Transport selection for quiz generation.

Lite models go straight to the single-shot endpoint. Every other model tries
the streaming endpoint once and falls back to the single-shot call pattern
when anything about the stream fails.
"""

from typing import Any, Dict, Optional

import structlog

from ..config import get_settings
from ..services.gemini_client import GeminiClient
from ..services.progress_emitter import ProgressEmitter, ProgressStage
from ..services.response_recoverer import ResponseRecoverer
from ..services.retry_executor import RetryExecutor
from ..services.stream_ingester import StreamIngester
from ..services.tier_router import ModelRoute
from .base_strategy import TransportStrategy
from .single_shot_strategy import SingleShotStrategy
from .streaming_strategy import StreamingStrategy

logger = structlog.get_logger(__name__)


class TransportSelector:

    def __init__(
        self,
        client: Optional[GeminiClient] = None,
        retry_executor: Optional[RetryExecutor] = None,
        recoverer: Optional[ResponseRecoverer] = None,
        ingester: Optional[StreamIngester] = None,
    ):
        settings = get_settings()
        client = client or GeminiClient()
        recoverer = recoverer or ResponseRecoverer()
        retry_executor = retry_executor or RetryExecutor(
            max_attempts=settings.retry_max_attempts,
            base_delay_ms=settings.retry_base_delay_ms,
            jitter_ms=settings.retry_jitter_ms,
        )
        ingester = ingester or StreamIngester(settings.stream_estimated_total_bytes)

        self.client = client

        self.single_shot = SingleShotStrategy(client, retry_executor, recoverer)
        self.streaming = StreamingStrategy(client, ingester, recoverer)

    async def close(self):
        await self.client.close()

    def select(self, route: ModelRoute) -> TransportStrategy:
        return self.single_shot if route.is_lite else self.streaming

    async def generate(
        self,
        route: ModelRoute,
        payload: Dict[str, Any],
        emitter: ProgressEmitter,
    ) -> Dict[str, Any]:
        strategy = self.select(route)
        logger.info("transport_selected", model=route.model, strategy=strategy.get_strategy_name())

        if strategy is self.single_shot:
            return await self.single_shot.generate(route, payload, emitter)

        try:
            return await self.streaming.generate(route, payload, emitter)
        except Exception as e:
            logger.warning(
                "streaming_failed_falling_back",
                model=route.model,
                error_type=type(e).__name__,
                error=str(e),
            )

        return await self.single_shot.generate(
            route,
            payload,
            emitter,
            stage=ProgressStage.FALLBACK,
            percentage=30,
        )
