from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, List, Optional

import structlog

logger = structlog.get_logger(__name__)


class ProgressStage(str, Enum):
    """Canonical stages, in the order a generation passes through them"""
    INITIALIZING = "Initializing"
    FETCHING_TRANSCRIPT = "Fetching video transcript"
    PROCESSING_INPUT = "Processing input"
    GENERATING = "Generating"
    STREAMING = "Streaming from AI"
    FALLBACK = "Generating from AI (non-streaming fallback)"
    PARSING = "Parsing response"
    FORMATTING = "Formatting & validating"
    FINALIZING = "Finalizing"


@dataclass(frozen=True)
class ProgressEvent:
    stage: str
    percentage: int
    questions_generated: Optional[int] = None


ProgressListener = Callable[[ProgressEvent], Awaitable[None]]


class ProgressEmitter:
    """
    Publishes progress events for a single generation to its subscribers.

    Percentages never go backwards: an event below the last emitted value is
    raised to it. A failing subscriber (caller went away) is logged and
    skipped; generation carries on either way.
    """

    def __init__(self, listeners: Optional[List[ProgressListener]] = None):
        self._listeners: List[ProgressListener] = list(listeners or [])
        self._last_percentage = 0
        self.history: List[ProgressEvent] = []

    def subscribe(self, listener: ProgressListener) -> None:
        self._listeners.append(listener)

    @property
    def last_percentage(self) -> int:
        return self._last_percentage

    async def emit(self, stage, percentage: int, extra: Optional[int] = None) -> ProgressEvent:
        percentage = max(self._last_percentage, min(100, max(0, int(percentage))))
        self._last_percentage = percentage

        stage_name = stage.value if isinstance(stage, ProgressStage) else str(stage)
        event = ProgressEvent(stage=stage_name, percentage=percentage, questions_generated=extra)
        self.history.append(event)

        for listener in self._listeners:
            try:
                await listener(event)
            except Exception as e:
                logger.warning("progress_write_failed", stage=stage_name, percentage=percentage, error=str(e))
        return event
