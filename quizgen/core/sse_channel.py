"""
Adapter between the generation pipeline and a text/event-stream response.

The pipeline publishes ProgressEvents; this channel encodes them as SSE
frames in publication order and ends the stream after exactly one terminal
``complete`` or ``error`` frame.
"""

import asyncio
from typing import AsyncIterator, Optional

import structlog

from ..api.v1.schemas import CompleteFrame, ErrorFrame, ProgressFrame, QuizResult, SSEFrame
from ..services.progress_emitter import ProgressEvent

logger = structlog.get_logger(__name__)


class ChannelClosedError(Exception):
    pass


class SSEChannel:
    def __init__(self):
        self._queue: "asyncio.Queue[Optional[SSEFrame]]" = asyncio.Queue()
        self._closed = False
        self._finished = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _put(self, frame: Optional[SSEFrame]) -> None:
        if self._closed:
            raise ChannelClosedError("Client disconnected from event stream")
        self._queue.put_nowait(frame)

    async def on_progress(self, event: ProgressEvent) -> None:
        self._put(ProgressFrame(
            stage=event.stage,
            percentage=event.percentage,
            questions_generated=event.questions_generated,
        ))

    def complete(self, quiz: QuizResult) -> None:
        self._finish(CompleteFrame(data=quiz))

    def fail(self, message: str) -> None:
        self._finish(ErrorFrame(message=message))

    def _finish(self, frame: SSEFrame) -> None:
        if self._finished:
            logger.warning("sse_terminal_frame_ignored", frame_type=frame.type)
            return
        self._finished = True
        try:
            self._put(frame)
            self._put(None)
        except ChannelClosedError:
            logger.warning("sse_terminal_frame_dropped", frame_type=frame.type)

    async def frames(self) -> AsyncIterator[str]:
        try:
            while True:
                frame = await self._queue.get()
                if frame is None:
                    break
                yield frame.to_sse()
        finally:
            self._closed = True
