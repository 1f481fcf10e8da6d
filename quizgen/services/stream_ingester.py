import codecs
import json
from typing import AsyncIterator, List, Optional

import structlog

from ..exceptions import EmptyResultError, ParseError, StreamUnavailableError
from .progress_emitter import ProgressEmitter, ProgressStage

logger = structlog.get_logger(__name__)

STREAM_PROGRESS_FLOOR = 30
STREAM_PROGRESS_SPAN = 40
STREAM_PROGRESS_CAP = 39


def candidate_text(result: dict) -> str:
    """Text of the first candidate's parts, or "" when the shape is missing."""
    candidates = result.get("candidates") if isinstance(result, dict) else None
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(part.get("text") or "" for part in parts if isinstance(part, dict))


class StreamIngester:
    """
    Drains a streamed Gemini body and rebuilds the generated text.

    The whole body is one JSON array of partial results. It is accumulated
    and parsed once after the stream ends; while reading, progress moves
    from 30 towards 69 based on a fixed size estimate.
    """

    def __init__(self, estimated_total_bytes: int = 2000):
        self.estimated_total_bytes = max(1, estimated_total_bytes)

    def progress_for(self, bytes_so_far: int) -> int:
        ratio = STREAM_PROGRESS_SPAN * bytes_so_far / self.estimated_total_bytes
        return STREAM_PROGRESS_FLOOR + int(min(STREAM_PROGRESS_CAP, ratio))

    async def ingest(
        self,
        chunks: AsyncIterator[bytes],
        emitter: Optional[ProgressEmitter] = None,
    ) -> str:
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        pieces: List[str] = []
        bytes_so_far = 0
        last_percentage = None

        async for chunk in chunks:
            if not chunk:
                continue
            bytes_so_far += len(chunk)
            pieces.append(decoder.decode(chunk))

            percentage = self.progress_for(bytes_so_far)
            if emitter is not None and percentage != last_percentage:
                await emitter.emit(ProgressStage.STREAMING, percentage)
                last_percentage = percentage

        pieces.append(decoder.decode(b"", final=True))

        if bytes_so_far == 0:
            raise StreamUnavailableError("Response body is empty - streaming not available")

        raw = "".join(pieces)
        logger.info("gemini_stream_drained", byte_count=bytes_so_far)
        return self.extract_text(raw)

    @staticmethod
    def extract_text(raw: str) -> str:
        try:
            results = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ParseError(f"Streamed response is not a JSON array: {e}") from e

        if not isinstance(results, list):
            raise ParseError("Streamed response is not a JSON array")

        text = "".join(candidate_text(result) for result in results)
        if not text:
            raise EmptyResultError("No text extracted from streaming response")
        return text
