import asyncio
from typing import List, Optional

import structlog
from youtube_transcript_api import YouTubeTranscriptApi

from ..config import get_settings
from ..exceptions import TranscriptFetchError
from ..utils.string_utils import clean_text
from ..utils.url_utils import extract_youtube_video_id

logger = structlog.get_logger(__name__)


class TranscriptService:
    """Fetches YouTube captions as one plain-text transcript."""

    def __init__(self, api: Optional[YouTubeTranscriptApi] = None, languages: Optional[List[str]] = None):
        self.api = api or YouTubeTranscriptApi()
        self.languages = languages or get_settings().transcript_languages

    async def fetch(self, video_url: str) -> str:
        """
        Raises:
            TranscriptFetchError: invalid URL, captions unavailable, or empty transcript
        """
        video_id = extract_youtube_video_id(video_url)
        logger.info("transcript_fetch_started", video_id=video_id)

        def _fetch_sync():
            return self.api.fetch(video_id, languages=self.languages)

        try:
            loop = asyncio.get_running_loop()
            fetched = await loop.run_in_executor(None, _fetch_sync)
        except Exception as e:
            logger.error("transcript_fetch_failed", video_id=video_id, error=str(e))
            raise TranscriptFetchError(
                f"Could not fetch transcript for video {video_id}: {e}",
                details={"video_id": video_id},
            ) from e

        transcript = clean_text(" ".join(snippet.text for snippet in fetched))
        if not transcript:
            raise TranscriptFetchError(
                f"Transcript for video {video_id} is empty",
                details={"video_id": video_id},
            )

        logger.info("transcript_fetch_completed", video_id=video_id, transcript_length=len(transcript))
        return transcript
