import re

from ..exceptions import TranscriptFetchError


YOUTUBE_PATTERNS = [
    r'youtube\.com/watch\?(?:.*&)?v=([a-zA-Z0-9_-]{11})',
    r'youtu\.be/([a-zA-Z0-9_-]{11})',
    r'youtube\.com/embed/([a-zA-Z0-9_-]{11})',
    r'youtube\.com/shorts/([a-zA-Z0-9_-]{11})'
]


def extract_youtube_video_id(url: str) -> str:
    for pattern in YOUTUBE_PATTERNS:
        match = re.search(pattern, url)
        if match:
            return match.group(1)
    raise TranscriptFetchError(f"Invalid YouTube URL: {url}")
