"""
Gemini Transport Strategies

- Single-shot strategy (generateContent wrapped in retries)
- Streaming strategy (one streamGenerateContent attempt)
- TransportSelector choosing between them with streaming → single-shot fallback
"""

from .base_strategy import TransportStrategy
from .single_shot_strategy import SingleShotStrategy
from .streaming_strategy import StreamingStrategy
from .transport_selector import TransportSelector

__all__ = [
    "TransportStrategy",
    "SingleShotStrategy",
    "StreamingStrategy",
    "TransportSelector",
]
