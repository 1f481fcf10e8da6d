"""
Base Transport Strategy Interface

Defines the contract for the ways a quiz payload can be sent to Gemini and
reduced to a ``{title, questions}`` object.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from ..services.gemini_client import GeminiClient
from ..services.progress_emitter import ProgressEmitter
from ..services.response_recoverer import ResponseRecoverer
from ..services.tier_router import ModelRoute


class TransportStrategy(ABC):
    """
    Abstract base class for Gemini transport strategies.

    Each strategy either returns the structured quiz data or raises; it never
    returns a partial result.
    """

    def __init__(self, client: GeminiClient, recoverer: Optional[ResponseRecoverer] = None):
        self.client = client
        self.recoverer = recoverer or ResponseRecoverer()

    @abstractmethod
    async def generate(
        self,
        route: ModelRoute,
        payload: Dict[str, Any],
        emitter: ProgressEmitter,
    ) -> Dict[str, Any]:
        """
        Send ``payload`` for ``route`` and return the parsed quiz data.

        Args:
            route: Model and API key to use
            payload: Gemini request body
            emitter: Progress channel for the current generation

        Returns:
            Dict with a non-empty ``questions`` list
        """
        pass

    @abstractmethod
    def get_strategy_name(self) -> str:
        pass
