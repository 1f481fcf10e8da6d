"""
Reduce generated text to the ``{title, questions}`` object.

Parsing is tried directly first; on failure a RecoveryStrategy gets a chance
to repair the text. The default strategy cuts a truncated response back to
its last complete question object.
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Optional

import structlog

from ..exceptions import EmptyResultError, NoValidCandidateError, ParseError
from .stream_ingester import candidate_text

logger = structlog.get_logger(__name__)


class RecoveryStrategy(ABC):

    @abstractmethod
    def recover(self, text: str) -> Optional[Any]:
        """Return the repaired parsed value, or None when the text cannot be repaired."""
        pass


class TruncationRepairStrategy(RecoveryStrategy):
    """
    Cut the text after the last '}' that closes a question object and
    re-close the enclosing array (and object).
    """

    CLOSERS = ("]}", "]")

    def __init__(self, max_candidates: int = 64):
        self.max_candidates = max_candidates

    def recover(self, text: str) -> Optional[Any]:
        end = len(text)
        for _ in range(self.max_candidates):
            end = text.rfind("}", 0, end)
            if end == -1:
                return None
            prefix = text[:end + 1]
            for closer in self.CLOSERS:
                try:
                    value = json.loads(prefix + closer)
                except json.JSONDecodeError:
                    continue
                if _questions_of(value):
                    return value
        return None


def _questions_of(value: Any) -> Optional[list]:
    """Question objects in ``value``; entries that are not objects do not count."""
    if isinstance(value, dict):
        value = value.get("questions")
    if not isinstance(value, list):
        return None
    return [q for q in value if isinstance(q, dict)]


class ResponseRecoverer:
    def __init__(self, strategy: Optional[RecoveryStrategy] = None):
        self.strategy = strategy or TruncationRepairStrategy()

    def recover(self, text: str) -> dict:
        """
        Raises:
            ParseError: text is not JSON and could not be repaired
            EmptyResultError: parsed value has no question objects
        """
        try:
            value = json.loads(text)
        except (json.JSONDecodeError, TypeError):
            value = self.strategy.recover(text or "")
            if value is None:
                raise ParseError("Failed to parse quiz JSON")
            logger.warning("quiz_json_repaired", strategy=type(self.strategy).__name__)

        # A bare array of questions is accepted as the questions list
        if isinstance(value, list):
            value = {"questions": value}

        questions = _questions_of(value)
        if not questions:
            raise EmptyResultError("AI returned invalid or empty quiz data")
        return value

    def select_candidate(self, body: str) -> dict:
        """
        Pick the first candidate of a ``generateContent`` body that yields a
        non-empty questions array.

        Raises:
            ParseError: body is not a JSON object with candidates
            NoValidCandidateError: no candidate qualifies
        """
        try:
            result = json.loads(body) if body else None
        except json.JSONDecodeError:
            result = None

        if not isinstance(result, dict) or not result.get("candidates"):
            raise ParseError("Invalid response from AI")

        for index, candidate in enumerate(result["candidates"]):
            text = candidate_text({"candidates": [candidate]})
            if not text:
                continue
            try:
                return self.recover(text)
            except (ParseError, EmptyResultError) as e:
                logger.info("candidate_rejected", candidate_index=index, reason=str(e))

        raise NoValidCandidateError("No valid candidate from AI")
