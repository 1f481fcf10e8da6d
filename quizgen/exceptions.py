from typing import Any, Dict, Optional


class QuizGenError(Exception):
    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }


class ProviderError(QuizGenError):
    """Failure reported by the Gemini HTTP wrapper.

    Only GeminiClient raises these; callers classify by subclass instead of
    inspecting response attributes.
    """

    def __init__(self, message: str, status: Optional[int] = None, body: str = ""):
        super().__init__(message, details={"status": status})
        self.status = status
        self.body = body


class TransientProviderError(ProviderError):
    """HTTP 429 or 503: rate limited or overloaded."""
    pass


class OtherProviderError(ProviderError):
    """Any other non-2xx response."""
    pass


class ProviderConnectionError(ProviderError):
    """Network failure or timeout before a status was received."""
    pass


class StreamUnavailableError(ProviderError):
    """Streaming endpoint answered 2xx but exposed no readable body."""
    pass


TRANSIENT_STATUS_CODES = frozenset({429, 503})


def provider_error_for_status(status: int, message: str, body: str = "") -> ProviderError:
    if status in TRANSIENT_STATUS_CODES:
        return TransientProviderError(message, status=status, body=body)
    return OtherProviderError(message, status=status, body=body)


class TranscriptFetchError(QuizGenError):
    pass


class ParseError(QuizGenError):
    pass


class EmptyResultError(QuizGenError):
    pass


class NoValidCandidateError(QuizGenError):
    pass


class AIServiceError(QuizGenError):
    pass


class QuizGenerationError(QuizGenError):
    pass
