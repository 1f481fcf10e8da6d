import json
from typing import List

from quizgen.services.tier_router import ModelRoute


FREE_ROUTE = ModelRoute("gemini-2.5-flash-lite", "free-key")
BASIC_ROUTE = ModelRoute("gemini-2.5-flash", "basic-key")
PRO_ROUTE = ModelRoute("gemini-3-pro-preview", "pro-key")


def quiz_json(count: int = 3, title: str = "Photosynthesis Quiz", marks: int = 3) -> str:
    return json.dumps({
        "title": title,
        "questions": [
            {
                "text": f"Question {i + 1}?",
                "type": "MCQ",
                "options": ["A", "B", "C", "D"],
                "correctAnswer": "A",
                "explanation": "Because A.",
                "marks": marks,
            }
            for i in range(count)
        ],
    })


def generate_body(*texts: str) -> str:
    """A generateContent body with one candidate per text."""
    return json.dumps({
        "candidates": [{"content": {"parts": [{"text": text}]}} for text in texts]
    })


def stream_body(text: str, pieces: int = 3) -> bytes:
    """A streamGenerateContent body: a JSON array of partial results."""
    size = max(1, len(text) // pieces + 1)
    chunks = [text[i:i + size] for i in range(0, len(text), size)]
    return json.dumps([
        {"candidates": [{"content": {"parts": [{"text": chunk}]}}]} for chunk in chunks
    ], ensure_ascii=False).encode("utf-8")


class RecordingSleep:
    def __init__(self):
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
