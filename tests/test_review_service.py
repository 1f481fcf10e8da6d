import json

import httpx
import pytest

from quizgen.api.v1.schemas import QuizSummary
from quizgen.exceptions import AIServiceError
from quizgen.services.review_service import NO_COMPLETED_QUIZZES_MESSAGE, REVIEW_FAILED_MESSAGE, ReviewService

from .helpers import generate_body


REVIEW_TEXT = "**Key Strength:** Cells\n**Critical Weakness:** Optics\n**Next Step:** Practise lenses"


@pytest.fixture
def quizzes():
    return [
        QuizSummary(topic="Cells", score=90, created_at=1700000000000),
        QuizSummary(topic="Optics", score=42.5, created_at=1700100000000),
        QuizSummary(topic="Unfinished", score=None),
    ]


@pytest.fixture
def make_review_service(make_gemini_client, tier_router, retry_executor):
    def _make(handler):
        return ReviewService(client=make_gemini_client(handler), tier_router=tier_router, retry_executor=retry_executor)
    return _make


@pytest.mark.asyncio
async def test_review_uses_completed_quizzes_only(make_review_service, free_user, quizzes):
    seen = {}

    def handler(request):
        seen["prompt"] = json.loads(request.content)["contents"][0]["parts"][0]["text"]
        return httpx.Response(200, text=generate_body(REVIEW_TEXT))

    review = await make_review_service(handler).generate_review(free_user, quizzes)

    assert review == REVIEW_TEXT
    assert "Analyze this quiz history for Test User" in seen["prompt"]
    assert "- Topic: Cells, Score: 90%, Date: 11/14/2023" in seen["prompt"]
    assert "Score: 42.5%" in seen["prompt"]
    assert "Unfinished" not in seen["prompt"]


@pytest.mark.asyncio
async def test_review_without_completed_quizzes(make_review_service, free_user):
    def handler(request):
        raise AssertionError("model must not be called")

    review = await make_review_service(handler).generate_review(free_user, [QuizSummary(topic="Cells")])

    assert review == NO_COMPLETED_QUIZZES_MESSAGE


@pytest.mark.asyncio
@pytest.mark.parametrize("make_response", [
    lambda: httpx.Response(400, text="bad"),
    lambda: httpx.Response(200, text=json.dumps({"candidates": []})),
    lambda: httpx.Response(200, text="not json"),
])
async def test_review_failures_use_fixed_message(make_review_service, free_user, quizzes, make_response):
    with pytest.raises(AIServiceError) as exc_info:
        await make_review_service(lambda request: make_response()).generate_review(free_user, quizzes)

    assert str(exc_info.value) == REVIEW_FAILED_MESSAGE
