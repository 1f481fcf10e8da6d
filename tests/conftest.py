from typing import Callable

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock

from quizgen.api.v1.schemas import GenerationRequest
from quizgen.models.enums import SubscriptionTier
from quizgen.models.user import UserContext
from quizgen.services.gemini_client import GeminiClient
from quizgen.services.progress_emitter import ProgressEmitter
from quizgen.services.retry_executor import RetryExecutor
from quizgen.services.tier_router import TierRouter

from .helpers import BASIC_ROUTE, FREE_ROUTE, PRO_ROUTE, RecordingSleep


@pytest.fixture
def free_route():
    return FREE_ROUTE


@pytest.fixture
def basic_route():
    return BASIC_ROUTE


@pytest.fixture
def tier_router():
    return TierRouter({
        SubscriptionTier.FREE: FREE_ROUTE,
        SubscriptionTier.BASIC: BASIC_ROUTE,
        SubscriptionTier.PRO: PRO_ROUTE,
    })


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def retry_executor(recording_sleep):
    return RetryExecutor(
        max_attempts=5,
        base_delay_ms=1000,
        jitter_ms=1000,
        sleep=recording_sleep,
        random_fn=lambda low, high: 0.0,
    )


@pytest.fixture
def emitter():
    return ProgressEmitter()


@pytest.fixture
def make_gemini_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], GeminiClient]:
    def _make(handler):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return GeminiClient(base_url="https://gemini.test/v1beta/models", client=http_client)
    return _make


@pytest.fixture
def generation_request():
    return GenerationRequest(
        topic="Photosynthesis",
        difficulty="Easy",
        question_count=3,
        types=["MCQ"],
        total_marks=9,
        exam_style_id="standard",
    )


@pytest.fixture
def free_user():
    return UserContext(user_id="test_user_id", tier=SubscriptionTier.FREE, generations_remaining=3, name="Test User")


@pytest.fixture
def mock_transcript_service():
    service = MagicMock()
    service.fetch = AsyncMock(return_value="Plants convert light energy into chemical energy.")
    return service


@pytest.fixture
async def async_client(mock_current_user):
    from httpx import AsyncClient, ASGITransport
    from quizgen.main import app
    from quizgen.api.dependencies import get_current_user

    app.dependency_overrides[get_current_user] = lambda: mock_current_user

    # Use ASGITransport for direct app interaction
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def mock_current_user():
    return UserContext(
        user_id="test_user_id",
        tier=SubscriptionTier.BASIC,
        generations_remaining=2,
        name="Test User",
    )
