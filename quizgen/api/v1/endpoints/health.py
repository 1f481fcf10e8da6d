from datetime import datetime, timezone

import structlog
from fastapi import APIRouter

from ..schemas import HealthResponse
from ....config import get_settings

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    settings = get_settings()
    configured_tiers = [
        tier for tier, key in (
            ("Free", settings.gemini_api_key_free),
            ("Basic", settings.gemini_api_key_basic),
            ("Pro", settings.gemini_api_key_pro),
        ) if key
    ]
    return HealthResponse(
        status="healthy",
        service="QuizGen API",
        version="0.1.0",
        timestamp=datetime.now(timezone.utc).isoformat(),
        details={"configured_tiers": configured_tiers},
    )
