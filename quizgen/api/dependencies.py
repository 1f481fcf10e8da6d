from functools import lru_cache
from typing import Optional

import structlog
from fastapi import Header, HTTPException

from ..models.enums import SubscriptionTier, UserRole
from ..models.user import UserContext
from ..services.quiz_generation_service import QuizGenerationService
from ..services.review_service import ReviewService

logger = structlog.get_logger(__name__)


def _parse_enum(enum_cls, value: Optional[str]):
    if value is None:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        logger.warning("unrecognised_header_value", field=enum_cls.__name__, value=value)
        return None


async def get_current_user(
    x_user_id: Optional[str] = Header(default=None),
    x_user_tier: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
    x_user_name: Optional[str] = Header(default=None),
    x_generations_remaining: Optional[int] = Header(default=None),
) -> UserContext:
    """
    Resolve the caller from the identity headers set by the auth gateway.

    Authentication itself happens upstream; this only shapes what the gateway
    forwards into a UserContext.
    """
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Authentication required")

    return UserContext(
        user_id=x_user_id,
        tier=_parse_enum(SubscriptionTier, x_user_tier),
        role=_parse_enum(UserRole, x_user_role) or UserRole.USER,
        generations_remaining=x_generations_remaining if x_generations_remaining is not None else 1,
        name=x_user_name or "",
    )


@lru_cache()
def get_quiz_generation_service() -> QuizGenerationService:
    return QuizGenerationService()


@lru_cache()
def get_review_service() -> ReviewService:
    return ReviewService()
