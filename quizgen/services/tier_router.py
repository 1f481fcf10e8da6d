from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Mapping, Optional, Union

import structlog

from ..config import Settings, get_settings
from ..models.enums import SubscriptionTier

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ModelRoute:
    model: str
    api_key: Optional[str]

    @property
    def is_lite(self) -> bool:
        # Lite models do not support streaming together with a response schema
        return "lite" in self.model


class TierRouter:
    """Maps a subscription tier to the Gemini model and API key it may use."""

    def __init__(self, routes: Mapping[SubscriptionTier, ModelRoute]):
        if SubscriptionTier.FREE not in routes:
            raise ValueError("A Free tier route is required as the default")
        self._routes = MappingProxyType(dict(routes))

    @classmethod
    def from_settings(cls, settings: Settings) -> "TierRouter":
        return cls({
            SubscriptionTier.FREE: ModelRoute(settings.gemini_free_model, settings.gemini_api_key_free),
            SubscriptionTier.BASIC: ModelRoute(settings.gemini_basic_model, settings.gemini_api_key_basic),
            SubscriptionTier.PRO: ModelRoute(settings.gemini_pro_model, settings.gemini_api_key_pro),
        })

    def resolve(self, tier: Union[SubscriptionTier, str, None]) -> ModelRoute:
        """Return the route for ``tier``; absent or unknown tiers get the Free route."""
        try:
            key = SubscriptionTier(tier) if tier is not None else SubscriptionTier.FREE
        except ValueError:
            logger.warning("unknown_tier_defaulting_to_free", tier=str(tier))
            key = SubscriptionTier.FREE
        return self._routes.get(key, self._routes[SubscriptionTier.FREE])

    def resolve_for_user(self, user) -> ModelRoute:
        return self.resolve(getattr(user, "tier", None) if user is not None else None)


@lru_cache()
def get_tier_router() -> TierRouter:
    return TierRouter.from_settings(get_settings())
