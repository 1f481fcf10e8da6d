"""Request-scoped view of the authenticated user.

Produced by the auth collaborator (see ``api.dependencies.get_current_user``).
The generation pipeline only reads ``tier``.
"""

from dataclasses import dataclass
from typing import Optional

from .enums import SubscriptionTier, UserRole


@dataclass
class UserContext:
    user_id: str
    tier: Optional[SubscriptionTier] = SubscriptionTier.FREE
    role: UserRole = UserRole.USER
    generations_remaining: int = 1
    name: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def can_generate(self) -> bool:
        return self.is_admin or self.generations_remaining > 0

    def consume_generation(self) -> None:
        if self.is_admin:
            return
        self.generations_remaining -= 1
