from dataclasses import dataclass
from enum import StrEnum

from ratewindow.core.strategies.base import RateLimitSpec

class UserTier(StrEnum):
    FREE = "free"
    PREMIUM = "premium"
    VIP = "vip"

@dataclass(frozen=True)
class Quota:
    limit: int
    window_ms: int

class QuotaManager:
    """
    Decides the rate policy of a caller based on its API key tier.
    """

    TIER_CONFIG = {
        UserTier.FREE: Quota(limit=5, window_ms=60_000),
        UserTier.PREMIUM: Quota(limit=50, window_ms=60_000),
        UserTier.VIP: Quota(limit=500, window_ms=60_000),
    }

    def get_quota(self, api_key: str | None) -> Quota:
        return self.TIER_CONFIG[self.resolve_tier(api_key)]

    def spec_for(self, action_id: str, api_key: str | None) -> RateLimitSpec:
        """
        Builds the policy applied to ``action_id`` for this caller.
        """
        quota = self.get_quota(api_key)
        return RateLimitSpec(action_id, limit=quota.limit, window_ms=quota.window_ms)

    def resolve_tier(self, api_key: str | None) -> UserTier:
        if not api_key:
            return UserTier.FREE

        if api_key.startswith("vip_"):
            return UserTier.VIP
        elif api_key.startswith("prem_"):
            return UserTier.PREMIUM

        return UserTier.FREE
