"""
Beauty Points Schemas - Pydantic models for the points ledger and rewards.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from ..core.schemas import CamelModel
from ..users.models import LoyaltyTier
from .models import RedemptionStatus


class RewardStatus(CamelModel):
    id: str
    name: str
    description: str
    points_required: int
    unlocked: bool


class PointsHistoryEntry(CamelModel):
    appointment_id: int
    treatment_name: str
    icon_name: Optional[str] = None
    points_earned: int
    completed_at: Optional[datetime] = None


class PointsLedger(CamelModel):
    """
    Points Ledger Schema

    Fields:
    - current_points: Balance
    - vip_multiplier: 2 for VIP users, otherwise 1
    - history: Ten most recent completed appointments that earned points
    - rewards: Every reward with its lock state
    - available_rewards / next_rewards: Unlocked and locked subsets
    """
    current_points: int
    loyalty_tier: LoyaltyTier
    vip_multiplier: int
    history: List[PointsHistoryEntry]
    rewards: List[RewardStatus]
    available_rewards: List[RewardStatus]
    next_rewards: List[RewardStatus]


class PointsSummary(CamelModel):
    current_points: int
    level: int
    points_to_next_level: int
    lifetime_points_earned: int
    loyalty_tier: LoyaltyTier
    vip_multiplier: int


class RedeemRequest(CamelModel):
    reward_id: str = Field(..., min_length=1, description="Id of the reward to redeem")


class RewardInfo(CamelModel):
    id: str
    name: str
    points_required: int
    description: str


class RedemptionResponse(CamelModel):
    """
    Redemption Response Schema

    Fields:
    - code: Code the user shows at the clinic
    - is_valid: ACTIVE and not past expires_at
    - days_until_expiry: Whole days left, 0 once expired
    """
    id: int
    reward_id: str
    reward_name: str
    points_used: int
    code: str
    status: RedemptionStatus
    is_valid: bool
    days_until_expiry: int
    expires_at: datetime
    used_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class RedeemResponse(CamelModel):
    reward: RewardInfo
    redemption: RedemptionResponse
    points_used: int
    remaining_points: int
    loyalty_tier: LoyaltyTier
