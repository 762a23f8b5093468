"""
VIP Schemas - Pydantic models for VIP plans and subscriptions.
"""
from datetime import datetime
from typing import List, Optional

from ..core.schemas import CamelModel
from .models import VipPlan, VipSubscriptionStatus


class VipBenefit(CamelModel):
    id: str
    title: str
    description: str
    icon_name: Optional[str] = None


class VipPlanInfo(CamelModel):
    plan: VipPlan
    price: float
    period_days: int


class VipBenefitsResponse(CamelModel):
    benefits: List[VipBenefit]
    plans: List[VipPlanInfo]


class SubscribeRequest(CamelModel):
    plan: VipPlan = VipPlan.MONTHLY


class VipSubscriptionResponse(CamelModel):
    """
    VIP Subscription Response Schema

    Fields:
    - id, plan, price, status
    - current_period_start / current_period_end
    - cancelled_at
    """
    id: int
    plan: VipPlan
    price: float
    status: VipSubscriptionStatus
    current_period_start: datetime
    current_period_end: datetime
    cancelled_at: Optional[datetime] = None


class VipStatusResponse(CamelModel):
    is_vip: bool
    subscription: Optional[VipSubscriptionResponse] = None
    days_remaining: Optional[int] = None
    benefits: List[VipBenefit]
