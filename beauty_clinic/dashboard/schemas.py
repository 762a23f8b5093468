"""
Dashboard Schemas - Pydantic models for the composed dashboard response.
"""
from datetime import datetime
from typing import List, Optional

from ..appointments.schemas import AppointmentResponse, ClinicSummary
from ..core.schemas import CamelModel
from ..treatments.schemas import TreatmentResponse
from ..users.models import LoyaltyTier
from ..vip.schemas import VipSubscriptionResponse


class WellnessTipResponse(CamelModel):
    id: int
    title: str
    content: str
    category: Optional[str] = None
    icon_name: Optional[str] = None
    clinic_id: Optional[int] = None
    created_at: Optional[datetime] = None


class DashboardUser(CamelModel):
    id: int
    first_name: str
    last_name: str
    email: str
    beauty_points: int
    loyalty_tier: LoyaltyTier
    vip_status: bool
    primary_clinic: Optional[ClinicSummary] = None
    vip_subscriptions: List[VipSubscriptionResponse]


class DashboardStats(CamelModel):
    total_sessions: int
    beauty_points: int
    total_investment: float
    vip_status: bool
    loyalty_tier: LoyaltyTier


class DashboardResponse(CamelModel):
    """
    Dashboard Response Schema

    Fields:
    - user: Snapshot of the user with active VIP subscriptions
    - next_appointment: Nearest upcoming appointment, null when none
    - featured_treatments: Up to six treatments
    - wellness_tip: Latest tip, null when none
    - stats: Sessions, points, investment and VIP flag
    """
    user: DashboardUser
    next_appointment: Optional[AppointmentResponse] = None
    featured_treatments: List[TreatmentResponse]
    wellness_tip: Optional[WellnessTipResponse] = None
    stats: DashboardStats
