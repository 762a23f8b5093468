"""
Import every model module so ``Base.metadata`` knows all tables and string
relationship targets resolve.
"""
from .database import Base
from .clinics.models import Clinic
from .users.models import LoyaltyTier, SkinType, User
from .professionals.models import EmploymentType, Professional, ProfessionalRole
from .consents.models import ConsentFormTemplate, ConsentStatus, PatientConsent
from .treatments.models import RiskLevel, Treatment
from .appointments.models import Appointment, AppointmentStatus
from .vip.models import VipPlan, VipSubscription, VipSubscriptionStatus
from .loyalty.models import RedemptionStatus, RewardRedemption
from .dashboard.models import WellnessTip

__all__ = [
    "Base",
    "Clinic",
    "User", "LoyaltyTier", "SkinType",
    "Professional", "EmploymentType", "ProfessionalRole",
    "ConsentFormTemplate", "PatientConsent", "ConsentStatus",
    "Treatment", "RiskLevel",
    "Appointment", "AppointmentStatus",
    "VipSubscription", "VipPlan", "VipSubscriptionStatus",
    "RewardRedemption", "RedemptionStatus",
    "WellnessTip",
]
