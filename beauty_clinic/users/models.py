"""
User Model - End customers of the clinics.

Loyalty tier and VIP flag are stored for cheap reads but are only ever written
by the loyalty and VIP services: tier follows the points balance, the VIP flag
follows subscription state.
"""
import enum

from sqlalchemy import (
    Boolean, CheckConstraint, Column, DateTime, Enum, ForeignKey, Integer, JSON, Numeric,
    String, func,
)
from sqlalchemy.orm import relationship

from ..database import Base


class LoyaltyTier(str, enum.Enum):
    """Ordered loyalty tiers, BRONZE < SILVER < GOLD."""
    BRONZE = "BRONZE"
    SILVER = "SILVER"
    GOLD = "GOLD"

    @property
    def rank(self) -> int:
        """Position in the tier order, compare tiers by rank not by value."""
        return list(LoyaltyTier).index(self)


class SkinType(str, enum.Enum):
    OILY = "OILY"
    DRY = "DRY"
    MIXED = "MIXED"
    SENSITIVE = "SENSITIVE"
    NORMAL = "NORMAL"


class User(Base):
    """
    User Model - Stores customer information

    Fields:
    - email / password_hash: Credentials
    - first_name, last_name, phone: Contact data
    - primary_clinic_id: Optional home clinic
    - skin_type: Self-reported skin type
    - allergies, medications, medical_conditions: Free-form structured notes (JSON)
    - beauty_points: Non-negative loyalty balance
    - loyalty_tier: Derived from beauty_points
    - vip_status: Derived from VIP subscriptions
    - sessions_completed / total_investment: Running stats of completed appointments
    - email_notifications, sms_notifications, marketing_notifications: Preferences
    """
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("beauty_points >= 0", name="ck_users_beauty_points_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    primary_clinic_id = Column(Integer, ForeignKey("clinics.id", ondelete="SET NULL"), nullable=True)
    skin_type = Column(Enum(SkinType), nullable=True)
    allergies = Column(JSON, nullable=True)
    medications = Column(JSON, nullable=True)
    medical_conditions = Column(JSON, nullable=True)
    beauty_points = Column(Integer, nullable=False, default=0)
    loyalty_tier = Column(Enum(LoyaltyTier), nullable=False, default=LoyaltyTier.BRONZE)
    vip_status = Column(Boolean, nullable=False, default=False)
    sessions_completed = Column(Integer, nullable=False, default=0)
    total_investment = Column(Numeric(10, 2), nullable=False, default=0)
    email_notifications = Column(Boolean, nullable=False, default=True)
    sms_notifications = Column(Boolean, nullable=False, default=False)
    marketing_notifications = Column(Boolean, nullable=False, default=True)
    is_active = Column(Boolean, nullable=False, default=True)
    is_verified = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    primary_clinic = relationship("Clinic")
    appointments = relationship("Appointment", back_populates="user")
    consents = relationship("PatientConsent", back_populates="user")
    vip_subscriptions = relationship("VipSubscription", back_populates="user")
    redemptions = relationship("RewardRedemption", back_populates="user")

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}')>"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
