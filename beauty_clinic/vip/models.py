"""
VIP Subscription Model - Paid membership plans of a user.
"""
import enum
from decimal import Decimal

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, Numeric, func
from sqlalchemy.orm import relationship

from ..core.dates import as_utc, utcnow
from ..database import Base


class VipPlan(str, enum.Enum):
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


class VipSubscriptionStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"


# plan -> (price, period length in days)
PLAN_TERMS = {
    VipPlan.MONTHLY: (Decimal("19.99"), 30),
    VipPlan.YEARLY: (Decimal("199.99"), 365),
}


class VipSubscription(Base):
    """
    VipSubscription Model - Stores VIP plans

    Fields:
    - user_id: Subscriber
    - plan: MONTHLY or YEARLY
    - price: Price paid for the period
    - status: ACTIVE / CANCELLED / EXPIRED
    - current_period_start / current_period_end
    - cancelled_at: When the user cancelled
    """
    __tablename__ = "vip_subscriptions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    plan = Column(Enum(VipPlan), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    status = Column(
        Enum(VipSubscriptionStatus, name="vip_subscription_status"),
        nullable=False,
        default=VipSubscriptionStatus.ACTIVE,
    )
    current_period_start = Column(DateTime(timezone=True), nullable=False)
    current_period_end = Column(DateTime(timezone=True), nullable=False)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="vip_subscriptions")

    def __repr__(self):
        return f"<VipSubscription(id={self.id}, user_id={self.user_id}, plan='{self.plan}', status='{self.status}')>"

    def grants_vip(self, now=None) -> bool:
        """A cancelled plan keeps granting VIP until its period ends."""
        if self.status == VipSubscriptionStatus.EXPIRED:
            return False
        return as_utc(self.current_period_end) > (now or utcnow())

    @classmethod
    def active_for(cls, db, user_id: int, now=None) -> list:
        """Subscriptions of a user currently granting VIP, latest period end first."""
        now = now or utcnow()
        subscriptions = (
            db.query(cls)
            .filter(
                cls.user_id == user_id,
                cls.status.in_([VipSubscriptionStatus.ACTIVE, VipSubscriptionStatus.CANCELLED]),
            )
            .order_by(cls.current_period_end.desc(), cls.id.desc())
            .all()
        )
        return [subscription for subscription in subscriptions if subscription.grants_vip(now)]
