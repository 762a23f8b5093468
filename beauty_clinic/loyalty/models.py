"""
Reward Redemption Model - Codes issued when a user spends beauty points.
"""
import enum

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String, func
from sqlalchemy.orm import relationship

from ..core.dates import as_utc, is_expired, utcnow
from ..database import Base


class RedemptionStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    USED = "USED"
    EXPIRED = "EXPIRED"


class RewardRedemption(Base):
    """
    RewardRedemption Model - One spent reward

    Fields:
    - user_id: Redeeming user
    - reward_id / reward_name: Which reward was bought
    - points_used: Points taken from the balance
    - code: Code the user shows at the clinic
    - status: ACTIVE until used or past expires_at
    - used_at / used_by_clinic_id: Where and when the code was honoured
    """
    __tablename__ = "reward_redemptions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    reward_id = Column(String, nullable=False)
    reward_name = Column(String, nullable=False)
    points_used = Column(Integer, nullable=False)
    code = Column(String, unique=True, index=True, nullable=False)
    status = Column(
        Enum(RedemptionStatus, name="redemption_status"),
        nullable=False,
        default=RedemptionStatus.ACTIVE,
    )
    expires_at = Column(DateTime(timezone=True), nullable=False)
    used_at = Column(DateTime(timezone=True), nullable=True)
    used_by_clinic_id = Column(Integer, ForeignKey("clinics.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    user = relationship("User", back_populates="redemptions")

    def __repr__(self):
        return f"<RewardRedemption(id={self.id}, code='{self.code}', status='{self.status}')>"

    def is_overdue(self, now=None) -> bool:
        return is_expired(self.expires_at, now)

    @property
    def is_valid(self) -> bool:
        return self.status == RedemptionStatus.ACTIVE and not self.is_overdue()

    @property
    def days_until_expiry(self) -> int:
        return max((as_utc(self.expires_at) - utcnow()).days, 0)
