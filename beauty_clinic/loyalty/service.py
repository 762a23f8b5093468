"""
Beauty Points Service - Loyalty balance, tiers, rewards and the points ledger.

The tier is never set directly: every change of the balance goes through
``award_points`` or ``redeem_reward`` which recompute it.
"""
from dataclasses import dataclass
from datetime import timedelta
from typing import List, Optional
import logging
import uuid

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..appointments.models import Appointment, AppointmentStatus
from ..clinics.models import Clinic
from ..core.dates import utcnow
from ..database import commit_or_rollback
from ..exceptions import ResourceNotFoundException, ValidationException
from ..users.models import LoyaltyTier, User
from ..vip.models import VipSubscription
from .models import RedemptionStatus, RewardRedemption

# Set up logging
logger = logging.getLogger(__name__)

# Minimum balance for each tier, highest first
TIER_THRESHOLDS = (
    (LoyaltyTier.GOLD, 500),
    (LoyaltyTier.SILVER, 250),
    (LoyaltyTier.BRONZE, 0),
)

VIP_MULTIPLIER = 2
POINTS_PER_LEVEL = 100
LEDGER_HISTORY_SIZE = 10
REDEMPTION_VALID_DAYS = 30


@dataclass(frozen=True)
class Reward:
    id: str
    name: str
    points_required: int
    description: str


REWARDS = (
    Reward("discount_10", "10% discount", 100, "10% off your next treatment"),
    Reward("facial_free", "Free facial", 250, "One basic facial at no cost"),
    Reward("premium_treatment", "Premium treatment", 500, "Access to a premium treatment"),
)


def tier_for_points(points: int) -> LoyaltyTier:
    """
    Loyalty tier for a points balance.

    Args:
        points: Current balance

    Returns:
        LoyaltyTier: BRONZE below 250, SILVER below 500, GOLD otherwise
    """
    for tier, minimum in TIER_THRESHOLDS:
        if points >= minimum:
            return tier
    return LoyaltyTier.BRONZE


def points_multiplier(is_vip: bool) -> int:
    return VIP_MULTIPLIER if is_vip else 1


def has_active_vip(db: Session, user_id: int) -> bool:
    """VIP state read from the subscriptions, not from the stored flag."""
    return bool(VipSubscription.active_for(db, user_id))


def get_reward(reward_id: str) -> Reward:
    for reward in REWARDS:
        if reward.id == reward_id:
            return reward
    raise ResourceNotFoundException(f"Reward '{reward_id}' not found")


def award_points(user: User, points: int) -> int:
    """
    Add points to a user's balance and recompute the tier.

    Does not commit, callers save the change with the rest of their unit of work.

    Returns:
        int: New balance
    """
    if points < 0:
        raise ValidationException("Points to award must not be negative")
    user.beauty_points = (user.beauty_points or 0) + points
    user.loyalty_tier = tier_for_points(user.beauty_points)
    return user.beauty_points


def _new_code() -> str:
    return f"RWD{uuid.uuid4().hex[:10].upper()}"


def redeem_reward(db: Session, user: User, reward_id: str) -> dict:
    """
    Spend points on one of the fixed rewards.

    A redemption with a one-off code is stored in the same commit as the
    balance change.

    Args:
        db: Database session
        user: Redeeming user
        reward_id: Id of the reward

    Returns:
        dict: Redeemed reward, the redemption and remaining balance

    Raises:
        ResourceNotFoundException: Unknown reward
        ValidationException: Balance below the reward cost
    """
    reward = get_reward(reward_id)
    balance = user.beauty_points or 0
    if balance < reward.points_required:
        raise ValidationException(
            "Insufficient beauty points",
            details={"required": reward.points_required, "available": balance},
        )

    user.beauty_points = balance - reward.points_required
    user.loyalty_tier = tier_for_points(user.beauty_points)
    redemption = RewardRedemption(
        user_id=user.id,
        reward_id=reward.id,
        reward_name=reward.name,
        points_used=reward.points_required,
        code=_new_code(),
        status=RedemptionStatus.ACTIVE,
        expires_at=utcnow() + timedelta(days=REDEMPTION_VALID_DAYS),
    )
    db.add(redemption)
    commit_or_rollback(db, "redeeming reward")
    db.refresh(user)
    db.refresh(redemption)

    logger.info(f"User {user.id} redeemed {reward.id} for {reward.points_required} points, code {redemption.code}")
    return {
        "reward": reward,
        "redemption": redemption,
        "points_used": reward.points_required,
        "remaining_points": user.beauty_points,
        "loyalty_tier": user.loyalty_tier,
    }


def get_points_history(db: Session, user_id: int, limit: int = LEDGER_HISTORY_SIZE) -> List[Appointment]:
    """Most recent completed appointments that earned points, newest first."""
    return (
        db.query(Appointment)
        .filter(
            Appointment.user_id == user_id,
            Appointment.status == AppointmentStatus.COMPLETED,
            Appointment.beauty_points_earned > 0,
        )
        .order_by(Appointment.completed_at.desc(), Appointment.id.desc())
        .limit(limit)
        .all()
    )


def get_points_ledger(db: Session, user_id: int) -> dict:
    """
    Read-only view of a user's points.

    Args:
        db: Database session
        user_id: ID of the user

    Returns:
        dict: Balance, VIP multiplier, recent history and reward lock state
    """
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise ResourceNotFoundException("User not found")

    balance = user.beauty_points or 0
    rewards = [
        {
            "id": reward.id,
            "name": reward.name,
            "description": reward.description,
            "points_required": reward.points_required,
            "unlocked": balance >= reward.points_required,
        }
        for reward in REWARDS
    ]
    history = [
        {
            "appointment_id": appointment.id,
            "treatment_name": appointment.treatment.name,
            "icon_name": appointment.treatment.icon_name,
            "points_earned": appointment.beauty_points_earned,
            "completed_at": appointment.completed_at,
        }
        for appointment in get_points_history(db, user.id)
    ]

    return {
        "current_points": balance,
        "loyalty_tier": user.loyalty_tier,
        "vip_multiplier": points_multiplier(has_active_vip(db, user.id)),
        "history": history,
        "rewards": rewards,
        "available_rewards": [reward for reward in rewards if reward["unlocked"]],
        "next_rewards": [reward for reward in rewards if not reward["unlocked"]],
    }


def get_points_summary(db: Session, user: User) -> dict:
    """Level progress and lifetime earnings."""
    balance = user.beauty_points or 0
    level = balance // POINTS_PER_LEVEL
    lifetime: Optional[int] = (
        db.query(func.coalesce(func.sum(Appointment.beauty_points_earned), 0))
        .filter(
            Appointment.user_id == user.id,
            Appointment.status == AppointmentStatus.COMPLETED,
        )
        .scalar()
    )
    return {
        "current_points": balance,
        "level": level,
        "points_to_next_level": (level + 1) * POINTS_PER_LEVEL - balance,
        "lifetime_points_earned": int(lifetime or 0),
        "loyalty_tier": user.loyalty_tier,
        "vip_multiplier": points_multiplier(has_active_vip(db, user.id)),
    }


def _expire_overdue(redemptions: List[RewardRedemption]) -> bool:
    now = utcnow()
    changed = False
    for redemption in redemptions:
        if redemption.status == RedemptionStatus.ACTIVE and redemption.is_overdue(now):
            redemption.status = RedemptionStatus.EXPIRED
            changed = True
    return changed


def list_redemptions(
    db: Session,
    user_id: int,
    status: Optional[RedemptionStatus] = None,
) -> List[RewardRedemption]:
    """
    Redemptions of a user, newest first.

    Overdue ACTIVE codes are marked EXPIRED before filtering.
    """
    redemptions = (
        db.query(RewardRedemption)
        .filter(RewardRedemption.user_id == user_id)
        .order_by(RewardRedemption.created_at.desc(), RewardRedemption.id.desc())
        .all()
    )
    if _expire_overdue(redemptions):
        commit_or_rollback(db, "expiring redemptions")
    if status is not None:
        redemptions = [redemption for redemption in redemptions if redemption.status == status]
    return redemptions


def get_clinic_redemption(db: Session, code: str, clinic: Clinic) -> RewardRedemption:
    """
    Look up a code for a clinic.

    Codes of users from other clinics are reported as missing.

    Raises:
        ResourceNotFoundException: Unknown code or not one of the clinic's users
    """
    redemption = (
        db.query(RewardRedemption)
        .join(User, RewardRedemption.user_id == User.id)
        .filter(RewardRedemption.code == code.strip().upper(), User.primary_clinic_id == clinic.id)
        .first()
    )
    if not redemption:
        raise ResourceNotFoundException("Redemption code not found")
    return redemption


def use_redemption(db: Session, code: str, clinic: Clinic) -> RewardRedemption:
    """
    Honour a redemption code at the clinic.

    Args:
        db: Database session
        code: Code shown by the user
        clinic: Clinic accepting the code

    Returns:
        RewardRedemption: The redemption, now USED

    Raises:
        ResourceNotFoundException: Unknown code
        ValidationException: Code already used or expired
    """
    redemption = get_clinic_redemption(db, code, clinic)
    if _expire_overdue([redemption]):
        commit_or_rollback(db, "expiring redemption")
    if redemption.status != RedemptionStatus.ACTIVE:
        raise ValidationException(
            f"Redemption code is {redemption.status.value.lower()}",
            details={"status": redemption.status.value},
        )

    redemption.status = RedemptionStatus.USED
    redemption.used_at = utcnow()
    redemption.used_by_clinic_id = clinic.id
    commit_or_rollback(db, "using redemption")
    db.refresh(redemption)
    logger.info(f"Clinic {clinic.id} accepted redemption {redemption.code} of user {redemption.user_id}")
    return redemption
