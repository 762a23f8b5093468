"""
VIP Service - Subscription lifecycle and the derived VIP flag.

``User.vip_status`` is only written here, from the state of the user's
subscriptions.
"""
from datetime import timedelta
from typing import List, Optional
import logging

from sqlalchemy.orm import Session

from ..core.dates import as_utc, utcnow
from ..database import commit_or_rollback
from ..exceptions import ConflictException, ResourceNotFoundException
from ..loyalty.service import award_points
from ..treatments.models import Treatment
from ..users.models import User
from .models import PLAN_TERMS, VipPlan, VipSubscription, VipSubscriptionStatus

# Set up logging
logger = logging.getLogger(__name__)

SUBSCRIPTION_BONUS_POINTS = 50

VIP_BENEFITS = [
    {"id": "double_points", "title": "Double beauty points", "description": "Earn 2x points on every completed treatment", "icon_name": "star"},
    {"id": "vip_prices", "title": "VIP prices", "description": "Reduced prices on treatments with a VIP rate", "icon_name": "tag"},
    {"id": "exclusive_treatments", "title": "Exclusive treatments", "description": "Book treatments reserved for VIP members", "icon_name": "crown"},
    {"id": "welcome_bonus", "title": "Welcome bonus", "description": f"{SUBSCRIPTION_BONUS_POINTS} beauty points when you subscribe", "icon_name": "gift"},
]


def get_plans() -> List[dict]:
    return [
        {"plan": plan, "price": price, "period_days": days}
        for plan, (price, days) in PLAN_TERMS.items()
    ]


def get_active_subscriptions(db: Session, user_id: int, now=None) -> List[VipSubscription]:
    """
    Subscriptions currently granting VIP, latest period end first.

    Cancelled subscriptions count until their period ends.
    """
    return VipSubscription.active_for(db, user_id, now)


def _expire_lapsed(db: Session, user_id: int, now) -> bool:
    lapsed = (
        db.query(VipSubscription)
        .filter(
            VipSubscription.user_id == user_id,
            VipSubscription.status.in_([VipSubscriptionStatus.ACTIVE, VipSubscriptionStatus.CANCELLED]),
        )
        .all()
    )
    changed = False
    for subscription in lapsed:
        if not subscription.grants_vip(now):
            subscription.status = VipSubscriptionStatus.EXPIRED
            changed = True
    return changed


def sync_vip_status(db: Session, user: User) -> bool:
    """
    Recompute ``user.vip_status`` from the subscriptions.

    Lapsed subscriptions are marked EXPIRED on the way. Commits only when
    something changed.

    Returns:
        bool: Whether the user is VIP
    """
    now = utcnow()
    changed = _expire_lapsed(db, user.id, now)
    is_vip = bool(get_active_subscriptions(db, user.id, now))
    if bool(user.vip_status) != is_vip:
        logger.info(f"VIP status of user {user.id} changed to {is_vip}")
        user.vip_status = is_vip
        changed = True
    if changed:
        commit_or_rollback(db, "updating VIP status")
        db.refresh(user)
    return is_vip


def get_vip_status(db: Session, user: User) -> dict:
    is_vip = sync_vip_status(db, user)
    subscriptions = get_active_subscriptions(db, user.id)
    current: Optional[VipSubscription] = subscriptions[0] if subscriptions else None
    days_remaining = None
    if current is not None:
        days_remaining = max((as_utc(current.current_period_end) - utcnow()).days, 0)
    return {
        "is_vip": is_vip,
        "subscription": current,
        "days_remaining": days_remaining,
        "benefits": VIP_BENEFITS if is_vip else [],
    }


def subscribe(db: Session, user: User, plan: VipPlan) -> VipSubscription:
    """
    Start a VIP subscription.

    Args:
        db: Database session
        user: Subscribing user
        plan: MONTHLY or YEARLY

    Returns:
        VipSubscription: The new subscription

    Raises:
        ConflictException: If the user already has an active subscription
    """
    if sync_vip_status(db, user):
        raise ConflictException("User already has an active VIP subscription")

    price, days = PLAN_TERMS[plan]
    now = utcnow()
    subscription = VipSubscription(
        user_id=user.id,
        plan=plan,
        price=price,
        status=VipSubscriptionStatus.ACTIVE,
        current_period_start=now,
        current_period_end=now + timedelta(days=days),
    )
    db.add(subscription)
    user.vip_status = True
    award_points(user, SUBSCRIPTION_BONUS_POINTS)

    commit_or_rollback(db, "creating VIP subscription")
    db.refresh(subscription)
    db.refresh(user)
    logger.info(f"User {user.id} subscribed to VIP plan {plan.value}")
    return subscription


def cancel_subscription(db: Session, user: User) -> VipSubscription:
    """
    Cancel the user's active subscription.

    The user keeps VIP benefits until the current period ends.

    Raises:
        ResourceNotFoundException: If there is no active subscription
    """
    subscription = (
        db.query(VipSubscription)
        .filter(
            VipSubscription.user_id == user.id,
            VipSubscription.status == VipSubscriptionStatus.ACTIVE,
        )
        .order_by(VipSubscription.current_period_end.desc())
        .first()
    )
    if not subscription or not subscription.grants_vip():
        raise ResourceNotFoundException("No active VIP subscription")

    subscription.status = VipSubscriptionStatus.CANCELLED
    subscription.cancelled_at = utcnow()
    commit_or_rollback(db, "cancelling VIP subscription")
    db.refresh(subscription)
    logger.info(f"User {user.id} cancelled VIP subscription {subscription.id}")
    return subscription


def get_vip_offers(db: Session, user: User) -> List[Treatment]:
    """VIP-exclusive treatments, from the user's clinic when one is set."""
    query = db.query(Treatment).filter(
        Treatment.is_active.is_(True),
        Treatment.is_vip_exclusive.is_(True),
    )
    if user.primary_clinic_id:
        query = query.filter(Treatment.clinic_id == user.primary_clinic_id)
    return query.order_by(Treatment.created_at.desc(), Treatment.id.desc()).all()
