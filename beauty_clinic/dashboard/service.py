"""
Dashboard Service - Composes the home screen of a user.

Four independent reads (user with VIP subscriptions, next appointment,
featured treatments, wellness tip) are combined into one payload. Every query
has a total order so reading twice without writes in between gives the same
result.
"""
from typing import List, Optional
import logging

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..appointments.service import get_next_appointment
from ..clinics.models import Clinic
from ..exceptions import ResourceNotFoundException
from ..treatments.models import Treatment
from ..users.models import User
from ..vip.service import get_active_subscriptions
from .models import WellnessTip

# Set up logging
logger = logging.getLogger(__name__)

FEATURED_LIMIT = 6


def get_featured_for_user(db: Session, user: User, is_vip: bool, limit: int = FEATURED_LIMIT) -> List[Treatment]:
    """
    Active treatments for the dashboard.

    Scoped to the primary clinic when set. VIP-exclusive treatments are only
    included when the user is VIP and the clinic runs the VIP program.
    """
    query = db.query(Treatment).filter(Treatment.is_active.is_(True))

    clinic: Optional[Clinic] = user.primary_clinic
    if clinic is not None:
        query = query.filter(Treatment.clinic_id == clinic.id)

    show_vip = bool(is_vip and clinic is not None and clinic.enable_vip_program)
    if not show_vip:
        query = query.filter(Treatment.is_vip_exclusive.is_(False))

    return (
        query.order_by(Treatment.created_at.desc(), Treatment.id.desc())
        .limit(limit)
        .all()
    )


def get_latest_tip(db: Session, clinic_id: Optional[int]) -> Optional[WellnessTip]:
    """Most recent active tip, platform-wide or from the user's clinic."""
    query = db.query(WellnessTip).filter(WellnessTip.is_active.is_(True))
    if clinic_id is not None:
        query = query.filter(or_(WellnessTip.clinic_id.is_(None), WellnessTip.clinic_id == clinic_id))
    else:
        query = query.filter(WellnessTip.clinic_id.is_(None))
    return query.order_by(WellnessTip.created_at.desc(), WellnessTip.id.desc()).first()


def get_dashboard(db: Session, user_id: int) -> dict:
    """
    Build the dashboard of a user.

    Args:
        db: Database session
        user_id: ID of the user

    Returns:
        dict: user, next_appointment (or None), featured_treatments,
        wellness_tip (or None) and stats

    Raises:
        ResourceNotFoundException: If the user does not exist
    """
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise ResourceNotFoundException("User not found")

    subscriptions = get_active_subscriptions(db, user.id)
    is_vip = bool(subscriptions)
    next_appointment = get_next_appointment(db, user.id)
    featured = get_featured_for_user(db, user, is_vip)
    tip = get_latest_tip(db, user.primary_clinic_id)

    return {
        "user": {
            "id": user.id,
            "first_name": user.first_name,
            "last_name": user.last_name,
            "email": user.email,
            "beauty_points": user.beauty_points or 0,
            "loyalty_tier": user.loyalty_tier,
            "vip_status": is_vip,
            "primary_clinic": user.primary_clinic,
            "vip_subscriptions": subscriptions,
        },
        "next_appointment": next_appointment,
        "featured_treatments": featured,
        "wellness_tip": tip,
        "stats": {
            "total_sessions": user.sessions_completed or 0,
            "beauty_points": user.beauty_points or 0,
            "total_investment": float(user.total_investment or 0),
            "vip_status": is_vip,
            "loyalty_tier": user.loyalty_tier,
        },
    }
