"""
VIP Router - API endpoints for VIP membership.
"""
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..auth.dependencies import get_current_user, require_vip
from ..core.schemas import ApiResponse, ok
from ..database import get_db
from ..treatments.schemas import TreatmentResponse
from ..users.models import User
from .schemas import SubscribeRequest, VipBenefitsResponse, VipStatusResponse, VipSubscriptionResponse
from .service import (
    VIP_BENEFITS,
    cancel_subscription,
    get_plans,
    get_vip_offers,
    get_vip_status,
    subscribe,
)

router = APIRouter()


@router.get("/benefits", response_model=ApiResponse[VipBenefitsResponse])
async def vip_benefits():
    """List VIP benefits and the available plans."""
    return ok({"benefits": VIP_BENEFITS, "plans": get_plans()})


@router.get("/status", response_model=ApiResponse[VipStatusResponse])
async def vip_status(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Get the current user's VIP status

    Recomputes the VIP flag from the user's subscriptions.
    """
    return ok(get_vip_status(db, current_user))


@router.post("/subscribe", status_code=status.HTTP_201_CREATED, response_model=ApiResponse[VipSubscriptionResponse])
async def vip_subscribe(
    payload: SubscribeRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Subscribe to a VIP plan

    Fails with 409 if the user already has an active subscription.
    """
    subscription = subscribe(db, current_user, payload.plan)
    return ok(subscription, message="Welcome to VIP")


@router.put("/cancel", response_model=ApiResponse[VipSubscriptionResponse])
async def vip_cancel(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Cancel the VIP subscription, benefits remain until the period ends."""
    subscription = cancel_subscription(db, current_user)
    return ok(subscription, message="VIP subscription cancelled")


@router.get("/offers", response_model=ApiResponse[List[TreatmentResponse]])
async def vip_offers(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_vip),
):
    """VIP-exclusive treatments, VIP members only."""
    return ok(get_vip_offers(db, current_user))
