"""
Beauty Points Router - API endpoints for the loyalty program.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..auth.dependencies import get_current_clinic, get_current_user
from ..clinics.models import Clinic
from ..core.schemas import ApiResponse, ok
from ..database import get_db
from ..users.models import User
from .models import RedemptionStatus
from .schemas import PointsLedger, PointsSummary, RedeemRequest, RedeemResponse, RedemptionResponse
from .service import (
    get_clinic_redemption,
    get_points_ledger,
    get_points_summary,
    list_redemptions,
    redeem_reward,
    use_redemption,
)

router = APIRouter()


@router.get("/", response_model=ApiResponse[PointsLedger])
async def points_ledger(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Get the current user's beauty points ledger

    Balance, VIP multiplier, the last completed appointments that earned
    points and which rewards are unlocked.
    """
    return ok(get_points_ledger(db, current_user.id))


@router.get("/summary", response_model=ApiResponse[PointsSummary])
async def points_summary(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get level progress and lifetime points."""
    return ok(get_points_summary(db, current_user))


@router.post("/redeem", response_model=ApiResponse[RedeemResponse])
async def redeem(
    payload: RedeemRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Redeem a reward

    Fails with 400 when the balance does not cover the reward. The response
    carries the code to show at the clinic.
    """
    result = redeem_reward(db, current_user, payload.reward_id)
    return ok(result, message=f"Reward '{result['reward'].name}' redeemed")


@router.get("/redemptions", response_model=ApiResponse[List[RedemptionResponse]])
async def my_redemptions(
    status_filter: Optional[RedemptionStatus] = Query(None, alias="status", description="Filter by status"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get the current user's redemptions, newest first."""
    return ok(list_redemptions(db, current_user.id, status_filter))


@router.get("/redemptions/verify/{code}", response_model=ApiResponse[RedemptionResponse])
async def verify_redemption(
    code: str,
    db: Session = Depends(get_db),
    clinic: Clinic = Depends(get_current_clinic),
):
    """Look up a code shown by one of the clinic's users."""
    return ok(get_clinic_redemption(db, code, clinic))


@router.post("/redemptions/{code}/use", response_model=ApiResponse[RedemptionResponse])
async def accept_redemption(
    code: str,
    db: Session = Depends(get_db),
    clinic: Clinic = Depends(get_current_clinic),
):
    """
    Mark a code as used

    Fails with 400 when the code was already used or has expired.
    """
    return ok(use_redemption(db, code, clinic), message="Redemption accepted")
