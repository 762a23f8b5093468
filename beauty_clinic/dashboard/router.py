"""
Dashboard Router - Composed read models for the user's home screen.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth.dependencies import get_current_user
from ..core.schemas import ApiResponse, ok
from ..database import get_db
from ..loyalty.schemas import PointsLedger
from ..loyalty.service import get_points_ledger
from ..users.models import User
from .schemas import DashboardResponse
from .service import get_dashboard

router = APIRouter()


@router.get("/", response_model=ApiResponse[DashboardResponse])
async def dashboard(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Get the dashboard of the current user

    User snapshot, next appointment, featured treatments, the latest
    wellness tip and stats in one response.
    """
    return ok(get_dashboard(db, current_user.id))


@router.get("/beauty-points", response_model=ApiResponse[PointsLedger])
async def dashboard_points(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Points ledger, same payload as GET /beauty-points."""
    return ok(get_points_ledger(db, current_user.id))
