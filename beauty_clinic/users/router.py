"""
Profile Router - API endpoints for the authenticated user's profile.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth.dependencies import get_current_user
from ..core.schemas import ApiResponse, ok
from ..database import get_db
from ..vip.service import sync_vip_status
from .models import User
from .schemas import PasswordChange, ProfileUpdate, UserResponse
from .service import change_password, update_profile

router = APIRouter()


@router.get("/", response_model=ApiResponse[UserResponse])
async def get_profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get the current user's profile."""
    sync_vip_status(db, current_user)
    return ok(current_user)


@router.put("/", response_model=ApiResponse[UserResponse])
async def update(
    profile_data: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Update the current user's profile

    Loyalty tier, points and VIP status are managed by the platform and
    rejected here.
    """
    return ok(update_profile(db, current_user, profile_data), message="Profile updated")


@router.put("/change-password", response_model=ApiResponse[None])
async def update_password(
    password_data: PasswordChange,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    change_password(db, current_user, password_data)
    return ok(message="Password changed successfully")
