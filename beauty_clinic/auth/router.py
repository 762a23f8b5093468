"""
Authentication routes for the beauty clinic platform.
"""
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..config import Settings
from ..core.schemas import ApiResponse, ok
from ..database import get_db
from ..users.models import User
from ..users.schemas import UserResponse
from ..vip.service import sync_vip_status
from .dependencies import get_current_user, get_settings_dependency
from .schemas import (
    ClinicAuthResponse,
    ProfessionalAuthResponse,
    RefreshRequest,
    TokenResponse,
    TokenValidation,
    UserAuthResponse,
    UserLogin,
    UserRegister,
)
from .service import login_clinic, login_professional, login_user, refresh_token, register_user

# Set up logging
logger = logging.getLogger(__name__)

# Create API router
router = APIRouter()


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=ApiResponse[UserAuthResponse])
async def register(
    user_data: UserRegister,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings_dependency),
):
    """
    User self-registration endpoint.

    New users start with welcome beauty points and are logged in straight away.

    Raises:
        409 if the email is already registered
    """
    result = await register_user(db, user_data, settings)
    return ok(result, message="Registration successful")


@router.post("/login", response_model=ApiResponse[UserAuthResponse])
async def login(
    credentials: UserLogin,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings_dependency),
):
    """
    User login endpoint.

    Returns an access token and a refresh token.
    """
    result = await login_user(db, credentials.email, credentials.password, settings)
    return ok(result, message="Login successful")


@router.post("/professional/login", response_model=ApiResponse[ProfessionalAuthResponse])
async def professional_login(
    credentials: UserLogin,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings_dependency),
):
    result = await login_professional(db, credentials.email, credentials.password, settings)
    return ok(result, message="Login successful")


@router.post("/clinic/login", response_model=ApiResponse[ClinicAuthResponse])
async def clinic_login(
    credentials: UserLogin,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings_dependency),
):
    result = await login_clinic(db, credentials.email, credentials.password, settings)
    return ok(result, message="Login successful")


@router.post("/refresh", response_model=ApiResponse[TokenResponse])
async def refresh(
    payload: RefreshRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings_dependency),
):
    """
    Refresh token endpoint.

    Issues a new access token for a valid refresh token whose subject still
    exists and is active.
    """
    return ok(await refresh_token(db, payload.refresh_token, settings))


@router.post("/logout", response_model=ApiResponse[None])
async def logout():
    """
    Logout endpoint.

    Tokens are stateless, the client discards them.
    """
    return ok(message="Logged out")


@router.get("/me", response_model=ApiResponse[UserResponse])
async def me(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get the authenticated user."""
    sync_vip_status(db, current_user)
    return ok(current_user)


@router.get("/validate", response_model=ApiResponse[TokenValidation])
async def validate(current_user: User = Depends(get_current_user)):
    """Check that the access token is still valid."""
    return ok({"valid": True, "user_id": current_user.id, "email": current_user.email})
