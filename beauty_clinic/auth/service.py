"""
Authentication Service - Business logic for registration, login and token refresh.
"""
from typing import Any, Dict
import logging

from sqlalchemy.orm import Session

from ..clinics.models import Clinic
from ..clinics.service import get_clinic_by_slug, get_default_clinic
from ..config import Settings
from ..core.security import (
    SubjectType,
    TokenKind,
    create_token,
    hash_password,
    issue_tokens,
    parse_duration,
    verify_password,
    verify_refresh_token,
)
from ..database import commit_or_rollback
from ..exceptions import ConflictException, UnauthorizedException
from ..loyalty.service import award_points
from ..professionals.models import Professional
from ..users.models import LoyaltyTier, User
from .schemas import UserRegister

# Set up logging
logger = logging.getLogger(__name__)

WELCOME_POINTS = 100


def _tokens(subject_id: int, settings: Settings, subject_type: SubjectType) -> Dict[str, Any]:
    pair = issue_tokens(subject_id, settings, subject_type)
    return {
        "access_token": pair.access_token,
        "refresh_token": pair.refresh_token,
        "token_type": pair.token_type,
        "expires_in": pair.expires_in,
    }


async def register_user(db: Session, user_data: UserRegister, settings: Settings) -> Dict[str, Any]:
    """
    Register a new user and log them in.

    Args:
        db: Database session
        user_data: Registration data
        settings: Application settings for token issuance

    Returns:
        Dict with the user and a token pair

    Raises:
        ConflictException: If the email is already registered
        ResourceNotFoundException: If ``clinic_slug`` names no active clinic
    """
    email = user_data.email.lower()
    if db.query(User).filter(User.email == email).first():
        logger.warning(f"Registration failed: email already exists {email}")
        raise ConflictException("Email already registered")

    if user_data.clinic_slug:
        clinic = get_clinic_by_slug(db, user_data.clinic_slug)
    else:
        clinic = get_default_clinic(db)

    user = User(
        email=email,
        password_hash=hash_password(user_data.password),
        first_name=user_data.first_name,
        last_name=user_data.last_name,
        phone=user_data.phone,
        primary_clinic_id=clinic.id if clinic else None,
        beauty_points=0,
        loyalty_tier=LoyaltyTier.BRONZE,
        vip_status=False,
    )
    award_points(user, WELCOME_POINTS)
    db.add(user)
    commit_or_rollback(db, "registering user")
    db.refresh(user)

    logger.info(f"User registered: {user.id} ({email})")
    return {"user": user, "tokens": _tokens(user.id, settings, SubjectType.USER)}


async def login_user(db: Session, email: str, password: str, settings: Settings) -> Dict[str, Any]:
    """
    Authenticate a user and generate tokens.

    Raises:
        UnauthorizedException: If credentials are invalid or the account is disabled
    """
    user = db.query(User).filter(User.email == email.lower()).first()
    if not user or not verify_password(password, user.password_hash):
        logger.warning(f"Login failed: Invalid credentials for {email}")
        raise UnauthorizedException("Invalid credentials")
    if not user.is_active:
        logger.warning(f"Login failed: account disabled for {email}")
        raise UnauthorizedException("Account is disabled")

    logger.info(f"Login successful: User {user.id} ({email})")
    return {"user": user, "tokens": _tokens(user.id, settings, SubjectType.USER)}


async def login_professional(db: Session, email: str, password: str, settings: Settings) -> Dict[str, Any]:
    """Authenticate a professional and generate tokens."""
    professional = db.query(Professional).filter(Professional.email == email.lower()).first()
    if not professional or not verify_password(password, professional.password_hash):
        logger.warning(f"Professional login failed: Invalid credentials for {email}")
        raise UnauthorizedException("Invalid credentials")
    if not professional.is_active:
        raise UnauthorizedException("Account is disabled")

    logger.info(f"Login successful: Professional {professional.id} ({email})")
    return {
        "professional": professional,
        "tokens": _tokens(professional.id, settings, SubjectType.PROFESSIONAL),
    }


async def login_clinic(db: Session, email: str, password: str, settings: Settings) -> Dict[str, Any]:
    """Authenticate a clinic admin and generate tokens."""
    clinic = db.query(Clinic).filter(Clinic.email == email.lower()).first()
    if not clinic or not verify_password(password, clinic.password_hash):
        logger.warning(f"Clinic login failed: Invalid credentials for {email}")
        raise UnauthorizedException("Invalid credentials")
    if not clinic.is_active:
        raise UnauthorizedException("Clinic is deactivated")

    logger.info(f"Login successful: Clinic {clinic.id} ({email})")
    return {"clinic": clinic, "tokens": _tokens(clinic.id, settings, SubjectType.CLINIC)}


# subject type -> model the token id points at
SUBJECT_MODELS = {
    SubjectType.USER: User,
    SubjectType.PROFESSIONAL: Professional,
    SubjectType.CLINIC: Clinic,
}


async def refresh_token(db: Session, token: str, settings: Settings) -> Dict[str, Any]:
    """
    Exchange a refresh token for a new access token.

    The refresh token itself is not rotated and stays valid until it expires,
    but it stops working once its subject is deleted or deactivated.

    Raises:
        UnauthorizedException: If the refresh token is invalid or expired, or
            its subject is gone or inactive
    """
    claims = verify_refresh_token(token, settings)
    model = SUBJECT_MODELS[claims.subject_type]
    subject = db.query(model).filter(model.id == claims.subject_id).first()
    if not subject or not subject.is_active:
        logger.warning(f"Refresh refused for inactive {claims.subject_type.value} {claims.subject_id}")
        raise UnauthorizedException("Account is disabled or no longer exists")
    access_token = create_token(claims.subject_id, TokenKind.ACCESS, settings, claims.subject_type)
    logger.info(f"Access token refreshed for {claims.subject_type.value} {claims.subject_id}")
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "expires_in": int(parse_duration(settings.jwt_expires_in).total_seconds()),
    }
