"""
FastAPI dependencies for authentication and authorization.

Each dependency verifies the bearer token against the access-token secret,
loads the subject it names and attaches it to ``request.state`` so later
layers (logging, handlers) can see who is calling.
"""
import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from ..clinics.models import Clinic
from ..config import Settings
from ..core.security import SubjectType, TokenClaims, decode_access_token
from ..database import get_db
from ..exceptions import PermissionDeniedException, UnauthorizedException
from ..professionals.models import Professional
from ..users.models import User
from ..vip.service import sync_vip_status

# Set up logging
logger = logging.getLogger(__name__)

# Missing tokens are reported by the dependencies themselves, in the API envelope
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


def get_settings_dependency(request: Request) -> Settings:
    """Settings the running application was built with."""
    return request.app.state.settings


def _claims_for(
    token: Optional[str],
    expected: SubjectType,
    settings: Settings,
) -> TokenClaims:
    if not token:
        raise UnauthorizedException("Authentication required")
    claims = decode_access_token(token, settings)
    if claims.subject_type != expected:
        raise UnauthorizedException("Invalid token for this resource")
    return claims


def get_current_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings_dependency),
) -> User:
    """
    Get current authenticated user from JWT token with database verification.

    Args:
        request: Incoming request, receives the user on ``request.state``
        token: JWT token from Authorization header
        db: Database session

    Returns:
        User: Current authenticated user

    Raises:
        UnauthorizedException: If token is missing, invalid, expired or the user is gone
    """
    claims = _claims_for(token, SubjectType.USER, settings)
    user = db.query(User).filter(User.id == claims.subject_id).first()
    if not user:
        raise UnauthorizedException("User not found")
    if not user.is_active:
        raise UnauthorizedException("Account is disabled")

    request.state.user = user
    request.state.subject_type = SubjectType.USER
    return user


def get_optional_current_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings_dependency),
) -> Optional[User]:
    """
    Same as ``get_current_user`` but anonymous callers get ``None``.

    Any token problem downgrades the request to anonymous instead of failing.
    """
    if not token:
        return None
    try:
        return get_current_user(request, token, db, settings)
    except UnauthorizedException as e:
        logger.debug(f"Ignoring invalid optional token: {e.detail}")
        return None


def get_current_professional(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings_dependency),
) -> Professional:
    """Authenticated professional from a professional token."""
    claims = _claims_for(token, SubjectType.PROFESSIONAL, settings)
    professional = db.query(Professional).filter(Professional.id == claims.subject_id).first()
    if not professional or not professional.is_active:
        raise UnauthorizedException("Professional not found")

    request.state.professional = professional
    request.state.subject_type = SubjectType.PROFESSIONAL
    return professional


def get_current_clinic(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings_dependency),
) -> Clinic:
    """Authenticated clinic admin from a clinic token."""
    claims = _claims_for(token, SubjectType.CLINIC, settings)
    clinic = db.query(Clinic).filter(Clinic.id == claims.subject_id).first()
    if not clinic or not clinic.is_active:
        raise UnauthorizedException("Clinic not found")

    request.state.clinic = clinic
    request.state.subject_type = SubjectType.CLINIC
    return clinic


def get_current_staff(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings_dependency),
):
    """
    Clinic admin or professional, whichever the token names.

    Returns:
        Clinic | Professional: The acting staff account
    """
    if not token:
        raise UnauthorizedException("Authentication required")
    claims = decode_access_token(token, settings)
    if claims.subject_type == SubjectType.CLINIC:
        return get_current_clinic(request, token, db, settings)
    if claims.subject_type == SubjectType.PROFESSIONAL:
        return get_current_professional(request, token, db, settings)
    raise PermissionDeniedException("Clinic staff access required")


def get_current_actor(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings_dependency),
):
    """User or clinic admin, for endpoints both sides may call."""
    if not token:
        raise UnauthorizedException("Authentication required")
    claims = decode_access_token(token, settings)
    if claims.subject_type == SubjectType.USER:
        return get_current_user(request, token, db, settings)
    if claims.subject_type == SubjectType.CLINIC:
        return get_current_clinic(request, token, db, settings)
    raise PermissionDeniedException("Not allowed for this account type")


def require_vip(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> User:
    """
    Dependency requiring an active VIP subscription.

    Raises:
        PermissionDeniedException: If the user is not VIP
    """
    if not sync_vip_status(db, current_user):
        raise PermissionDeniedException("VIP membership required")
    return current_user
