"""
Profile Service - Business logic for the user's own profile.
"""
import logging

from sqlalchemy.orm import Session

from ..clinics.models import Clinic
from ..core.security import hash_password, verify_password
from ..database import commit_or_rollback
from ..exceptions import UnauthorizedException, ValidationException
from .models import User
from .schemas import PasswordChange, ProfileUpdate

# Set up logging
logger = logging.getLogger(__name__)

# Columns that may be cleared by sending null
_NULLABLE_FIELDS = {
    "phone", "skin_type", "allergies", "medications", "medical_conditions", "primary_clinic_id",
}


def update_profile(db: Session, user: User, profile_data: ProfileUpdate) -> User:
    """
    Update profile fields of the current user.

    Args:
        db: Database session
        user: The authenticated user
        profile_data: Fields to change

    Returns:
        User: Updated user

    Raises:
        ValidationException: If the primary clinic does not exist
    """
    update_data = profile_data.model_dump(exclude_unset=True)

    clinic_id = update_data.get("primary_clinic_id")
    if clinic_id is not None:
        clinic = db.query(Clinic).filter(Clinic.id == clinic_id, Clinic.is_active.is_(True)).first()
        if not clinic:
            raise ValidationException("Clinic not found")

    for field, value in update_data.items():
        if value is None and field not in _NULLABLE_FIELDS:
            continue
        setattr(user, field, value)

    commit_or_rollback(db, "updating profile")
    db.refresh(user)
    logger.info(f"Profile of user {user.id} updated: {sorted(update_data)}")
    return user


def change_password(db: Session, user: User, password_data: PasswordChange) -> None:
    """
    Change the current user's password.

    Raises:
        UnauthorizedException: If the current password is wrong
    """
    if not verify_password(password_data.current_password, user.password_hash):
        logger.warning(f"Password change failed for user {user.id}: wrong current password")
        raise UnauthorizedException("Current password is incorrect")

    user.password_hash = hash_password(password_data.new_password)
    commit_or_rollback(db, "changing password")
    logger.info(f"Password changed for user {user.id}")
