"""
Clinic Service - Business logic for clinic registration and management.
"""
import logging

from sqlalchemy import or_
from sqlalchemy.orm import Query, Session

from ..core.security import hash_password
from ..database import commit_or_rollback
from ..exceptions import ConflictException, PermissionDeniedException, ResourceNotFoundException
from .models import Clinic
from .schemas import ClinicCreate, ClinicUpdate

# Set up logging
logger = logging.getLogger(__name__)


def get_clinic(db: Session, clinic_id: int) -> Clinic:
    """
    Get an active clinic by ID.

    Raises:
        ResourceNotFoundException: If the clinic does not exist or is inactive
    """
    clinic = db.query(Clinic).filter(Clinic.id == clinic_id, Clinic.is_active.is_(True)).first()
    if not clinic:
        raise ResourceNotFoundException("Clinic not found")
    return clinic


def get_clinic_by_slug(db: Session, slug: str) -> Clinic:
    clinic = db.query(Clinic).filter(Clinic.slug == slug, Clinic.is_active.is_(True)).first()
    if not clinic:
        raise ResourceNotFoundException("Clinic not found")
    return clinic


def get_default_clinic(db: Session):
    """Oldest active clinic, used when a registration names none."""
    return (
        db.query(Clinic)
        .filter(Clinic.is_active.is_(True))
        .order_by(Clinic.created_at.asc(), Clinic.id.asc())
        .first()
    )


def list_clinics_query(db: Session) -> Query:
    return db.query(Clinic).filter(Clinic.is_active.is_(True)).order_by(Clinic.name, Clinic.id)


def create_clinic(db: Session, clinic_data: ClinicCreate) -> Clinic:
    """
    Register a clinic with its admin credentials.

    Args:
        db: Database session
        clinic_data: Clinic registration data

    Returns:
        Clinic: The created clinic

    Raises:
        ConflictException: If the slug or email is taken
    """
    email = clinic_data.email.lower()
    existing = (
        db.query(Clinic)
        .filter(or_(Clinic.slug == clinic_data.slug, Clinic.email == email))
        .first()
    )
    if existing:
        field = "slug" if existing.slug == clinic_data.slug else "email"
        raise ConflictException(f"A clinic with this {field} already exists")

    data = clinic_data.model_dump(exclude={"password", "email", "business_hours"})
    clinic = Clinic(
        **data,
        email=email,
        password_hash=hash_password(clinic_data.password),
        business_hours=(
            {day: hours.model_dump() for day, hours in clinic_data.business_hours.items()}
            if clinic_data.business_hours else None
        ),
    )
    db.add(clinic)
    commit_or_rollback(db, "creating clinic")
    db.refresh(clinic)
    logger.info(f"Clinic {clinic.id} ({clinic.slug}) registered")
    return clinic


def _check_owner(clinic_id: int, current_clinic: Clinic) -> None:
    if current_clinic.id != clinic_id:
        raise PermissionDeniedException("You can only manage your own clinic")


def update_clinic(db: Session, clinic_id: int, clinic_data: ClinicUpdate, current_clinic: Clinic) -> Clinic:
    """
    Update the authenticated clinic.

    Raises:
        PermissionDeniedException: If acting on another clinic
    """
    _check_owner(clinic_id, current_clinic)
    clinic = get_clinic(db, clinic_id)

    update_data = clinic_data.model_dump(exclude_unset=True, exclude={"business_hours"})
    for field, value in update_data.items():
        if value is not None:
            setattr(clinic, field, value)
    if clinic_data.business_hours is not None:
        clinic.update_business_hours(
            {day: hours.model_dump() for day, hours in clinic_data.business_hours.items()}
        )

    commit_or_rollback(db, "updating clinic")
    db.refresh(clinic)
    logger.info(f"Clinic {clinic_id} updated")
    return clinic


def deactivate_clinic(db: Session, clinic_id: int, current_clinic: Clinic) -> Clinic:
    """Soft delete: the clinic is hidden and its logins stop working."""
    _check_owner(clinic_id, current_clinic)
    clinic = get_clinic(db, clinic_id)
    clinic.is_active = False
    commit_or_rollback(db, "deactivating clinic")
    db.refresh(clinic)
    logger.info(f"Clinic {clinic_id} deactivated")
    return clinic
