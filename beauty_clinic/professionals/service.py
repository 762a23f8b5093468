"""
Professional Service - Business logic for clinic staff management.

This module provides service functions for professional CRUD operations.
Professionals are created by their clinic and log in with their own credentials.
"""
from typing import List, Optional
import logging

from sqlalchemy.orm import Session

from ..clinics.models import Clinic
from ..core.security import hash_password
from ..database import commit_or_rollback
from ..exceptions import ConflictException, PermissionDeniedException, ResourceNotFoundException
from .models import Professional
from .schemas import ProfessionalCreate, ProfessionalUpdate

# Set up logging
logger = logging.getLogger(__name__)


def get_professional(db: Session, professional_id: int) -> Professional:
    """
    Get a professional by ID.

    Args:
        db: Database session
        professional_id: ID of the professional

    Returns:
        Professional: Professional profile

    Raises:
        ResourceNotFoundException: If professional not found
    """
    professional = db.query(Professional).filter(Professional.id == professional_id).first()
    if not professional:
        raise ResourceNotFoundException("Professional not found")
    return professional


def list_professionals(
    db: Session,
    clinic_id: Optional[int] = None,
    specialty: Optional[str] = None,
) -> List[Professional]:
    """
    Active professionals, optionally filtered by clinic and specialty.

    Specialties are a JSON list, so the specialty filter runs in Python.
    """
    query = db.query(Professional).filter(Professional.is_active.is_(True))
    if clinic_id is not None:
        query = query.filter(Professional.clinic_id == clinic_id)
    professionals = query.order_by(Professional.last_name, Professional.first_name, Professional.id).all()
    if specialty:
        wanted = specialty.lower()
        professionals = [
            p for p in professionals
            if any(wanted == s.lower() for s in (p.specialties or []))
        ]
    return professionals


def create_professional(db: Session, clinic: Clinic, professional_data: ProfessionalCreate) -> Professional:
    """
    Add a professional to a clinic.

    Raises:
        ConflictException: If the email is already registered
    """
    email = professional_data.email.lower()
    if db.query(Professional).filter(Professional.email == email).first():
        raise ConflictException("Email already registered")

    data = professional_data.model_dump(exclude={"password", "email"})
    professional = Professional(
        **data,
        clinic_id=clinic.id,
        email=email,
        password_hash=hash_password(professional_data.password),
    )
    db.add(professional)
    commit_or_rollback(db, "creating professional")
    db.refresh(professional)
    logger.info(f"Professional {professional.id} added to clinic {clinic.id}")
    return professional


def update_professional(
    db: Session,
    professional_id: int,
    professional_data: ProfessionalUpdate,
    clinic: Clinic,
) -> Professional:
    """
    Update a professional of the authenticated clinic.

    Raises:
        ResourceNotFoundException: If professional not found
        PermissionDeniedException: If the professional works at another clinic
    """
    professional = get_professional(db, professional_id)
    if professional.clinic_id != clinic.id:
        raise PermissionDeniedException("You don't have permission to update this professional")

    update_data = professional_data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        if value is None and field not in ("phone", "bio", "license_number"):
            continue
        setattr(professional, field, value)

    commit_or_rollback(db, "updating professional")
    db.refresh(professional)
    logger.info(f"Professional {professional_id} updated by clinic {clinic.id}")
    return professional
