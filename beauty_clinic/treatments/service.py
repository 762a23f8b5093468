"""
Treatment Service - Business logic for the treatment catalogue.

Risk gating is applied on every write: HIGH and MEDICAL treatments always
require consultation and medical staff, MEDICAL also requires a consent form.
"""
from typing import List, Optional
import logging

from sqlalchemy import func, or_
from sqlalchemy.orm import Query, Session

from ..clinics.models import Clinic
from ..consents.models import ConsentFormTemplate
from ..database import commit_or_rollback
from ..exceptions import PermissionDeniedException, ResourceNotFoundException, ValidationException
from ..users.models import User
from ..vip.models import VipSubscription
from .models import RiskLevel, Treatment
from .schemas import TreatmentCreate, TreatmentUpdate

# Set up logging
logger = logging.getLogger(__name__)

FEATURED_LIMIT = 6


def get_treatment(db: Session, treatment_id: int, active_only: bool = False) -> Treatment:
    """
    Get a treatment by ID.

    Raises:
        ResourceNotFoundException: If the treatment does not exist
    """
    query = db.query(Treatment).filter(Treatment.id == treatment_id)
    if active_only:
        query = query.filter(Treatment.is_active.is_(True))
    treatment = query.first()
    if not treatment:
        raise ResourceNotFoundException("Treatment not found")
    return treatment


def list_treatments_query(
    db: Session,
    clinic_id: Optional[int] = None,
    category: Optional[str] = None,
    risk_level: Optional[RiskLevel] = None,
    include_vip_exclusive: bool = True,
) -> Query:
    """Active treatments matching the filters, newest first."""
    query = db.query(Treatment).filter(Treatment.is_active.is_(True))
    if clinic_id is not None:
        query = query.filter(Treatment.clinic_id == clinic_id)
    if category:
        query = query.filter(Treatment.category == category)
    if risk_level is not None:
        query = query.filter(Treatment.risk_level == risk_level)
    if not include_vip_exclusive:
        query = query.filter(Treatment.is_vip_exclusive.is_(False))
    return query.order_by(Treatment.created_at.desc(), Treatment.id.desc())


def get_featured_treatments(
    db: Session,
    user: Optional[User] = None,
    clinic_id: Optional[int] = None,
    limit: int = FEATURED_LIMIT,
) -> List[Treatment]:
    """
    Featured treatments for a viewer.

    VIP-exclusive treatments are hidden unless the viewer is VIP.
    """
    show_vip = user is not None and bool(VipSubscription.active_for(db, user.id))
    query = list_treatments_query(db, clinic_id=clinic_id, include_vip_exclusive=show_vip)
    return query.filter(Treatment.is_featured.is_(True)).limit(limit).all()


def get_categories(db: Session, clinic_id: Optional[int] = None) -> List[dict]:
    """Distinct categories of active treatments with their counts."""
    query = db.query(Treatment.category, func.count(Treatment.id)).filter(Treatment.is_active.is_(True))
    if clinic_id is not None:
        query = query.filter(Treatment.clinic_id == clinic_id)
    rows = query.group_by(Treatment.category).order_by(Treatment.category).all()
    return [{"category": category, "count": count} for category, count in rows]


def search_treatments(db: Session, term: str, clinic_id: Optional[int] = None, limit: int = 20) -> List[Treatment]:
    """Case-insensitive search over name, description and category."""
    pattern = f"%{term.strip()}%"
    query = list_treatments_query(db, clinic_id=clinic_id).filter(
        or_(
            Treatment.name.ilike(pattern),
            Treatment.description.ilike(pattern),
            Treatment.category.ilike(pattern),
        )
    )
    return query.limit(limit).all()


def _check_template(db: Session, clinic: Clinic, template_id: Optional[int]) -> None:
    if template_id is None:
        return
    template = db.query(ConsentFormTemplate).filter(ConsentFormTemplate.id == template_id).first()
    if not template or template.clinic_id != clinic.id:
        raise ValidationException("Consent form template not found for this clinic")


def create_treatment(db: Session, clinic: Clinic, treatment_data: TreatmentCreate) -> Treatment:
    """
    Create a treatment for a clinic.

    Args:
        db: Database session
        clinic: Owning clinic (the authenticated clinic)
        treatment_data: Treatment fields

    Returns:
        Treatment: The created treatment with risk gating applied
    """
    _check_template(db, clinic, treatment_data.consent_form_template_id)

    treatment = Treatment(clinic_id=clinic.id, **treatment_data.model_dump())
    treatment.apply_risk_requirements()
    db.add(treatment)
    commit_or_rollback(db, "creating treatment")
    db.refresh(treatment)
    logger.info(f"Treatment {treatment.id} created for clinic {clinic.id}")
    return treatment


def update_treatment(db: Session, clinic: Clinic, treatment_id: int, treatment_data: TreatmentUpdate) -> Treatment:
    """
    Update a treatment of the authenticated clinic.

    Raises:
        ResourceNotFoundException: If the treatment does not exist
        PermissionDeniedException: If it belongs to another clinic
    """
    treatment = get_treatment(db, treatment_id)
    if treatment.clinic_id != clinic.id:
        raise PermissionDeniedException("You don't have permission to update this treatment")

    update_data = treatment_data.model_dump(exclude_unset=True)
    if "consent_form_template_id" in update_data:
        _check_template(db, clinic, update_data["consent_form_template_id"])
    for field, value in update_data.items():
        if value is None and field not in ("description", "icon_name", "vip_price", "consent_form_template_id"):
            continue
        setattr(treatment, field, value)

    if treatment.vip_price is not None and treatment.vip_price > treatment.price:
        raise ValidationException("vipPrice must not exceed price")

    treatment.apply_risk_requirements()
    commit_or_rollback(db, "updating treatment")
    db.refresh(treatment)
    logger.info(f"Treatment {treatment_id} updated by clinic {clinic.id}")
    return treatment
