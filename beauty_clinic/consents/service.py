"""
Consent Service - Consent templates, signatures and the confirmation gate.

A consent is valid for a booking when it is APPROVED and its ``expires_at``
is still in the future. The expiry check is done in SQL so the comparison
does not depend on how the driver returns timestamps.
"""
from datetime import timedelta
from typing import List, Optional
import logging

from sqlalchemy.orm import Session

from ..appointments.models import Appointment, OPEN_STATUSES
from ..clinics.models import Clinic
from ..core.dates import utcnow
from ..database import commit_or_rollback
from ..exceptions import (
    ConflictException,
    PermissionDeniedException,
    ResourceNotFoundException,
    ValidationException,
)
from ..treatments.models import Treatment
from ..users.models import User
from .models import ConsentFormTemplate, ConsentStatus, PatientConsent
from .schemas import ConsentSign, ConsentTemplateCreate

# Set up logging
logger = logging.getLogger(__name__)


def create_template(db: Session, clinic: Clinic, template_data: ConsentTemplateCreate) -> ConsentFormTemplate:
    """
    Create a consent form template for a clinic.

    Args:
        db: Database session
        clinic: Owning clinic
        template_data: Title, version, fields and validity

    Returns:
        ConsentFormTemplate: The created template
    """
    template = ConsentFormTemplate(
        clinic_id=clinic.id,
        title=template_data.title,
        version=template_data.version,
        fields=[field.model_dump() for field in template_data.fields],
        validity_days=template_data.validity_days,
    )
    db.add(template)
    commit_or_rollback(db, "creating consent template")
    db.refresh(template)
    logger.info(f"Consent template {template.id} v{template.version} created for clinic {clinic.id}")
    return template


def list_templates(db: Session, clinic_id: Optional[int] = None) -> List[ConsentFormTemplate]:
    query = db.query(ConsentFormTemplate).filter(ConsentFormTemplate.is_active.is_(True))
    if clinic_id is not None:
        query = query.filter(ConsentFormTemplate.clinic_id == clinic_id)
    return query.order_by(ConsentFormTemplate.id).all()


def get_template(db: Session, template_id: int) -> ConsentFormTemplate:
    template = db.query(ConsentFormTemplate).filter(ConsentFormTemplate.id == template_id).first()
    if not template:
        raise ResourceNotFoundException("Consent template not found")
    return template


def find_valid_consent(db: Session, user_id: int, treatment_id: int) -> Optional[PatientConsent]:
    """Approved, unexpired consent of a user for a treatment, latest expiry first."""
    return (
        db.query(PatientConsent)
        .filter(
            PatientConsent.user_id == user_id,
            PatientConsent.treatment_id == treatment_id,
            PatientConsent.status == ConsentStatus.APPROVED,
            PatientConsent.expires_at > utcnow(),
        )
        .order_by(PatientConsent.expires_at.desc(), PatientConsent.id.desc())
        .first()
    )


def has_valid_consent(db: Session, user_id: int, treatment_id: int) -> bool:
    return find_valid_consent(db, user_id, treatment_id) is not None


def consent_status_for(db: Session, user_id: int, treatment: Treatment) -> ConsentStatus:
    """
    Consent status an appointment for ``treatment`` should carry.

    APPROVED when no consent is needed or a valid one exists, COMPLETED when
    a signed consent awaits approval, PENDING otherwise.
    """
    if not treatment.consent_form_required:
        return ConsentStatus.APPROVED
    if has_valid_consent(db, user_id, treatment.id):
        return ConsentStatus.APPROVED
    signed = (
        db.query(PatientConsent)
        .filter(
            PatientConsent.user_id == user_id,
            PatientConsent.treatment_id == treatment.id,
            PatientConsent.status == ConsentStatus.COMPLETED,
            PatientConsent.expires_at > utcnow(),
        )
        .first()
    )
    return ConsentStatus.COMPLETED if signed else ConsentStatus.PENDING


def refresh_appointment_consents(db: Session, user_id: int, treatment: Treatment) -> int:
    """
    Recompute the consent status of the user's open appointments for a treatment.

    Does not commit.

    Returns:
        int: Number of appointments updated
    """
    new_status = consent_status_for(db, user_id, treatment)
    appointments = (
        db.query(Appointment)
        .filter(
            Appointment.user_id == user_id,
            Appointment.treatment_id == treatment.id,
            Appointment.status.in_(OPEN_STATUSES),
        )
        .all()
    )
    for appointment in appointments:
        appointment.consent_status = new_status
    return len(appointments)


def sign_consent(db: Session, user: User, consent_data: ConsentSign) -> PatientConsent:
    """
    Sign a consent form for a treatment.

    The consent is COMPLETED and valid for the template's ``validity_days``
    once the clinic approves it.

    Raises:
        ResourceNotFoundException: Unknown treatment or template
        ValidationException: Template from another clinic, or required answers missing
    """
    treatment = db.query(Treatment).filter(Treatment.id == consent_data.treatment_id).first()
    if not treatment:
        raise ResourceNotFoundException("Treatment not found")

    template_id = consent_data.template_id or treatment.consent_form_template_id
    if template_id is None:
        raise ValidationException("No consent template configured for this treatment")
    template = get_template(db, template_id)
    if template.clinic_id != treatment.clinic_id:
        raise ValidationException("Consent template does not belong to the treatment's clinic")
    if not template.is_active:
        raise ValidationException("Consent template is no longer active")

    missing = [
        field["name"]
        for field in (template.fields or [])
        if field.get("required") and consent_data.answers.get(field["name"]) in (None, "", False)
    ]
    if missing:
        raise ValidationException("Required consent fields missing", details={"fields": missing})

    signed_at = utcnow()
    consent = PatientConsent(
        user_id=user.id,
        treatment_id=treatment.id,
        template_id=template.id,
        answers=consent_data.answers,
        status=ConsentStatus.COMPLETED,
        signed_at=signed_at,
        expires_at=signed_at + timedelta(days=template.validity_days),
    )
    db.add(consent)
    db.flush()
    refresh_appointment_consents(db, user.id, treatment)
    commit_or_rollback(db, "signing consent")
    db.refresh(consent)
    logger.info(f"User {user.id} signed consent {consent.id} for treatment {treatment.id}")
    return consent


def list_user_consents(db: Session, user_id: int) -> List[PatientConsent]:
    return (
        db.query(PatientConsent)
        .filter(PatientConsent.user_id == user_id)
        .order_by(PatientConsent.id.desc())
        .all()
    )


def list_pending_consents(db: Session, clinic_id: int) -> List[PatientConsent]:
    """Signed consents on the clinic's templates awaiting approval, oldest signature first."""
    return (
        db.query(PatientConsent)
        .join(ConsentFormTemplate, PatientConsent.template_id == ConsentFormTemplate.id)
        .filter(
            ConsentFormTemplate.clinic_id == clinic_id,
            PatientConsent.status == ConsentStatus.COMPLETED,
        )
        .order_by(PatientConsent.signed_at, PatientConsent.id)
        .all()
    )


def approve_consent(db: Session, clinic: Clinic, consent_id: int) -> PatientConsent:
    """
    Approve a signed consent.

    Raises:
        ResourceNotFoundException: Unknown consent
        PermissionDeniedException: Consent belongs to another clinic's template
        ConflictException: Consent is not in the signed state
    """
    consent = db.query(PatientConsent).filter(PatientConsent.id == consent_id).first()
    if not consent:
        raise ResourceNotFoundException("Consent not found")
    if consent.template.clinic_id != clinic.id:
        raise PermissionDeniedException("You don't have permission to approve this consent")
    if consent.status != ConsentStatus.COMPLETED:
        raise ConflictException(f"Consent in status {ConsentStatus(consent.status).value} cannot be approved")

    consent.status = ConsentStatus.APPROVED
    consent.approved_at = utcnow()
    db.flush()
    refresh_appointment_consents(db, consent.user_id, consent.treatment)
    commit_or_rollback(db, "approving consent")
    db.refresh(consent)
    logger.info(f"Consent {consent_id} approved by clinic {clinic.id}")
    return consent


def check_consent(db: Session, user: User, treatment_id: int) -> dict:
    treatment = db.query(Treatment).filter(Treatment.id == treatment_id).first()
    if not treatment:
        raise ResourceNotFoundException("Treatment not found")
    consent = find_valid_consent(db, user.id, treatment.id)
    return {
        "treatment_id": treatment.id,
        "consent_required": bool(treatment.consent_form_required),
        "has_valid_consent": consent is not None,
        "status": consent_status_for(db, user.id, treatment),
        "consent": consent,
    }
