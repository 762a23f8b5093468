"""
Consent Router - API endpoints for consent templates and patient consents.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..auth.dependencies import get_current_clinic, get_current_user
from ..clinics.models import Clinic
from ..core.schemas import ApiResponse, ok
from ..database import get_db
from ..users.models import User
from .schemas import (
    ConsentCheckResponse,
    ConsentSign,
    ConsentTemplateCreate,
    ConsentTemplateResponse,
    PatientConsentResponse,
    PendingConsentResponse,
)
from .service import (
    approve_consent,
    check_consent,
    create_template,
    get_template,
    list_pending_consents,
    list_templates,
    list_user_consents,
    sign_consent,
)

router = APIRouter()


@router.post("/templates", status_code=status.HTTP_201_CREATED, response_model=ApiResponse[ConsentTemplateResponse])
async def create_consent_template(
    template_data: ConsentTemplateCreate,
    db: Session = Depends(get_db),
    current_clinic: Clinic = Depends(get_current_clinic),
):
    """Create a consent form template for the authenticated clinic."""
    return ok(create_template(db, current_clinic, template_data), message="Consent template created")


@router.get("/templates", response_model=ApiResponse[List[ConsentTemplateResponse]])
async def list_consent_templates(
    clinic_id: Optional[int] = Query(None, alias="clinicId"),
    db: Session = Depends(get_db),
):
    """List active consent templates."""
    return ok(list_templates(db, clinic_id))


@router.get("/templates/{template_id}", response_model=ApiResponse[ConsentTemplateResponse])
async def get_consent_template(template_id: int, db: Session = Depends(get_db)):
    return ok(get_template(db, template_id))


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=ApiResponse[PatientConsentResponse])
async def sign(
    consent_data: ConsentSign,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Sign a consent form for a treatment

    The signed consent waits for clinic approval before it unlocks confirmation.
    """
    return ok(sign_consent(db, current_user, consent_data), message="Consent signed")


@router.get("/me", response_model=ApiResponse[List[PatientConsentResponse]])
async def my_consents(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return ok(list_user_consents(db, current_user.id))


@router.get("/pending", response_model=ApiResponse[List[PendingConsentResponse]])
async def pending_consents(
    db: Session = Depends(get_db),
    current_clinic: Clinic = Depends(get_current_clinic),
):
    """
    Get the consents waiting for this clinic's approval

    Signed consents on the clinic's templates, oldest signature first.
    """
    return ok(list_pending_consents(db, current_clinic.id))


@router.post("/{consent_id}/approve", response_model=ApiResponse[PatientConsentResponse])
async def approve(
    consent_id: int,
    db: Session = Depends(get_db),
    current_clinic: Clinic = Depends(get_current_clinic),
):
    """Approve a signed consent, clinic admins of the owning clinic only."""
    return ok(approve_consent(db, current_clinic, consent_id), message="Consent approved")


@router.get("/check/{treatment_id}", response_model=ApiResponse[ConsentCheckResponse])
async def check(
    treatment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Check whether the current user holds a valid consent for a treatment."""
    return ok(check_consent(db, current_user, treatment_id))
