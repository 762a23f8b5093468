"""
Consent Schemas - Pydantic models for consent templates and signed consents.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from ..core.schemas import CamelModel
from .models import ConsentStatus


class ConsentField(CamelModel):
    """
    One field of a consent form

    Fields:
    - name: Key used in the answers
    - label: Text shown to the patient
    - type: checkbox, text, signature...
    - required: Whether an answer is mandatory
    """
    name: str = Field(..., min_length=1)
    label: str
    type: str = "checkbox"
    required: bool = True


class ConsentTemplateCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    version: str = Field("1.0", min_length=1, max_length=20)
    fields: List[ConsentField] = Field(default_factory=list)
    validity_days: int = Field(365, gt=0, le=3650)


class ConsentTemplateResponse(CamelModel):
    id: int
    clinic_id: int
    title: str
    version: str
    fields: List[Dict[str, Any]]
    validity_days: int
    is_active: bool
    created_at: Optional[datetime] = None


class ConsentSign(CamelModel):
    """
    Consent Signing Schema

    The template defaults to the one configured on the treatment.
    """
    treatment_id: int
    template_id: Optional[int] = None
    answers: Dict[str, Any] = Field(default_factory=dict)


class PatientConsentResponse(CamelModel):
    id: int
    user_id: int
    treatment_id: int
    template_id: int
    answers: Dict[str, Any]
    status: ConsentStatus
    signed_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None


class ConsentSigner(CamelModel):
    id: int
    first_name: str
    last_name: str
    email: str


class ConsentTreatment(CamelModel):
    id: int
    name: str


class PendingConsentResponse(PatientConsentResponse):
    """Signed consent waiting for the clinic, with who signed it and for what."""
    user: ConsentSigner
    treatment: ConsentTreatment


class ConsentCheckResponse(CamelModel):
    treatment_id: int
    consent_required: bool
    has_valid_consent: bool
    status: ConsentStatus
    consent: Optional[PatientConsentResponse] = None
