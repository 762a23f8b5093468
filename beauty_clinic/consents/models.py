"""
Consent Models - Consent form templates and the patients' signed answers.
"""
import enum

from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, JSON, String, func
from sqlalchemy.orm import relationship

from ..database import Base


class ConsentStatus(str, enum.Enum):
    """
    PENDING: not signed yet
    COMPLETED: signed by the patient
    APPROVED: reviewed and approved by the clinic
    """
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    APPROVED = "APPROVED"


class ConsentFormTemplate(Base):
    """
    ConsentFormTemplate Model - Versioned form definition owned by a clinic

    Fields:
    - clinic_id: Owning clinic
    - title / version: Identify the form revision
    - fields: Field definitions (JSON list)
    - validity_days: How long a signed form stays valid
    - is_active: Whether new signatures are accepted
    """
    __tablename__ = "consent_form_templates"

    id = Column(Integer, primary_key=True, index=True)
    clinic_id = Column(Integer, ForeignKey("clinics.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    version = Column(String, nullable=False, default="1.0")
    fields = Column(JSON, nullable=False, default=list)
    validity_days = Column(Integer, nullable=False, default=365)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    clinic = relationship("Clinic", back_populates="consent_templates")
    consents = relationship("PatientConsent", back_populates="template")

    def __repr__(self):
        return f"<ConsentFormTemplate(id={self.id}, title='{self.title}', version='{self.version}')>"


class PatientConsent(Base):
    """
    PatientConsent Model - A user's response to a template for one treatment

    Fields:
    - user_id / treatment_id / template_id
    - answers: Field answers (JSON)
    - status: PENDING -> COMPLETED -> APPROVED
    - signed_at / approved_at / expires_at
    """
    __tablename__ = "patient_consents"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    treatment_id = Column(Integer, ForeignKey("treatments.id", ondelete="CASCADE"), nullable=False, index=True)
    template_id = Column(Integer, ForeignKey("consent_form_templates.id", ondelete="CASCADE"), nullable=False)
    answers = Column(JSON, nullable=False, default=dict)
    status = Column(Enum(ConsentStatus, name="consent_status"), nullable=False, default=ConsentStatus.PENDING)
    signed_at = Column(DateTime(timezone=True), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="consents")
    treatment = relationship("Treatment")
    template = relationship("ConsentFormTemplate", back_populates="consents")

    def __repr__(self):
        return f"<PatientConsent(id={self.id}, user_id={self.user_id}, status='{self.status}')>"
