"""
Treatment Model - Services offered by a clinic.
"""
import enum

from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import relationship

from ..database import Base


class RiskLevel(str, enum.Enum):
    """Ordered risk levels, LOW < MEDIUM < HIGH < MEDICAL."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    MEDICAL = "MEDICAL"

    @property
    def requires_medical_supervision(self) -> bool:
        return self in (RiskLevel.HIGH, RiskLevel.MEDICAL)


class Treatment(Base):
    """
    Treatment Model - Stores the treatment catalogue of a clinic

    Fields:
    - clinic_id: Owning clinic
    - name, description, category, icon_name: Catalogue data
    - risk_level: LOW / MEDIUM / HIGH / MEDICAL
    - price / vip_price: Standard and VIP price
    - duration_minutes: Length of one session
    - requires_consultation / requires_medical_staff / consent_form_required
    - consent_form_template_id: Template signed before confirmation
    - beauty_points: Points earned when an appointment is completed
    - is_vip_exclusive / is_featured / is_active: Catalogue flags
    """
    __tablename__ = "treatments"

    id = Column(Integer, primary_key=True, index=True)
    clinic_id = Column(Integer, ForeignKey("clinics.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String, nullable=False, index=True)
    icon_name = Column(String, nullable=True)
    risk_level = Column(Enum(RiskLevel), nullable=False, default=RiskLevel.LOW)
    price = Column(Numeric(10, 2), nullable=False)
    vip_price = Column(Numeric(10, 2), nullable=True)
    duration_minutes = Column(Integer, nullable=False, default=60)
    requires_consultation = Column(Boolean, nullable=False, default=False)
    requires_medical_staff = Column(Boolean, nullable=False, default=False)
    consent_form_required = Column(Boolean, nullable=False, default=False)
    consent_form_template_id = Column(
        Integer, ForeignKey("consent_form_templates.id", ondelete="SET NULL"), nullable=True
    )
    beauty_points = Column(Integer, nullable=False, default=0)
    is_vip_exclusive = Column(Boolean, nullable=False, default=False)
    is_featured = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    clinic = relationship("Clinic", back_populates="treatments")
    consent_form_template = relationship("ConsentFormTemplate")
    appointments = relationship("Appointment", back_populates="treatment")

    def __repr__(self):
        return f"<Treatment(id={self.id}, name='{self.name}', risk='{self.risk_level}')>"

    def apply_risk_requirements(self) -> None:
        """
        Raise the gating flags to what the risk level demands.

        HIGH and MEDICAL need consultation and medical staff, MEDICAL also
        needs a consent form. Flags are only ever raised here, never lowered.
        """
        risk = RiskLevel(self.risk_level) if self.risk_level else RiskLevel.LOW
        if risk.requires_medical_supervision:
            self.requires_consultation = True
            self.requires_medical_staff = True
        if risk == RiskLevel.MEDICAL:
            self.consent_form_required = True

    def price_for(self, vip: bool):
        """Price charged to a customer, VIP price applies only when one is set."""
        if vip and self.vip_price is not None:
            return self.vip_price
        return self.price
