"""
Clinic Model - Tenant root of the platform.

Every professional, treatment, appointment, consent template and wellness tip
hangs off exactly one clinic.
"""
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, JSON, String, func
from sqlalchemy.orm import relationship

from ..database import Base

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


class Clinic(Base):
    """
    Clinic Model - Stores tenant information

    Fields:
    - id: Primary key
    - name / slug: Display name and unique URL slug
    - email / password_hash: Clinic admin credentials
    - phone, address, city, country, timezone: Contact info
    - business_hours: Weekly schedule (JSON, one entry per weekday)
    - is_active / is_verified: Lifecycle flags
    - enable_vip_program / enable_online_booking: Feature toggles
    """
    __tablename__ = "clinics"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    slug = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)
    city = Column(String, nullable=True)
    country = Column(String, nullable=False, default="ES")
    timezone = Column(String, nullable=False, default="Europe/Madrid")
    business_hours = Column(JSON, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    is_verified = Column(Boolean, nullable=False, default=False)
    enable_vip_program = Column(Boolean, nullable=False, default=True)
    enable_online_booking = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    professionals = relationship("Professional", back_populates="clinic")
    treatments = relationship("Treatment", back_populates="clinic")
    appointments = relationship("Appointment", back_populates="clinic")
    consent_templates = relationship("ConsentFormTemplate", back_populates="clinic")

    def __repr__(self):
        return f"<Clinic(id={self.id}, slug='{self.slug}')>"

    def update_business_hours(self, schedule_data: dict) -> None:
        """
        Replace the weekly schedule

        Args:
            schedule_data: Dictionary containing opening hours for each day
        """
        self.business_hours = schedule_data
        self.updated_at = datetime.now(timezone.utc)
