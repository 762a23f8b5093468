"""
Appointment Model - Stores appointment information and scheduling.

This model binds a user, a clinic, an optional professional and a treatment
to a time window, and carries the status lifecycle.
"""
from sqlalchemy import (
    Column, Date, DateTime, Enum, ForeignKey, Integer, Numeric, String, Text, Time, func,
)
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
import enum

from ..consents.models import ConsentStatus
from ..database import Base


class AppointmentStatus(str, enum.Enum):
    """Enum for appointment status"""
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


TERMINAL_STATUSES = frozenset({AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED})

# Upcoming appointments are the ones still expected to happen
OPEN_STATUSES = (
    AppointmentStatus.PENDING,
    AppointmentStatus.CONFIRMED,
    AppointmentStatus.IN_PROGRESS,
)

ALLOWED_TRANSITIONS = {
    AppointmentStatus.PENDING: {AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED},
    AppointmentStatus.CONFIRMED: {
        AppointmentStatus.IN_PROGRESS,
        AppointmentStatus.PENDING,
        AppointmentStatus.CANCELLED,
    },
    AppointmentStatus.IN_PROGRESS: {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED},
    AppointmentStatus.COMPLETED: set(),
    AppointmentStatus.CANCELLED: set(),
}


class Appointment(Base):
    """
    Appointment Model - Stores appointment information

    Fields:
    - id: Primary key for appointment
    - user_id / clinic_id / treatment_id: Required references
    - professional_id: Assigned professional (optional)
    - scheduled_date / scheduled_time / duration_minutes: Time window
    - status: Current status of the appointment
    - consent_status: Whether the required consent is in place
    - original_price / final_price: Catalogue price and price charged
    - notes / cancellation_reason
    - beauty_points_earned: Points awarded on completion
    - completed_at: When the appointment was completed
    """
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    clinic_id = Column(Integer, ForeignKey("clinics.id", ondelete="CASCADE"), nullable=False, index=True)
    professional_id = Column(Integer, ForeignKey("professionals.id", ondelete="SET NULL"), nullable=True)
    treatment_id = Column(Integer, ForeignKey("treatments.id", ondelete="CASCADE"), nullable=False)
    scheduled_date = Column(Date, nullable=False, index=True)
    scheduled_time = Column(Time, nullable=False)
    duration_minutes = Column(Integer, nullable=False, default=60)
    status = Column(
        Enum(AppointmentStatus, name="appointment_status"),
        nullable=False,
        default=AppointmentStatus.PENDING,
    )
    consent_status = Column(
        Enum(ConsentStatus, name="appointment_consent_status"),
        nullable=False,
        default=ConsentStatus.PENDING,
    )
    original_price = Column(Numeric(10, 2), nullable=False, default=0)
    final_price = Column(Numeric(10, 2), nullable=False, default=0)
    notes = Column(Text, nullable=True)
    cancellation_reason = Column(String, nullable=True)
    beauty_points_earned = Column(Integer, nullable=False, default=0)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="appointments")
    clinic = relationship("Clinic", back_populates="appointments")
    professional = relationship("Professional", back_populates="appointments")
    treatment = relationship("Treatment", back_populates="appointments")

    def __repr__(self):
        """String representation of the Appointment model"""
        return (
            f"<Appointment(id={self.id}, user_id={self.user_id}, "
            f"date='{self.scheduled_date}', time='{self.scheduled_time}', status='{self.status}')>"
        )

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def can_transition_to(self, status: AppointmentStatus) -> bool:
        return status in ALLOWED_TRANSITIONS[AppointmentStatus(self.status)]

    def update_status(self, status: AppointmentStatus) -> None:
        """
        Update appointment status

        Args:
            status: New appointment status
        """
        self.status = status
        self.updated_at = datetime.now(timezone.utc)
