"""
Appointment Schemas - Pydantic models for appointment data validation and serialization.
"""
from datetime import date, datetime, time
from typing import List, Optional

from pydantic import Field

from ..consents.models import ConsentStatus
from ..core.schemas import CamelModel
from .models import AppointmentStatus


class AppointmentCreate(CamelModel):
    """
    Appointment Creation Schema - Used when a user books a treatment

    Fields:
    - treatment_id: Treatment to book, the clinic is the treatment's clinic
    - professional_id: Preferred professional (optional)
    - scheduled_date / scheduled_time: Start of the appointment
    - notes: Free text for the clinic
    """
    treatment_id: int
    professional_id: Optional[int] = None
    scheduled_date: date
    scheduled_time: time
    notes: Optional[str] = Field(None, max_length=1000)


class AppointmentReschedule(CamelModel):
    scheduled_date: date
    scheduled_time: time
    professional_id: Optional[int] = None


class AppointmentCancel(CamelModel):
    reason: Optional[str] = Field(None, max_length=500)


class TreatmentSummary(CamelModel):
    id: int
    name: str
    category: str
    icon_name: Optional[str] = None
    duration_minutes: int
    consent_form_required: bool


class ClinicSummary(CamelModel):
    id: int
    name: str
    slug: str
    address: Optional[str] = None
    city: Optional[str] = None


class ProfessionalSummary(CamelModel):
    id: int
    first_name: str
    last_name: str
    specialties: List[str] = Field(default_factory=list)


class AppointmentResponse(CamelModel):
    """
    Appointment Response Schema - Used when returning appointment data
    """
    id: int
    user_id: int
    clinic_id: int
    professional_id: Optional[int] = None
    treatment_id: int
    scheduled_date: date
    scheduled_time: time
    duration_minutes: int
    status: AppointmentStatus
    consent_status: ConsentStatus
    original_price: float
    final_price: float
    notes: Optional[str] = None
    cancellation_reason: Optional[str] = None
    beauty_points_earned: int
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    treatment: Optional[TreatmentSummary] = None
    clinic: Optional[ClinicSummary] = None
    professional: Optional[ProfessionalSummary] = None


class CustomerSummary(CamelModel):
    id: int
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None


class ClinicAppointmentResponse(AppointmentResponse):
    """Appointment as seen by the clinic, with the booking customer."""
    user: Optional[CustomerSummary] = None


class ClinicDayCounts(CamelModel):
    total: int
    pending: int
    confirmed: int
    in_progress: int
    completed: int
    cancelled: int
    appointments: List[ClinicAppointmentResponse]


class ClinicRevenue(CamelModel):
    total: float
    today: float
    completed_appointments: int


class TopTreatment(CamelModel):
    treatment_id: int
    name: str
    completed_count: int
    revenue: float


class ClinicOverview(CamelModel):
    """
    Clinic Overview Schema

    Fields:
    - today: Appointments scheduled for the day and their counts per status
    - revenue: Final prices of completed appointments, all time and today
    - awaiting_confirmation: PENDING appointments from today on
    - top_treatments: Most completed treatments
    """
    date: date
    today: ClinicDayCounts
    revenue: ClinicRevenue
    awaiting_confirmation: int
    top_treatments: List[TopTreatment]


class AppointmentStats(CamelModel):
    total: int
    completed: int
    pending: int
    confirmed: int
    cancelled: int
    total_spent: float
    beauty_points_earned: int


class SlotProfessional(CamelModel):
    id: int
    name: str
    specialties: List[str] = Field(default_factory=list)


class AvailabilitySlot(CamelModel):
    time: str
    available: bool
    professionals: List[SlotProfessional]
    count: int


class AvailabilityResponse(CamelModel):
    date: date
    clinic_id: int
    available_slots: List[AvailabilitySlot]
    total_slots: int
    total_professionals: int
    slot_minutes: int
