"""
Appointment Router - API endpoints for booking and managing appointments.
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session

from ..auth.dependencies import get_current_actor, get_current_clinic, get_current_staff, get_current_user
from ..clinics.models import Clinic
from ..core.pagination import PageParams, PageResponse, paginate
from ..core.schemas import ApiResponse, ok
from ..database import get_db
from ..users.models import User
from .models import AppointmentStatus
from .schemas import (
    AppointmentCancel,
    AppointmentCreate,
    AppointmentReschedule,
    AppointmentResponse,
    AppointmentStats,
    AvailabilityResponse,
    ClinicAppointmentResponse,
    ClinicOverview,
)
from .service import (
    cancel_appointment,
    complete_appointment,
    confirm_appointment,
    create_appointment,
    get_appointment_stats,
    get_availability,
    get_clinic_overview,
    get_next_appointment,
    get_user_appointment,
    list_clinic_appointments_query,
    list_user_appointments_query,
    reschedule_appointment,
    staff_clinic_id,
    start_appointment,
)

router = APIRouter()


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=ApiResponse[AppointmentResponse])
async def book_appointment(
    appointment_data: AppointmentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Book an appointment

    The appointment starts PENDING. VIP users pay the VIP price where the
    clinic runs the VIP program.
    """
    appointment = create_appointment(db, current_user, appointment_data)
    return ok(appointment, message="Appointment booked")


@router.get("/", response_model=ApiResponse[PageResponse[AppointmentResponse]])
async def list_my_appointments(
    status_filter: Optional[AppointmentStatus] = Query(None, alias="status", description="Filter by status"),
    page_params: PageParams = Depends(),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get the current user's appointments, most recent first."""
    query = list_user_appointments_query(db, current_user.id, status_filter)
    return ok(paginate(query, page_params, AppointmentResponse))


@router.get("/next", response_model=ApiResponse[Optional[AppointmentResponse]])
async def next_appointment(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get the nearest upcoming appointment, null when there is none."""
    return ok(get_next_appointment(db, current_user.id))


@router.get("/stats", response_model=ApiResponse[AppointmentStats])
async def appointment_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return ok(get_appointment_stats(db, current_user.id))


@router.get("/availability", response_model=ApiResponse[AvailabilityResponse])
async def availability(
    clinic_id: int = Query(..., alias="clinicId", description="Clinic to check"),
    day: date = Query(..., alias="date", description="Day to check (YYYY-MM-DD)"),
    db: Session = Depends(get_db),
):
    """
    Get free slots for a clinic and day

    Half-hour slots from 09:00 to 17:30 with a lunch break, each listing the
    professionals still free.
    """
    return ok(get_availability(db, clinic_id, day))


@router.get("/clinic", response_model=ApiResponse[PageResponse[ClinicAppointmentResponse]])
async def list_clinic_appointments(
    status_filter: Optional[AppointmentStatus] = Query(None, alias="status", description="Filter by status"),
    date_from: Optional[date] = Query(None, alias="dateFrom", description="First day (YYYY-MM-DD)"),
    date_to: Optional[date] = Query(None, alias="dateTo", description="Last day (YYYY-MM-DD)"),
    professional_id: Optional[int] = Query(None, alias="professionalId"),
    page_params: PageParams = Depends(),
    db: Session = Depends(get_db),
    staff=Depends(get_current_staff),
):
    """
    Get the appointments of the caller's clinic

    Open to the clinic account and its professionals, in calendar order.
    """
    query = list_clinic_appointments_query(
        db,
        staff_clinic_id(staff),
        status=status_filter,
        date_from=date_from,
        date_to=date_to,
        professional_id=professional_id,
    )
    return ok(paginate(query, page_params, ClinicAppointmentResponse))


@router.get("/clinic/overview", response_model=ApiResponse[ClinicOverview])
async def clinic_overview(
    db: Session = Depends(get_db),
    clinic: Clinic = Depends(get_current_clinic),
):
    """Get today's appointments, revenue and top treatments of the clinic."""
    return ok(get_clinic_overview(db, clinic.id))


@router.get("/{appointment_id}", response_model=ApiResponse[AppointmentResponse])
async def get_appointment_detail(
    appointment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return ok(get_user_appointment(db, appointment_id, current_user))


@router.patch("/{appointment_id}/confirm", response_model=ApiResponse[AppointmentResponse])
async def confirm(
    appointment_id: int,
    db: Session = Depends(get_db),
    actor=Depends(get_current_actor),
):
    """
    Confirm a pending appointment

    Treatments that need a consent form can only be confirmed once the user
    holds an approved, unexpired consent (409 otherwise).
    """
    return ok(confirm_appointment(db, appointment_id, actor), message="Appointment confirmed")


@router.patch("/{appointment_id}/start", response_model=ApiResponse[AppointmentResponse])
async def start(
    appointment_id: int,
    db: Session = Depends(get_db),
    staff=Depends(get_current_staff),
):
    return ok(start_appointment(db, appointment_id, staff), message="Appointment started")


@router.patch("/{appointment_id}/complete", response_model=ApiResponse[AppointmentResponse])
async def complete(
    appointment_id: int,
    db: Session = Depends(get_db),
    staff=Depends(get_current_staff),
):
    """
    Complete an appointment in progress

    Awards the treatment's beauty points, doubled for VIP users.
    """
    appointment = complete_appointment(db, appointment_id, staff)
    return ok(appointment, message=f"{appointment.beauty_points_earned} beauty points awarded")


@router.patch("/{appointment_id}/cancel", response_model=ApiResponse[AppointmentResponse])
async def cancel(
    appointment_id: int,
    cancel_data: Optional[AppointmentCancel] = Body(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    reason = cancel_data.reason if cancel_data else None
    return ok(cancel_appointment(db, appointment_id, current_user, reason), message="Appointment cancelled")


@router.patch("/{appointment_id}/reschedule", response_model=ApiResponse[AppointmentResponse])
async def reschedule(
    appointment_id: int,
    reschedule_data: AppointmentReschedule,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Move an appointment to a new time

    Confirmed appointments return to PENDING and must be confirmed again.
    """
    return ok(
        reschedule_appointment(db, appointment_id, current_user, reschedule_data),
        message="Appointment rescheduled",
    )
