"""
Appointment Service - Business logic for booking and the appointment lifecycle.

Status changes go through ``ALLOWED_TRANSITIONS``; anything else is a 409.
Confirmation is gated on a valid consent when the treatment requires one.
"""
from datetime import date, datetime, time
from typing import List, Optional, Union
import logging

from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Query, Session

from ..clinics.models import Clinic
from ..consents.models import ConsentStatus
from ..consents.service import consent_status_for, has_valid_consent
from ..core.dates import utcnow
from ..database import commit_or_rollback
from ..exceptions import (
    ConflictException,
    PermissionDeniedException,
    ResourceNotFoundException,
    ValidationException,
)
from ..loyalty.service import award_points, points_multiplier
from ..professionals.models import Professional, ProfessionalRole
from ..treatments.models import Treatment
from ..treatments.service import get_treatment
from ..users.models import User
from ..vip.service import sync_vip_status
from .models import OPEN_STATUSES, Appointment, AppointmentStatus
from .schemas import AppointmentCreate, AppointmentReschedule

# Set up logging
logger = logging.getLogger(__name__)

SLOT_MINUTES = 30
TOP_TREATMENTS_SIZE = 5
LUNCH_START = time(13, 0)
LUNCH_END = time(14, 0)
# Half-hour grid 09:00-17:30 without the lunch break
SLOT_TIMES = tuple(
    time(hour, minute)
    for hour in range(9, 18)
    for minute in (0, 30)
    if not LUNCH_START <= time(hour, minute) < LUNCH_END
)

Staff = Union[Clinic, Professional]


def _minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def _ensure_future(scheduled_date: date, scheduled_time: time) -> None:
    now = utcnow()
    if datetime.combine(scheduled_date, scheduled_time) <= now.replace(tzinfo=None):
        raise ValidationException("Appointment must be scheduled in the future")


def _check_transition(appointment: Appointment, target: AppointmentStatus) -> None:
    if not appointment.can_transition_to(target):
        raise ConflictException(
            f"Cannot change appointment from {AppointmentStatus(appointment.status).value} to {target.value}"
        )


def _transition(appointment: Appointment, target: AppointmentStatus) -> None:
    _check_transition(appointment, target)
    appointment.update_status(target)


def _check_professional(db: Session, professional_id: int, clinic_id: int, treatment) -> Professional:
    professional = db.query(Professional).filter(Professional.id == professional_id).first()
    if not professional or professional.clinic_id != clinic_id or not professional.is_active:
        raise ValidationException("Professional not available at this clinic")
    if treatment.requires_medical_staff and professional.role != ProfessionalRole.MEDICAL_STAFF:
        raise ValidationException("This treatment must be performed by medical staff")
    return professional


def get_appointment(db: Session, appointment_id: int) -> Appointment:
    """
    Get an appointment by ID.

    Raises:
        ResourceNotFoundException: If the appointment does not exist
    """
    appointment = db.query(Appointment).filter(Appointment.id == appointment_id).first()
    if not appointment:
        raise ResourceNotFoundException("Appointment not found")
    return appointment


def get_user_appointment(db: Session, appointment_id: int, user: User) -> Appointment:
    """Appointment owned by ``user``, other users' appointments look missing."""
    appointment = get_appointment(db, appointment_id)
    if appointment.user_id != user.id:
        raise ResourceNotFoundException("Appointment not found")
    return appointment


def staff_clinic_id(staff: Staff) -> int:
    return staff.id if isinstance(staff, Clinic) else staff.clinic_id


def _check_staff_access(appointment: Appointment, staff: Staff) -> None:
    if appointment.clinic_id != staff_clinic_id(staff):
        raise PermissionDeniedException("Appointment belongs to another clinic")


def create_appointment(db: Session, user: User, appointment_data: AppointmentCreate) -> Appointment:
    """
    Book a treatment.

    Args:
        db: Database session
        user: Booking user
        appointment_data: Treatment, optional professional and time

    Returns:
        Appointment: The PENDING appointment with price and consent status set

    Raises:
        ResourceNotFoundException: Treatment missing or inactive
        PermissionDeniedException: VIP-exclusive treatment booked by a non-VIP user
        ValidationException: Online booking disabled, past time or unsuitable professional
    """
    treatment = get_treatment(db, appointment_data.treatment_id, active_only=True)
    clinic = treatment.clinic
    if not clinic.is_active or not clinic.enable_online_booking:
        raise ValidationException("Online booking is not available for this clinic")

    is_vip = sync_vip_status(db, user)
    if treatment.is_vip_exclusive and not is_vip:
        raise PermissionDeniedException("This treatment is exclusive to VIP members")

    _ensure_future(appointment_data.scheduled_date, appointment_data.scheduled_time)
    if appointment_data.professional_id is not None:
        _check_professional(db, appointment_data.professional_id, clinic.id, treatment)

    final_price = treatment.price_for(is_vip and clinic.enable_vip_program)
    appointment = Appointment(
        user_id=user.id,
        clinic_id=clinic.id,
        professional_id=appointment_data.professional_id,
        treatment_id=treatment.id,
        scheduled_date=appointment_data.scheduled_date,
        scheduled_time=appointment_data.scheduled_time,
        duration_minutes=treatment.duration_minutes,
        status=AppointmentStatus.PENDING,
        consent_status=consent_status_for(db, user.id, treatment),
        original_price=treatment.price,
        final_price=final_price,
        notes=appointment_data.notes,
    )
    db.add(appointment)
    commit_or_rollback(db, "creating appointment")
    db.refresh(appointment)
    logger.info(f"Appointment {appointment.id} booked by user {user.id} for treatment {treatment.id}")
    return appointment


def list_user_appointments_query(
    db: Session,
    user_id: int,
    status: Optional[AppointmentStatus] = None,
) -> Query:
    """User's appointments, most recent first."""
    query = db.query(Appointment).filter(Appointment.user_id == user_id)
    if status is not None:
        query = query.filter(Appointment.status == status)
    return query.order_by(
        Appointment.scheduled_date.desc(),
        Appointment.scheduled_time.desc(),
        Appointment.id.desc(),
    )


def get_next_appointment(db: Session, user_id: int) -> Optional[Appointment]:
    """
    Nearest upcoming non-terminal appointment.

    Ordered by date then time, the id breaks ties so repeated reads agree.
    """
    now = utcnow()
    today = now.date()
    current_time = now.time().replace(microsecond=0)
    return (
        db.query(Appointment)
        .filter(
            Appointment.user_id == user_id,
            Appointment.status.in_(OPEN_STATUSES),
            or_(
                Appointment.scheduled_date > today,
                and_(Appointment.scheduled_date == today, Appointment.scheduled_time >= current_time),
            ),
        )
        .order_by(
            Appointment.scheduled_date.asc(),
            Appointment.scheduled_time.asc(),
            Appointment.id.asc(),
        )
        .first()
    )


def get_appointment_stats(db: Session, user_id: int) -> dict:
    """Counts per status plus money spent and points earned on completed appointments."""
    counts = dict(
        db.query(Appointment.status, func.count(Appointment.id))
        .filter(Appointment.user_id == user_id)
        .group_by(Appointment.status)
        .all()
    )
    spent, points = (
        db.query(
            func.coalesce(func.sum(Appointment.final_price), 0),
            func.coalesce(func.sum(Appointment.beauty_points_earned), 0),
        )
        .filter(Appointment.user_id == user_id, Appointment.status == AppointmentStatus.COMPLETED)
        .one()
    )
    return {
        "total": sum(counts.values()),
        "completed": counts.get(AppointmentStatus.COMPLETED, 0),
        "pending": counts.get(AppointmentStatus.PENDING, 0),
        "confirmed": counts.get(AppointmentStatus.CONFIRMED, 0),
        "cancelled": counts.get(AppointmentStatus.CANCELLED, 0),
        "total_spent": float(spent or 0),
        "beauty_points_earned": int(points or 0),
    }


def list_clinic_appointments_query(
    db: Session,
    clinic_id: int,
    status: Optional[AppointmentStatus] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    professional_id: Optional[int] = None,
) -> Query:
    """Clinic's appointments in calendar order."""
    query = db.query(Appointment).filter(Appointment.clinic_id == clinic_id)
    if status is not None:
        query = query.filter(Appointment.status == status)
    if date_from is not None:
        query = query.filter(Appointment.scheduled_date >= date_from)
    if date_to is not None:
        query = query.filter(Appointment.scheduled_date <= date_to)
    if professional_id is not None:
        query = query.filter(Appointment.professional_id == professional_id)
    return query.order_by(
        Appointment.scheduled_date,
        Appointment.scheduled_time,
        Appointment.id,
    )


def get_top_treatments(db: Session, clinic_id: int, limit: int = TOP_TREATMENTS_SIZE) -> List[dict]:
    """Treatments with the most completed appointments, ties broken by revenue."""
    completed = func.count(Appointment.id)
    revenue = func.coalesce(func.sum(Appointment.final_price), 0)
    rows = (
        db.query(Treatment.id, Treatment.name, completed, revenue)
        .join(Appointment, Appointment.treatment_id == Treatment.id)
        .filter(
            Appointment.clinic_id == clinic_id,
            Appointment.status == AppointmentStatus.COMPLETED,
        )
        .group_by(Treatment.id, Treatment.name)
        .order_by(completed.desc(), revenue.desc(), Treatment.id)
        .limit(limit)
        .all()
    )
    return [
        {"treatment_id": treatment_id, "name": name, "completed_count": count, "revenue": float(total or 0)}
        for treatment_id, name, count, total in rows
    ]


def get_clinic_overview(db: Session, clinic_id: int, today: Optional[date] = None) -> dict:
    """
    Day-to-day numbers for a clinic.

    Args:
        db: Database session
        clinic_id: ID of the clinic
        today: Day to report on, defaults to the current UTC date

    Returns:
        dict: Today's appointments with counts per status, revenue from
        completed appointments, open requests still waiting for confirmation
        and the top treatments
    """
    today = today or utcnow().date()
    todays = list_clinic_appointments_query(db, clinic_id, date_from=today, date_to=today).all()
    counts = {appointment_status: 0 for appointment_status in AppointmentStatus}
    for appointment in todays:
        counts[appointment.status] += 1

    revenue_total, completed_total = (
        db.query(func.coalesce(func.sum(Appointment.final_price), 0), func.count(Appointment.id))
        .filter(Appointment.clinic_id == clinic_id, Appointment.status == AppointmentStatus.COMPLETED)
        .one()
    )
    revenue_today = sum(
        float(appointment.final_price or 0)
        for appointment in todays
        if appointment.status == AppointmentStatus.COMPLETED
    )
    awaiting_confirmation = (
        db.query(func.count(Appointment.id))
        .filter(
            Appointment.clinic_id == clinic_id,
            Appointment.status == AppointmentStatus.PENDING,
            Appointment.scheduled_date >= today,
        )
        .scalar()
    )

    return {
        "date": today,
        "today": {
            "total": len(todays),
            "pending": counts[AppointmentStatus.PENDING],
            "confirmed": counts[AppointmentStatus.CONFIRMED],
            "in_progress": counts[AppointmentStatus.IN_PROGRESS],
            "completed": counts[AppointmentStatus.COMPLETED],
            "cancelled": counts[AppointmentStatus.CANCELLED],
            "appointments": todays,
        },
        "revenue": {
            "total": float(revenue_total or 0),
            "today": revenue_today,
            "completed_appointments": completed_total,
        },
        "awaiting_confirmation": awaiting_confirmation or 0,
        "top_treatments": get_top_treatments(db, clinic_id),
    }


def get_availability(db: Session, clinic_id: int, day: date) -> dict:
    """
    Free professionals per half-hour slot for a clinic and day.

    A professional is busy in a slot when one of their open appointments
    overlaps it. Only slots with at least one free professional are returned.
    """
    clinic = db.query(Clinic).filter(Clinic.id == clinic_id, Clinic.is_active.is_(True)).first()
    if not clinic:
        raise ResourceNotFoundException("Clinic not found")

    professionals: List[Professional] = (
        db.query(Professional)
        .filter(Professional.clinic_id == clinic_id, Professional.is_active.is_(True))
        .order_by(Professional.id)
        .all()
    )
    booked = (
        db.query(Appointment)
        .filter(
            Appointment.clinic_id == clinic_id,
            Appointment.scheduled_date == day,
            Appointment.status.in_(OPEN_STATUSES),
            Appointment.professional_id.isnot(None),
        )
        .all()
    )

    busy = {}
    for appointment in booked:
        start = _minutes(appointment.scheduled_time)
        busy.setdefault(appointment.professional_id, []).append((start, start + appointment.duration_minutes))

    slots = []
    for slot_time in SLOT_TIMES:
        slot_start = _minutes(slot_time)
        slot_end = slot_start + SLOT_MINUTES
        free = [
            professional
            for professional in professionals
            if not any(start < slot_end and slot_start < end for start, end in busy.get(professional.id, []))
        ]
        if not free:
            continue
        slots.append({
            "time": slot_time.strftime("%H:%M"),
            "available": True,
            "professionals": [
                {"id": p.id, "name": p.full_name, "specialties": p.specialties or []}
                for p in free
            ],
            "count": len(free),
        })

    return {
        "date": day,
        "clinic_id": clinic.id,
        "available_slots": slots,
        "total_slots": len(slots),
        "total_professionals": len(professionals),
        "slot_minutes": SLOT_MINUTES,
    }


def confirm_appointment(db: Session, appointment_id: int, actor: Union[User, Clinic]) -> Appointment:
    """
    Confirm a PENDING appointment.

    Args:
        db: Database session
        appointment_id: ID of the appointment
        actor: The owning user or the clinic admin

    Raises:
        ConflictException: Illegal transition, or the treatment needs a consent
            and no approved, unexpired one exists
    """
    if isinstance(actor, User):
        appointment = get_user_appointment(db, appointment_id, actor)
    else:
        appointment = get_appointment(db, appointment_id)
        _check_staff_access(appointment, actor)

    _check_transition(appointment, AppointmentStatus.CONFIRMED)

    treatment = appointment.treatment
    if treatment.consent_form_required:
        if not has_valid_consent(db, appointment.user_id, treatment.id):
            logger.warning(f"Appointment {appointment_id} not confirmed: no valid consent")
            raise ConflictException(
                "A valid approved consent form is required before confirmation",
                details={"treatmentId": treatment.id, "consentStatus": ConsentStatus(appointment.consent_status).value},
            )
    appointment.consent_status = ConsentStatus.APPROVED

    _transition(appointment, AppointmentStatus.CONFIRMED)
    commit_or_rollback(db, "confirming appointment")
    db.refresh(appointment)
    logger.info(f"Appointment {appointment_id} confirmed")
    return appointment


def start_appointment(db: Session, appointment_id: int, staff: Staff) -> Appointment:
    """Mark a CONFIRMED appointment as IN_PROGRESS."""
    appointment = get_appointment(db, appointment_id)
    _check_staff_access(appointment, staff)
    if isinstance(staff, Professional) and appointment.professional_id is None:
        appointment.professional_id = staff.id

    _transition(appointment, AppointmentStatus.IN_PROGRESS)
    commit_or_rollback(db, "starting appointment")
    db.refresh(appointment)
    logger.info(f"Appointment {appointment_id} started")
    return appointment


def complete_appointment(db: Session, appointment_id: int, staff: Staff) -> Appointment:
    """
    Complete an IN_PROGRESS appointment and reward the user.

    Points earned are the treatment's rate times the VIP multiplier. The
    user's sessions, investment and tier are updated in the same commit.
    """
    appointment = get_appointment(db, appointment_id)
    _check_staff_access(appointment, staff)
    _check_transition(appointment, AppointmentStatus.COMPLETED)

    user = appointment.user
    is_vip = sync_vip_status(db, user)
    appointment.update_status(AppointmentStatus.COMPLETED)
    points = (appointment.treatment.beauty_points or 0) * points_multiplier(is_vip)

    appointment.beauty_points_earned = points
    appointment.completed_at = utcnow()
    award_points(user, points)
    user.sessions_completed = (user.sessions_completed or 0) + 1
    user.total_investment = (user.total_investment or 0) + appointment.final_price

    commit_or_rollback(db, "completing appointment")
    db.refresh(appointment)
    logger.info(f"Appointment {appointment_id} completed, {points} points awarded to user {user.id}")
    return appointment


def cancel_appointment(db: Session, appointment_id: int, user: User, reason: Optional[str] = None) -> Appointment:
    """
    Cancel one of the user's appointments.

    The reason is stored and appended to the notes.
    """
    appointment = get_user_appointment(db, appointment_id, user)
    _transition(appointment, AppointmentStatus.CANCELLED)
    if reason:
        appointment.cancellation_reason = reason
        note = f"Cancelled: {reason}"
        appointment.notes = f"{appointment.notes}\n{note}" if appointment.notes else note

    commit_or_rollback(db, "cancelling appointment")
    db.refresh(appointment)
    logger.info(f"Appointment {appointment_id} cancelled by user {user.id}")
    return appointment


def reschedule_appointment(
    db: Session,
    appointment_id: int,
    user: User,
    reschedule_data: AppointmentReschedule,
) -> Appointment:
    """
    Move an appointment to a new time.

    Only PENDING and CONFIRMED appointments can move. A CONFIRMED appointment
    goes back to PENDING and has to be confirmed again.
    """
    appointment = get_user_appointment(db, appointment_id, user)
    if appointment.status not in (AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED):
        raise ConflictException(
            f"Appointment in status {AppointmentStatus(appointment.status).value} cannot be rescheduled"
        )

    _ensure_future(reschedule_data.scheduled_date, reschedule_data.scheduled_time)
    if reschedule_data.professional_id is not None:
        _check_professional(db, reschedule_data.professional_id, appointment.clinic_id, appointment.treatment)
        appointment.professional_id = reschedule_data.professional_id

    if appointment.status == AppointmentStatus.CONFIRMED:
        _transition(appointment, AppointmentStatus.PENDING)
    appointment.scheduled_date = reschedule_data.scheduled_date
    appointment.scheduled_time = reschedule_data.scheduled_time
    appointment.consent_status = consent_status_for(db, user.id, appointment.treatment)

    commit_or_rollback(db, "rescheduling appointment")
    db.refresh(appointment)
    logger.info(f"Appointment {appointment_id} rescheduled to {appointment.scheduled_date} {appointment.scheduled_time}")
    return appointment
