"""
Tests for booking and the appointment lifecycle.
"""
from datetime import timedelta
from decimal import Decimal

from beauty_clinic.core.dates import utcnow
from beauty_clinic.core.security import SubjectType
from beauty_clinic.models import AppointmentStatus, ConsentStatus, ProfessionalRole, RiskLevel

BASE = "/api/v1/appointments"


def _booking(treatment, days_ahead=3, time="10:00", **extra):
    day = (utcnow() + timedelta(days=days_ahead)).date().isoformat()
    return {"treatmentId": treatment.id, "scheduledDate": day, "scheduledTime": time, **extra}


def test_book_appointment(client, make_clinic, make_user, make_treatment, auth_headers):
    clinic = make_clinic()
    user = make_user()
    treatment = make_treatment(clinic, vip_price=Decimal("60.00"))

    response = client.post(f"{BASE}/", json=_booking(treatment), headers=auth_headers(user))
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["status"] == "PENDING"
    assert data["consentStatus"] == "APPROVED"
    assert data["originalPrice"] == 80.0
    assert data["finalPrice"] == 80.0
    assert data["treatment"]["name"] == "Hydrating facial"
    assert data["clinic"]["slug"] == clinic.slug


def test_vip_pays_vip_price(client, make_clinic, make_user, make_treatment, make_vip, auth_headers):
    clinic = make_clinic()
    user = make_user()
    make_vip(user)
    treatment = make_treatment(clinic, vip_price=Decimal("60.00"))

    response = client.post(f"{BASE}/", json=_booking(treatment), headers=auth_headers(user))
    assert response.status_code == 201
    assert response.json()["data"]["finalPrice"] == 60.0


def test_book_in_the_past(client, make_clinic, make_user, make_treatment, auth_headers):
    treatment = make_treatment(make_clinic())
    response = client.post(
        f"{BASE}/", json=_booking(treatment, days_ahead=-1), headers=auth_headers(make_user())
    )
    assert response.status_code == 400


def test_book_when_online_booking_disabled(client, make_clinic, make_user, make_treatment, auth_headers):
    treatment = make_treatment(make_clinic(enable_online_booking=False))
    response = client.post(f"{BASE}/", json=_booking(treatment), headers=auth_headers(make_user()))
    assert response.status_code == 400


def test_vip_exclusive_needs_vip(client, make_clinic, make_user, make_treatment, auth_headers):
    treatment = make_treatment(make_clinic(), is_vip_exclusive=True)
    response = client.post(f"{BASE}/", json=_booking(treatment), headers=auth_headers(make_user()))
    assert response.status_code == 403


def test_medical_treatment_needs_medical_staff(
    client, make_clinic, make_user, make_treatment, make_professional, auth_headers
):
    clinic = make_clinic()
    treatment = make_treatment(clinic, risk_level=RiskLevel.MEDICAL)
    beautician = make_professional(clinic)
    doctor = make_professional(clinic, role=ProfessionalRole.MEDICAL_STAFF)
    headers = auth_headers(make_user())

    response = client.post(f"{BASE}/", json=_booking(treatment, professionalId=beautician.id), headers=headers)
    assert response.status_code == 400

    response = client.post(f"{BASE}/", json=_booking(treatment, professionalId=doctor.id), headers=headers)
    assert response.status_code == 201
    assert response.json()["data"]["consentStatus"] == "PENDING"


def test_professional_from_other_clinic(client, make_clinic, make_user, make_treatment, make_professional, auth_headers):
    treatment = make_treatment(make_clinic())
    stranger = make_professional(make_clinic())
    response = client.post(
        f"{BASE}/", json=_booking(treatment, professionalId=stranger.id), headers=auth_headers(make_user())
    )
    assert response.status_code == 400


def test_confirm_without_consent_conflicts(
    client, db, make_clinic, make_user, make_treatment, make_appointment, auth_headers
):
    """Treatments requiring a consent stay PENDING until one is approved."""
    clinic = make_clinic()
    user = make_user()
    treatment = make_treatment(clinic, consent_form_required=True)
    appointment = make_appointment(user, treatment)

    response = client.patch(f"{BASE}/{appointment.id}/confirm", headers=auth_headers(user))
    assert response.status_code == 409

    db.refresh(appointment)
    assert appointment.status == AppointmentStatus.PENDING


def test_confirm_with_expired_consent_conflicts(
    client, make_clinic, make_user, make_treatment, make_template, make_consent, make_appointment, auth_headers
):
    clinic = make_clinic()
    user = make_user()
    template = make_template(clinic)
    treatment = make_treatment(clinic, consent_form_required=True, consent_form_template_id=template.id)
    make_consent(user, treatment, template, expires_in_days=-1)
    appointment = make_appointment(user, treatment)

    response = client.patch(f"{BASE}/{appointment.id}/confirm", headers=auth_headers(user))
    assert response.status_code == 409


def test_confirm_with_approved_consent(
    client, make_clinic, make_user, make_treatment, make_template, make_consent, make_appointment, auth_headers
):
    clinic = make_clinic()
    user = make_user()
    template = make_template(clinic)
    treatment = make_treatment(clinic, consent_form_required=True, consent_form_template_id=template.id)
    make_consent(user, treatment, template)
    appointment = make_appointment(user, treatment)

    response = client.patch(
        f"{BASE}/{appointment.id}/confirm", headers=auth_headers(clinic, SubjectType.CLINIC)
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "CONFIRMED"
    assert data["consentStatus"] == "APPROVED"


def test_other_clinic_cannot_confirm(client, make_clinic, make_user, make_treatment, make_appointment, auth_headers):
    appointment = make_appointment(make_user(), make_treatment(make_clinic()))
    other = make_clinic()
    response = client.patch(f"{BASE}/{appointment.id}/confirm", headers=auth_headers(other, SubjectType.CLINIC))
    assert response.status_code == 403


def test_full_lifecycle_awards_points(
    client, db, make_clinic, make_user, make_treatment, make_professional, make_appointment, auth_headers
):
    clinic = make_clinic()
    user = make_user(beauty_points=200)
    professional = make_professional(clinic)
    treatment = make_treatment(clinic, beauty_points=50)
    appointment = make_appointment(user, treatment)
    staff_headers = auth_headers(professional, SubjectType.PROFESSIONAL)

    assert client.patch(f"{BASE}/{appointment.id}/confirm", headers=auth_headers(user)).status_code == 200
    response = client.patch(f"{BASE}/{appointment.id}/start", headers=staff_headers)
    assert response.status_code == 200
    assert response.json()["data"]["professionalId"] == professional.id

    response = client.patch(f"{BASE}/{appointment.id}/complete", headers=staff_headers)
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "COMPLETED"
    assert data["beautyPointsEarned"] == 50
    assert data["completedAt"] is not None

    db.refresh(user)
    assert user.beauty_points == 250
    assert user.loyalty_tier.value == "SILVER"
    assert user.sessions_completed == 1
    assert user.total_investment == Decimal("80.00")


def test_vip_earns_double_points(
    client, db, make_clinic, make_user, make_treatment, make_appointment, make_vip, auth_headers
):
    clinic = make_clinic()
    user = make_user()
    make_vip(user)
    treatment = make_treatment(clinic, beauty_points=50)
    appointment = make_appointment(user, treatment, status=AppointmentStatus.IN_PROGRESS)

    response = client.patch(f"{BASE}/{appointment.id}/complete", headers=auth_headers(clinic, SubjectType.CLINIC))
    assert response.status_code == 200
    assert response.json()["data"]["beautyPointsEarned"] == 100

    db.refresh(user)
    assert user.beauty_points == 100


def test_complete_pending_is_illegal(client, make_clinic, make_user, make_treatment, make_appointment, auth_headers):
    clinic = make_clinic()
    appointment = make_appointment(make_user(), make_treatment(clinic))
    response = client.patch(f"{BASE}/{appointment.id}/complete", headers=auth_headers(clinic, SubjectType.CLINIC))
    assert response.status_code == 409


def test_user_cannot_start(client, make_clinic, make_user, make_treatment, make_appointment, auth_headers):
    user = make_user()
    appointment = make_appointment(user, make_treatment(make_clinic()), status=AppointmentStatus.CONFIRMED)
    response = client.patch(f"{BASE}/{appointment.id}/start", headers=auth_headers(user))
    assert response.status_code == 403


def test_cancel_with_reason(client, make_clinic, make_user, make_treatment, make_appointment, auth_headers):
    user = make_user()
    appointment = make_appointment(user, make_treatment(make_clinic()), notes="Sensitive skin")

    response = client.patch(
        f"{BASE}/{appointment.id}/cancel", json={"reason": "Travelling"}, headers=auth_headers(user)
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "CANCELLED"
    assert data["cancellationReason"] == "Travelling"
    assert data["notes"] == "Sensitive skin\nCancelled: Travelling"

    response = client.patch(f"{BASE}/{appointment.id}/cancel", headers=auth_headers(user))
    assert response.status_code == 409


def test_cannot_touch_other_users_appointment(client, make_clinic, make_user, make_treatment, make_appointment, auth_headers):
    appointment = make_appointment(make_user(), make_treatment(make_clinic()))
    intruder = make_user()
    assert client.get(f"{BASE}/{appointment.id}", headers=auth_headers(intruder)).status_code == 404
    assert client.patch(f"{BASE}/{appointment.id}/cancel", headers=auth_headers(intruder)).status_code == 404


def test_reschedule_confirmed_goes_back_to_pending(
    client, make_clinic, make_user, make_treatment, make_appointment, auth_headers
):
    user = make_user()
    appointment = make_appointment(user, make_treatment(make_clinic()), status=AppointmentStatus.CONFIRMED)
    new_day = (utcnow() + timedelta(days=10)).date().isoformat()

    response = client.patch(
        f"{BASE}/{appointment.id}/reschedule",
        json={"scheduledDate": new_day, "scheduledTime": "15:30"},
        headers=auth_headers(user),
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "PENDING"
    assert data["scheduledDate"] == new_day
    assert data["scheduledTime"] == "15:30:00"


def test_reschedule_completed_is_refused(client, make_clinic, make_user, make_treatment, make_appointment, auth_headers):
    user = make_user()
    appointment = make_appointment(user, make_treatment(make_clinic()), status=AppointmentStatus.COMPLETED)
    new_day = (utcnow() + timedelta(days=10)).date().isoformat()
    response = client.patch(
        f"{BASE}/{appointment.id}/reschedule",
        json={"scheduledDate": new_day, "scheduledTime": "15:30"},
        headers=auth_headers(user),
    )
    assert response.status_code == 409


def test_list_and_stats(client, make_clinic, make_user, make_treatment, make_appointment, auth_headers):
    user = make_user()
    treatment = make_treatment(make_clinic())
    make_appointment(user, treatment, days_ahead=2)
    make_appointment(user, treatment, days_ahead=5, status=AppointmentStatus.CANCELLED)
    make_appointment(
        user, treatment, days_ahead=-3, status=AppointmentStatus.COMPLETED, beauty_points_earned=50
    )

    response = client.get(f"{BASE}/", headers=auth_headers(user))
    assert response.status_code == 200
    assert response.json()["data"]["total"] == 3

    response = client.get(f"{BASE}/?status=CANCELLED", headers=auth_headers(user))
    assert response.json()["data"]["total"] == 1

    stats = client.get(f"{BASE}/stats", headers=auth_headers(user)).json()["data"]
    assert stats["total"] == 3
    assert stats["completed"] == 1
    assert stats["pending"] == 1
    assert stats["cancelled"] == 1
    assert stats["totalSpent"] == 80.0
    assert stats["beautyPointsEarned"] == 50


def test_availability(client, make_clinic, make_user, make_treatment, make_professional, make_appointment):
    clinic = make_clinic()
    first = make_professional(clinic)
    second = make_professional(clinic)
    treatment = make_treatment(clinic, duration_minutes=60)
    make_appointment(make_user(), treatment, hour=10, professional_id=first.id)
    make_appointment(make_user(), treatment, hour=11, professional_id=first.id)
    make_appointment(make_user(), treatment, hour=11, professional_id=second.id)
    day = (utcnow() + timedelta(days=3)).date().isoformat()

    response = client.get(f"{BASE}/availability", params={"clinicId": clinic.id, "date": day})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["totalProfessionals"] == 2
    assert data["slotMinutes"] == 30

    slots = {slot["time"]: slot for slot in data["availableSlots"]}
    assert "13:00" not in slots
    assert "09:00" in slots and "17:30" in slots
    assert [p["id"] for p in slots["10:30"]["professionals"]] == [second.id]
    assert "11:00" not in slots
    assert "11:30" not in slots
    assert slots["12:00"]["count"] == 2
    assert data["totalSlots"] == 14


def test_availability_unknown_clinic(client):
    response = client.get(f"{BASE}/availability", params={"clinicId": 999, "date": "2030-01-01"})
    assert response.status_code == 404
