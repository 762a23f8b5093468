"""
Tests for the clinic side of appointments: the calendar listing and the overview.
"""
from datetime import timedelta
from decimal import Decimal

from beauty_clinic.core.dates import utcnow
from beauty_clinic.core.security import SubjectType
from beauty_clinic.models import AppointmentStatus

BASE = "/api/v1/appointments"


def test_clinic_lists_own_appointments_in_calendar_order(
    client, make_clinic, make_user, make_treatment, make_appointment, auth_headers
):
    clinic = make_clinic()
    treatment = make_treatment(clinic)
    user = make_user(first_name="Marta")
    later = make_appointment(user, treatment, days_ahead=4, hour=9)
    first = make_appointment(user, treatment, days_ahead=2, hour=15)
    second = make_appointment(make_user(), treatment, days_ahead=3, hour=11)
    make_appointment(user, make_treatment(make_clinic()), days_ahead=1)

    response = client.get(f"{BASE}/clinic", headers=auth_headers(clinic, SubjectType.CLINIC))
    assert response.status_code == 200
    page = response.json()["data"]
    assert page["total"] == 3
    assert [a["id"] for a in page["items"]] == [first.id, second.id, later.id]
    assert page["items"][0]["user"]["firstName"] == "Marta"


def test_clinic_listing_filters(
    client, make_clinic, make_user, make_treatment, make_appointment, make_professional, auth_headers
):
    clinic = make_clinic()
    treatment = make_treatment(clinic)
    professional = make_professional(clinic)
    user = make_user()
    confirmed = make_appointment(
        user, treatment, days_ahead=2, status=AppointmentStatus.CONFIRMED, professional_id=professional.id
    )
    make_appointment(user, treatment, days_ahead=2, hour=12)
    make_appointment(user, treatment, days_ahead=6, status=AppointmentStatus.CONFIRMED)
    headers = auth_headers(clinic, SubjectType.CLINIC)

    by_status = client.get(f"{BASE}/clinic", params={"status": "CONFIRMED"}, headers=headers).json()["data"]
    assert by_status["total"] == 2

    day = (utcnow() + timedelta(days=2)).date().isoformat()
    by_day = client.get(
        f"{BASE}/clinic", params={"status": "CONFIRMED", "dateFrom": day, "dateTo": day}, headers=headers
    ).json()["data"]
    assert [a["id"] for a in by_day["items"]] == [confirmed.id]

    by_professional = client.get(
        f"{BASE}/clinic", params={"professionalId": professional.id}, headers=headers
    ).json()["data"]
    assert [a["id"] for a in by_professional["items"]] == [confirmed.id]


def test_professional_sees_own_clinic_listing(
    client, make_clinic, make_user, make_treatment, make_appointment, make_professional, auth_headers
):
    clinic = make_clinic()
    appointment = make_appointment(make_user(), make_treatment(clinic))
    make_appointment(make_user(), make_treatment(make_clinic()))
    professional = make_professional(clinic)

    response = client.get(f"{BASE}/clinic", headers=auth_headers(professional, SubjectType.PROFESSIONAL))
    assert response.status_code == 200
    assert [a["id"] for a in response.json()["data"]["items"]] == [appointment.id]


def test_users_cannot_list_clinic_appointments(client, make_user, auth_headers):
    assert client.get(f"{BASE}/clinic", headers=auth_headers(make_user())).status_code == 403


def test_clinic_overview(client, make_clinic, make_user, make_treatment, make_appointment, auth_headers):
    clinic = make_clinic()
    facial = make_treatment(clinic, name="Facial", price=Decimal("80.00"))
    peel = make_treatment(clinic, name="Peel", price=Decimal("120.00"))
    user = make_user()
    done_today = make_appointment(user, facial, days_ahead=0, hour=9, status=AppointmentStatus.COMPLETED)
    make_appointment(user, facial, days_ahead=-2, status=AppointmentStatus.COMPLETED)
    make_appointment(user, peel, days_ahead=-1, status=AppointmentStatus.COMPLETED)
    waiting_today = make_appointment(user, peel, days_ahead=0, hour=16)
    make_appointment(user, facial, days_ahead=3)
    make_appointment(user, make_treatment(make_clinic()), days_ahead=0, status=AppointmentStatus.COMPLETED)

    response = client.get(f"{BASE}/clinic/overview", headers=auth_headers(clinic, SubjectType.CLINIC))
    assert response.status_code == 200
    data = response.json()["data"]

    assert data["date"] == utcnow().date().isoformat()
    assert data["today"]["total"] == 2
    assert data["today"]["completed"] == 1
    assert data["today"]["pending"] == 1
    assert [a["id"] for a in data["today"]["appointments"]] == [done_today.id, waiting_today.id]
    assert data["revenue"] == {"total": 280.0, "today": 80.0, "completedAppointments": 3}
    assert data["awaitingConfirmation"] == 2
    assert data["topTreatments"] == [
        {"treatmentId": facial.id, "name": "Facial", "completedCount": 2, "revenue": 160.0},
        {"treatmentId": peel.id, "name": "Peel", "completedCount": 1, "revenue": 120.0},
    ]


def test_overview_is_clinic_only(client, make_clinic, make_professional, auth_headers):
    professional = make_professional(make_clinic())
    response = client.get(f"{BASE}/clinic/overview", headers=auth_headers(professional, SubjectType.PROFESSIONAL))
    assert response.status_code == 401
