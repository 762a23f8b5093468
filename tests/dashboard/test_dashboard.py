"""
Tests for the composed dashboard.
"""
from beauty_clinic.models import AppointmentStatus

URL = "/api/v1/dashboard/"


def test_dashboard_without_appointments(client, make_clinic, make_user, auth_headers):
    clinic = make_clinic()
    user = make_user(primary_clinic_id=clinic.id, beauty_points=120)

    response = client.get(URL, headers=auth_headers(user))
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["nextAppointment"] is None
    assert data["wellnessTip"] is None
    assert data["featuredTreatments"] == []
    assert data["user"]["primaryClinic"]["id"] == clinic.id
    assert data["user"]["vipSubscriptions"] == []
    assert data["stats"]["beautyPoints"] == 120
    assert data["stats"]["totalSessions"] == 0


def test_next_appointment_is_earliest_open_one(
    client, make_clinic, make_user, make_treatment, make_appointment, auth_headers
):
    user = make_user()
    treatment = make_treatment(make_clinic())
    make_appointment(user, treatment, days_ahead=5, hour=9)
    make_appointment(user, treatment, days_ahead=1, hour=9, status=AppointmentStatus.CANCELLED)
    make_appointment(user, treatment, days_ahead=2, hour=16)
    expected = make_appointment(user, treatment, days_ahead=2, hour=11, status=AppointmentStatus.CONFIRMED)
    make_appointment(user, treatment, days_ahead=-1, hour=9)

    response = client.get(URL, headers=auth_headers(user))
    assert response.json()["data"]["nextAppointment"]["id"] == expected.id

    response = client.get("/api/v1/appointments/next", headers=auth_headers(user))
    assert response.json()["data"]["id"] == expected.id


def test_dashboard_is_stable_between_reads(
    client, make_clinic, make_user, make_treatment, make_appointment, make_tip, auth_headers
):
    clinic = make_clinic()
    user = make_user(primary_clinic_id=clinic.id)
    treatment = make_treatment(clinic)
    make_appointment(user, treatment, days_ahead=2, hour=10)
    make_appointment(user, treatment, days_ahead=2, hour=10)
    make_tip()

    first = client.get(URL, headers=auth_headers(user)).json()
    second = client.get(URL, headers=auth_headers(user)).json()
    assert first == second


def test_featured_hides_vip_exclusive_for_regular_users(
    client, make_clinic, make_user, make_treatment, auth_headers
):
    clinic = make_clinic()
    user = make_user(primary_clinic_id=clinic.id)
    regular = make_treatment(clinic, name="Manicure")
    make_treatment(clinic, name="Gold mask", is_vip_exclusive=True)
    make_treatment(clinic, name="Retired peel", is_active=False)
    make_treatment(make_clinic(), name="Elsewhere")

    data = client.get(URL, headers=auth_headers(user)).json()["data"]
    assert [t["id"] for t in data["featuredTreatments"]] == [regular.id]


def test_featured_includes_vip_exclusive_for_vip(
    client, make_clinic, make_user, make_treatment, make_vip, auth_headers
):
    clinic = make_clinic()
    user = make_user(primary_clinic_id=clinic.id)
    make_vip(user)
    make_treatment(clinic, name="Manicure")
    make_treatment(clinic, name="Gold mask", is_vip_exclusive=True)

    data = client.get(URL, headers=auth_headers(user)).json()["data"]
    assert {t["name"] for t in data["featuredTreatments"]} == {"Manicure", "Gold mask"}
    assert data["user"]["vipStatus"] is True
    assert len(data["user"]["vipSubscriptions"]) == 1


def test_lapsed_vip_is_not_vip_on_dashboard(
    client, make_clinic, make_user, make_treatment, make_vip, auth_headers
):
    clinic = make_clinic()
    user = make_user(primary_clinic_id=clinic.id)
    make_vip(user, days_left=-1)
    make_treatment(clinic, name="Manicure")
    make_treatment(clinic, name="Gold mask", is_vip_exclusive=True)

    data = client.get(URL, headers=auth_headers(user)).json()["data"]
    assert data["user"]["vipStatus"] is False
    assert data["user"]["vipSubscriptions"] == []
    assert data["stats"]["vipStatus"] is False
    assert [t["name"] for t in data["featuredTreatments"]] == ["Manicure"]


def test_featured_is_capped(client, make_clinic, make_user, make_treatment, auth_headers):
    clinic = make_clinic()
    user = make_user(primary_clinic_id=clinic.id)
    for n in range(8):
        make_treatment(clinic, name=f"Treatment {n}")

    data = client.get(URL, headers=auth_headers(user)).json()["data"]
    assert len(data["featuredTreatments"]) == 6


def test_wellness_tip_from_own_clinic_or_global(client, make_clinic, make_user, make_tip, auth_headers):
    clinic = make_clinic()
    other = make_clinic()
    user = make_user(primary_clinic_id=clinic.id)
    make_tip(title="Global")
    own = make_tip(title="Own clinic", clinic_id=clinic.id)
    make_tip(title="Other clinic", clinic_id=other.id)
    make_tip(title="Hidden", is_active=False)

    data = client.get(URL, headers=auth_headers(user)).json()["data"]
    assert data["wellnessTip"]["id"] == own.id


def test_dashboard_requires_user(client):
    assert client.get(URL).status_code == 401
