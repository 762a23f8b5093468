"""
Tests for clinics, professionals and the user profile.
"""
from beauty_clinic.core.security import SubjectType

from conftest import PASSWORD

NEW_CLINIC = {
    "name": "Glow Studio",
    "slug": "glow-studio",
    "email": "admin@glow.example.com",
    "password": "Clinic1234",
    "city": "Valencia",
    "businessHours": {
        "monday": {"open": "09:00", "close": "18:00"},
        "sunday": {"closed": True},
    },
}


def test_register_clinic_and_login(client):
    response = client.post("/api/v1/clinics/", json=NEW_CLINIC)
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["slug"] == "glow-studio"
    assert data["businessHours"]["sunday"]["closed"] is True
    assert "passwordHash" not in data

    response = client.post(
        "/api/v1/auth/clinic/login", json={"email": NEW_CLINIC["email"], "password": NEW_CLINIC["password"]}
    )
    assert response.status_code == 200

    response = client.get("/api/v1/clinics/slug/glow-studio")
    assert response.json()["data"]["id"] == data["id"]


def test_duplicate_slug_conflicts(client, make_clinic):
    make_clinic(slug="glow-studio")
    response = client.post("/api/v1/clinics/", json=NEW_CLINIC)
    assert response.status_code == 409
    assert response.json()["error"]["message"] == "A clinic with this slug already exists"


def test_invalid_business_hours(client):
    payload = {**NEW_CLINIC, "businessHours": {"monday": {"open": "18:00", "close": "09:00"}}}
    assert client.post("/api/v1/clinics/", json=payload).status_code == 400

    payload = {**NEW_CLINIC, "businessHours": {"funday": {"closed": True}}}
    assert client.post("/api/v1/clinics/", json=payload).status_code == 400


def test_update_own_clinic(client, make_clinic, auth_headers):
    clinic = make_clinic()
    response = client.put(
        f"/api/v1/clinics/{clinic.id}",
        json={"enableOnlineBooking": False},
        headers=auth_headers(clinic, SubjectType.CLINIC),
    )
    assert response.status_code == 200
    assert response.json()["data"]["enableOnlineBooking"] is False


def test_update_other_clinic_forbidden(client, make_clinic, auth_headers):
    clinic = make_clinic()
    other = make_clinic()
    response = client.put(
        f"/api/v1/clinics/{other.id}", json={"name": "Hijacked"}, headers=auth_headers(clinic, SubjectType.CLINIC)
    )
    assert response.status_code == 403


def test_deactivated_clinic_is_hidden(client, make_clinic, auth_headers):
    clinic = make_clinic()
    response = client.delete(f"/api/v1/clinics/{clinic.id}", headers=auth_headers(clinic, SubjectType.CLINIC))
    assert response.status_code == 200
    assert client.get("/api/v1/clinics/").json()["data"]["total"] == 0
    assert client.post(
        "/api/v1/auth/clinic/login", json={"email": clinic.email, "password": PASSWORD}
    ).status_code == 401


def test_clinic_adds_professional(client, make_clinic, auth_headers):
    clinic = make_clinic()
    payload = {
        "email": "doctor@example.com",
        "password": "Doctor1234",
        "firstName": "Elena",
        "lastName": "Sanz",
        "specialties": ["Laser"],
        "role": "MEDICAL_STAFF",
    }
    response = client.post("/api/v1/professionals/", json=payload, headers=auth_headers(clinic, SubjectType.CLINIC))
    assert response.status_code == 201
    assert response.json()["data"]["clinicId"] == clinic.id

    response = client.post("/api/v1/professionals/", json=payload, headers=auth_headers(clinic, SubjectType.CLINIC))
    assert response.status_code == 409

    listed = client.get("/api/v1/professionals/", params={"specialty": "laser"}).json()["data"]
    assert [p["email"] for p in listed] == ["doctor@example.com"]


def test_professional_me(client, make_clinic, make_professional, auth_headers):
    professional = make_professional(make_clinic())
    response = client.get("/api/v1/professionals/me", headers=auth_headers(professional, SubjectType.PROFESSIONAL))
    assert response.status_code == 200
    assert response.json()["data"]["id"] == professional.id


def test_profile_update(client, make_user, auth_headers):
    user = make_user()
    response = client.put(
        "/api/v1/profile/", json={"skinType": "DRY", "allergies": ["latex"]}, headers=auth_headers(user)
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["skinType"] == "DRY"
    assert data["allergies"] == ["latex"]


def test_profile_rejects_loyalty_fields(client, db, make_user, auth_headers):
    """Tier, points and VIP flag are managed by the platform."""
    user = make_user()
    for payload in ({"loyaltyTier": "GOLD"}, {"vipStatus": True}, {"beautyPoints": 9999}):
        response = client.put("/api/v1/profile/", json=payload, headers=auth_headers(user))
        assert response.status_code == 400

    db.refresh(user)
    assert user.loyalty_tier.value == "BRONZE"
    assert user.beauty_points == 0


def test_change_password(client, make_user, auth_headers):
    user = make_user()
    response = client.put(
        "/api/v1/profile/change-password",
        json={"currentPassword": "wrong-one", "newPassword": "Another123"},
        headers=auth_headers(user),
    )
    assert response.status_code == 401

    response = client.put(
        "/api/v1/profile/change-password",
        json={"currentPassword": PASSWORD, "newPassword": "Another123"},
        headers=auth_headers(user),
    )
    assert response.status_code == 200
    response = client.post("/api/v1/auth/login", json={"email": user.email, "password": "Another123"})
    assert response.status_code == 200
