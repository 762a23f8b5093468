"""
Tests for consent templates, signing and approval.
"""
from datetime import timedelta

from beauty_clinic.core.dates import as_utc
from beauty_clinic.core.security import SubjectType
from beauty_clinic.models import ConsentStatus, RiskLevel

URL = "/api/v1/consents"


def test_create_template(client, make_clinic, auth_headers):
    clinic = make_clinic()
    response = client.post(
        f"{URL}/templates",
        json={
            "title": "Laser consent",
            "fields": [{"name": "risks", "label": "I understand the risks"}],
            "validityDays": 180,
        },
        headers=auth_headers(clinic, SubjectType.CLINIC),
    )
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["clinicId"] == clinic.id
    assert data["validityDays"] == 180
    assert data["fields"][0]["required"] is True

    listed = client.get(f"{URL}/templates", params={"clinicId": clinic.id}).json()["data"]
    assert [t["id"] for t in listed] == [data["id"]]


def test_sign_sets_expiry_from_template(
    client, db, make_clinic, make_user, make_treatment, make_template, make_appointment, auth_headers
):
    clinic = make_clinic()
    user = make_user()
    template = make_template(clinic, validity_days=90)
    treatment = make_treatment(clinic, risk_level=RiskLevel.MEDICAL, consent_form_template_id=template.id)
    appointment = make_appointment(user, treatment)

    response = client.post(
        f"{URL}/", json={"treatmentId": treatment.id, "answers": {"accept": True}}, headers=auth_headers(user)
    )
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["status"] == "COMPLETED"
    assert data["templateId"] == template.id

    db.expire_all()
    consent = user.consents[0]
    assert as_utc(consent.expires_at) - as_utc(consent.signed_at) == timedelta(days=90)
    db.refresh(appointment)
    assert appointment.consent_status == ConsentStatus.COMPLETED


def test_sign_with_missing_answers(client, make_clinic, make_user, make_treatment, make_template, auth_headers):
    clinic = make_clinic()
    template = make_template(clinic)
    treatment = make_treatment(clinic, consent_form_required=True, consent_form_template_id=template.id)

    response = client.post(
        f"{URL}/", json={"treatmentId": treatment.id, "answers": {}}, headers=auth_headers(make_user())
    )
    assert response.status_code == 400
    assert response.json()["error"]["details"] == {"fields": ["accept"]}


def test_approve_unlocks_confirmation(
    client, db, make_clinic, make_user, make_treatment, make_template, make_consent, make_appointment, auth_headers
):
    clinic = make_clinic()
    user = make_user()
    template = make_template(clinic)
    treatment = make_treatment(clinic, consent_form_required=True, consent_form_template_id=template.id)
    consent = make_consent(user, treatment, template, status=ConsentStatus.COMPLETED)
    appointment = make_appointment(user, treatment, consent_status=ConsentStatus.COMPLETED)

    response = client.post(f"{URL}/{consent.id}/approve", headers=auth_headers(clinic, SubjectType.CLINIC))
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "APPROVED"
    assert response.json()["data"]["approvedAt"] is not None

    db.refresh(appointment)
    assert appointment.consent_status == ConsentStatus.APPROVED

    response = client.patch(f"/api/v1/appointments/{appointment.id}/confirm", headers=auth_headers(user))
    assert response.status_code == 200


def test_approve_twice_conflicts(client, make_clinic, make_user, make_treatment, make_template, make_consent, auth_headers):
    clinic = make_clinic()
    template = make_template(clinic)
    treatment = make_treatment(clinic, consent_form_template_id=template.id)
    consent = make_consent(make_user(), treatment, template, status=ConsentStatus.APPROVED)

    response = client.post(f"{URL}/{consent.id}/approve", headers=auth_headers(clinic, SubjectType.CLINIC))
    assert response.status_code == 409


def test_other_clinic_cannot_approve(client, make_clinic, make_user, make_treatment, make_template, make_consent, auth_headers):
    clinic = make_clinic()
    template = make_template(clinic)
    treatment = make_treatment(clinic, consent_form_template_id=template.id)
    consent = make_consent(make_user(), treatment, template, status=ConsentStatus.COMPLETED)

    other = make_clinic()
    response = client.post(f"{URL}/{consent.id}/approve", headers=auth_headers(other, SubjectType.CLINIC))
    assert response.status_code == 403


def test_check_consent(client, make_clinic, make_user, make_treatment, make_template, make_consent, auth_headers):
    clinic = make_clinic()
    user = make_user()
    template = make_template(clinic)
    treatment = make_treatment(clinic, consent_form_required=True, consent_form_template_id=template.id)

    data = client.get(f"{URL}/check/{treatment.id}", headers=auth_headers(user)).json()["data"]
    assert data["consentRequired"] is True
    assert data["hasValidConsent"] is False
    assert data["status"] == "PENDING"

    make_consent(user, treatment, template)
    data = client.get(f"{URL}/check/{treatment.id}", headers=auth_headers(user)).json()["data"]
    assert data["hasValidConsent"] is True
    assert data["status"] == "APPROVED"
    assert data["consent"]["treatmentId"] == treatment.id


def test_my_consents(client, make_clinic, make_user, make_treatment, make_template, make_consent, auth_headers):
    clinic = make_clinic()
    user = make_user()
    template = make_template(clinic)
    treatment = make_treatment(clinic, consent_form_template_id=template.id)
    make_consent(user, treatment, template)
    make_consent(make_user(), treatment, template)

    data = client.get(f"{URL}/me", headers=auth_headers(user)).json()["data"]
    assert len(data) == 1
    assert data[0]["userId"] == user.id


def test_pending_lists_signed_consents_of_own_templates(
    client, make_clinic, make_user, make_treatment, make_template, make_consent, auth_headers
):
    clinic = make_clinic()
    treatment = make_treatment(clinic, risk_level=RiskLevel.MEDICAL)
    template = make_template(clinic)
    user = make_user(first_name="Marta")
    waiting = make_consent(user, treatment, template, status=ConsentStatus.COMPLETED)
    make_consent(make_user(), treatment, template, status=ConsentStatus.APPROVED)
    other_clinic = make_clinic()
    make_consent(
        user, make_treatment(other_clinic), make_template(other_clinic), status=ConsentStatus.COMPLETED
    )

    response = client.get(f"{URL}/pending", headers=auth_headers(clinic, SubjectType.CLINIC))
    assert response.status_code == 200
    data = response.json()["data"]
    assert [c["id"] for c in data] == [waiting.id]
    assert data[0]["user"]["firstName"] == "Marta"
    assert data[0]["treatment"]["id"] == treatment.id


def test_pending_empties_after_approval(
    client, make_clinic, make_user, make_treatment, make_template, make_consent, auth_headers
):
    clinic = make_clinic()
    template = make_template(clinic)
    consent = make_consent(make_user(), make_treatment(clinic), template, status=ConsentStatus.COMPLETED)
    headers = auth_headers(clinic, SubjectType.CLINIC)

    assert client.post(f"{URL}/{consent.id}/approve", headers=headers).status_code == 200
    assert client.get(f"{URL}/pending", headers=headers).json()["data"] == []


def test_users_cannot_list_pending_consents(client, make_user, auth_headers):
    assert client.get(f"{URL}/pending", headers=auth_headers(make_user())).status_code == 401
