"""
Test configuration for the beauty clinic backend.

Each test gets a fresh in-memory SQLite schema shared between the test
session and the application through ``StaticPool``.
"""
from datetime import time, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from beauty_clinic.config import Settings
from beauty_clinic.core.dates import utcnow
from beauty_clinic.core.security import SubjectType, hash_password, issue_tokens
from beauty_clinic.main import create_app
from beauty_clinic.models import (
    Appointment,
    AppointmentStatus,
    Base,
    Clinic,
    ConsentFormTemplate,
    ConsentStatus,
    PatientConsent,
    Professional,
    ProfessionalRole,
    RiskLevel,
    Treatment,
    User,
    VipPlan,
    VipSubscription,
    VipSubscriptionStatus,
    WellnessTip,
)

PASSWORD = "Secret123!"
PASSWORD_HASH = hash_password(PASSWORD)


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite://",
        jwt_secret="test-access-secret",
        jwt_refresh_secret="test-refresh-secret",
        rate_limit_enabled=False,
        environment="test",
    )


@pytest.fixture
def engine():
    """
    Create a fresh database for each test.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def app(settings, engine):
    return create_app(settings, engine)


@pytest.fixture
def client(app):
    """
    Create a test client bound to the test database.
    """
    with TestClient(app) as client:
        yield client


@pytest.fixture
def auth_headers(settings):
    """Build an Authorization header for a user, professional or clinic."""
    def _headers(subject, subject_type=SubjectType.USER):
        token = issue_tokens(subject.id, settings, subject_type).access_token
        return {"Authorization": f"Bearer {token}"}
    return _headers


def _save(db, instance):
    db.add(instance)
    db.commit()
    db.refresh(instance)
    return instance


@pytest.fixture
def make_clinic(db):
    counter = {"n": 0}

    def _make(**kwargs):
        counter["n"] += 1
        n = counter["n"]
        data = {
            "name": f"Clinic {n}",
            "slug": f"clinic-{n}",
            "email": f"clinic{n}@example.com",
            "password_hash": PASSWORD_HASH,
            "city": "Madrid",
        }
        data.update(kwargs)
        return _save(db, Clinic(**data))
    return _make


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(**kwargs):
        counter["n"] += 1
        n = counter["n"]
        data = {
            "email": f"user{n}@example.com",
            "password_hash": PASSWORD_HASH,
            "first_name": "Ana",
            "last_name": f"Lopez{n}",
        }
        data.update(kwargs)
        return _save(db, User(**data))
    return _make


@pytest.fixture
def make_professional(db):
    counter = {"n": 0}

    def _make(clinic, **kwargs):
        counter["n"] += 1
        n = counter["n"]
        data = {
            "clinic_id": clinic.id,
            "email": f"pro{n}@example.com",
            "password_hash": PASSWORD_HASH,
            "first_name": "Laura",
            "last_name": f"Garcia{n}",
            "specialties": ["Facial"],
            "role": ProfessionalRole.PROFESSIONAL,
        }
        data.update(kwargs)
        return _save(db, Professional(**data))
    return _make


@pytest.fixture
def make_treatment(db):
    def _make(clinic, **kwargs):
        data = {
            "clinic_id": clinic.id,
            "name": "Hydrating facial",
            "category": "Facial",
            "risk_level": RiskLevel.LOW,
            "price": Decimal("80.00"),
            "duration_minutes": 60,
            "beauty_points": 50,
        }
        data.update(kwargs)
        treatment = Treatment(**data)
        treatment.apply_risk_requirements()
        return _save(db, treatment)
    return _make


@pytest.fixture
def make_appointment(db):
    def _make(user, treatment, days_ahead=3, hour=10, minute=0, **kwargs):
        when = utcnow() + timedelta(days=days_ahead)
        data = {
            "user_id": user.id,
            "clinic_id": treatment.clinic_id,
            "treatment_id": treatment.id,
            "scheduled_date": when.date(),
            "scheduled_time": time(hour, minute),
            "duration_minutes": treatment.duration_minutes,
            "status": AppointmentStatus.PENDING,
            "consent_status": (
                ConsentStatus.PENDING if treatment.consent_form_required else ConsentStatus.APPROVED
            ),
            "original_price": treatment.price,
            "final_price": treatment.price,
        }
        data.update(kwargs)
        return _save(db, Appointment(**data))
    return _make


@pytest.fixture
def make_template(db):
    def _make(clinic, **kwargs):
        data = {
            "clinic_id": clinic.id,
            "title": "Informed consent",
            "version": "1.0",
            "fields": [{"name": "accept", "label": "I accept", "type": "checkbox", "required": True}],
            "validity_days": 365,
        }
        data.update(kwargs)
        return _save(db, ConsentFormTemplate(**data))
    return _make


@pytest.fixture
def make_consent(db):
    def _make(user, treatment, template, status=ConsentStatus.APPROVED, expires_in_days=30):
        now = utcnow()
        consent = PatientConsent(
            user_id=user.id,
            treatment_id=treatment.id,
            template_id=template.id,
            answers={"accept": True},
            status=status,
            signed_at=now,
            approved_at=now if status == ConsentStatus.APPROVED else None,
            expires_at=now + timedelta(days=expires_in_days),
        )
        return _save(db, consent)
    return _make


@pytest.fixture
def make_vip(db):
    """Give a user an active monthly VIP subscription."""
    def _make(user, days_left=30):
        now = utcnow()
        subscription = VipSubscription(
            user_id=user.id,
            plan=VipPlan.MONTHLY,
            price=Decimal("19.99"),
            status=VipSubscriptionStatus.ACTIVE,
            current_period_start=now,
            current_period_end=now + timedelta(days=days_left),
        )
        user.vip_status = True
        db.add(subscription)
        db.commit()
        db.refresh(user)
        return subscription
    return _make


@pytest.fixture
def make_tip(db):
    def _make(**kwargs):
        data = {"title": "Drink water", "content": "Hydration helps your skin.", "category": "skin"}
        data.update(kwargs)
        return _save(db, WellnessTip(**data))
    return _make
