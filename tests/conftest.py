import os

# Set testing environment variable before the app is imported
os.environ["TESTING"] = "1"

import fakeredis
import pytest
from fastapi.testclient import TestClient

from clinic.core.config import Settings
from clinic.core.database import Database, get_redis
from clinic.main import create_app

# Test data
admin_data = {
    "name": "Admin User",
    "email": "admin@test.com",
    "password": "123456",
    "role": "admin",
}

doctor_data = {
    "name": "Dr. A",
    "email": "dr.a@clinic.test",
    "password": "DoctorPass1",
    "role": "doctor",
    "specialty": "Cardiology",
}

patient_data = {
    "name": "P",
    "email": "p@clinic.test",
    "password": "PatientPass1",
    "role": "patient",
}


def make_settings(tmp_path, **overrides):
    values = {
        "TESTING": True,
        "TEST_DATABASE_URL": f"sqlite:///{tmp_path / 'clinic_test.db'}",
        "RATE_LIMIT_REQUESTS": 1000,
        # Staff accounts can only be created by this admin
        "FIRST_ADMIN_NAME": admin_data["name"],
        "FIRST_ADMIN_EMAIL": admin_data["email"],
        "FIRST_ADMIN_PASSWORD": admin_data["password"],
    }
    values.update(overrides)
    return Settings(**values)


def make_client(settings, fake_redis):
    application = create_app(settings)
    application.dependency_overrides[get_redis] = lambda: fake_redis
    return TestClient(application, base_url="http://testserver")


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture
def fake_redis():
    return fakeredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)


@pytest.fixture
def app(settings, fake_redis):
    application = create_app(settings)
    application.dependency_overrides[get_redis] = lambda: fake_redis
    return application


@pytest.fixture
def client(app):
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client


@pytest.fixture
def database(tmp_path):
    db = Database(f"sqlite:///{tmp_path / 'clinic_service.db'}")
    db.init_db()
    yield db
    db.dispose()


@pytest.fixture
def db_session(database):
    session = database.session()
    try:
        yield session
    finally:
        session.close()


def register(client, data, headers=None):
    response = client.post("/api/v1/auth/register", json=data, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


def login(client, data):
    response = client.post(
        "/api/v1/auth/login",
        json={"email": data["email"], "password": data["password"]},
    )
    assert response.status_code == 200, response.text
    return response.json()


def auth_headers(client, data):
    token = login(client, data)["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(client):
    return auth_headers(client, admin_data)


@pytest.fixture
def clinic(client, admin_headers):
    """The bootstrap admin, one doctor it created and one self-registered patient."""
    admin = login(client, admin_data)["user"]
    doctor = register(client, doctor_data, headers=admin_headers)
    patient = register(client, patient_data)
    return {
        "admin": admin,
        "doctor": doctor,
        "patient": patient,
        "admin_headers": admin_headers,
        "doctor_headers": auth_headers(client, doctor_data),
        "patient_headers": auth_headers(client, patient_data),
    }


vitals = {
    "blood_pressure": "120/80",
    "heart_rate": 72,
    "temperature": 36.6,
    "weight": 70.5,
    "comments": "Healthy",
}


def book(client, clinic, scheduled_at="2025-01-10T10:00:00Z"):
    response = client.post(
        "/api/v1/appointments",
        json={
            "doctor_id": clinic["doctor"]["id"],
            "patient_id": clinic["patient"]["id"],
            "scheduled_at": scheduled_at,
        },
        headers=clinic["patient_headers"],
    )
    assert response.status_code == 200, response.text
    return response.json()


def complete(client, clinic, appointment_id, payload=None):
    return client.post(
        f"/api/v1/appointments/{appointment_id}/complete",
        json=payload if payload is not None else vitals,
        headers=clinic["doctor_headers"],
    )
