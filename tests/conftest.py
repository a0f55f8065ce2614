"""
Pytest configuration and fixtures for the FleetDesk API tests
"""

import os

# Settings are read at import time, so the test environment is set first
os.environ["ENVIRONMENT"] = "development"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ALLOW_ADMIN_SIGNUP"] = "false"

import mongomock
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from fleetdesk.api.deps import get_email_service
from fleetdesk.db.init_db import init_db
from fleetdesk.db.session import get_db
from fleetdesk.main import app

TEST_PASSWORD = "secret123"


class RecordingEmailService:
    """Stands in for EmailService and remembers what would have been sent."""

    def __init__(self):
        self.sent = []

    def send_booking_confirmation(self, booking):
        if not booking.email:
            return False
        self.sent.append(("confirmation", booking.email))
        return True

    def send_booking_notification(self, booking):
        self.sent.append(("notification", booking.id))
        return True

    def send_password_reset(self, email, token):
        self.sent.append(("reset", email, token))
        return True


@pytest.fixture
def db():
    """Fresh in-memory document store with the production indexes"""
    database = mongomock.MongoClient()["fleetdesk_test"]
    init_db(database)
    return database


@pytest.fixture
def owner_id():
    return str(ObjectId())


@pytest.fixture
def other_owner_id():
    return str(ObjectId())


@pytest.fixture
def outbox():
    return RecordingEmailService()


@pytest.fixture
def client(db, outbox):
    """API client wired to the in-memory store and the recording mailer"""
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_email_service] = lambda: outbox
    yield TestClient(app)
    app.dependency_overrides.clear()


def register(client, email="owner@fleetdesk.io", password=TEST_PASSWORD, business_name="Acme Travels"):
    """Register a user and return (user, token)"""
    response = client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "businessName": business_name},
    )
    assert response.status_code == 201, response.text
    data = response.json()["data"]
    return data["user"], data["token"]


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(client):
    _, token = register(client)
    return bearer(token)


@pytest.fixture
def other_auth_headers(client):
    _, token = register(client, email="rival@fleetdesk.io", business_name="Rival Cabs")
    return bearer(token)


def bank_details():
    return {
        "bankName": "State Bank",
        "branch": "MG Road",
        "accountNumber": "1234567890",
        "ifscCode": "SBIN0001234",
    }


def billing_payload(vehicle_ids, **overrides):
    payload = {
        "companyName": "Acme Travels",
        "vehicleIds": vehicle_ids,
        "billingDate": "2025-01-15",
        "recipientName": "Globex Ltd",
        "recipientAddress": "12 Ring Road, Bengaluru",
        "workingTime": "January hire",
        "billingItems": [
            {"description": "Cab hire", "hsnSac": "996601", "unit": "Trip", "quantity": 3, "rate": 100},
            {"description": "Driver allowance", "hsnSac": "996601", "unit": "Day", "quantity": 2, "rate": 250.5},
        ],
        "bankDetails": bank_details(),
    }
    payload.update(overrides)
    return payload
