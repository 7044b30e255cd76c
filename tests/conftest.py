"""Shared test fixtures."""
import time
from unittest.mock import Mock

import pytest
from jose import jwt

from nail_booking.api import SalonApi
from nail_booking.auth import AuthService
from nail_booking.models import Appointment, Service, TimeSlot
from nail_booking.session_store import SessionStore

TEST_SECRET = "test-secret"

CLIENT_USER = {
    "_id": "user-1",
    "name": "Maria Silva",
    "email": "maria@example.com",
    "phone": "48999990000",
    "role": "client",
}
ADMIN_USER = {
    "_id": "admin-1",
    "name": "Vitória",
    "email": "admin@vitorianail.com",
    "role": "admin",
}


@pytest.fixture
def make_token():
    """Build a signed JWT expiring ``expires_in`` seconds from now."""
    def _create(expires_in: int = 3600, **claims):
        claims.setdefault("sub", "user-1")
        claims["exp"] = int(time.time()) + expires_in
        return jwt.encode(claims, TEST_SECRET, algorithm="HS256")
    return _create


@pytest.fixture
def store() -> SessionStore:
    """Empty in-memory session."""
    return SessionStore(path=None)


@pytest.fixture
def client_store(store, make_token) -> SessionStore:
    store.save(make_token(), CLIENT_USER)
    return store


@pytest.fixture
def admin_store(store, make_token) -> SessionStore:
    store.save(make_token(sub="admin-1", role="admin"), ADMIN_USER)
    return store


@pytest.fixture
def api():
    return Mock(spec=SalonApi)


@pytest.fixture
def auth(api, store) -> AuthService:
    return AuthService(api, store)


@pytest.fixture
def service() -> Service:
    return Service.model_validate(
        {"_id": "svc-1", "name": "Alongamento em Gel", "price": 150, "duration": 120}
    )


@pytest.fixture
def slots():
    return [
        TimeSlot.model_validate({"_id": "slot-1", "date": "2025-03-15T00:00:00.000Z",
                                 "start_time": "08:00", "end_time": "10:00"}),
        TimeSlot.model_validate({"_id": "slot-2", "date": "2025-03-15T00:00:00.000Z",
                                 "start_time": "10:00", "end_time": "12:00"}),
        TimeSlot.model_validate({"_id": "slot-3", "date": "2025-03-18T00:00:00.000Z",
                                 "start_time": "08:00", "end_time": "10:00"}),
    ]


@pytest.fixture
def make_appointment():
    def _create(appointment_id="apt-1", status="pending", slot_id="slot-1", service_id="svc-1"):
        return Appointment.model_validate({
            "_id": appointment_id,
            "user": {"name": "Maria Silva"},
            "service": {"_id": service_id, "name": "Alongamento em Gel", "price": 150},
            "timeSlot": {"_id": slot_id, "date": "2025-03-15T00:00:00.000Z",
                         "start_time": "08:00", "end_time": "10:00"},
            "status": status,
            "paymentMethod": "pix",
        })
    return _create


@pytest.fixture
def client_user():
    return dict(CLIENT_USER)


@pytest.fixture
def admin_user():
    return dict(ADMIN_USER)
