"""
Test configuration and fixtures for GradHelper.

Provides shared fixtures for unit and integration tests.
"""

import os
import time
from datetime import datetime, timedelta, timezone

# Settings are read once at import time; configure before the app loads.
os.environ.setdefault("JWT_SECRET", "test-secret-key-that-is-long-enough-for-hs256")
os.environ.setdefault("STORAGE_BACKEND", "memory")

import jwt
import pytest
from fastapi.testclient import TestClient

from gradhelper.domain.messaging import Message, MessageStatus, Role, Viewer
from gradhelper.domain.store import MessageStore
from gradhelper.infrastructure.memory_repository import InMemoryMessageRepository
from gradhelper.infrastructure.services.messaging_service import MessagingService


T0 = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


# =============================================================================
# App Fixtures
# =============================================================================

@pytest.fixture
def app():
    """Get the FastAPI application."""
    from gradhelper.main import app
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    """Get synchronous test client."""
    return TestClient(app)


def make_token(sub: str, name: str, role: str = "student", **claims) -> str:
    """Sign a token the way the auth backend would."""
    from gradhelper.config.settings import get_settings

    payload = {
        "sub": sub,
        "name": name,
        "role": role,
        "aud": "authenticated",
        "exp": int(time.time()) + 3600,
    }
    payload.update(claims)
    return jwt.encode(payload, get_settings().jwt_secret, algorithm="HS256")


@pytest.fixture
def student_headers():
    """Authorization headers for student-1."""
    return {"Authorization": f"Bearer {make_token('student-1', 'John Smith')}"}


@pytest.fixture
def admin_headers():
    """Authorization headers for admin-1."""
    token = make_token("admin-1", "Admin Support", role="admin")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def outsider_headers():
    """Authorization headers for a student in no seeded thread."""
    return {"Authorization": f"Bearer {make_token('student-9', 'Eve Outsider')}"}


# =============================================================================
# Sample Data Fixtures
# =============================================================================

def make_message(
    id: str,
    thread_id: str,
    sender: str = "student-1",
    recipient: str = "admin-1",
    minutes: int = 0,
    **overrides,
) -> Message:
    """Build a message between two known identities."""
    names = {
        "student-1": ("John Smith", Role.STUDENT),
        "student-2": ("Maria Garcia", Role.STUDENT),
        "admin-1": ("Admin Support", Role.ADMIN),
        "admin-2": ("Billing Desk", Role.ADMIN),
    }
    sender_name, sender_role = names[sender]
    recipient_name, recipient_role = names[recipient]
    fields = dict(
        id=id,
        thread_id=thread_id,
        sender_id=sender,
        sender_name=sender_name,
        sender_role=sender_role,
        recipient_id=recipient,
        recipient_name=recipient_name,
        recipient_role=recipient_role,
        subject="Budget question",
        content=f"Message {id}",
        created_at=T0 + timedelta(minutes=minutes),
    )
    fields.update(overrides)
    return Message(**fields)


@pytest.fixture
def message_factory():
    """Expose make_message to test modules."""
    return make_message


@pytest.fixture
def sample_messages():
    """Two threads: a student/admin exchange and an unanswered payment query."""
    return [
        make_message("m1", "t1", "student-1", "admin-1", 0, subject="Hi"),
        make_message(
            "m2", "t1", "admin-1", "student-1", 10,
            subject="Re: Hi", content="Your deliverable has been approved",
        ),
        make_message(
            "m3", "t2", "student-2", "admin-1", 5,
            subject="Invoice", content="Charged twice", category="payment",
            status=MessageStatus.DELIVERED,
        ),
    ]


@pytest.fixture
def store(sample_messages):
    """Message store holding the sample messages."""
    return MessageStore(sample_messages)


@pytest.fixture
def student():
    return Viewer(id="student-1", name="John Smith", role=Role.STUDENT)


@pytest.fixture
def admin():
    return Viewer(id="admin-1", name="Admin Support", role=Role.ADMIN)


@pytest.fixture
def fixed_clock():
    """Clock returning a fixed instant after all sample messages."""
    return lambda: T0 + timedelta(hours=1)


@pytest.fixture
def messaging_service(sample_messages):
    """MessagingService over an in-memory repository seeded with samples."""
    return MessagingService(InMemoryMessageRepository(sample_messages))


@pytest.fixture
def seeded_app(app, messaging_service):
    """App whose messaging dependency uses the seeded in-memory service."""
    from gradhelper.api.dependencies import get_messaging_service

    app.dependency_overrides[get_messaging_service] = lambda: messaging_service
    return app
