"""
Shared test fixtures.

Sets up an isolated SQLite database so tests never touch the
real database. Tables are created before each test and dropped
after it, so no test data persists.
"""

import os

# Configuration is read at import time, so the test environment
# must be in place before the application is imported.
TEST_DATABASE_URL = "sqlite:///./test.db"
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["STRIPE_SECRET_KEY"] = ""
os.environ["JWT_SECRET"] = "test-secret"
os.environ["MANUAL_TRANSFER_ACCOUNT"] = "01012345678"
os.environ["FRONTEND_URL"] = "https://learn.example.com"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from course_marketplace.api.deps import get_checkout_processor
from course_marketplace.main import app
from course_marketplace.models.base import Base, get_db
from course_marketplace.models.course import Course
from course_marketplace.models.enums import UserRole
from course_marketplace.security import create_access_token
from course_marketplace.services.authorization import Actor
from course_marketplace.services.checkout_processor import (
    CheckoutProcessor,
    CheckoutSession,
)
from course_marketplace.services.enrollment_service import EnrollmentService


engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)

TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


class FakeCheckoutProcessor(CheckoutProcessor):
    """Records checkout sessions in memory instead of calling Stripe."""

    def __init__(self):
        self.created = []
        self.sessions = {}

    def create_session(self, **kwargs):
        session_id = f"cs_test_{len(self.created) + 1}"
        self.created.append(kwargs)
        session = CheckoutSession(
            id=session_id,
            url=f"https://checkout.stripe.test/pay/{session_id}",
            status="open",
            payment_status="unpaid",
            metadata=kwargs["metadata"],
        )
        self.sessions[session_id] = session
        return session

    def retrieve_session(self, session_id):
        return self.sessions[session_id]

    def mark_paid(self, session_id):
        self.sessions[session_id].status = "complete"
        self.sessions[session_id].payment_status = "paid"

    def mark_expired(self, session_id):
        self.sessions[session_id].status = "expired"


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop them after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    """Provide a database session for direct service testing."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def processor():
    return FakeCheckoutProcessor()


@pytest.fixture
def service(db_session, processor):
    return EnrollmentService(db_session, processor)


@pytest.fixture
def student():
    return Actor(user_id=1, role=UserRole.STUDENT)


@pytest.fixture
def other_student():
    return Actor(user_id=2, role=UserRole.STUDENT)


@pytest.fixture
def admin():
    return Actor(user_id=99, role=UserRole.ADMIN)


@pytest.fixture
def client(db_session, processor):
    """
    Provide a test client with the test database.

    get_db and the checkout processor are overridden so the app
    uses the test session and never calls Stripe.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_checkout_processor] = lambda: processor
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_course(db_session):
    """Factory for catalog courses; price is in minor units."""
    def _make_course(title="Python Basics", price=1000, description="Learn Python"):
        course = Course(
            title=title,
            description=description,
            instructor="Jane Teacher",
            price_minor_units=price,
        )
        db_session.add(course)
        db_session.commit()
        return course
    return _make_course


@pytest.fixture
def auth_headers():
    """Build bearer headers the way the identity provider issues them."""
    def _auth_headers(actor: Actor) -> dict:
        token = create_access_token(actor.user_id, actor.role)
        return {"Authorization": f"Bearer {token}"}
    return _auth_headers
