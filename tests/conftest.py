"""
Pytest configuration and fixtures for testing.
"""
import os
import tempfile

# settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("S3_STORAGE_PATH", tempfile.mkdtemp(prefix="coursemarket-media-"))
os.environ.setdefault("USE_DUMMY_S3", "true")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient
from uuid import uuid4

from coursemarket.main import app
from coursemarket.db.base import Base
from coursemarket.db.deps import get_db
from coursemarket.core.security import create_access_token, get_password_hash
from coursemarket.integrations.oauth import OAuthError, OAuthProfile, OAuthProvider
from coursemarket.integrations.paystack import PaystackError
from coursemarket.modules.auth.models import User, UserRole
from coursemarket.modules.auth.routes import facebook_provider, google_provider
from coursemarket.modules.categories.models import Category
from coursemarket.modules.courses.models import Course, Lesson, Module
from coursemarket.modules.enrollments.models import Enrollment, EnrollmentStatus
from coursemarket.modules.payments.routes import paystack_gateway


# Test database URL
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakePaystack:
    """In-memory stand-in for the Paystack client."""

    def __init__(self):
        self.initialized = []
        self.transactions = {}
        self.fail = False
        self._counter = 0

    async def initialize_transaction(self, email, amount, metadata, callback_url=None):
        if self.fail:
            raise PaystackError("gateway unavailable")
        self._counter += 1
        reference = f"ref-{self._counter}"
        self.initialized.append(
            {"email": email, "amount": amount, "metadata": metadata, "reference": reference}
        )
        self.transactions[reference] = {
            "status": "success",
            "reference": reference,
            "amount": amount,
            "metadata": metadata,
        }
        return {
            "authorization_url": f"https://checkout.paystack.test/{reference}",
            "access_code": f"code-{self._counter}",
            "reference": reference,
        }

    async def verify_transaction(self, reference):
        if self.fail:
            raise PaystackError("gateway unavailable")
        if reference not in self.transactions:
            raise PaystackError("Transaction reference not found")
        return dict(self.transactions[reference])

    def set_status(self, reference, status):
        self.transactions[reference]["status"] = status


class FakeOAuthProvider(OAuthProvider):
    def __init__(self, name, profile=None, error=None):
        self.name = name
        self.profile = profile
        self.error = error

    def get_login_url(self):
        return f"https://{self.name}.test/authorize?client_id=test"

    async def fetch_profile(self, code):
        if self.error:
            raise OAuthError(self.error)
        return self.profile


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db):
    """FastAPI test client with test database."""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def paystack(client):
    """Fake gateway injected into the payment routes."""
    fake = FakePaystack()
    app.dependency_overrides[paystack_gateway] = lambda: fake
    return fake


@pytest.fixture
def oauth_google(client):
    fake = FakeOAuthProvider(
        "google",
        profile=OAuthProfile(
            provider="google",
            provider_id="g-123",
            name="Google User",
            email="guser@example.com",
            email_verified=True,
        ),
    )
    app.dependency_overrides[google_provider] = lambda: fake
    return fake


@pytest.fixture
def oauth_facebook(client):
    fake = FakeOAuthProvider(
        "facebook",
        profile=OAuthProfile(provider="facebook", provider_id="fb-456", name="Facebook User"),
    )
    app.dependency_overrides[facebook_provider] = lambda: fake
    return fake


def make_user(db, email, role, name="Test User", password="password123"):
    user = User(
        id=uuid4(),
        name=name,
        email=email,
        password_hash=get_password_hash(password),
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers_for(user):
    token = create_access_token(subject=str(user.id), role=user.role.value)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def student_user(db):
    """Create a student user."""
    return make_user(db, "student@test.com", UserRole.student, name="Test Student")


@pytest.fixture
def other_student(db):
    return make_user(db, "other@test.com", UserRole.student, name="Other Student")


@pytest.fixture
def instructor_user(db):
    """Create an instructor user."""
    return make_user(db, "instructor@test.com", UserRole.instructor, name="Test Instructor")


@pytest.fixture
def other_instructor(db):
    return make_user(db, "instructor2@test.com", UserRole.instructor, name="Other Instructor")


@pytest.fixture
def admin_user(db):
    """Create an admin user."""
    return make_user(db, "admin@test.com", UserRole.admin, name="Admin User")


@pytest.fixture
def auth_headers(student_user):
    """Authentication headers for the student user."""
    return auth_headers_for(student_user)


@pytest.fixture
def instructor_headers(instructor_user):
    return auth_headers_for(instructor_user)


@pytest.fixture
def admin_headers(admin_user):
    return auth_headers_for(admin_user)


@pytest.fixture
def category(db):
    category = Category(id=uuid4(), name="Web Development")
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


@pytest.fixture
def basic_course(db, instructor_user, category):
    """A paid course with one module holding a lesson and a sub-lesson."""
    course = Course(
        id=uuid4(),
        title="Python Basics",
        description="Introduction to Python",
        content="Course overview",
        duration="4 weeks",
        price=50.0,
        max_students=3,
        category_id=category.id,
        instructor_id=instructor_user.id,
    )
    module = Module(title="Getting started", order_index=1)
    lesson = Lesson(title="Installing Python", content="Download it", order_index=1)
    lesson.children = [Lesson(title="Windows", content="Use the installer", order_index=1)]
    module.lessons = [lesson]
    course.modules = [module]
    db.add(course)
    db.commit()
    db.refresh(course)
    return course


@pytest.fixture
def free_course(db, instructor_user, category):
    course = Course(
        id=uuid4(),
        title="Free Intro",
        description="No charge",
        duration="1 day",
        price=0,
        max_students=2,
        category_id=category.id,
        instructor_id=instructor_user.id,
    )
    db.add(course)
    db.commit()
    db.refresh(course)
    return course


def make_enrollment(db, user, course, status=EnrollmentStatus.pending):
    enrollment = Enrollment(id=uuid4(), user_id=user.id, course_id=course.id, status=status)
    db.add(enrollment)
    db.commit()
    db.refresh(enrollment)
    return enrollment


@pytest.fixture
def pending_enrollment(db, student_user, basic_course):
    return make_enrollment(db, student_user, basic_course, EnrollmentStatus.pending)


@pytest.fixture
def paid_enrollment(db, student_user, basic_course):
    return make_enrollment(db, student_user, basic_course, EnrollmentStatus.paid)


@pytest.fixture
def user_factory(db):
    """Create extra users: ``user_factory("x@test.com", UserRole.student)``."""
    def factory(email, role=UserRole.student, name="Test User", password="password123"):
        return make_user(db, email, role, name=name, password=password)
    return factory


@pytest.fixture
def enroll(db):
    """Insert an enrollment row directly: ``enroll(user, course, status)``."""
    def factory(user, course, status=EnrollmentStatus.pending):
        return make_enrollment(db, user, course, status)
    return factory


@pytest.fixture
def headers_for():
    return auth_headers_for
