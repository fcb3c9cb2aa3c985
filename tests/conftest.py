# tests/conftest.py
# Shared fixtures: SQLite database recreated per test, users per role,
# a catalog with one assigned course, and a TestClient with auth helpers.

import os
import tempfile
from decimal import Decimal

# Settings are read at import time -- configure before importing the app
_DB_FILE = os.path.join(tempfile.gettempdir(), f"tutorhub_test_{os.getpid()}.db")
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_FILE}"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["SENDGRID_API_KEY"] = ""
os.environ["QUESTION_GENERATOR"] = "static"
os.environ["CV_MATCHER"] = "keyword"
os.environ["APP_ENV"] = "test"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import app.db.base  # noqa: F401, E402
from app.core.dependencies import payment_gateway  # noqa: E402
from app.core.security import create_access_token, hash_password  # noqa: E402
from app.db.base_class import Base  # noqa: E402
from app.db.session import SessionLocal, engine  # noqa: E402
from app.main import app  # noqa: E402
from app.models.booking import Booking  # noqa: E402
from app.models.course import Category, Course  # noqa: E402
from app.models.tutor import TutorProfile  # noqa: E402
from app.models.user import User  # noqa: E402
from app.services.payment_gateway import PaymentGateway  # noqa: E402

TEST_PASSWORD = "password123"
_PASSWORD_HASH = hash_password(TEST_PASSWORD)


# ── Database ──────────────────────────────────────────────────────────────────

@pytest.fixture
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


# ── Users ─────────────────────────────────────────────────────────────────────

def make_user(db, role: str, email: str, full_name: str) -> User:
    user = User(
        email=email,
        hashed_password=_PASSWORD_HASH,
        full_name=full_name,
        role=role,
        is_active=True,
    )
    db.add(user)
    db.flush()
    if role == "tutor":
        db.add(TutorProfile(user_id=user.id, bio=f"{full_name} teaches.", experience_years=3))
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin(db) -> User:
    return make_user(db, "admin", "admin@example.com", "Ada Admin")


@pytest.fixture
def student(db) -> User:
    return make_user(db, "student", "sam@example.com", "Sam Student")


@pytest.fixture
def other_student(db) -> User:
    return make_user(db, "student", "olive@example.com", "Olive Other")


@pytest.fixture
def tutor_user(db) -> User:
    return make_user(db, "tutor", "tina@example.com", "Tina Tutor")


@pytest.fixture
def second_tutor_user(db) -> User:
    return make_user(db, "tutor", "theo@example.com", "Theo Tutor")


@pytest.fixture
def tutor(tutor_user) -> TutorProfile:
    return tutor_user.tutor_profile


@pytest.fixture
def second_tutor(second_tutor_user) -> TutorProfile:
    return second_tutor_user.tutor_profile


# ── Catalog ───────────────────────────────────────────────────────────────────

@pytest.fixture
def category(db) -> Category:
    c = Category(name="Mathematics", description="Numbers and more")
    db.add(c)
    db.commit()
    return c


def make_course(db, title: str, category=None, instructor=None, price="49.99") -> Course:
    course = Course(
        title=title,
        description=f"{title} from the ground up.",
        category=category,
        price=Decimal(price),
        level="beginner",
        max_students=10,
        instructor_id=instructor.id if instructor else None,
        is_published=instructor is not None,
    )
    db.add(course)
    db.flush()
    if instructor:
        instructor.courses.append(course)
    db.commit()
    return course


@pytest.fixture
def course(db, category, tutor) -> Course:
    return make_course(db, "Algebra I", category=category, instructor=tutor)


@pytest.fixture
def open_course(db, category) -> Course:
    return make_course(db, "Geometry", category=category)


def make_booking(db, student, course, status="requested") -> Booking:
    from datetime import datetime, timedelta, timezone

    start = datetime.now(timezone.utc) + timedelta(days=1)
    booking = Booking(
        student_id=student.id,
        course_id=course.id,
        tutor_id=course.instructor_id,
        start=start,
        end=start + timedelta(hours=1),
        status=status,
        assignment_attempts=0,
    )
    db.add(booking)
    db.commit()
    return booking


# ── Payments ──────────────────────────────────────────────────────────────────

def card(cvc: str = "123") -> dict:
    return {"card_number": "4242424242424242", "exp_month": 12, "exp_year": 2030, "cvc": cvc}


@pytest.fixture
def gateway() -> PaymentGateway:
    return PaymentGateway(decline_rate=0.0)


# ── HTTP ──────────────────────────────────────────────────────────────────────

def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}


@pytest.fixture
def client(db):
    app.dependency_overrides[payment_gateway] = lambda: PaymentGateway(decline_rate=0.0)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
