# app/db/init_db.py
# Seed initial data into the database
# Run once after migrations: python -m app.db.init_db
#
# Creates:
#   1. Admin user (from env vars or defaults)
#   2. Starter course categories

import os

from dotenv import load_dotenv

# Load .env for local dev -- before app.core.config reads the environment
load_dotenv()

import app.db.base  # noqa: F401, E402
from app.core.security import hash_password  # noqa: E402
from app.db.session import SessionLocal  # noqa: E402
from app.models.course import Category  # noqa: E402
from app.models.user import User  # noqa: E402

STARTER_CATEGORIES = [
    ("Mathematics", "Arithmetic through calculus and statistics."),
    ("Programming", "Software development, from first programs to systems design."),
    ("Languages", "Spoken and written language courses."),
    ("Science", "Physics, chemistry and biology."),
    ("Music", "Instruments, theory and composition."),
]


def seed_admin(db) -> None:
    """Create the admin user if it doesn't exist."""
    admin_email = os.getenv("ADMIN_EMAIL", "admin@tutorhub.dev")
    admin_password = os.getenv("ADMIN_PASSWORD", "TutorHub@Admin123")
    admin_name = os.getenv("ADMIN_NAME", "TutorHub Admin")

    existing = db.query(User).filter(User.email == admin_email).first()
    if existing:
        print(f"  Admin already exists: {admin_email}")
        return

    admin = User(
        email=admin_email,
        hashed_password=hash_password(admin_password),
        full_name=admin_name,
        role="admin",
        is_active=True,
    )
    db.add(admin)
    db.flush()
    print(f"  Admin created: {admin_email}")


def seed_categories(db) -> None:
    """Create the starter categories if they don't exist."""
    for name, description in STARTER_CATEGORIES:
        existing = db.query(Category).filter(Category.name == name).first()
        if existing:
            print(f"  Category already exists: {name}")
            continue
        db.add(Category(name=name, description=description))
        print(f"  Category created: {name}")


def init_db() -> None:
    print("Seeding database...")
    db = SessionLocal()
    try:
        print("\n[1/2] Admin user")
        seed_admin(db)

        print("\n[2/2] Course categories")
        seed_categories(db)

        db.commit()
        print("\nDone. Database seeded successfully.")
    except Exception as e:
        db.rollback()
        print(f"\nERROR: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    init_db()
