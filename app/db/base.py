# app/db/base.py
# Alembic model registry -- imports Base + every model so Alembic detects all tables.
# Do NOT import this file from model files (use app.db.base_class instead).
# This file is imported by:
#   - alembic/env.py        (schema detection)
#   - app/db/init_db.py     (seeding)
#   - app/main.py           (relationship resolution at startup)

from app.db.base_class import Base  # noqa: F401

# ── Import all models here so Alembic can detect them ────────────────────────
# Order matters: parent tables before child tables (foreign key dependencies)

from app.models.user import User                                       # noqa: F401, E402
from app.models.course import Category, Course                         # noqa: F401, E402
from app.models.tutor import TutorProfile, AvailabilitySlot            # noqa: F401, E402
from app.models.booking import Booking, Payment                        # noqa: F401, E402
from app.models.assignment import Assignment                           # noqa: F401, E402
from app.models.enrollment import Enrollment                           # noqa: F401, E402
from app.models.notification import Notification                       # noqa: F401, E402
from app.models.resource import TutorResource                          # noqa: F401, E402
from app.models.review import Review                                   # noqa: F401, E402
from app.models.office_hours import OfficeHourMessage                  # noqa: F401, E402
