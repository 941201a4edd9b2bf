"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Content rows (resources, reminders, exams) are scoped by year/branch

Design Decisions:
    - Related entities grouped per file (lookups, announcements, academic)
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from pecup.models.lookups import Branch, Semester, Year  # noqa: F401
from pecup.models.profile import Profile  # noqa: F401
from pecup.models.admin import Admin  # noqa: F401
from pecup.models.representative import Representative  # noqa: F401
from pecup.models.resource import Resource  # noqa: F401
from pecup.models.announcements import Exam, RecentUpdate, Reminder  # noqa: F401
from pecup.models.audit_log import AuditLog  # noqa: F401
from pecup.models.settings import Setting  # noqa: F401
from pecup.models.academic import AcademicCalendar, AcademicConfig  # noqa: F401
from pecup.models.semester_promotion import SemesterPromotion  # noqa: F401
from pecup.models.hero_text import HeroText  # noqa: F401
