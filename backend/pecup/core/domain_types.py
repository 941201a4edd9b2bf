"""Domain Types — enums shared across the codebase.

Invariants:
    - All valid role/action/entity values encoded as Enums — no raw string matching
    - str Enums serialize to JSON and compare equal to their DB string values
"""

from enum import Enum


# ─── Enums ───────────────────────────────────────────────────────

class Role(str, Enum):
    """Caller roles stored on profiles.role / admins.role."""
    STUDENT = "student"
    REPRESENTATIVE = "representative"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


class AdminRole(str, Enum):
    """Roles valid in the admins table."""
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


class PermissionAction(str, Enum):
    READ = "read"
    WRITE = "write"
    DELETE = "delete"


class PermissionEntity(str, Enum):
    """Entities covered by the role permission matrix."""
    RESOURCES = "resources"
    REMINDERS = "reminders"
    RECENT_UPDATES = "recentUpdates"
    EXAMS = "exams"
    PROFILES = "profiles"


class AuditAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    SOFT_DELETE = "soft_delete"
    READ = "read"
    SETTINGS_UPDATE = "settings_update"
    PROMOTE = "promote"
    DEMOTE = "demote"
    PROMOTE_SEMESTER = "promote_semester"


class AuditEntity(str, Enum):
    RESOURCE = "resource"
    REMINDER = "reminder"
    RECENT_UPDATE = "recent_update"
    EXAM = "exam"
    ADMIN = "admin"
    SETTINGS = "settings"
    YEAR_MAPPINGS = "year_mappings"
    ACADEMIC_CALENDAR = "academic_calendar"
    SEMESTER_PROMOTIONS = "semester_promotions"
    STUDENT = "student"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"
